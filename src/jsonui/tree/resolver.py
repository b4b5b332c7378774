"""
Tree Resolver
Turns a Definition plus current state into a ResolvedTree.

Node ids double as local state owner ids: the explicit `id` when present,
otherwise the structural path (`root/0/2`). Nodes repeated by forEach get
the item index appended, so each repetition owns its own local state.
A second node reusing an explicit id gets `id@path` as its owner id.
"""

from collections.abc import Mapping

from ..actions import ActionEngine, ExecutionContext, Presenters
from ..bindings import BindingResolver, ResolutionContext
from ..core import get_logger
from ..core.config import Settings
from ..document import (
    ActionBinding,
    ColorScheme,
    Component,
    Definition,
    ForEach,
    Layout,
    Node,
    Section,
    SectionLayout,
    Spacer,
)
from ..expressions import interpolate
from ..state import StateStore
from ..styles import DesignSystemProvider, StyleResolver
from ..value import Value
from .nodes import (
    BoundAction,
    Insets,
    ResolvedComponent,
    ResolvedLayout,
    ResolvedNode,
    ResolvedSection,
    ResolvedSectionLayout,
    ResolvedSpacer,
    ResolvedTree,
)

logger = get_logger(__name__)

ROOT_PATH = "root"
_LOCAL_PREFIX = "local."


class TreeResolver:
    """
    Resolves one document instance.

    Args:
        definition: Parsed document
        store: State of this instance (global state is seeded from the document)
        engine: Action engine used by bound actions
        design_system: Provider for `@` style references
    """

    def __init__(
        self,
        definition: Definition,
        store: StateStore | None = None,
        engine: ActionEngine | None = None,
        design_system: DesignSystemProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.definition = definition
        self.store = store if store is not None else StateStore()
        self.engine = engine if engine is not None else ActionEngine(settings=settings)
        self.bindings: BindingResolver = self.engine.bindings
        self.styles = StyleResolver.for_document(definition, design_system, settings or self.engine.settings)
        self._declared = False
        self._owners: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def resolve(self) -> ResolvedTree:
        """Resolve the whole tree against current state. Safe to call repeatedly."""
        self._declare_global_state()
        root = self.definition.root
        context = self.resolution_context()

        children = tuple(
            self._resolve_node(child, f"{ROOT_PATH}/{i}", context, "")
            for i, child in enumerate(root.children)
        )
        actions = root.actions
        tree = ResolvedTree(
            document_id=self.definition.id,
            children=children,
            background_color=root.background_color,
            color_scheme=root.color_scheme or ColorScheme.SYSTEM,
            edge_insets=Insets.of(root.edge_insets),
            style=self.styles.resolve(root.style_id),
            on_appear=BoundAction(actions.on_appear) if actions and actions.on_appear else None,
            on_disappear=BoundAction(actions.on_disappear) if actions and actions.on_disappear else None,
        )
        logger.debug("tree_resolved", document=self.definition.id, nodes=sum(1 for _ in tree.walk()))
        return tree

    def resolution_context(self) -> ResolutionContext:
        return ResolutionContext(
            store=self.store,
            document=self.definition,
            resolvers=self.engine.resolvers,
        )

    def execution_context(self, presenters: Presenters | None = None) -> ExecutionContext:
        """Context for running the tree's BoundActions."""
        return ExecutionContext(
            store=self.store,
            engine=self.engine,
            document=self.definition,
            presenters=presenters or Presenters(),
        )

    # ------------------------------------------------------------------
    # State declaration
    # ------------------------------------------------------------------

    def _declare_global_state(self) -> None:
        if self._declared:
            return
        self.store.seed(self.definition.state)
        self._declared = True

    def _enter_scope(
        self, node_id: str, path: str, state: Mapping[str, Value] | None, context: ResolutionContext
    ) -> ResolutionContext:
        if state is None:
            return context
        owner_id = self._claim_owner(node_id, path)
        self.store.declare_scope(owner_id, state)
        return context.with_scope(owner_id)

    def _claim_owner(self, node_id: str, path: str) -> str:
        """
        Scope owner id for a node with local state.

        The first node to use an id owns it; another node with the same id
        gets its structural path appended, so the two never share state.
        """
        claimed = self._owners.setdefault(node_id, path)
        if claimed == path:
            return node_id
        logger.warning("duplicate_scope_owner", node_id=node_id, path=path, owner_path=claimed)
        return f"{node_id}@{path}"

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _resolve_node(self, node: Node, path: str, context: ResolutionContext, suffix: str) -> ResolvedNode:
        if isinstance(node, Layout):
            return self._resolve_layout(node, path, context, suffix)
        if isinstance(node, ForEach):
            return self._resolve_for_each(node, path, context, suffix)
        if isinstance(node, SectionLayout):
            return self._resolve_section_layout(node, path, context, suffix)
        if isinstance(node, Spacer):
            return ResolvedSpacer(id=path, min_length=node.min_length)
        return self._resolve_component(node, path, context, suffix)

    @staticmethod
    def _node_id(explicit: str | None, path: str, suffix: str) -> str:
        return f"{explicit}{suffix}" if explicit else path

    def _resolve_component(
        self, node: Component, path: str, context: ResolutionContext, suffix: str
    ) -> ResolvedComponent:
        node_id = self._node_id(node.id, path, suffix)
        context = self._enter_scope(node_id, path, node.state, context)

        value: Value | None = None
        if node.bind is not None:
            value = context.read(node.bind)
        elif node.local_bind is not None:
            value = context.read_local(node.local_bind)
        elif node.data_source_id is not None:
            value = self.bindings.resolve_data_source(node.data_source_id, context)

        return ResolvedComponent(
            id=node_id,
            kind=node.type,
            styles=self.styles.resolve_states(node.styles, node.style_id, node.style),
            padding=Insets.of(node.padding),
            text=interpolate(node.text, context) if node.text is not None else None,
            placeholder=interpolate(node.placeholder, context) if node.placeholder is not None else None,
            value=value,
            is_selected=(
                context.read(node.is_selected_binding).truthy
                if node.is_selected_binding is not None
                else None
            ),
            fill_width=node.fill_width,
            data={name: self.bindings.resolve_reference(ref, context) for name, ref in node.data.items()},
            actions={event: self._bind(binding, context) for event, binding in node.actions.items()},
            properties={
                name: self.bindings.resolve_dynamic(raw, context)
                for name, raw in node.additional_properties.items()
            },
            scope_owner=context.scope_owner,
        )

    def _resolve_layout(
        self, node: Layout, path: str, context: ResolutionContext, suffix: str
    ) -> ResolvedLayout:
        node_id = self._node_id(node.id, path, suffix)
        context = self._enter_scope(node_id, path, node.state, context)
        return ResolvedLayout(
            id=node_id,
            kind=node.type,
            alignment=node.alignment,
            spacing=node.spacing,
            padding=Insets.of(node.padding),
            children=self._children(node.children, path, context, suffix),
        )

    def _resolve_for_each(
        self, node: ForEach, path: str, context: ResolutionContext, suffix: str
    ) -> ResolvedLayout:
        node_id = self._node_id(node.id, path, suffix)
        context = self._enter_scope(node_id, path, node.state, context)
        items = self._read_collection(node.items, context)

        if not items:
            children: tuple[ResolvedNode, ...] = ()
            if node.empty_view is not None:
                children = (self._resolve_node(node.empty_view, f"{path}/empty", context, suffix),)
        else:
            children = self._expand(
                node.template, items, node.item_variable, node.index_variable, path, context, suffix
            )

        return ResolvedLayout(
            id=node_id,
            kind=node.layout,
            alignment=node.alignment,
            spacing=node.spacing,
            padding=Insets.of(node.padding),
            children=children,
        )

    def _resolve_section_layout(
        self, node: SectionLayout, path: str, context: ResolutionContext, suffix: str
    ) -> ResolvedSectionLayout:
        node_id = self._node_id(node.id, path, suffix)
        context = self._enter_scope(node_id, path, node.state, context)
        sections = tuple(
            self._resolve_section(section, f"{path}/{i}", context, suffix)
            for i, section in enumerate(node.sections)
        )
        return ResolvedSectionLayout(id=node_id, section_spacing=node.section_spacing, sections=sections)

    def _resolve_section(
        self, section: Section, path: str, context: ResolutionContext, suffix: str
    ) -> ResolvedSection:
        children = self._children(section.children, path, context, suffix)
        if section.item_template is not None and section.data_source is not None:
            items = self._section_items(section.data_source, context)
            offset = len(section.children)
            children += self._expand(
                section.item_template,
                items,
                section.item_variable,
                section.index_variable,
                path,
                context,
                suffix,
                offset=offset,
            )
        return ResolvedSection(
            id=self._node_id(section.id, path, suffix),
            layout=section.layout,
            header=(
                self._resolve_node(section.header, f"{path}/header", context, suffix)
                if section.header is not None
                else None
            ),
            footer=(
                self._resolve_node(section.footer, f"{path}/footer", context, suffix)
                if section.footer is not None
                else None
            ),
            sticky_header=section.sticky_header,
            children=children,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _children(
        self, nodes: list[Node], path: str, context: ResolutionContext, suffix: str
    ) -> tuple[ResolvedNode, ...]:
        return tuple(
            self._resolve_node(child, f"{path}/{i}", context, suffix) for i, child in enumerate(nodes)
        )

    def _expand(
        self,
        template: Node,
        items: tuple[Value, ...],
        item_variable: str,
        index_variable: str,
        path: str,
        context: ResolutionContext,
        suffix: str,
        offset: int = 0,
    ) -> tuple[ResolvedNode, ...]:
        expanded = []
        for index, item in enumerate(items):
            item_context = context.with_iteration(**{item_variable: item, index_variable: index})
            expanded.append(
                self._resolve_node(
                    template, f"{path}/{offset + index}", item_context, f"{suffix}[{index}]"
                )
            )
        return tuple(expanded)

    def _read_collection(self, path: str, context: ResolutionContext) -> tuple[Value, ...]:
        if path.startswith(_LOCAL_PREFIX):
            value = context.read_local(path[len(_LOCAL_PREFIX):])
        else:
            value = context.read(path)
        items = value.as_list()
        if items is None:
            if not value.is_null:
                logger.debug("collection_not_array", path=path, kind=value.kind.value)
            return ()
        return items

    def _section_items(self, source: str, context: ResolutionContext) -> tuple[Value, ...]:
        """A section data source names a document data source or a state path."""
        if source in self.definition.data_sources:
            return self.bindings.resolve_data_source(source, context).as_list() or ()
        return self._read_collection(source, context)

    @staticmethod
    def _bind(binding: ActionBinding, context: ResolutionContext) -> BoundAction:
        return BoundAction(binding, context.scope_owner, context.iteration)
