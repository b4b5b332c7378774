"""Resolved tree: what a renderer consumes."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Union

from ..document import ActionBinding, ColorScheme, EdgeInsets, LayoutKind, Padding, SectionLayoutConfig
from ..styles import EMPTY_STYLE, ResolvedStateStyles, ResolvedStyle
from ..value import Value

if TYPE_CHECKING:
    from ..actions import ActionResult, ExecutionContext

_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class Insets:
    top: float = 0.0
    bottom: float = 0.0
    leading: float = 0.0
    trailing: float = 0.0

    @classmethod
    def of(cls, insets: Padding | EdgeInsets | None) -> "Insets":
        if insets is None:
            return ZERO_INSETS
        if isinstance(insets, Padding):
            return cls(
                insets.resolved_top,
                insets.resolved_bottom,
                insets.resolved_leading,
                insets.resolved_trailing,
            )
        return cls(
            insets.top or 0.0,
            insets.bottom or 0.0,
            insets.leading or 0.0,
            insets.trailing or 0.0,
        )


ZERO_INSETS = Insets()


@dataclass(frozen=True)
class BoundAction:
    """
    An action binding plus the scope it was bound in.

    Running it later sees the same local state owner and iteration
    variables as the node that declared it.
    """

    binding: ActionBinding
    scope_owner: str | None = None
    iteration: Mapping[str, Value] = field(default_factory=lambda: _EMPTY)

    async def run(self, context: "ExecutionContext") -> "ActionResult":
        return await context.with_capture(self.scope_owner, self.iteration).run(self.binding)


@dataclass(frozen=True)
class ResolvedComponent:
    id: str
    kind: str
    styles: ResolvedStateStyles = field(default_factory=lambda: ResolvedStateStyles(EMPTY_STYLE))
    padding: Insets = ZERO_INSETS
    text: str | None = None
    placeholder: str | None = None
    value: Value | None = None
    is_selected: bool | None = None
    fill_width: bool | None = None
    data: Mapping[str, Value] = field(default_factory=lambda: _EMPTY)
    actions: Mapping[str, BoundAction] = field(default_factory=lambda: _EMPTY)
    properties: Mapping[str, Value] = field(default_factory=lambda: _EMPTY)
    scope_owner: str | None = None

    @property
    def style(self) -> ResolvedStyle:
        return self.styles.normal


@dataclass(frozen=True)
class ResolvedSpacer:
    id: str
    min_length: float | None = None


@dataclass(frozen=True)
class ResolvedLayout:
    """Stack container. forEach expands into one of these."""

    id: str
    kind: LayoutKind
    alignment: str | None = None
    spacing: float | None = None
    padding: Insets = ZERO_INSETS
    children: tuple["ResolvedNode", ...] = ()


@dataclass(frozen=True)
class ResolvedSection:
    id: str
    layout: SectionLayoutConfig
    header: "ResolvedNode | None" = None
    footer: "ResolvedNode | None" = None
    sticky_header: bool = False
    children: tuple["ResolvedNode", ...] = ()


@dataclass(frozen=True)
class ResolvedSectionLayout:
    id: str
    section_spacing: float | None = None
    sections: tuple[ResolvedSection, ...] = ()


ResolvedNode = Union[ResolvedComponent, ResolvedSpacer, ResolvedLayout, ResolvedSectionLayout]


@dataclass(frozen=True)
class ResolvedTree:
    document_id: str
    children: tuple[ResolvedNode, ...] = ()
    background_color: str | None = None
    color_scheme: ColorScheme = ColorScheme.SYSTEM
    edge_insets: Insets = ZERO_INSETS
    style: ResolvedStyle = EMPTY_STYLE
    on_appear: BoundAction | None = None
    on_disappear: BoundAction | None = None

    def walk(self) -> Iterator[ResolvedNode]:
        """Depth-first, pre-order over every node (section headers and footers included)."""
        stack: list[ResolvedNode] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, ResolvedLayout):
                stack.extend(reversed(node.children))
            elif isinstance(node, ResolvedSectionLayout):
                for section in reversed(node.sections):
                    nested = [section.header, *section.children, section.footer]
                    stack.extend(reversed([n for n in nested if n is not None]))

    def find(self, node_id: str) -> ResolvedNode | None:
        return next((node for node in self.walk() if node.id == node_id), None)

    def components(self, kind: str | None = None) -> list[ResolvedComponent]:
        return [
            node
            for node in self.walk()
            if isinstance(node, ResolvedComponent) and (kind is None or node.kind == kind)
        ]
