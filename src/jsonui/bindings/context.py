"""Resolution context shared by binding, style and action resolvers."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..state import StateStore
from ..state.keypath import parse_keypath, read
from ..value import NULL, Value

if TYPE_CHECKING:
    from ..actions.registry import ActionResolverRegistry
    from ..document import Definition


@dataclass(frozen=True)
class ResolutionContext:
    """
    Everything a resolver may read while turning document records into
    resolved form.

    Attributes:
        store: State of the document instance
        document: Parsed document (named actions, data sources, styles)
        scope_owner: Id of the nearest enclosing node with local state
        iteration: forEach variables (`item`, `index`, ...) in scope
        resolvers: Action resolver registry, for composite actions
    """

    store: StateStore
    document: "Definition | None" = None
    scope_owner: str | None = None
    iteration: Mapping[str, Value] = field(default_factory=lambda: MappingProxyType({}))
    resolvers: "ActionResolverRegistry | None" = None

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_scope(self, owner_id: str | None) -> "ResolutionContext":
        return replace(self, scope_owner=owner_id)

    def with_iteration(self, **variables: Any) -> "ResolutionContext":
        merged = dict(self.iteration)
        merged.update({name: Value.of(v) for name, v in variables.items()})
        return replace(self, iteration=MappingProxyType(merged))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Value:
        """
        First path segment lookup for expressions.

        Iteration variables shadow state; `local` names the nearest
        scope's local state; anything else is global state.
        """
        if name in self.iteration:
            return self.iteration[name]
        if name == "local" and self.scope_owner is not None:
            return self.store.get_scope_values(self.scope_owner)
        return self.store.values.get(name)

    def read(self, path: str) -> Value:
        """Global path read; a leading iteration variable reads from the item."""
        segments = parse_keypath(path)
        if not segments:
            return NULL
        head = segments[0]
        if isinstance(head, str) and head in self.iteration:
            return read(self.iteration[head], segments[1:])
        return self.store.get(path)

    def read_local(self, path: str) -> Value:
        """Path read against the nearest enclosing local scope."""
        if self.scope_owner is None:
            return NULL
        return self.store.get(path, scope=self.scope_owner)
