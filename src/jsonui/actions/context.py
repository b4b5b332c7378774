"""Execution context handed to action handlers."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..bindings import ResolutionContext
from ..document import ActionBinding, Definition
from ..expressions import interpolate
from ..state import LocalScope, StateStore
from ..value import Value
from .presenters import Presenters
from .types import ActionDefinition

if TYPE_CHECKING:
    from .engine import ActionEngine, ActionResult


@dataclass(frozen=True)
class ExecutionContext:
    """
    What a handler may touch while executing.

    The scope owner and iteration variables are the ones captured where the
    action was bound, so `localBind` paths and `item` references inside the
    action see the same values the bound node saw.
    """

    store: StateStore
    engine: "ActionEngine"
    document: Definition | None = None
    scope_owner: str | None = None
    iteration: Mapping[str, Value] = field(default_factory=lambda: MappingProxyType({}))
    presenters: Presenters = field(default_factory=Presenters)
    instance_id: str | None = None

    @property
    def document_id(self) -> str | None:
        """Key for per-document bookkeeping such as in-flight requests."""
        if self.instance_id is not None:
            return self.instance_id
        return self.document.id if self.document is not None else None

    @property
    def local(self) -> LocalScope | None:
        if self.scope_owner is None:
            return None
        return self.store.scope(self.scope_owner)

    def resolution_context(self) -> ResolutionContext:
        return ResolutionContext(
            store=self.store,
            document=self.document,
            scope_owner=self.scope_owner,
            iteration=self.iteration,
            resolvers=self.engine.resolvers,
        )

    def with_capture(
        self, scope_owner: str | None, iteration: Mapping[str, Value] | None = None
    ) -> "ExecutionContext":
        return replace(
            self,
            scope_owner=scope_owner,
            iteration=MappingProxyType(dict(iteration or {})),
        )

    # ------------------------------------------------------------------
    # Dynamic values
    # ------------------------------------------------------------------

    def evaluate(self, value: Any) -> Value:
        """Resolve `{"$expr": ...}` values against current state."""
        return self.engine.bindings.resolve_dynamic(Value.of(value), self.resolution_context())

    def interpolate(self, template: str) -> str:
        return interpolate(template, self.resolution_context())

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    async def execute_action(self, binding: ActionBinding) -> None:
        """Resolve and execute a named or inline action. Errors propagate."""
        definition = self.engine.resolve_binding(binding, self.resolution_context())
        await self.engine.execute(definition, self)

    async def execute_definition(self, definition: ActionDefinition) -> None:
        await self.engine.execute(definition, self)

    async def run(self, binding: ActionBinding) -> "ActionResult":
        """Like execute_action, but failures are reported instead of raised."""
        return await self.engine.run(binding, self)
