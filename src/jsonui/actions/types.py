"""
Action Type Definitions
Resolved actions and the resolver/handler extension protocols.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from ..core.errors import ActionExecutionError
from ..document import Action, ActionKind
from ..value import Value

if TYPE_CHECKING:
    from ..bindings import ResolutionContext
    from .context import ExecutionContext
    from .registry import ActionResolverRegistry

T = TypeVar("T")

_MISSING = object()


@dataclass(frozen=True)
class ActionDefinition:
    """
    Executable form of an action.

    `execution_data` is whatever the kind's resolver produced; only the
    matching handler interprets it.
    """

    kind: ActionKind
    execution_data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def parameter(self, name: str, default: Any = None) -> Any:
        return self.execution_data.get(name, default)

    def required_parameter(self, name: str) -> Any:
        value = self.execution_data.get(name, _MISSING)
        if value is _MISSING or value is None or (isinstance(value, Value) and value.is_null):
            raise ActionExecutionError.missing_parameter(name, self.kind)
        return value

    def typed_parameter(self, name: str, expected: type[T]) -> T:
        """Required parameter checked against a Python type."""
        value = self.required_parameter(name)
        if not isinstance(value, expected):
            raise ActionExecutionError.invalid_parameter_type(name, expected, value, self.kind)
        return value

    def __repr__(self) -> str:
        return f"ActionDefinition(kind={self.kind!r}, keys={sorted(self.execution_data)})"


@runtime_checkable
class ActionResolver(Protocol):
    """Turns a document-form Action of one kind into an ActionDefinition."""

    def validate(self, action: Action, registry: "ActionResolverRegistry | None" = None) -> Any:
        """Check parameters at parse time. Raises ActionResolutionError."""
        ...

    def resolve(self, action: Action, context: "ResolutionContext") -> ActionDefinition:
        """Raises ActionResolutionError."""
        ...


@runtime_checkable
class ActionHandler(Protocol):
    """Performs the side effects of one action kind."""

    async def execute(self, definition: ActionDefinition, context: "ExecutionContext") -> None:
        """Raises ActionExecutionError."""
        ...


@runtime_checkable
class CancellableActionHandler(ActionHandler, Protocol):
    """Handler with in-flight work that can be cancelled by id."""

    def cancel(self, request_id: str, document_id: str | None = None) -> bool:
        ...

    def cancel_all(self) -> int:
        ...


HandlerFunc = Callable[[ActionDefinition, "ExecutionContext"], Awaitable[None]]


class FunctionHandler:
    """Adapts a coroutine function to the ActionHandler protocol."""

    def __init__(self, fn: HandlerFunc) -> None:
        self.fn = fn

    async def execute(self, definition: ActionDefinition, context: "ExecutionContext") -> None:
        await self.fn(definition, context)

    def __repr__(self) -> str:
        return f"FunctionHandler({getattr(self.fn, '__name__', self.fn)!r})"


def as_handler(handler: ActionHandler | HandlerFunc) -> ActionHandler:
    if hasattr(handler, "execute"):
        return handler  # type: ignore[return-value]
    return FunctionHandler(handler)  # type: ignore[arg-type]
