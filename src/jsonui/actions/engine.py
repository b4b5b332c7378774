"""
Action Engine
Resolves bound actions into definitions and dispatches them to handlers.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..bindings import BindingResolver, ResolutionContext
from ..core import LogContext, get_logger
from ..core.config import Settings, get_settings
from ..core.errors import (
    ActionExecutionError,
    ActionResolutionError,
    JsonUIError,
)
from ..core.id import InvocationID, new_invocation_id
from ..document import Action, ActionBinding, Definition, DocumentParser
from ..state import StateStore
from .context import ExecutionContext
from .registry import ActionHandlerRegistry, ActionResolverRegistry
from .types import (
    ActionDefinition,
    ActionHandler,
    ActionResolver,
    CancellableActionHandler,
    HandlerFunc,
)

logger = get_logger(__name__)


class ActionPhase(str, Enum):
    """Lifecycle of one action invocation."""

    BOUND = "bound"
    RESOLVED = "resolved"
    DEFINED = "defined"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ActionInvocation:
    """Bookkeeping for a single run of a bound action."""

    binding: ActionBinding
    id: InvocationID = field(default_factory=new_invocation_id)
    phase: ActionPhase = ActionPhase.BOUND
    kind: str | None = None
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    error: JsonUIError | None = None
    failed_in: ActionPhase | None = None

    def advance(self, phase: ActionPhase) -> None:
        self.phase = phase
        if phase in (ActionPhase.COMPLETED, ActionPhase.FAILED):
            self.finished_at = time.monotonic()
        logger.debug("action_phase", phase=phase.value, action_kind=self.kind)

    @property
    def duration_ms(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at) * 1000


class ActionResult(BaseModel):
    """Outcome of ActionEngine.run; failures are data, not exceptions."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    invocation_id: str
    success: bool
    phase: ActionPhase
    failed_in: ActionPhase | None = None
    kind: str | None = None
    error: str | None = None
    error_kind: str | None = None
    duration_ms: float | None = None
    exception: Exception | None = Field(default=None, exclude=True)

    @classmethod
    def from_invocation(cls, invocation: ActionInvocation) -> "ActionResult":
        error = invocation.error
        return cls(
            invocation_id=invocation.id,
            success=invocation.phase == ActionPhase.COMPLETED,
            phase=invocation.phase,
            failed_in=invocation.failed_in,
            kind=invocation.kind,
            error=str(error) if error else None,
            error_kind=getattr(getattr(error, "kind", None), "value", None),
            duration_ms=invocation.duration_ms,
            exception=error,
        )


class ActionEngine:
    """
    Central registry and dispatcher for actions.

    Resolution (Action -> ActionDefinition) and execution (handler side
    effects) are separate steps with separate error types, so a host can
    resolve everything up front and execute later.
    """

    def __init__(
        self,
        resolvers: ActionResolverRegistry | None = None,
        handlers: ActionHandlerRegistry | None = None,
        bindings: BindingResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.resolvers = resolvers if resolvers is not None else ActionResolverRegistry()
        self.handlers = handlers if handlers is not None else ActionHandlerRegistry()
        self.bindings = bindings or BindingResolver()
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_action(
        self,
        kind: str,
        resolver: ActionResolver,
        handler: ActionHandler | HandlerFunc,
    ) -> None:
        """
        Register a resolver and handler for a kind together.

        Raises:
            DuplicateRegistrationError: If either side is taken; nothing is
                registered in that case
        """
        self.resolvers.register(kind, resolver)
        try:
            self.handlers.register(kind, handler)
        except JsonUIError:
            self.resolvers.unregister(kind)
            raise
        logger.info("action_registered", action_kind=kind)

    def unregister_action(self, kind: str) -> None:
        self.resolvers.unregister(kind)
        self.handlers.unregister(kind)

    def supports(self, kind: str) -> bool:
        return kind in self.resolvers and kind in self.handlers

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, data: bytes | str) -> Definition:
        """Parse a document, validating actions against registered resolvers."""
        parser = DocumentParser(
            resolvers=self.resolvers,
            max_size=self.settings.max_document_size,
            max_depth=self.settings.max_document_depth,
        )
        return parser.parse(data)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, action: Action, context: ResolutionContext) -> ActionDefinition:
        """
        Resolve a document-form action.

        Raises:
            ActionResolutionError: unknownActionKind, invalidParameters or
                resolutionFailed
        """
        if context.resolvers is None:
            context = replace(context, resolvers=self.resolvers)
        return self.resolvers.resolve(action, context)

    def lookup(self, binding: ActionBinding, document: Definition | None) -> Action:
        """Inline actions pass through; references go to the document's `actions` map."""
        if isinstance(binding, Action):
            return binding
        action = document.actions.get(binding) if document is not None else None
        if action is None:
            raise ActionResolutionError.unknown_reference(binding)
        return action

    def resolve_binding(self, binding: ActionBinding, context: ResolutionContext) -> ActionDefinition:
        return self.resolve(self.lookup(binding, context.document), context)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        """
        Run a definition's handler.

        Raises:
            ActionExecutionError: noHandler, or whatever the handler reports;
                other handler exceptions are wrapped as executionFailed
        """
        handler = self.handlers.get(definition.kind)
        if handler is None:
            raise ActionExecutionError.no_handler(definition.kind)
        try:
            await handler.execute(definition, context)
        except ActionExecutionError:
            raise
        except JsonUIError as e:
            raise ActionExecutionError.failed(str(e), definition.kind) from e
        except Exception as e:
            logger.error("handler_failed", action_kind=definition.kind, error=str(e), exc_info=True)
            raise ActionExecutionError.failed(
                f"Handler for '{definition.kind}' failed: {e}", definition.kind
            ) from e

    async def run(self, binding: ActionBinding, context: ExecutionContext) -> ActionResult:
        """
        Drive one bound action through resolution and execution.

        Never raises for resolution or execution errors; the result carries
        the phase reached and the error.
        """
        invocation = ActionInvocation(binding=binding)
        with LogContext(invocation_id=invocation.id, document=context.document_id):
            try:
                action = self.lookup(binding, context.document)
                invocation.kind = action.type
                invocation.advance(ActionPhase.RESOLVED)

                definition = self.resolve(action, context.resolution_context())
                invocation.advance(ActionPhase.DEFINED)

                invocation.advance(ActionPhase.EXECUTING)
                await self.execute(definition, context)
                invocation.advance(ActionPhase.COMPLETED)
            except (ActionResolutionError, ActionExecutionError) as e:
                invocation.error = e
                invocation.failed_in = invocation.phase
                logger.warning(
                    "action_failed",
                    action_kind=invocation.kind,
                    failed_in=invocation.phase.value,
                    error=str(e),
                )
                invocation.advance(ActionPhase.FAILED)
            else:
                logger.info(
                    "action_completed",
                    action_kind=invocation.kind,
                    duration_ms=invocation.duration_ms,
                )
        return ActionResult.from_invocation(invocation)

    def context(self, store: StateStore, document: Definition | None = None, **kwargs: Any) -> ExecutionContext:
        """Build an ExecutionContext bound to this engine."""
        return ExecutionContext(store=store, engine=self, document=document, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def cancel_all(self) -> int:
        """Cancel in-flight work of every cancellable handler."""
        cancelled = 0
        for handler in self.handlers.values():
            if isinstance(handler, CancellableActionHandler):
                cancelled += handler.cancel_all()
        if cancelled:
            logger.info("actions_cancelled", count=cancelled)
        return cancelled

    def get_stats(self) -> dict[str, Any]:
        return {
            "resolvers": self.resolvers.get_stats(),
            "handlers": self.handlers.get_stats(),
        }


def create_engine(
    with_builtins: bool = True,
    http_client: Any = None,
    settings: Settings | None = None,
) -> ActionEngine:
    """Engine with the built-in action kinds registered."""
    engine = ActionEngine(settings=settings)
    if with_builtins:
        from ..builtins import register_builtins

        register_builtins(engine, http_client=http_client, settings=engine.settings)
    return engine
