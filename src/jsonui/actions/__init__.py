"""Action resolution and execution."""

from .types import (
    ActionDefinition,
    ActionResolver,
    ActionHandler,
    CancellableActionHandler,
    FunctionHandler,
    HandlerFunc,
    as_handler,
)
from .base import ActionParameters, NoParameters, ParameterizedResolver
from .registry import ActionResolverRegistry, ActionHandlerRegistry
from .presenters import (
    Alert,
    AlertButton,
    AlertButtonStyle,
    AlertPresenter,
    NavigationPresentation,
    NavigationPresenter,
    DismissPresenter,
    Presenters,
    call_presenter,
)
from .context import ExecutionContext
from .engine import ActionEngine, ActionInvocation, ActionPhase, ActionResult, create_engine

__all__ = [
    # Types
    "ActionDefinition",
    "ActionResolver",
    "ActionHandler",
    "CancellableActionHandler",
    "FunctionHandler",
    "HandlerFunc",
    "as_handler",
    # Base
    "ActionParameters",
    "NoParameters",
    "ParameterizedResolver",
    # Registries
    "ActionResolverRegistry",
    "ActionHandlerRegistry",
    # Presenters
    "Alert",
    "AlertButton",
    "AlertButtonStyle",
    "AlertPresenter",
    "NavigationPresentation",
    "NavigationPresenter",
    "DismissPresenter",
    "Presenters",
    "call_presenter",
    # Engine
    "ExecutionContext",
    "ActionEngine",
    "ActionInvocation",
    "ActionPhase",
    "ActionResult",
    "create_engine",
]
