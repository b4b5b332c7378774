"""
Built-in actions.

Registered like any host-provided action kind; a host can unregister and
replace any of them.
"""

import httpx

from ..actions import ActionEngine
from ..core import get_logger
from ..core.config import Settings
from .arrays import (
    AppendToArrayHandler,
    ArrayValueResolver,
    ClearArrayHandler,
    ClearArrayResolver,
    RemoveFromArrayHandler,
    RemoveFromArrayResolver,
    SetArrayItemHandler,
    SetArrayItemResolver,
    ToggleInArrayHandler,
)
from .presentation import (
    DismissHandler,
    DismissResolver,
    NavigateHandler,
    NavigateResolver,
    OpenURLHandler,
    OpenURLResolver,
    ShowAlertHandler,
    ShowAlertResolver,
)
from .request import CancelRequestHandler, CancelRequestResolver, RequestHandler, RequestResolver
from .sequence import SequenceHandler, SequenceResolver
from .state import SetStateHandler, SetStateResolver, ToggleStateHandler, ToggleStateResolver

logger = get_logger(__name__)

BUILTIN_KINDS = (
    "dismiss",
    "setState",
    "toggleState",
    "showAlert",
    "navigate",
    "openURL",
    "sequence",
    "appendToArray",
    "removeFromArray",
    "toggleInArray",
    "setArrayItem",
    "clearArray",
    "request",
    "cancelRequest",
)


def register_builtins(
    engine: ActionEngine,
    http_client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> RequestHandler:
    """
    Register every built-in action kind on an engine.

    Args:
        engine: Engine to register on
        http_client: AsyncClient for `request`; created lazily if omitted
        settings: Request timeout and breaker settings (engine's by default)

    Returns:
        The request handler, for closing its client and cancelling requests

    Raises:
        DuplicateRegistrationError: If any built-in kind is already taken
    """
    requests = RequestHandler(http_client=http_client, settings=settings or engine.settings)

    engine.register_action("dismiss", DismissResolver(), DismissHandler())
    engine.register_action("setState", SetStateResolver(), SetStateHandler())
    engine.register_action("toggleState", ToggleStateResolver(), ToggleStateHandler())
    engine.register_action("showAlert", ShowAlertResolver(), ShowAlertHandler(engine.bindings))
    engine.register_action("navigate", NavigateResolver(), NavigateHandler())
    engine.register_action("openURL", OpenURLResolver(), OpenURLHandler())
    engine.register_action("sequence", SequenceResolver(), SequenceHandler())
    engine.register_action("appendToArray", ArrayValueResolver(), AppendToArrayHandler())
    engine.register_action("removeFromArray", RemoveFromArrayResolver(), RemoveFromArrayHandler())
    engine.register_action("toggleInArray", ArrayValueResolver(), ToggleInArrayHandler())
    engine.register_action("setArrayItem", SetArrayItemResolver(), SetArrayItemHandler())
    engine.register_action("clearArray", ClearArrayResolver(), ClearArrayHandler())
    engine.register_action("request", RequestResolver(), requests)
    engine.register_action("cancelRequest", CancelRequestResolver(), CancelRequestHandler(requests))

    logger.info("builtins_registered", count=len(BUILTIN_KINDS))
    return requests


__all__ = ["register_builtins", "BUILTIN_KINDS", "RequestHandler"]
