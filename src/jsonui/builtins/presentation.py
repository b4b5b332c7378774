"""dismiss, showAlert, navigate, openURL."""

from typing import Any

from pydantic import Field

from ..actions import (
    ActionDefinition,
    ActionParameters,
    Alert,
    AlertButton,
    AlertButtonStyle,
    ExecutionContext,
    NavigationPresentation,
    NoParameters,
    ParameterizedResolver,
    call_presenter,
)
from ..bindings import BindingResolver, ResolutionContext
from ..core import get_logger
from ..document import ActionBinding, DataReference
from .common import resolve_nested

logger = get_logger(__name__)


def _missing_presenter(kind: str, presenter: str) -> None:
    logger.warning("presenter_missing", action_kind=kind, presenter=presenter)


# ============================================================================
# dismiss
# ============================================================================


class DismissResolver(ParameterizedResolver[NoParameters]):
    parameters_model = NoParameters

    def build(self, params: NoParameters, context: ResolutionContext) -> dict[str, Any]:
        return {}


class DismissHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        presenter = context.presenters.dismiss
        if presenter is None:
            _missing_presenter(definition.kind, "dismiss")
            return
        await call_presenter(presenter.dismiss())


# ============================================================================
# showAlert
# ============================================================================


class AlertButtonParameters(ActionParameters):
    label: str
    style: AlertButtonStyle = AlertButtonStyle.DEFAULT
    action: ActionBinding | None = None


class ShowAlertParameters(ActionParameters):
    title: str = "Alert"
    message: str | DataReference | None = None
    buttons: list[AlertButtonParameters] = Field(default_factory=list)


class ShowAlertResolver(ParameterizedResolver[ShowAlertParameters]):
    """Button actions are resolved up front; title and message at presentation time."""

    parameters_model = ShowAlertParameters

    def build(self, params: ShowAlertParameters, context: ResolutionContext) -> dict[str, Any]:
        buttons = tuple(
            AlertButton(
                label=button.label,
                style=button.style,
                action=resolve_nested(button.action, context) if button.action is not None else None,
            )
            for button in params.buttons
        )
        return {"title": params.title, "message": params.message, "buttons": buttons}


class ShowAlertHandler:
    def __init__(self, bindings: BindingResolver | None = None) -> None:
        self.bindings = bindings or BindingResolver()

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        presenter = context.presenters.alert
        if presenter is None:
            _missing_presenter(definition.kind, "alert")
            return

        message = definition.parameter("message")
        if isinstance(message, DataReference):
            message = self.bindings.resolve_reference(message, context.resolution_context()).stringify()
        elif isinstance(message, str):
            message = context.interpolate(message)

        alert = Alert(
            title=context.interpolate(definition.parameter("title", "Alert")),
            message=message,
            buttons=definition.parameter("buttons", ()),
        )
        logger.debug("alert_presented", title=alert.title, buttons=len(alert.buttons))
        await call_presenter(presenter.present_alert(alert))


# ============================================================================
# navigate / openURL
# ============================================================================


class NavigateParameters(ActionParameters):
    destination: str = Field(min_length=1)
    presentation: NavigationPresentation = NavigationPresentation.PUSH


class NavigateResolver(ParameterizedResolver[NavigateParameters]):
    parameters_model = NavigateParameters

    def build(self, params: NavigateParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"destination": params.destination, "presentation": params.presentation}


class NavigateHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        presenter = context.presenters.navigation
        if presenter is None:
            _missing_presenter(definition.kind, "navigation")
            return
        destination = context.interpolate(definition.typed_parameter("destination", str))
        await call_presenter(presenter.navigate(destination, definition.parameter("presentation")))


class OpenURLParameters(ActionParameters):
    url: str = Field(min_length=1)


class OpenURLResolver(ParameterizedResolver[OpenURLParameters]):
    parameters_model = OpenURLParameters

    def build(self, params: OpenURLParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"url": params.url}


class OpenURLHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        presenter = context.presenters.navigation
        if presenter is None:
            _missing_presenter(definition.kind, "navigation")
            return
        url = context.interpolate(definition.typed_parameter("url", str))
        await call_presenter(presenter.open_url(url))
