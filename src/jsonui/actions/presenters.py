"""Host-side presentation collaborators used by built-in actions.

Presenter methods may be plain or async; async results are awaited.
"""

import inspect
from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .types import ActionDefinition


class AlertButtonStyle(str, Enum):
    DEFAULT = "default"
    CANCEL = "cancel"
    DESTRUCTIVE = "destructive"


class NavigationPresentation(str, Enum):
    PUSH = "push"
    PRESENT = "present"
    FULL_SCREEN = "fullScreen"


@dataclass(frozen=True)
class AlertButton:
    label: str
    style: AlertButtonStyle = AlertButtonStyle.DEFAULT
    action: ActionDefinition | None = None


@dataclass(frozen=True)
class Alert:
    """Alert ready to show. Button actions run via ExecutionContext.execute_definition."""

    title: str
    message: str | None = None
    buttons: tuple[AlertButton, ...] = field(default_factory=tuple)


@runtime_checkable
class AlertPresenter(Protocol):
    def present_alert(self, alert: Alert) -> Any:
        ...


@runtime_checkable
class NavigationPresenter(Protocol):
    def navigate(self, destination: str, presentation: NavigationPresentation) -> Any:
        ...

    def open_url(self, url: str) -> Any:
        ...


@runtime_checkable
class DismissPresenter(Protocol):
    def dismiss(self) -> Any:
        ...


@dataclass(frozen=True)
class Presenters:
    """Presenters available to one execution. Any of them may be absent."""

    alert: AlertPresenter | None = None
    navigation: NavigationPresenter | None = None
    dismiss: DismissPresenter | None = None


async def call_presenter(result: Any | Awaitable[Any]) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result
