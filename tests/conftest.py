"""Pytest configuration and fixtures."""

import os
from typing import Any

import pytest
import pytest_asyncio
import httpx
import pybreaker

from jsonui.actions import ActionEngine, Alert, NavigationPresentation, Presenters, create_engine
from jsonui.core import configure_logging, get_settings
from jsonui.document import Definition
from jsonui.state import StateStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['JSONUI_LOG_LEVEL'] = 'DEBUG'
    os.environ['JSONUI_ENABLE_STYLE_CACHE'] = 'true'
    os.environ['JSONUI_REQUEST_TIMEOUT'] = '5'
    get_settings.cache_clear()
    settings = get_settings()
    configure_logging(settings.log_level, settings.json_logs)


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return get_settings()


@pytest.fixture
def store():
    """Empty state store."""
    return StateStore()


@pytest.fixture
def bare_engine():
    """Engine without any registered action kinds."""
    return ActionEngine()


@pytest_asyncio.fixture
async def http_client():
    """AsyncClient routed through respx mocks."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def breaker():
    """Circuit breaker that opens after two failures."""
    return pybreaker.CircuitBreaker(fail_max=2, reset_timeout=60, name="test-request")


@pytest.fixture
def engine(http_client):
    """Engine with built-in actions and a test HTTP client."""
    return create_engine(http_client=http_client)


# ============================================================================
# Presenter Fixtures
# ============================================================================

class RecordingPresenter:
    """Records every presentation call."""

    def __init__(self):
        self.alerts: list[Alert] = []
        self.navigations: list[tuple[str, NavigationPresentation]] = []
        self.urls: list[str] = []
        self.dismissed = 0

    def present_alert(self, alert: Alert) -> None:
        self.alerts.append(alert)

    def navigate(self, destination: str, presentation: NavigationPresentation) -> None:
        self.navigations.append((destination, presentation))

    async def open_url(self, url: str) -> None:
        self.urls.append(url)

    def dismiss(self) -> None:
        self.dismissed += 1


@pytest.fixture
def presenter():
    """Presenter recording alerts, navigation and dismissals."""
    return RecordingPresenter()


@pytest.fixture
def presenters(presenter):
    """Presenters bundle backed by the recording presenter."""
    return Presenters(alert=presenter, navigation=presenter, dismiss=presenter)


# ============================================================================
# Document Fixtures
# ============================================================================

def make_document(**overrides: Any) -> dict[str, Any]:
    """Minimal valid document, with top-level keys overridden."""
    document: dict[str, Any] = {
        "id": "test-doc",
        "version": "0.1.0",
        "root": {"children": []},
    }
    document.update(overrides)
    return document


@pytest.fixture
def document_factory():
    """Factory for minimal valid documents."""
    return make_document


@pytest.fixture
def counter_document() -> dict[str, Any]:
    """Counter screen with named actions, styles and a data source."""
    return make_document(
        id="counter",
        state={"count": 0, "title": "Counter", "items": []},
        styles={
            "base": {"fontSize": 14, "textColor": "#000000"},
            "title": {"inherits": "base", "fontSize": 24, "fontWeight": "bold"},
        },
        dataSources={"greeting": {"type": "static", "template": "Count is ${count}"}},
        actions={
            "increment": {"type": "setState", "path": "count", "value": {"$expr": "${count} + 1"}},
            "reset": {"type": "setState", "path": "count", "value": 0},
        },
        root={
            "backgroundColor": "#FFFFFF",
            "actions": {"onAppear": "reset"},
            "children": [
                {
                    "type": "vstack",
                    "spacing": 8,
                    "children": [
                        {"type": "label", "id": "title", "styleId": "title", "text": "${title}"},
                        {"type": "label", "id": "count", "bind": "count"},
                        {"type": "button", "id": "inc", "text": "+", "actions": {"onTap": "increment"}},
                    ],
                }
            ],
        },
    )


@pytest.fixture
def counter_definition(counter_document) -> Definition:
    """Parsed counter document."""
    return Definition.model_validate(counter_document)
