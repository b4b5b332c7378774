"""Tests for the request and cancelRequest actions."""

import asyncio
import json

import httpx
import pytest
import respx

from jsonui.actions import ActionEngine, ActionPhase, create_engine
from jsonui.builtins import RequestHandler
from jsonui.builtins.request import RequestResolver
from jsonui.core.errors import ExecutionErrorKind
from jsonui.document import Action
from jsonui.state import StateStore

API = "https://api.example.com"


def request_action(**parameters) -> Action:
    return Action.model_validate({"type": "request", **parameters})


def loading_values(changes) -> list:
    return [change.new.to_python() for change in changes if change.path == "loading"]


@pytest.fixture
def slow_client():
    """Client whose first call hangs until cancelled; later calls answer at once."""
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            await asyncio.sleep(10)
        return httpx.Response(200, json={"call": len(calls)})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# Responses
# ============================================================================

@pytest.mark.unit
class TestResponses:
    """State written for success and failure."""

    async def test_success_writes_response(self, engine):
        store = StateStore()
        changes = []
        store.observe(changes.append)

        with respx.mock() as router:
            route = router.get(f"{API}/items").mock(
                return_value=httpx.Response(200, json={"items": [1, 2]})
            )
            result = await engine.run(request_action(
                url=f"{API}/items",
                loadingPath="loading",
                responsePath="response",
                errorPath="error",
                onSuccess={"type": "setState", "path": "done", "value": True},
            ), engine.context(store))

        assert result.success
        assert route.called
        assert loading_values(changes) == [True, False]
        assert store.get_python("response") == {"items": [1, 2]}
        assert store.get("error").is_null
        assert store.get_python("done") is True

    async def test_success_over_mock_transport(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"id": 7})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        engine = create_engine(http_client=client)
        store = StateStore()

        result = await engine.run(request_action(
            method="POST", url=f"{API}/items", body={"name": "a"}, responsePath="created",
        ), engine.context(store))

        assert result.success
        assert store.get_python("created") == {"id": 7}
        await client.aclose()

    async def test_text_body(self, engine):
        store = StateStore()
        with respx.mock() as router:
            router.get(f"{API}/ping").mock(return_value=httpx.Response(200, text="pong"))
            await engine.run(
                request_action(url=f"{API}/ping", responsePath="response"), engine.context(store)
            )
        assert store.get_python("response") == "pong"

    async def test_http_error_payload(self, engine):
        store = StateStore()
        with respx.mock() as router:
            router.get(f"{API}/missing").mock(
                return_value=httpx.Response(404, json={"detail": "not found"})
            )
            result = await engine.run(request_action(
                url=f"{API}/missing",
                loadingPath="loading",
                errorPath="error",
                onError={"type": "setState", "path": "failed", "value": True},
            ), engine.context(store))

        assert result.success
        assert store.get_python("loading") is False
        assert store.get_python("error") == {
            "statusCode": 404,
            "message": "Not Found",
            "code": "httpError",
            "body": {"detail": "not found"},
        }
        assert store.get_python("failed") is True

    async def test_network_error_code(self, engine):
        store = StateStore()
        with respx.mock() as router:
            router.get(f"{API}/down").mock(side_effect=httpx.ConnectError)
            await engine.run(request_action(url=f"{API}/down", errorPath="error"), engine.context(store))

        error = store.get_python("error")
        assert error["statusCode"] == -1
        assert error["code"] == "ConnectError"

    async def test_invalid_url(self, engine):
        store = StateStore()
        await engine.run(request_action(url="not a url", errorPath="error"), engine.context(store))
        assert store.get_python("error")["code"] == "invalidURL"

    async def test_invalid_callback_fails_resolution(self, engine, store):
        result = await engine.run(
            request_action(url=f"{API}/x", onSuccess="notDefined"), engine.context(store)
        )
        assert result.failed_in == ActionPhase.RESOLVED


# ============================================================================
# Request building
# ============================================================================

@pytest.mark.unit
class TestRequestBuilding:
    """Method, headers, query and body."""

    async def test_json_body_headers_and_query(self, engine):
        store = StateStore({"user": {"name": "Ada", "age": 36}, "token": "abc", "page": 2})
        with respx.mock() as router:
            route = router.post(f"{API}/users").mock(return_value=httpx.Response(201))
            await engine.run(request_action(
                method="post",
                url=f"{API}/users",
                headers={"Authorization": "Bearer ${token}"},
                queryParams=[{"path": "page"}, {"as": "v", "literal": 1}],
                body=[{"path": "user.name"}, {"path": "user.age", "as": "years"}],
            ), engine.context(store))

        request = route.calls.last.request
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.headers["Content-Type"] == "application/json"
        assert request.url.params["page"] == "2"
        assert request.url.params["v"] == "1"
        assert json.loads(request.content) == {"name": "Ada", "years": 36}

    async def test_form_body(self, engine):
        store = StateStore({"email": "ada@example.com"})
        with respx.mock() as router:
            route = router.post(f"{API}/login").mock(return_value=httpx.Response(204))
            await engine.run(request_action(
                method="POST",
                url=f"{API}/login",
                contentType="formUrlEncoded",
                body={"email": {"$expr": "email"}, "remember": True},
            ), engine.context(store))

        request = route.calls.last.request
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == b"email=ada%40example.com&remember=true"

    async def test_missing_state_params_skipped(self, engine, store):
        with respx.mock() as router:
            route = router.get(f"{API}/search").mock(return_value=httpx.Response(200))
            await engine.run(request_action(
                url=f"{API}/search", queryParams=[{"path": "query"}],
            ), engine.context(store))

        assert "query" not in route.calls.last.request.url.params

    async def test_url_interpolation(self, engine):
        store = StateStore({"id": 7})
        with respx.mock() as router:
            route = router.delete(f"{API}/items/7").mock(return_value=httpx.Response(204))
            await engine.run(
                request_action(method="DELETE", url=API + "/items/${id}"), engine.context(store)
            )
        assert route.called


# ============================================================================
# Cancellation
# ============================================================================

@pytest.mark.unit
class TestCancellation:
    """cancelRequest and superseding requests."""

    async def test_cancel_request(self, slow_client):
        engine = create_engine(http_client=slow_client)
        store = StateStore()
        context = engine.context(store)
        pending = asyncio.create_task(engine.run(request_action(
            requestId="load", url=f"{API}/slow", loadingPath="loading", errorPath="error",
        ), context))
        await asyncio.sleep(0.01)

        cancel = await engine.run(
            Action.model_validate({"type": "cancelRequest", "requestId": "load"}), context
        )
        result = await pending

        assert cancel.success
        assert not result.success
        assert result.failed_in == ActionPhase.EXECUTING
        assert result.error_kind == ExecutionErrorKind.CANCELLED.value
        assert store.get_python("loading") is False
        assert store.get_python("error") == {
            "cancelled": True,
            "requestId": "load",
            "message": "Request was cancelled",
        }
        await slow_client.aclose()

    async def test_cancel_unknown_request_is_noop(self, engine, store):
        result = await engine.run(
            Action.model_validate({"type": "cancelRequest", "requestId": "nothing"}),
            engine.context(store),
        )
        assert result.success

    async def test_same_id_supersedes(self, slow_client):
        engine = create_engine(http_client=slow_client)
        store = StateStore()
        context = engine.context(store)
        action = request_action(
            requestId="feed", url=f"{API}/feed", responsePath="response", errorPath="error",
        )

        first = asyncio.create_task(engine.run(action, context))
        await asyncio.sleep(0.01)
        second = await engine.run(action, context)
        first_result = await first

        assert second.success
        assert first_result.error_kind == ExecutionErrorKind.CANCELLED.value
        assert store.get_python("response") == {"call": 2}
        assert store.get("error").is_null
        await slow_client.aclose()

    async def test_engine_cancel_all(self, slow_client):
        engine = create_engine(http_client=slow_client)
        context = engine.context(StateStore())
        pending = asyncio.create_task(engine.run(request_action(url=f"{API}/slow"), context))
        await asyncio.sleep(0.01)

        assert engine.cancel_all() == 1
        assert (await pending).error_kind == ExecutionErrorKind.CANCELLED.value
        await slow_client.aclose()


# ============================================================================
# Circuit breaker
# ============================================================================

@pytest.mark.unit
async def test_breaker_opens_after_server_errors(http_client, breaker, store):
    """Server errors trip the breaker; further requests are rejected without a call."""
    engine = ActionEngine()
    engine.register_action("request", RequestResolver(), RequestHandler(http_client, breaker=breaker))
    action = request_action(url=f"{API}/flaky", errorPath="error")

    with respx.mock() as router:
        route = router.get(f"{API}/flaky").mock(return_value=httpx.Response(503))
        for _ in range(2):
            await engine.run(action, engine.context(store))
        assert store.get_python("error")["statusCode"] == 503

        await engine.run(action, engine.context(store))

    assert route.call_count == 2
    assert breaker.current_state == "open"
    assert store.get_python("error")["code"] == "circuitOpen"
