"""
HTTP request actions
`request` performs an HTTP call and writes loading/response/error state;
`cancelRequest` cancels an in-flight request by id.

In-flight requests are tracked per (document id, request id). Starting a
request with an id that is already in flight cancels the earlier one.
"""

import asyncio
import threading
import time
from typing import Any, Literal

import httpx
import pybreaker
from pydantic import Field, field_validator

from ..actions import ActionDefinition, ActionParameters, ExecutionContext, ParameterizedResolver
from ..bindings import ResolutionContext
from ..core import dumps_json, get_logger, loads_json
from ..core.config import Settings, get_settings
from ..core.errors import ActionExecutionError
from ..core.json import JSONParseError
from ..core.id import new_request_id
from ..document import ActionBinding
from ..value import Value
from .common import resolve_nested

logger = get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


# ============================================================================
# Parameters
# ============================================================================


class RequestParam(ActionParameters):
    """
    One body field or query parameter.

    The value is `literal` when given, otherwise read from state at `path`.
    The key is `as`, else the last segment of `path`, else "value".
    """

    path: str | None = None
    as_: str | None = Field(default=None, alias="as")
    literal: Value | None = None

    @property
    def key(self) -> str:
        if self.as_:
            return self.as_
        if self.path:
            return self.path.rsplit(".", 1)[-1]
        return "value"


class RequestHeader(ActionParameters):
    name: str = Field(min_length=1)
    value: str | None = None
    path: str | None = None


class RequestParameters(ActionParameters):
    request_id: str | None = None
    method: HTTPMethod = "GET"
    url: str = Field(min_length=1)
    headers: list[RequestHeader] | dict[str, str] = Field(default_factory=list)
    query_params: list[RequestParam] = Field(default_factory=list)
    body: list[RequestParam] | dict[str, Value] | None = None
    content_type: Literal["json", "formUrlEncoded"] = "json"
    timeout: float | None = Field(default=None, gt=0)
    loading_path: str | None = None
    response_path: str | None = None
    error_path: str | None = None
    on_success: ActionBinding | None = None
    on_error: ActionBinding | None = None
    debug: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class CancelRequestParameters(ActionParameters):
    request_id: str = Field(min_length=1)


# ============================================================================
# Resolvers
# ============================================================================


class RequestResolver(ParameterizedResolver[RequestParameters]):
    """Callbacks are resolved up front so a broken onSuccess fails early."""

    parameters_model = RequestParameters

    def build(self, params: RequestParameters, context: ResolutionContext) -> dict[str, Any]:
        return {
            "params": params,
            "on_success": resolve_nested(params.on_success, context) if params.on_success else None,
            "on_error": resolve_nested(params.on_error, context) if params.on_error else None,
        }


class CancelRequestResolver(ParameterizedResolver[CancelRequestParameters]):
    parameters_model = CancelRequestParameters

    def build(self, params: CancelRequestParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"request_id": params.request_id}


# ============================================================================
# Handlers
# ============================================================================


class _RequestFailed(Exception):
    """Breaker-counted failure (network error or 5xx)."""


class RequestHandler:
    """
    Executes `request` actions with httpx behind a circuit breaker.

    Args:
        http_client: Shared AsyncClient; one is created (and owned) if omitted
        breaker: Circuit breaker for all requests of this handler
        settings: Default timeout and breaker thresholds
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        breaker: pybreaker.CircuitBreaker | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = http_client
        self._owns_client = http_client is None
        self._tasks: dict[tuple[str, str], asyncio.Task[None]] = {}
        self._lock = threading.Lock()

        # Log breaker transitions
        class BreakerListener(pybreaker.CircuitBreakerListener):
            """Listener for circuit breaker state changes."""

            def state_change(self, cb, old_state, new_state):
                logger.warning(
                    "breaker_state_change",
                    breaker=cb.name,
                    from_state=str(old_state),
                    to_state=str(new_state),
                )

        self.breaker = breaker or pybreaker.CircuitBreaker(
            fail_max=self.settings.request_breaker_fail_max,
            reset_timeout=self.settings.request_breaker_reset_timeout,
            name="request-action",
            listeners=[BreakerListener()],
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    async def aclose(self) -> None:
        self.cancel_all()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self, request_id: str, document_id: str | None = None) -> bool:
        with self._lock:
            task = self._tasks.pop((document_id or "", request_id), None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("request_cancelled", request_id=request_id, document=document_id)
        return True

    def cancel_all(self, document_id: str | None = None) -> int:
        """Cancel every in-flight request, or only those of one document."""
        with self._lock:
            keys = [key for key in self._tasks if document_id is None or key[0] == document_id]
            tasks = [self._tasks.pop(key) for key in keys]
        cancelled = 0
        for task in tasks:
            if not task.done():
                task.cancel()
                cancelled += 1
        return cancelled

    def in_flight(self, document_id: str | None = None) -> list[str]:
        with self._lock:
            return [
                request_id
                for (doc, request_id), task in self._tasks.items()
                if not task.done() and (document_id is None or doc == document_id)
            ]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        params: RequestParameters = definition.required_parameter("params")
        request_id = params.request_id or new_request_id()
        document_id = context.document_id or ""
        key = (document_id, request_id)

        self.cancel(request_id, document_id)

        if params.loading_path:
            context.store.set(params.loading_path, True)
        if params.error_path:
            context.store.set(params.error_path, None)

        task = asyncio.create_task(self._perform(definition, params, request_id, context))
        with self._lock:
            self._tasks[key] = task
        try:
            await task
        except asyncio.CancelledError:
            with self._lock:
                superseded = self._tasks.get(key) not in (None, task)
            # a newer request with the same id owns the loading/error paths now
            if not superseded:
                self._write_cancelled(params, request_id, context)
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise ActionExecutionError.cancelled(
                f"Request '{request_id}' was cancelled", definition.kind
            ) from None
        finally:
            with self._lock:
                if self._tasks.get(key) is task:
                    del self._tasks[key]

    async def _perform(
        self,
        definition: ActionDefinition,
        params: RequestParameters,
        request_id: str,
        context: ExecutionContext,
    ) -> None:
        try:
            request = self._build_request(params, context)
        except (httpx.InvalidURL, ValueError) as e:
            await self._fail(
                definition,
                context,
                {"statusCode": -1, "message": str(e), "code": "invalidURL"},
            )
            return

        if params.debug:
            logger.info(
                "request_debug",
                request_id=request_id,
                method=request.method,
                url=str(request.url),
                headers=_masked_headers(request.headers),
            )

        started = time.monotonic()
        try:
            response = await self._send(request)
        except pybreaker.CircuitBreakerError:
            logger.error("request_rejected", request_id=request_id, error="circuit breaker open")
            await self._fail(
                definition,
                context,
                {"statusCode": -1, "message": "Circuit breaker open", "code": "circuitOpen"},
            )
            return
        except httpx.HTTPError as e:
            logger.warning("request_failed", request_id=request_id, error=str(e))
            await self._fail(
                definition,
                context,
                {"statusCode": -1, "message": str(e) or type(e).__name__, "code": type(e).__name__},
            )
            return

        logger.info(
            "request_completed",
            request_id=request_id,
            status=response.status_code,
            elapsed_ms=round((time.monotonic() - started) * 1000, 2),
        )

        if response.is_success:
            await self._succeed(definition, params, response, context)
            return

        error: dict[str, Any] = {
            "statusCode": response.status_code,
            "message": response.reason_phrase,
            "code": "httpError",
        }
        body = _decode_body(response)
        if body is not None:
            error["body"] = body
        await self._fail(definition, context, error)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send through the breaker; network errors and 5xx count as failures."""
        if self.breaker.current_state == pybreaker.STATE_OPEN:
            # Raises CircuitBreakerError until the reset timeout elapses
            self.breaker.call(lambda: None)

        failure: Exception | None = None
        response: httpx.Response | None = None
        try:
            response = await self.client.send(request)
        except httpx.HTTPError as e:
            failure = e

        def record() -> None:
            if failure is not None:
                raise _RequestFailed(str(failure))
            if response is not None and response.status_code >= 500:
                raise _RequestFailed(f"HTTP {response.status_code}")

        try:
            self.breaker.call(record)
        except (_RequestFailed, pybreaker.CircuitBreakerError):
            pass

        if failure is not None:
            raise failure
        assert response is not None
        return response

    def _build_request(self, params: RequestParameters, context: ExecutionContext) -> httpx.Request:
        url = httpx.URL(context.interpolate(params.url))
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Invalid URL: {url}")

        headers: dict[str, str] = {}
        if isinstance(params.headers, dict):
            headers.update({name: context.interpolate(v) for name, v in params.headers.items()})
        else:
            for header in params.headers:
                if header.value is not None:
                    headers[header.name] = context.interpolate(header.value)
                elif header.path is not None:
                    value = context.resolution_context().read(header.path)
                    if not value.is_null:
                        headers[header.name] = value.stringify()

        query = [
            (param.key, value.stringify())
            for param, value in self._param_values(params.query_params, context)
        ]

        content: bytes | None = None
        data: dict[str, str] | None = None
        if params.body:
            if isinstance(params.body, dict):
                fields = {k: context.evaluate(v).to_python() for k, v in params.body.items()}
            else:
                fields = {
                    param.key: value.to_python()
                    for param, value in self._param_values(params.body, context)
                }
            if params.content_type == "formUrlEncoded":
                data = {k: Value.of(v).stringify() for k, v in fields.items()}
            else:
                headers.setdefault("Content-Type", "application/json")
                content = dumps_json(fields).encode("utf-8")

        return self.client.build_request(
            params.method,
            url,
            params=query or None,
            headers=headers,
            content=content,
            data=data,
            timeout=params.timeout or self.settings.request_timeout,
        )

    @staticmethod
    def _param_values(
        items: list[RequestParam], context: ExecutionContext
    ) -> list[tuple[RequestParam, Value]]:
        resolved = []
        for param in items:
            if "literal" in param.model_fields_set:
                resolved.append((param, context.evaluate(param.literal)))
            elif param.path is not None:
                value = context.resolution_context().read(param.path)
                if not value.is_null:
                    resolved.append((param, value))
        return resolved

    async def _succeed(
        self,
        definition: ActionDefinition,
        params: RequestParameters,
        response: httpx.Response,
        context: ExecutionContext,
    ) -> None:
        if params.loading_path:
            context.store.set(params.loading_path, False)
        if params.response_path:
            context.store.set(params.response_path, _decode_body(response))
        on_success = definition.parameter("on_success")
        if on_success is not None:
            await self._callback(on_success, context)

    async def _fail(
        self, definition: ActionDefinition, context: ExecutionContext, error: dict[str, Any]
    ) -> None:
        params: RequestParameters = definition.parameter("params")
        if params.loading_path:
            context.store.set(params.loading_path, False)
        if params.error_path:
            context.store.set(params.error_path, error)
        on_error = definition.parameter("on_error")
        if on_error is not None:
            await self._callback(on_error, context)

    @staticmethod
    def _write_cancelled(params: RequestParameters, request_id: str, context: ExecutionContext) -> None:
        if params.loading_path:
            context.store.set(params.loading_path, False)
        if params.error_path:
            context.store.set(
                params.error_path,
                {"cancelled": True, "requestId": request_id, "message": "Request was cancelled"},
            )

    @staticmethod
    async def _callback(callback: ActionDefinition, context: ExecutionContext) -> None:
        try:
            await context.execute_definition(callback)
        except ActionExecutionError as e:
            logger.warning("request_callback_failed", action_kind=callback.kind, error=str(e))


class CancelRequestHandler:
    def __init__(self, requests: RequestHandler) -> None:
        self.requests = requests

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        request_id = definition.typed_parameter("request_id", str)
        if not self.requests.cancel(request_id, context.document_id):
            logger.debug("request_not_in_flight", request_id=request_id)


# ============================================================================
# Helpers
# ============================================================================


def _decode_body(response: httpx.Response) -> Any:
    """JSON bodies as data, anything else as text; empty bodies as None."""
    if response.status_code == 204 or not response.content:
        return None
    if "application/json" in response.headers.get("content-type", ""):
        try:
            return loads_json(response.content)
        except JSONParseError:
            return response.text
    return response.text


def _masked_headers(headers: httpx.Headers) -> dict[str, str]:
    masked = {}
    for name, value in headers.items():
        if name.lower() == "authorization":
            value = "***" if len(value) <= 10 else f"{value[:6]}...{value[-4:]}"
        masked[name] = value
    return masked
