"""Request correlation, request logging, and JSON error envelopes."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
_REQUEST_ID_HEADER_RAW = REQUEST_ID_HEADER.lower().encode("latin-1")
_HEALTH_PATHS = frozenset({"/health", "/healthz", "/readyz"})


def _decode_bytes(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _error_payload(*, detail: Any, request_id: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {"detail": detail}
    if request_id:
        payload["request_id"] = request_id
    return payload


def _get_request_id(request: Request) -> str | None:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return None


def _response_headers(request_id: str | None) -> dict[str, str] | None:
    if not request_id:
        return None
    return {REQUEST_ID_HEADER: request_id}


def _incoming_request_id(scope: Scope) -> str:
    for name, value in scope.get("headers") or []:
        if name.lower() == _REQUEST_ID_HEADER_RAW:
            candidate = value.decode("latin-1").strip()
            if candidate:
                return candidate
    return uuid4().hex


class RequestContextMiddleware:
    """Assign a request id, echo it back, and log request completion."""

    def __init__(self, app: ASGIApp) -> None:
        self._app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope)
        scope.setdefault("state", {})["request_id"] = request_id
        started = perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = int(message["status"])
                headers = list(message.get("headers") or [])
                if not any(name.lower() == _REQUEST_ID_HEADER_RAW for name, _ in headers):
                    headers.append((_REQUEST_ID_HEADER_RAW, request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self._app(scope, receive, send_with_request_id)
        finally:
            self._log_request(scope, request_id, status_code, started)

    @staticmethod
    def _log_request(scope: Scope, request_id: str, status_code: int, started: float) -> None:
        path = str(scope.get("path", ""))
        if path in _HEALTH_PATHS and not settings.request_log_include_health:
            return
        duration_ms = round((perf_counter() - started) * 1000, 2)
        extra = {
            "request_id": request_id,
            "method": scope.get("method", ""),
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
        }
        logger.info("http.request.complete", extra=extra)
        slow_threshold_ms = settings.request_log_slow_ms
        if slow_threshold_ms and duration_ms >= slow_threshold_ms:
            logger.warning(
                "http.request.slow",
                extra={**extra, "slow_threshold_ms": slow_threshold_ms},
            )


async def _request_validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    request_id = _get_request_id(request)
    detail = jsonable_encoder(errors, custom_encoder={bytes: _decode_bytes})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_payload(detail=detail, request_id=request_id),
        headers=_response_headers(request_id),
    )


async def _response_validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    request_id = _get_request_id(request)
    logger.error(
        "http.response.validation_failed",
        extra={"request_id": request_id, "path": request.url.path, "error": str(exc)[:500]},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_payload(detail="Internal Server Error", request_id=request_id),
        headers=_response_headers(request_id),
    )


async def _http_exception_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    request_id = _get_request_id(request)
    if not isinstance(exc, StarletteHTTPException):
        return await _unhandled_exception_handler(request, exc)
    headers = dict(exc.headers or {})
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(detail=exc.detail, request_id=request_id),
        headers=headers or None,
    )


async def _unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    request_id = _get_request_id(request)
    logger.error(
        "http.request.unhandled_exception",
        extra={"request_id": request_id, "path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_payload(detail="Internal Server Error", request_id=request_id),
        headers=_response_headers(request_id),
    )


def install_error_handling(app: FastAPI) -> None:
    """Register request-id middleware and JSON exception handlers on `app`."""
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(RequestValidationError, _request_validation_exception_handler)
    app.add_exception_handler(ResponseValidationError, _response_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
