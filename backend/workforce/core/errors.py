"""
Typed domain errors and their HTTP rendering.

Services raise these; routers let them propagate and the handlers registered
in ``register_exception_handlers`` turn them into
``{"error": {"code", "message", "details"}}`` responses.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"
    retryable: bool = False
    headers: dict[str, str] | None = None

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class ValidationError(DomainError):
    status_code = 422
    code = "validation_error"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class AlreadyCheckedIn(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_checked_in"


class NotCheckedIn(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "not_checked_in"


class NotPending(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "not_pending"


class StorageUnavailable(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"
    retryable = True


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }


def _render(exc: DomainError) -> JSONResponse:
    content = error_response(exc.code, exc.message, exc.details)
    headers = dict(exc.headers) if exc.headers else None
    if exc.retryable:
        content["error"]["retryable"] = True
        headers = {**(headers or {}), "Retry-After": "5"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        logger.info(
            "%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message
        )
        return _render(exc)

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Storage unavailable during %s %s: %s", request.method, request.url.path, exc)
        return _render(StorageUnavailable("Storage is temporarily unavailable, retry later"))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response(
                "validation_error",
                "Request validation failed",
                {"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = {
            status.HTTP_401_UNAUTHORIZED: "unauthorized",
            status.HTTP_403_FORBIDDEN: "forbidden",
            status.HTTP_404_NOT_FOUND: "not_found",
            status.HTTP_409_CONFLICT: "conflict",
        }.get(exc.status_code, "http_error")
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response("internal_error", "Unexpected server error"),
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may hold exception instances, which are not JSON serializable
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
