"""
Error taxonomy and the JSON failure envelope.

Every failure leaves the API as ``{"success": false, "message": ..., "error"?: ...}``.
Services raise ``PortalError`` (an ``HTTPException``) for expected outcomes;
``DataSourceError`` and ``IdentityProviderError`` come from the downstream
adapters and are either converted at the call site with ``downstream()`` or
rendered by the handlers installed here.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

log = structlog.get_logger()

UNIQUE_VIOLATION = "23505"


class PortalError(HTTPException):
    """An expected failure carrying the envelope's message and optional detail."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        error: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.message = message
        self.error = error


class DataSourceError(Exception):
    """Raised by a data source when a query or RPC fails."""

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class IdentityProviderError(Exception):
    """Raised by the identity adapter when the provider rejects or fails a call."""

    def __init__(self, message: str, *, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@contextmanager
def downstream(message: str, status_code: int = 400) -> Iterator[None]:
    """Convert a data source failure inside the block into a ``PortalError``."""
    try:
        yield
    except DataSourceError as exc:
        log.warning("datasource.failed", message=message, error=exc.message, code=exc.code)
        raise PortalError(status_code, message, error=exc.message) from exc


def failure(status_code: int, message: str, error: Optional[Any] = None, headers=None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content, headers=headers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, PortalError):
        return failure(exc.status_code, exc.message, exc.error, exc.headers)
    if exc.status_code == 404 and exc.detail == "Not Found":
        return failure(404, "Endpoint not found")
    return failure(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append({"field": field, "message": err.get("msg", "")})
    fields = ", ".join(p["field"] for p in problems if p["field"]) or "request"
    return failure(400, f"Missing or invalid fields: {fields}", problems)


async def _datasource_exception_handler(request: Request, exc: DataSourceError) -> JSONResponse:
    if exc.code == UNIQUE_VIOLATION:
        return failure(409, "Resource already exists", exc.message)
    log.error("datasource.unhandled", path=request.url.path, error=exc.message, code=exc.code)
    return failure(500, "Database error")


async def _identity_exception_handler(request: Request, exc: IdentityProviderError) -> JSONResponse:
    log.warning("identity.failed", path=request.url.path, error=exc.message)
    return failure(exc.status_code, exc.message)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled", path=request.url.path, method=request.method)
    return failure(500, "Internal server error")


def install_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-rendering handlers on the application."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(DataSourceError, _datasource_exception_handler)
    app.add_exception_handler(IdentityProviderError, _identity_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
