"""
Error boundary - translate failures into the uniform error body.

Every error response has the shape::

    {"path": ..., "timestamp": <epoch ms>, "message": ...}

plus ``validationErrors`` ({field: message}) for field failures. Message
keys are rendered in the locale negotiated from Accept-Language.
Internal details (tracebacks, storage errors) are logged, never returned.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config.settings import get_settings
from src.domain.exceptions import UserServiceError, ValidationFailure
from src.i18n import MessageCatalog, get_catalog

logger = logging.getLogger(__name__)


def error_body(
    path: str, message: str, validation_errors: dict[str, str] | None = None
) -> dict:
    """Build the uniform error body, stamped with the current time."""
    body = {
        "path": path,
        "timestamp": time.time_ns() // 1_000_000,
        "message": message,
    }
    if validation_errors is not None:
        body["validationErrors"] = validation_errors
    return body


def _catalog() -> MessageCatalog:
    return get_catalog(get_settings().default_locale)


def _locale(request: Request, catalog: MessageCatalog) -> str:
    return catalog.negotiate(request.headers.get("accept-language"))


async def user_service_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
    """Render domain failures."""
    catalog = _catalog()
    locale = _locale(request, catalog)

    validation_errors = None
    if isinstance(exc, ValidationFailure):
        validation_errors = {
            field: catalog.resolve(key, locale) for field, key in exc.errors.items()
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            request.url.path, catalog.resolve(exc.message_key, locale), validation_errors
        ),
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed bodies and path/query parameters as a 400 validation failure."""
    catalog = _catalog()
    locale = _locale(request, catalog)

    validation_errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = loc[-1] if loc else "body"
        validation_errors.setdefault(field, catalog.resolve("field_invalid", locale))

    return JSONResponse(
        status_code=400,
        content=error_body(
            request.url.path, catalog.resolve("validation_failure", locale), validation_errors
        ),
    )


_HTTP_STATUS_KEYS = {
    404: "resource_not_found",
    405: "method_not_allowed",
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the uniform shape."""
    key = _HTTP_STATUS_KEYS.get(exc.status_code)
    if key is None:
        message = str(exc.detail)
    else:
        catalog = _catalog()
        message = catalog.resolve(key, _locale(request, catalog))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request.url.path, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure, return a detail-free 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    catalog = _catalog()
    return JSONResponse(
        status_code=500,
        content=error_body(
            request.url.path, catalog.resolve("internal_error", _locale(request, catalog))
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error boundary on an application."""
    app.add_exception_handler(UserServiceError, user_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
