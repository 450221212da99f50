"""Exception-to-response mapping shared by every route.

All error bodies share one shape::

    {"detail": <message>, "code": <machine code>, "debug_id": <uuid>}

``debug_id`` is logged alongside the failure so a client report can be
matched to the server-side record. Rate-limit rejections add ``retryAfter``
to the body and a ``Retry-After`` header.
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from appbuilder.core.exceptions import AppBuilderError, InvalidArgumentError, ResourceExhaustedError
from appbuilder.middleware.correlation import get_correlation_id

logger = structlog.get_logger(__name__)


def _error_response(
    status_code: int,
    detail,
    code: str,
    debug_id: str,
    extra: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content = {"detail": detail, "code": code, "debug_id": debug_id}
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _request_fields(request: Request) -> dict:
    return {
        "correlation_id": get_correlation_id(),
        "path": request.url.path,
        "method": request.method,
    }


async def app_error_handler(request: Request, exc: AppBuilderError) -> JSONResponse:
    debug_id = str(uuid.uuid4())
    log = logger.warning if exc.status_code < 500 else logger.error
    log("app_error", code=exc.code, status_code=exc.status_code, debug_id=debug_id,
        detail=str(exc), **_request_fields(request))

    if isinstance(exc, ResourceExhaustedError):
        return _error_response(
            exc.status_code, str(exc), exc.code, debug_id,
            extra={"retryAfter": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )
    return _error_response(exc.status_code, str(exc), exc.code, debug_id)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors like any other invalid argument."""
    debug_id = str(uuid.uuid4())
    errors = exc.errors()
    logger.warning("request_validation_failed", debug_id=debug_id, error_count=len(errors),
                   **_request_fields(request))

    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return _error_response(InvalidArgumentError.status_code, detail, InvalidArgumentError.code, debug_id)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    debug_id = str(uuid.uuid4())
    logger.warning("http_exception", status_code=exc.status_code, debug_id=debug_id,
                   detail=exc.detail, **_request_fields(request))
    code = "not_found" if exc.status_code == 404 else "http_error"
    return _error_response(exc.status_code, exc.detail, code, debug_id, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, reveal nothing but the debug id."""
    debug_id = str(uuid.uuid4())
    logger.error("unhandled_exception", debug_id=debug_id, error=str(exc),
                 error_type=type(exc).__name__, exc_info=True, **_request_fields(request))
    return _error_response(500, "Internal server error", AppBuilderError.code, debug_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppBuilderError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
