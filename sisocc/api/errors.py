"""Response envelope and the mapping from error kinds to HTTP status codes.

This is the only module that knows about status codes for engine errors.
Every response, success or failure, uses the envelope
``{success, message?, data?, pagination?}``.  Unexpected failures are
logged in full and answered with a generic message.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sisocc.domain.errors import ErrorKind, OccurrenceError, OccurrenceValidationError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RESOLVER_UNAVAILABLE: 400,
    ErrorKind.ADDRESS_NOT_FOUND: 400,
    ErrorKind.INTERNAL: 500,
}

INTERNAL_ERROR_MESSAGE = "Internal server error"


def envelope(
    data: Any = None,
    message: str | None = None,
    pagination: dict[str, Any] | None = None,
    success: bool = True,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


def error_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(data=data, message=message, success=False),
    )


async def _occurrence_error(request: Request, exc: OccurrenceError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        return error_response(status_code, INTERNAL_ERROR_MESSAGE)

    data = None
    if isinstance(exc, OccurrenceValidationError) and exc.errors:
        data = {"errors": exc.errors}
    return error_response(status_code, exc.message, data)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    ]
    return error_response(400, "Invalid request", {"errors": errors})


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OccurrenceError, _occurrence_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unexpected_error)
