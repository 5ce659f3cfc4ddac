"""
Exception handlers.

Every failure leaves the API as ``{"status": "error", "statusCode": n,
"message": ...}``.  Client errors are logged at WARNING; server errors at
ERROR with the traceback, which never reaches the response body.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from limousine.domain.errors import AppError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"status": "error", "statusCode": status_code, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        return error_response(exc.status_code, "Internal server error")
    logger.warning(
        "%s %s -> %d: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    missed: list[str] = []
    problems: list[str] = []
    section = "body"
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc:
            section = loc[0]
        field = ".".join(loc[1:]) or section
        if error.get("type") == "missing":
            missed.append(field)
        else:
            problems.append(f"{field}: {error.get('msg')}")

    logger.warning(
        "%s %s -> 400: invalid input %s",
        request.method,
        request.url.path,
        missed or problems,
    )
    if missed:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            f"you have missed some inputs in {section}",
            missedInputs=missed,
        )
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Invalid input: " + "; ".join(problems)
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
