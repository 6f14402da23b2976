"""Translation of raised errors into the response envelope."""

import logging

import fastapi
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from components.core import config
from components.core.exceptions import DebtLiteError, UnauthorizedError, ValidationError
from components.core.schemas import ApiResponse
from components.core.validation import violations_from_errors

logger = logging.getLogger(__name__)


def envelope(status_code: int, error: str, message: str, errors=None, headers=None) -> JSONResponse:
    body = ApiResponse(success=False, error=error, message=message, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def debtlite_error_handler(request: Request, exc: DebtLiteError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    errors = (exc.violations or None) if isinstance(exc, ValidationError) else None
    return envelope(exc.status_code, exc.error, exc.message, errors=errors, headers=headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(violations=violations_from_errors(exc.errors()))
    return envelope(status.HTTP_400_BAD_REQUEST, error.error, error.message, errors=error.violations)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return envelope(exc.status_code, str(exc.detail), str(exc.detail), headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if config.get_settings().DEBUG else "An unexpected error occurred"
    return envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", message)


def register_error_handlers(app: fastapi.FastAPI) -> None:
    app.add_exception_handler(DebtLiteError, debtlite_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
