# domainstore/app/core/exception_handlers.py
"""
Global exception handlers.

Every failure leaves the service as a JSON body of the form
``{"error": "<message>"}`` with the matching status code.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from domainstore.app.core.exceptions import ApiError, InternalError
from domainstore.app.security.hashing import HashingError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error(exc.status_code, exc.message, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed request fields are reported as 400, first problem only."""
    errors = exc.errors()
    if not errors:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")

    first = errors[0]
    field = ".".join(str(loc) for loc in first.get("loc", ())[1:])
    if first.get("type") == "missing":
        message = f"{field} is required" if field else "Request body is required"
    else:
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return await api_error_handler(request, InternalError())


async def hashing_error_handler(request: Request, exc: HashingError) -> JSONResponse:
    logger.exception("Password hashing failed on %s %s", request.method, request.url.path)
    return await api_error_handler(request, InternalError())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await api_error_handler(request, InternalError())


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(HashingError, hashing_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
