# app/core/errors.py
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Operational error rendered as the standard `{success: false, error: {...}}` envelope."""

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid input data", details: Any = None, code: str = "VALIDATION_ERROR"):
        super().__init__(status.HTTP_400_BAD_REQUEST, code, message, details)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication failed", code: str = "UNAUTHORIZED"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, code, message)


class AuthorizationError(AppError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(status.HTTP_403_FORBIDDEN, "AUTHORIZATION_ERROR", message)


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource", code: str = "NOT_FOUND"):
        super().__init__(status.HTTP_404_NOT_FOUND, code, f"{resource} not found")


class ConflictError(AppError):
    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(status.HTTP_409_CONFLICT, code, message)


class DatabaseError(AppError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", message, details)


class ExternalServiceError(AppError):
    def __init__(self, service: str, message: str):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, "EXTERNAL_SERVICE_ERROR", f"{service}: {message}")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("x-request-id") or f"req_{uuid.uuid4().hex[:12]}"


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    exc: Optional[BaseException] = None,
) -> JSONResponse:
    error = {"code": code, "message": message}
    # server-side details stay private unless DEBUG is on
    if details is not None and (status_code < 500 or settings.DEBUG):
        error["details"] = details
    if exc is not None and settings.DEBUG:
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "timestamp": utc_timestamp(),
            "requestId": get_request_id(request),
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.exception(f"AppError on {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"AppError on {request.method} {request.url.path}: {exc.code} {exc.message}")
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append({"field": field, "message": error.get("msg", "")})
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {details}")
    return error_response(request, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Invalid input data", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        code, message = "NOT_FOUND", f"Route {request.method} {request.url.path} not found"
    elif exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        code, message = "RATE_LIMITED", "Too many requests, please try again later"
    else:
        code, message = f"HTTP_{exc.status_code}", str(exc.detail)
    return error_response(request, exc.status_code, code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}", exc_info=exc)
    message = str(exc) if settings.DEBUG else "An unexpected error occurred"
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", message, exc=exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
