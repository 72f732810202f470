"""
Error taxonomy and the exception handlers that render every failure as a
``{"success": false, "message": ...}`` envelope.
"""
import logging
import traceback
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException

from lawconnect.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class ConflictError(AppError):
    """Duplicate record, e.g. an email that is already registered"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "This record already exists"


class AuthError(AppError):
    """Missing, invalid or expired credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or missing token"


class ForbiddenError(AppError):
    """Authenticated but not permitted on this resource"""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class UpstreamError(AppError):
    """
    The AI service failed. The client only ever sees the generic message;
    ``detail`` is for the server log.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "AI service is unavailable"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


def error_response(
    status_code: int,
    message: str,
    exc: Optional[BaseException] = None,
    errors: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    if exc is not None and not settings.is_production:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, UpstreamError):
        logger.error(f"Upstream failure on {request.url.path}: {exc.detail}")
    elif exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return error_response(exc.status_code, exc.message, exc=exc, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Not Found - {request.url.path}"
    else:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    key_pattern = (exc.details or {}).get("keyPattern") or (exc.details or {}).get("keyValue") or {}
    field = next(iter(key_pattern), None)
    message = f"{field} already exists" if field else "This record already exists"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc=exc)
