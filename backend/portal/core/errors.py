# backend/portal/core/errors.py
import traceback
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import settings
from ..utils.logging import api_logger


class PortalError(Exception):
    """Base class for failures that map onto an HTTP status"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationFailed(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, fields: List[Dict[str, str]], message: Optional[str] = None):
        self.fields = fields
        super().__init__(message)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}], message)

    @classmethod
    def from_errors(cls, errors) -> "ValidationFailed":
        """Build from pydantic / FastAPI error dicts"""
        return cls([_field_failure(err) for err in errors])

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "fields": self.fields}


class Unauthenticated(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class UpstreamStorageFailure(PortalError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Attachment storage is unavailable"


_LOCATION_PREFIXES = {"body", "query", "path", "form", "header", "cookie"}


def _field_failure(err: Dict[str, Any]) -> Dict[str, str]:
    loc = [str(part) for part in err.get("loc", ()) if str(part) not in _LOCATION_PREFIXES]
    message = err.get("msg", "Invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return {"field": ".".join(loc) or "body", "message": message}


def _render(exc: Exception, status_code: int, body: Dict[str, Any]) -> JSONResponse:
    if settings.is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return _render(exc, exc.status_code, exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailed.from_errors(exc.errors())
    api_logger.info("Rejected malformed request", extra={
        "path": request.url.path,
        "fields": [f["field"] for f in failure.fields]
    })
    return _render(exc, failure.status_code, failure.to_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    api_logger.error("Unhandled error", extra={
        "path": request.url.path,
        "method": request.method,
        "error": str(exc)
    }, exc_info=exc)
    return _render(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": "Internal Server Error"})


def register_error_handlers(app) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
