"""
Custom exceptions for the catalog engine
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from bookcatalog.core.config import settings
from bookcatalog.core.logging import log


class BaseAPIException(HTTPException):
    """Base exception for catalog errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(status_code=self.status_code, detail=detail or self.detail, headers=headers or self.headers)
        # Store any additional context
        self.context = kwargs

    def __str__(self) -> str:
        return self.detail


class NotFoundError(BaseAPIException):
    """Requested id is not in the supplied data; the selection is stale"""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"


class ValidationError(BaseAPIException):
    """A single malformed field"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = "Validation error"

    def __init__(self, field: str, reason: str, **kwargs):
        self.field = field
        self.reason = reason
        super().__init__(detail=f"{field}: {reason}", field=field, reason=reason, **kwargs)

    def at(self, prefix: str) -> "ValidationError":
        """Same error with the field nested under ``prefix``"""
        field = f"{prefix}.{self.field}" if self.field else prefix
        return ValidationError(field, self.reason)


class CycleError(BaseAPIException):
    """Parent assignment would make a category its own ancestor"""

    status_code = status.HTTP_409_CONFLICT
    detail = "Category parent assignment would create a cycle"


class DuplicateRoleError(BaseAPIException):
    """Two active media items claim the same singleton role"""

    status_code = status.HTTP_409_CONFLICT
    detail = "Media role is already taken"

    def __init__(self, role: str, **kwargs):
        self.role = role
        super().__init__(detail=f"More than one media item has role '{role}'", role=role, **kwargs)


class ExternalServiceError(BaseAPIException):
    """Catalog service error"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Catalog service unavailable"


# Error response models for OpenAPI documentation
class ErrorDetail(BaseModel):
    """Error detail model"""

    message: str
    type: str
    context: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standard error response"""

    error: ErrorDetail
    request_id: Optional[str] = None
    timestamp: str


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "no-request-id"


# Exception handlers
async def handle_api_exception(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle catalog exceptions with structured response"""
    error_response = {
        "error": {"message": exc.detail, "type": exc.__class__.__name__, "context": getattr(exc, "context", {})},
        "request_id": _request_id(request),
        "timestamp": datetime.utcnow().isoformat(),
    }

    return JSONResponse(status_code=exc.status_code, content=error_response, headers=getattr(exc, "headers", None))


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    # Log the full exception
    log.opt(exception=exc).error("Unexpected error")

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    error_response = {
        "error": {"message": detail, "type": "InternalServerError", "context": {}},
        "request_id": _request_id(request),
        "timestamp": datetime.utcnow().isoformat(),
    }

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_response)
