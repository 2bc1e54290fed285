"""
Error taxonomy for the API.

Every error is an HTTPException so FastAPI routes raise them the usual way;
the application-level handler in ``jobportal.main`` renders them as the
``{"success": false, "message": ...}`` envelope, merging ``extra`` into the
body.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors rendered into the JSON envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        extra: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(
            status_code=status_code or type(self).status_code,
            detail=message or self.default_message,
            headers=headers,
        )
        self.extra = extra or {}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    # Some endpoints report duplicates as 400; they pass status_code explicitly.
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ServiceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


class ServerError(AppError):
    pass
