# glacier/core/exceptions.py
from __future__ import annotations

"""
Glacier • Application Exceptions
================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException`.
Every failure of the resource delivery pipeline maps to exactly one of the
classes below, and therefore to exactly one HTTP status.

Taxonomy
--------
- `BadRequestException`          400  malformed id (user input)
- `UnauthorizedException`        401  missing / invalid / mismatched token
- `ResourceNotFoundException`    404  no backing metadata record
- `InternalFaultException`       500  programming error or storage fault
- `ServiceUnavailableException`  503  glacier storage/secret not configured

Messages are deliberately generic. Why a token failed or where a file lives
goes to the server log, never into `detail`.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "BadRequestException",
    "UnauthorizedException",
    "ResourceNotFoundException",
    "InternalFaultException",
    "ServiceUnavailableException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = status_code or self.default_status
        message = message or self.default_message
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.message: str = message


class BadRequestException(AppException):
    """Raised when the request itself is malformed (e.g. a non-numeric id)."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedException(AppException):
    """Raised when a protected resource is requested without valid authorisation."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ResourceNotFoundException(AppException):
    """Raised when no metadata record backs the requested id."""

    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalFaultException(AppException):
    """Raised for code defects and storage faults. Always logged before raising."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class ServiceUnavailableException(AppException):
    """Raised while the glacier endpoint requirements are not met."""

    default_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"
