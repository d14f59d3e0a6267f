"""
Application Errors

Error taxonomy for the service layer. Every error is an ``HTTPException`` so
services can raise them directly and FastAPI maps them to the right status.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors raised by the service layer."""

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.default_status, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(AppError):
    """Missing or malformed input."""
    default_status = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """Missing or invalid credential."""
    default_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    """Wrong role, non-owner, or inactive account."""
    default_status = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Entity absent."""
    default_status = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Duplicate enrollment, review, discount code, title or email."""
    default_status = status.HTTP_400_BAD_REQUEST


class DomainRuleError(AppError):
    """A business rule rejected the operation."""
    default_status = status.HTTP_400_BAD_REQUEST


class RateLimitExceeded(AppError):
    """Too many requests from one client."""
    default_status = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(
        self,
        detail: str = "Rate limit exceeded. Please try again later.",
        retry_after: int = 60,
    ):
        super().__init__(detail, headers={"Retry-After": str(retry_after)})
