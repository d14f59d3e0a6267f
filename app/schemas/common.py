"""
Common Schemas

Response envelope shared by every endpoint.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Standard response envelope.

    ``count`` is set on list responses; ``message`` carries a human-readable
    confirmation or, with ``success=False``, the error.
    """

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    count: Optional[int] = None


class ErrorResponse(BaseModel):
    """Envelope returned by the exception handlers."""

    success: bool = False
    message: str


def ok(data=None, message: Optional[str] = None, count: Optional[int] = None) -> dict:
    """Build a success envelope. List payloads get ``count`` filled in."""
    if count is None and isinstance(data, list):
        count = len(data)
    body = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    return body
