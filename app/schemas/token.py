"""
Token Schemas

Bearer token returned by login and the claims carried inside it.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class Token(BaseModel):
    """OAuth2 password-flow response."""

    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    """
    Validated JWT claims.

    ``role`` is informational; authorization always re-reads the user.
    """

    sub: uuid.UUID
    exp: int
    iat: Optional[int] = None
    role: Optional[str] = None
