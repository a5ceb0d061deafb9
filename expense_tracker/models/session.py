"""Authenticated session handed over by the external auth provider."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthSession(BaseModel):
    """
    The signed-in identity.

    The store scopes every row to ``owner_id``; nothing in this package
    creates or refreshes sessions.
    """
    model_config = ConfigDict(frozen=True)

    owner_id: UUID
    email: Optional[str] = None
