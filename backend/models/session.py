"""
Session domain models and schemas.

Dependencies: pydantic
System role: Session API contracts
"""

from pydantic import BaseModel


class CurrentUserResponse(BaseModel):
    """Response schema for the authenticated user."""

    user_id: str
