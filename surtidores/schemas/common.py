"""
Shared/common Pydantic schemas used across multiple endpoints
"""

from pydantic import BaseModel


class UserSummary(BaseModel):
    """
    Minimal user information for embedding in responses.

    Used across comment and station endpoints to avoid N+1 queries
    when clients need basic user info without fetching the full profile.
    """

    user_id: int
    name: str
    image: str | None = None

    # Allow Pydantic to read from SQLAlchemy model attributes (not just dicts)
    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
