"""
SQLModel-based StationComment models with inheritance for security

CommentBase (shared public fields)
    ├─> StationComments (database table, adds ownership and timestamps)
    └─> CommentCreate/CommentUpdate/CommentResponse (API schemas, defined in surtidores/schemas)

A user keeps at most one comment per station; they edit it instead of
posting again.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel

from surtidores.config import COMMENT_MAX_LENGTH
from surtidores.utils import utc_now


class CommentBase(SQLModel):
    """
    Base model with shared public fields for comments.
    """

    text: str = Field(max_length=COMMENT_MAX_LENGTH)


class StationComments(CommentBase, table=True):
    """
    Database table for station comments.

    Constraints:
    - Unique on (station_id, user_id)
    """

    __tablename__ = "station_comments"

    __table_args__ = (
        UniqueConstraint("station_id", "user_id", name="uq_station_comments_station_user"),
        Index("idx_station_comments_user", "user_id"),
        Index("idx_station_comments_created_at", "created_at"),
    )

    comment_id: int | None = Field(default=None, primary_key=True)

    station_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("stations.station_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Note: Relationships are intentionally omitted.
    # Foreign keys are sufficient for queries, and omitting relationships avoids:
    # - Circular import issues
    # - Accidental eager loading
    # - Unwanted auto-serialization in API responses
