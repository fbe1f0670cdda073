"""
SQLModel-based ModerationRecord model for the station audit trail

Every approve/reject decision on a user-created station is appended here.
The most recent ``reject`` row supplies the reason shown to the creator when
they resubmit.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer
from sqlmodel import Field, SQLModel

from surtidores.config import ModerationAction
from surtidores.utils import utc_now


class ModerationRecords(SQLModel, table=True):
    """
    Append-only moderation log.

    Rows are never updated or deleted by the application.
    """

    __tablename__ = "station_moderations"

    __table_args__ = (
        Index("idx_station_moderations_station_created", "station_id", "created_at"),
        Index("idx_station_moderations_moderator", "moderator_user_id"),
    )

    moderation_id: int | None = Field(default=None, primary_key=True)

    station_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("stations.station_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    moderator_user_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="SET NULL", onupdate="CASCADE"),
            nullable=True,
        ),
    )

    action: ModerationAction
    reason: str | None = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=utc_now)
