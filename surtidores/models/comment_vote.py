"""
SQLModel-based CommentVote model

A vote marks a station comment as useful. Voting again removes the vote.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel

from surtidores.utils import utc_now


class CommentVotes(SQLModel, table=True):
    """
    Database table for comment usefulness votes.

    Constraints:
    - Unique on (comment_id, user_id)
    """

    __tablename__ = "comment_votes"

    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_votes_comment_user"),
        Index("idx_comment_votes_user", "user_id"),
    )

    vote_id: int | None = Field(default=None, primary_key=True)

    comment_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("station_comments.comment_id", ondelete="CASCADE", onupdate="CASCADE"),
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
