"""
SQLModel-based CommentReport models with inheritance for security

This module defines the comment report tables using SQLModel.
A report submission is one CommentReportSubmissions row, unique per
(comment, user), plus one CommentReports row per selected reason. All reason
rows of a submission share its notes and timestamp.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel

from surtidores.config import REPORT_NOTES_MAX_LENGTH, CommentReportReason
from surtidores.utils import utc_now


class CommentReportSubmissions(SQLModel, table=True):
    """
    One report action by a user on a comment.

    Constraints:
    - Unique on (comment_id, user_id): a user reports a comment once
    """

    __tablename__ = "comment_report_submissions"

    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_report_submissions_comment_user"),
        Index("idx_comment_report_submissions_user", "user_id"),
    )

    submission_id: int | None = Field(default=None, primary_key=True)

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


class CommentReportBase(SQLModel):
    """
    Base model with shared public fields for CommentReports.
    """

    reason: CommentReportReason
    notes: str | None = Field(default=None, max_length=REPORT_NOTES_MAX_LENGTH)


class CommentReports(CommentReportBase, table=True):
    """
    Database table for comment abuse reports, one row per reason.

    Constraints:
    - Unique on (comment_id, user_id, reason)
    - Every row belongs to a submission
    """

    __tablename__ = "comment_reports"

    __table_args__ = (
        UniqueConstraint(
            "comment_id", "user_id", "reason", name="uq_comment_reports_comment_user_reason"
        ),
        Index("idx_comment_reports_comment_user", "comment_id", "user_id"),
        Index("idx_comment_reports_user", "user_id"),
        Index("idx_comment_reports_submission", "submission_id"),
    )

    report_id: int | None = Field(default=None, primary_key=True)

    submission_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey(
                "comment_report_submissions.submission_id",
                ondelete="CASCADE",
                onupdate="CASCADE",
            ),
            nullable=False,
        )
    )
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
