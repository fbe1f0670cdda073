"""
Pydantic schemas for station comment, vote and report endpoints
"""

from pydantic import BaseModel, Field, field_validator

from surtidores.config import COMMENT_MAX_LENGTH, REPORT_NOTES_MAX_LENGTH, CommentReportReason
from surtidores.schemas.base import UTCDatetime
from surtidores.schemas.common import UserSummary


class CommentCreate(BaseModel):
    """Schema for creating a new comment"""

    station_id: int = Field(description="ID of the station to comment on")
    text: str = Field(max_length=COMMENT_MAX_LENGTH, description="1-144 characters once trimmed")

    @field_validator("text", mode="before")
    @classmethod
    def sanitize_text(cls, v: str) -> str:
        """Trim before the length check; the service rejects text that is empty once trimmed."""
        if isinstance(v, str):
            return v.strip()
        return v


class CommentUpdate(BaseModel):
    """Schema for updating a comment"""

    text: str = Field(max_length=COMMENT_MAX_LENGTH)

    @field_validator("text", mode="before")
    @classmethod
    def sanitize_text(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class CommentResponse(BaseModel):
    """
    Schema for comment response - what API returns after a write.
    """

    comment_id: int
    station_id: int
    user_id: int
    text: str
    created_at: UTCDatetime
    updated_at: UTCDatetime

    model_config = {"from_attributes": True}


class CommentView(CommentResponse):
    """
    Comment as shown on a station page.

    The viewer flags are false for anonymous callers.
    """

    author: UserSummary | None = None
    vote_count: int = 0
    voted: bool = False
    reported: bool = False
    is_own: bool = False


class CommentListResponse(BaseModel):
    """Comments for one station, most useful first."""

    station_id: int
    total: int
    comments: list[CommentView]


class VoteResult(BaseModel):
    """Vote state after a toggle, or the current state for a viewer."""

    comment_id: int
    voted: bool
    vote_count: int


class CommentReportCreate(BaseModel):
    """Schema for reporting a comment."""

    reasons: list[CommentReportReason] = Field(min_length=1, description="At least one reason")
    notes: str | None = Field(default=None, max_length=REPORT_NOTES_MAX_LENGTH)

    @field_validator("notes", mode="before")
    @classmethod
    def sanitize_notes(cls, v: str | None) -> str | None:
        """Trim notes before the length check; blank notes are stored as null."""
        if isinstance(v, str):
            return v.strip() or None
        return v


class CommentReportItem(BaseModel):
    """One stored report row."""

    report_id: int
    comment_id: int
    user_id: int
    reason: CommentReportReason
    notes: str | None = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class ReportResult(BaseModel):
    """Outcome of reporting a comment."""

    comment_id: int
    reasons: list[CommentReportReason]
    reports: list[CommentReportItem]


class ReportStatus(BaseModel):
    """Whether the caller has already reported a comment."""

    comment_id: int
    has_reported: bool
    report_count: int
