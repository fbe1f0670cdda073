"""
Comments API endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from surtidores.api.dependencies import CommentServiceDep
from surtidores.core.auth import CurrentUser, OptionalCurrentUser
from surtidores.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentReportCreate,
    CommentResponse,
    CommentUpdate,
    ReportResult,
    ReportStatus,
    VoteResult,
)
from surtidores.schemas.common import MessageResponse

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=CommentListResponse)
async def list_comments(
    station_id: Annotated[int, Query(description="Station to list comments for")],
    service: CommentServiceDep,
    current_user: OptionalCurrentUser,
) -> CommentListResponse:
    """
    Comments on a station, most voted first.

    Ties are broken by recency. When signed in, each comment tells whether
    you voted for it, reported it, or wrote it.
    """
    return await service.list_comments(station_id, current_user)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment: CommentCreate,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> CommentResponse:
    """
    Comment on a station.

    One comment per station per user; edit it with PUT instead of posting again.
    """
    created = await service.create_comment(current_user, comment.station_id, comment.text)
    return CommentResponse.model_validate(created)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment: CommentUpdate,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> CommentResponse:
    """Edit your own comment."""
    updated = await service.update_comment(current_user, comment_id, comment.text)
    return CommentResponse.model_validate(updated)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> MessageResponse:
    """Delete your own comment."""
    await service.delete_comment(current_user, comment_id)
    return MessageResponse(message="Comment deleted")


@router.post("/{comment_id}/votes", response_model=VoteResult)
async def toggle_vote(
    comment_id: int,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> VoteResult:
    """Mark a comment as helpful, or undo it if already marked."""
    return await service.toggle_vote(current_user, comment_id)


@router.get("/{comment_id}/votes", response_model=VoteResult)
async def get_vote_status(
    comment_id: int,
    service: CommentServiceDep,
    current_user: OptionalCurrentUser,
) -> VoteResult:
    """Vote count of a comment and whether you voted for it."""
    return await service.get_vote_status(comment_id, current_user)


@router.post(
    "/{comment_id}/reports", response_model=ReportResult, status_code=status.HTTP_201_CREATED
)
async def report_comment(
    comment_id: int,
    report: CommentReportCreate,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> ReportResult:
    """
    Report a comment for review.

    Pick one or more reasons; a comment can be reported once per user.
    """
    return await service.report_comment(current_user, comment_id, report.reasons, report.notes)


@router.get("/{comment_id}/reports", response_model=ReportStatus)
async def get_report_status(
    comment_id: int,
    current_user: CurrentUser,
    service: CommentServiceDep,
) -> ReportStatus:
    """Whether you already reported this comment."""
    return await service.get_report_status(current_user, comment_id)
