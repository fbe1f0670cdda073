"""
Station comments, helpful-votes and abuse reports.

Rules:
- One comment per (station, user); authors edit instead of posting again.
- Comments that are missing or belong to someone else both read as "not
  found" on edit/delete, so ownership is never disclosed.
- Nobody votes on or reports their own comment.
- A vote is a toggle; the returned count is read after the write commits.
- A report submission stores one row per selected reason. A user reports a
  given comment once, whatever the reasons; the submission row is unique per
  (comment, user) and the comment row is locked while the check runs.
"""

from typing import Any

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import (
    COMMENT_MAX_LENGTH,
    REPORT_NOTES_MAX_LENGTH,
    CommentReportReason,
    NotificationKind,
)
from surtidores.core.errors import (
    ConflictError,
    NotFoundError,
    SelfActionError,
    ValidationError,
)
from surtidores.core.logging import get_logger
from surtidores.models.comment import StationComments
from surtidores.models.comment_report import CommentReports, CommentReportSubmissions
from surtidores.models.comment_vote import CommentVotes
from surtidores.models.station import Stations
from surtidores.models.user import Users
from surtidores.schemas.comment import (
    CommentListResponse,
    CommentReportItem,
    CommentView,
    ReportResult,
    ReportStatus,
    VoteResult,
)
from surtidores.schemas.common import UserSummary
from surtidores.services.notifications import Notifier, dispatch_notification
from surtidores.utils import utc_now

logger = get_logger(__name__)


def clean_comment_text(text: str) -> str:
    """Trim comment text and enforce the 1..144 character window."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError.for_field("text", "Comment text cannot be empty")
    if len(cleaned) > COMMENT_MAX_LENGTH:
        raise ValidationError.for_field(
            "text", f"Comment text cannot exceed {COMMENT_MAX_LENGTH} characters"
        )
    return cleaned


class CommentService:
    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        self.db = db
        self.notifier = notifier

    # ===== Comments =====

    async def create_comment(self, user: Users, station_id: int, text: str) -> StationComments:
        """
        Post the caller's comment on a station.

        Raises:
            ValidationError: Text empty after trimming or too long
            NotFoundError: Station does not exist
            ConflictError: Caller already commented on this station
        """
        cleaned = clean_comment_text(text)

        if await self.db.get(Stations, station_id) is None:
            raise NotFoundError("Station not found")

        existing = await self.db.execute(
            select(StationComments.comment_id).where(  # type: ignore[call-overload]
                StationComments.station_id == station_id,
                StationComments.user_id == user.user_id,
            )
        )
        if existing.first() is not None:
            raise ConflictError("You already commented on this station")

        comment = StationComments(station_id=station_id, user_id=user.user_id, text=cleaned)
        self.db.add(comment)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("You already commented on this station") from e

        logger.info("comment_created", comment_id=comment.comment_id, station_id=station_id)
        return comment

    async def update_comment(self, user: Users, comment_id: int, text: str) -> StationComments:
        """Replace the text of the caller's own comment."""
        cleaned = clean_comment_text(text)
        comment = await self._get_owned(comment_id, user)

        comment.text = cleaned
        comment.updated_at = utc_now()
        await self.db.commit()

        logger.info("comment_updated", comment_id=comment_id)
        return comment

    async def delete_comment(self, user: Users, comment_id: int) -> None:
        """Delete the caller's own comment (votes and reports cascade)."""
        comment = await self._get_owned(comment_id, user)

        # Children first; SQLite does not enforce ON DELETE CASCADE
        await self.db.execute(
            delete(CommentVotes).where(CommentVotes.comment_id == comment_id)  # type: ignore[arg-type]
        )
        await self.db.execute(
            delete(CommentReports).where(CommentReports.comment_id == comment_id)  # type: ignore[arg-type]
        )
        await self.db.execute(
            delete(CommentReportSubmissions).where(
                CommentReportSubmissions.comment_id == comment_id  # type: ignore[arg-type]
            )
        )
        await self.db.delete(comment)
        await self.db.commit()

        logger.info("comment_deleted", comment_id=comment_id)

    async def list_comments(
        self, station_id: int, viewer: Users | None = None
    ) -> CommentListResponse:
        """
        Comments on a station ordered by vote count, most recent first on ties.

        Viewer flags (voted, reported, is_own) are false for anonymous callers.
        """
        if await self.db.get(Stations, station_id) is None:
            raise NotFoundError("Station not found")

        vote_counts = (
            select(
                CommentVotes.comment_id.label("comment_id"),  # type: ignore[attr-defined]
                func.count().label("vote_count"),
            )
            .group_by(CommentVotes.comment_id)
            .subquery()
        )
        vote_count = func.coalesce(vote_counts.c.vote_count, 0)

        result = await self.db.execute(
            select(StationComments, Users, vote_count.label("vote_count"))  # type: ignore[call-overload]
            .outerjoin(Users, Users.user_id == StationComments.user_id)
            .outerjoin(vote_counts, vote_counts.c.comment_id == StationComments.comment_id)
            .where(StationComments.station_id == station_id)
            .order_by(
                desc(vote_count),
                desc(StationComments.created_at),
                desc(StationComments.comment_id),
            )
        )
        rows = result.all()

        voted_ids: set[int] = set()
        reported_ids: set[int] = set()
        comment_ids = [comment.comment_id for comment, _, _ in rows]
        if viewer is not None and comment_ids:
            voted = await self.db.execute(
                select(CommentVotes.comment_id).where(  # type: ignore[call-overload]
                    CommentVotes.user_id == viewer.user_id,
                    CommentVotes.comment_id.in_(comment_ids),  # type: ignore[attr-defined]
                )
            )
            voted_ids = set(voted.scalars().all())
            reported = await self.db.execute(
                select(CommentReports.comment_id)  # type: ignore[call-overload]
                .where(
                    CommentReports.user_id == viewer.user_id,
                    CommentReports.comment_id.in_(comment_ids),  # type: ignore[attr-defined]
                )
                .distinct()
            )
            reported_ids = set(reported.scalars().all())

        comments = [
            CommentView(
                comment_id=comment.comment_id,
                station_id=comment.station_id,
                user_id=comment.user_id,
                text=comment.text,
                created_at=comment.created_at,
                updated_at=comment.updated_at,
                author=UserSummary.model_validate(author) if author is not None else None,
                vote_count=count,
                voted=comment.comment_id in voted_ids,
                reported=comment.comment_id in reported_ids,
                is_own=viewer is not None and comment.user_id == viewer.user_id,
            )
            for comment, author, count in rows
        ]
        return CommentListResponse(station_id=station_id, total=len(comments), comments=comments)

    # ===== Votes =====

    async def toggle_vote(self, user: Users, comment_id: int) -> VoteResult:
        """
        Add the caller's helpful-vote, or remove it if already present.

        Raises:
            NotFoundError: Comment does not exist
            SelfActionError: Caller wrote the comment
            ConflictError: A concurrent request inserted the same vote
        """
        comment = await self._get(comment_id)
        if comment.user_id == user.user_id:
            raise SelfActionError("You cannot vote on your own comment")

        existing = await self.db.execute(
            select(CommentVotes).where(
                CommentVotes.comment_id == comment_id,  # type: ignore[arg-type]
                CommentVotes.user_id == user.user_id,  # type: ignore[arg-type]
            )
        )
        vote = existing.scalar_one_or_none()

        if vote is not None:
            await self.db.delete(vote)
            await self.db.commit()
            voted = False
        else:
            self.db.add(CommentVotes(comment_id=comment_id, user_id=user.user_id))
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                raise ConflictError("Vote already registered") from e
            voted = True

        count = await self._vote_count(comment_id)
        logger.info("comment_vote_toggled", comment_id=comment_id, voted=voted, vote_count=count)
        return VoteResult(comment_id=comment_id, voted=voted, vote_count=count)

    async def get_vote_status(self, comment_id: int, viewer: Users | None = None) -> VoteResult:
        """Current vote count and whether the viewer has voted."""
        await self._get(comment_id)
        count = await self._vote_count(comment_id)

        voted = False
        if viewer is not None:
            existing = await self.db.execute(
                select(CommentVotes.vote_id).where(  # type: ignore[call-overload]
                    CommentVotes.comment_id == comment_id,
                    CommentVotes.user_id == viewer.user_id,
                )
            )
            voted = existing.first() is not None

        return VoteResult(comment_id=comment_id, voted=voted, vote_count=count)

    # ===== Reports =====

    async def report_comment(
        self,
        user: Users,
        comment_id: int,
        reasons: list[CommentReportReason],
        notes: str | None = None,
    ) -> ReportResult:
        """
        Report a comment for one or more reasons.

        Raises:
            ValidationError: No reasons, or notes too long
            NotFoundError: Comment does not exist
            SelfActionError: Caller wrote the comment
            ConflictError: Caller already reported this comment
        """
        unique_reasons = list(dict.fromkeys(reasons))
        if not unique_reasons:
            raise ValidationError.for_field("reasons", "Select at least one reason")

        cleaned_notes = notes.strip() if notes else None
        if cleaned_notes and len(cleaned_notes) > REPORT_NOTES_MAX_LENGTH:
            raise ValidationError.for_field(
                "notes", f"Notes cannot exceed {REPORT_NOTES_MAX_LENGTH} characters"
            )

        comment = await self._lock(comment_id)
        if comment.user_id == user.user_id:
            raise SelfActionError("You cannot report your own comment")

        if await self._has_reported(comment_id, user.user_id):
            raise ConflictError("You already reported this comment")

        now = utc_now()
        submission = CommentReportSubmissions(
            comment_id=comment_id, user_id=user.user_id, created_at=now
        )
        self.db.add(submission)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("You already reported this comment") from e

        reports = [
            CommentReports(
                submission_id=submission.submission_id,
                comment_id=comment_id,
                user_id=user.user_id,
                reason=reason,
                notes=cleaned_notes or None,
                created_at=now,
            )
            for reason in unique_reasons
        ]
        self.db.add_all(reports)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("You already reported this comment") from e

        logger.info(
            "comment_reported",
            comment_id=comment_id,
            reasons=[r.value for r in unique_reasons],
        )

        station = await self.db.get(Stations, comment.station_id)
        context: dict[str, Any] = {
            "station_id": comment.station_id,
            "station_name": station.name if station is not None else None,
            "reasons": ", ".join(r.label for r in unique_reasons),
            "notes": cleaned_notes,
        }
        await dispatch_notification(
            self.notifier, NotificationKind.comment_report_thanks, user, context
        )

        return ReportResult(
            comment_id=comment_id,
            reasons=unique_reasons,
            reports=[CommentReportItem.model_validate(r) for r in reports],
        )

    async def get_report_status(self, user: Users, comment_id: int) -> ReportStatus:
        """Whether the caller has reported a comment, and with how many reasons."""
        await self._get(comment_id)
        result = await self.db.execute(
            select(func.count())
            .select_from(CommentReports)
            .where(
                CommentReports.comment_id == comment_id,  # type: ignore[arg-type]
                CommentReports.user_id == user.user_id,  # type: ignore[arg-type]
            )
        )
        count = result.scalar() or 0
        return ReportStatus(comment_id=comment_id, has_reported=count > 0, report_count=count)

    # ===== Helpers =====

    async def _get(self, comment_id: int) -> StationComments:
        comment = await self.db.get(StationComments, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _lock(self, comment_id: int) -> StationComments:
        result = await self.db.execute(
            select(StationComments)
            .where(StationComments.comment_id == comment_id)  # type: ignore[arg-type]
            .with_for_update()
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _get_owned(self, comment_id: int, user: Users) -> StationComments:
        result = await self.db.execute(
            select(StationComments).where(
                StationComments.comment_id == comment_id,  # type: ignore[arg-type]
                StationComments.user_id == user.user_id,  # type: ignore[arg-type]
            )
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _vote_count(self, comment_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(CommentVotes)
            .where(CommentVotes.comment_id == comment_id)  # type: ignore[arg-type]
        )
        return result.scalar() or 0

    async def _has_reported(self, comment_id: int, user_id: int | None) -> bool:
        result = await self.db.execute(
            select(CommentReportSubmissions.submission_id)  # type: ignore[call-overload]
            .where(
                CommentReportSubmissions.comment_id == comment_id,
                CommentReportSubmissions.user_id == user_id,
            )
            .limit(1)
        )
        return result.first() is not None
