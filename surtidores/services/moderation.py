"""
Station moderation state machine.

Only user-created stations are moderated. Transitions:

    pending  --approve-->  approved
    pending  --reject--->  rejected
    rejected --resubmit->  pending

Approve and reject are admin actions and are appended to the audit trail.
Resubmission is the creator's action; it surfaces the reason of the latest
rejection so the creator can see what to fix.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import DataSource, ModerationAction, NotificationKind, StationState
from surtidores.core.errors import (
    ForbiddenError,
    InvalidSourceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from surtidores.core.logging import get_logger
from surtidores.models.moderation import ModerationRecords
from surtidores.models.station import Stations
from surtidores.models.user import Users
from surtidores.services.notifications import Notifier, dispatch_notification
from surtidores.utils import utc_now

logger = get_logger(__name__)


TRANSITIONS: dict[tuple[StationState, ModerationAction], StationState] = {
    (StationState.pending, ModerationAction.approve): StationState.approved,
    (StationState.pending, ModerationAction.reject): StationState.rejected,
    (StationState.rejected, ModerationAction.resubmit): StationState.pending,
}

_NOTIFICATION_FOR_STATE = {
    StationState.approved: NotificationKind.station_approved,
    StationState.rejected: NotificationKind.station_rejected,
    StationState.pending: NotificationKind.station_resubmitted,
}


def next_state(current: StationState, action: ModerationAction) -> StationState:
    """
    Resolve a transition.

    Raises:
        InvalidStateError: The action is not allowed from the current state
    """
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidStateError(
            f"Cannot {action.value} a station in state {current.value}"
        ) from None


def station_context(station: Stations, **extra: Any) -> dict[str, Any]:
    """Template context shared by every station notification."""
    context: dict[str, Any] = {
        "station_id": station.station_id,
        "station_name": station.name,
        "address": station.address,
    }
    context.update(extra)
    return context


class StationModerationService:
    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        self.db = db
        self.notifier = notifier

    async def moderate(
        self,
        actor: Users,
        station_id: int,
        action: ModerationAction,
        reason: str | None = None,
    ) -> tuple[Stations, ModerationRecords]:
        """
        Approve or reject a pending user-created station.

        Raises:
            ForbiddenError: Actor is not an admin
            ValidationError: Action is not approve/reject
            NotFoundError: Station does not exist
            InvalidSourceError: Station comes from the official dataset
            InvalidStateError: Station is not pending
        """
        if not actor.is_admin:
            raise ForbiddenError("Only admins can moderate stations")

        if action not in (ModerationAction.approve, ModerationAction.reject):
            raise ValidationError.for_field("action", "action must be 'approve' or 'reject'")

        station = await self._lock_station(station_id)

        if station.source != DataSource.user:
            raise InvalidSourceError("Only user-created stations can be moderated")

        new_state = next_state(station.state, action)
        cleaned_reason = reason.strip() if reason else None

        station.state = new_state
        station.updated_at = utc_now()
        record = ModerationRecords(
            station_id=station_id,
            moderator_user_id=actor.user_id,
            action=action,
            reason=cleaned_reason or None,
        )
        self.db.add(record)
        await self.db.commit()

        logger.info(
            "station_moderated",
            station_id=station_id,
            action=action.value,
            state=new_state.value,
            moderator_user_id=actor.user_id,
        )

        creator = await self._creator(station)
        await dispatch_notification(
            self.notifier,
            _NOTIFICATION_FOR_STATE[new_state],
            creator,
            station_context(station, reason=record.reason),
        )
        return station, record

    async def resubmit(self, actor: Users, station_id: int) -> tuple[Stations, str | None]:
        """
        Send a rejected station back to the moderation queue.

        Returns:
            The station and the reason of its most recent rejection

        Raises:
            NotFoundError: Station does not exist
            ForbiddenError: Actor did not create the station
            InvalidStateError: Station is not rejected
        """
        station = await self._lock_station(station_id)

        if station.creator_user_id != actor.user_id:
            raise ForbiddenError("Only the creator can resubmit this station")

        new_state = next_state(station.state, ModerationAction.resubmit)
        previous_reason = await self.latest_rejection_reason(station_id)

        station.state = new_state
        station.updated_at = utc_now()
        await self.db.commit()

        logger.info("station_resubmitted", station_id=station_id)

        await dispatch_notification(
            self.notifier,
            NotificationKind.station_resubmitted,
            actor,
            station_context(station, previous_reason=previous_reason),
        )
        return station, previous_reason

    async def list_pending(self, limit: int = 20, offset: int = 0) -> tuple[list[Stations], int]:
        """User-created stations waiting for review, oldest first."""
        filters = (
            Stations.state == StationState.pending,  # type: ignore[arg-type]
            Stations.source == DataSource.user,  # type: ignore[arg-type]
        )
        total_result = await self.db.execute(
            select(func.count()).select_from(Stations).where(*filters)
        )
        total = total_result.scalar() or 0

        result = await self.db.execute(
            select(Stations)
            .where(*filters)
            .order_by(Stations.created_at, Stations.station_id)  # type: ignore[arg-type]
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def moderation_history(self, station_id: int) -> list[ModerationRecords]:
        """Audit trail of a station, newest first."""
        if await self.db.get(Stations, station_id) is None:
            raise NotFoundError("Station not found")

        result = await self.db.execute(
            select(ModerationRecords)
            .where(ModerationRecords.station_id == station_id)  # type: ignore[arg-type]
            .order_by(
                ModerationRecords.created_at.desc(),  # type: ignore[attr-defined]
                ModerationRecords.moderation_id.desc(),  # type: ignore[union-attr]
            )
        )
        return list(result.scalars().all())

    async def latest_rejection_reason(self, station_id: int) -> str | None:
        result = await self.db.execute(
            select(ModerationRecords.reason)  # type: ignore[call-overload]
            .where(
                ModerationRecords.station_id == station_id,
                ModerationRecords.action == ModerationAction.reject,
            )
            .order_by(
                ModerationRecords.created_at.desc(),  # type: ignore[attr-defined]
                ModerationRecords.moderation_id.desc(),  # type: ignore[union-attr]
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _lock_station(self, station_id: int) -> Stations:
        result = await self.db.execute(
            select(Stations)
            .where(Stations.station_id == station_id)  # type: ignore[arg-type]
            .with_for_update()
        )
        station = result.scalar_one_or_none()
        if station is None:
            raise NotFoundError("Station not found")
        return station

    async def _creator(self, station: Stations) -> Users | None:
        if station.creator_user_id is None:
            return None
        return await self.db.get(Users, station.creator_user_id)
