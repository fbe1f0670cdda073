"""
Confirmation ledger service.

Users vouch for prices reported by other users. Every ledger write recounts
the confirmations of the target price and persists
``is_validated = count >= threshold`` in the same transaction, so the flag
always agrees with the ledger.

Concurrency:
- UNIQUE(price_id, user_id) is the race-safe guard against double
  confirmation; the existence check before insert only produces a nicer
  error in the common case.
- The parent price row is locked (SELECT ... FOR UPDATE) before the ledger is
  touched, so concurrent confirm/unconfirm calls on one price serialize and
  the recount inside the transaction sees every committed row.
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import DataSource, settings
from surtidores.core.errors import (
    ConflictError,
    InvalidTargetError,
    NotFoundError,
    SelfActionError,
)
from surtidores.core.logging import get_logger
from surtidores.models.price import PriceConfirmations, PriceReports
from surtidores.models.station import Stations
from surtidores.models.user import Users
from surtidores.schemas.price import (
    ConfirmationListItem,
    ConfirmationListResponse,
    ConfirmationResult,
    ConfirmationStatus,
)
from surtidores.utils import utc_now

logger = get_logger(__name__)


class ConfirmationLedger:
    """Records confirmations and keeps the validated flag of each price in sync."""

    def __init__(self, db: AsyncSession, threshold: int | None = None) -> None:
        self.db = db
        self.threshold = threshold if threshold is not None else settings.PRICE_VALIDATION_THRESHOLD

    async def confirm_price(self, user: Users, price_id: int) -> ConfirmationResult:
        """
        Confirm another user's price report.

        Raises:
            NotFoundError: Price does not exist
            InvalidTargetError: Price comes from the official dataset
            SelfActionError: Caller reported the price
            ConflictError: Caller already confirmed it
        """
        price = await self._lock_price(price_id)
        if price is None:
            raise NotFoundError("Price not found")

        if price.source == DataSource.official:
            raise InvalidTargetError("Official prices cannot be confirmed")

        if price.reporter_user_id == user.user_id:
            raise SelfActionError("You cannot confirm your own price report")

        if await self._find(price_id, user.user_id) is not None:
            raise ConflictError("You already confirmed this price")

        self.db.add(PriceConfirmations(price_id=price_id, user_id=user.user_id))
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("You already confirmed this price") from e

        count = await self._recompute(price)
        await self.db.commit()

        logger.info(
            "price_confirmed",
            price_id=price_id,
            confirmation_count=count,
            is_validated=price.is_validated,
        )
        return ConfirmationResult(
            price_id=price_id,
            confirmed=True,
            confirmation_count=count,
            is_validated=price.is_validated,
        )

    async def remove_confirmation(self, user: Users, price_id: int) -> ConfirmationResult:
        """
        Withdraw the caller's confirmation of a price.

        Raises:
            NotFoundError: The caller has no confirmation on this price
        """
        price = await self._lock_price(price_id)
        confirmation = await self._find(price_id, user.user_id) if price is not None else None
        if price is None or confirmation is None:
            raise NotFoundError("Confirmation not found")

        await self.db.delete(confirmation)
        count = await self._recompute(price)
        await self.db.commit()

        logger.info(
            "price_confirmation_removed",
            price_id=price_id,
            confirmation_count=count,
            is_validated=price.is_validated,
        )
        return ConfirmationResult(
            price_id=price_id,
            confirmed=False,
            confirmation_count=count,
            is_validated=price.is_validated,
        )

    async def get_confirmation_counts(self, price_ids: Iterable[int]) -> dict[int, int]:
        """
        Count confirmations for several prices in one query.

        Returns:
            Dict mapping every requested id to its count (0 when unconfirmed)
        """
        ids = list(dict.fromkeys(price_ids))
        if not ids:
            return {}

        result = await self.db.execute(
            select(PriceConfirmations.price_id, func.count())  # type: ignore[call-overload]
            .where(PriceConfirmations.price_id.in_(ids))  # type: ignore[attr-defined]
            .group_by(PriceConfirmations.price_id)
        )
        counts = {price_id: 0 for price_id in ids}
        for price_id, count in result.all():
            counts[price_id] = count
        return counts

    async def get_confirmation_status(
        self, price_id: int, viewer: Users | None = None
    ) -> ConfirmationStatus:
        """Confirmation count for one price plus whether the viewer confirmed it."""
        price = await self.db.get(PriceReports, price_id)
        if price is None:
            raise NotFoundError("Price not found")

        count = await self._count(price_id)
        confirmed = False
        if viewer is not None:
            confirmed = await self._find(price_id, viewer.user_id) is not None

        return ConfirmationStatus(price_id=price_id, confirmation_count=count, confirmed=confirmed)

    async def list_confirmations(
        self,
        price_id: int | None = None,
        user_id: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ConfirmationListResponse:
        """List confirmations newest first, with the price and station they refer to."""
        query = (
            select(PriceConfirmations, PriceReports, Stations)  # type: ignore[call-overload]
            .outerjoin(PriceReports, PriceReports.price_id == PriceConfirmations.price_id)
            .outerjoin(Stations, Stations.station_id == PriceReports.station_id)
        )
        if price_id is not None:
            query = query.where(PriceConfirmations.price_id == price_id)
        if user_id is not None:
            query = query.where(PriceConfirmations.user_id == user_id)

        query = query.order_by(
            PriceConfirmations.created_at.desc(),  # type: ignore[attr-defined]
            PriceConfirmations.confirmation_id.desc(),  # type: ignore[union-attr]
        )
        result = await self.db.execute(query.offset(offset).limit(limit))
        rows = result.all()

        items = [
            ConfirmationListItem(
                confirmation_id=confirmation.confirmation_id,
                price_id=confirmation.price_id,
                user_id=confirmation.user_id,
                created_at=confirmation.created_at,
                price=float(price.price) if price is not None else None,
                fuel_type=price.fuel_type if price is not None else None,
                time_of_day=price.time_of_day if price is not None else None,
                station_name=station.name if station is not None else None,
                station_company=station.company if station is not None else None,
            )
            for confirmation, price, station in rows
        ]
        return ConfirmationListResponse(
            limit=limit,
            offset=offset,
            has_more=len(items) == limit,
            items=items,
        )

    async def _lock_price(self, price_id: int) -> PriceReports | None:
        result = await self.db.execute(
            select(PriceReports)
            .where(PriceReports.price_id == price_id)  # type: ignore[arg-type]
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def _find(self, price_id: int, user_id: int | None) -> PriceConfirmations | None:
        result = await self.db.execute(
            select(PriceConfirmations).where(
                PriceConfirmations.price_id == price_id,  # type: ignore[arg-type]
                PriceConfirmations.user_id == user_id,  # type: ignore[arg-type]
            )
        )
        return result.scalar_one_or_none()

    async def _count(self, price_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(PriceConfirmations)
            .where(PriceConfirmations.price_id == price_id)  # type: ignore[arg-type]
        )
        return result.scalar() or 0

    async def _recompute(self, price: PriceReports) -> int:
        """Recount the ledger and persist the derived validated flag."""
        await self.db.flush()
        count = await self._count(price.price_id)  # type: ignore[arg-type]
        validated = count >= self.threshold
        if price.is_validated != validated:
            price.is_validated = validated
            price.updated_at = utc_now()
        await self.db.flush()
        return count
