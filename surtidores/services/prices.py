"""
Price reports.

Two write paths exist:

- ``report_price``: any authenticated user files an unvalidated report; it
  becomes validated once enough other users confirm it.
- ``set_station_price``: the creator of an approved station enters prices
  directly. These rows are validated on write and updated in place.

``update_price`` and ``delete_price`` let the station creator or an admin correct
user-sourced rows; official prices are never edited or deleted.

A ``TimeOfDay.ambos`` submission is stored as one row per schedule.
"""

from datetime import timedelta
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import (
    MAX_PRICE,
    DataSource,
    FuelType,
    NotificationKind,
    StationState,
    TimeOfDay,
    settings,
)
from surtidores.core.errors import (
    ForbiddenError,
    InvalidStateError,
    InvalidTargetError,
    NotFoundError,
    ValidationError,
)
from surtidores.core.logging import get_logger
from surtidores.models.price import PriceConfirmations, PriceReports
from surtidores.models.station import Stations
from surtidores.models.user import Users
from surtidores.schemas.price import PriceReportSummaryItem
from surtidores.services.moderation import station_context
from surtidores.services.notifications import Notifier, dispatch_notification
from surtidores.utils import utc_now

logger = get_logger(__name__)

SUMMARY_REPORT_LIMIT = 50


def check_price(price: Decimal) -> Decimal:
    """
    Raises:
        ValidationError: Price not positive or above the sanity cap
    """
    if price <= 0:
        raise ValidationError.for_field("price", "Price must be greater than zero")
    if price > MAX_PRICE:
        raise ValidationError.for_field("price", f"Price cannot exceed {MAX_PRICE}")
    return price


class PriceService:
    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        self.db = db
        self.notifier = notifier

    async def report_price(
        self,
        user: Users,
        station_id: int,
        fuel_type: FuelType,
        price: Decimal,
        time_of_day: TimeOfDay = TimeOfDay.diurno,
        notes: str | None = None,
    ) -> list[PriceReports]:
        """
        File a user price report.

        Returns:
            The stored rows (two when ``time_of_day`` is ``ambos``)

        Raises:
            ValidationError: Price out of range
            NotFoundError: Station does not exist
        """
        check_price(price)
        station = await self.db.get(Stations, station_id)
        if station is None:
            raise NotFoundError("Station not found")

        now = utc_now()
        cleaned_notes = notes.strip() if notes else None
        reports = [
            PriceReports(
                station_id=station_id,
                reporter_user_id=user.user_id,
                fuel_type=fuel_type,
                price=price,
                time_of_day=schedule,
                source=DataSource.user,
                is_validated=False,
                notes=cleaned_notes or None,
                created_at=now,
                updated_at=now,
            )
            for schedule in time_of_day.expand()
        ]
        self.db.add_all(reports)
        await self.db.commit()

        logger.info(
            "price_reported",
            station_id=station_id,
            fuel_type=fuel_type.value,
            time_of_day=time_of_day.value,
            rows=len(reports),
        )

        await dispatch_notification(
            self.notifier,
            NotificationKind.price_report_thanks,
            user,
            station_context(station, fuel_type=fuel_type.value, price=str(price)),
        )
        return reports

    async def set_station_price(
        self,
        user: Users,
        station_id: int,
        fuel_type: FuelType,
        price: Decimal,
        time_of_day: TimeOfDay = TimeOfDay.diurno,
    ) -> list[PriceReports]:
        """
        Owner quick entry for an approved station.

        Updates the owner's existing row for the same fuel and schedule, or
        inserts one. Rows written here are validated.

        Raises:
            ValidationError: Price out of range
            NotFoundError: Station does not exist
            ForbiddenError: Caller did not create the station
            InvalidStateError: Station is not approved
        """
        check_price(price)
        station = await self.db.get(Stations, station_id)
        if station is None:
            raise NotFoundError("Station not found")
        if station.creator_user_id != user.user_id:
            raise ForbiddenError("Only the creator can set prices for this station")
        if station.state != StationState.approved:
            raise InvalidStateError("Prices can only be set on approved stations")

        now = utc_now()
        rows = []
        for schedule in time_of_day.expand():
            result = await self.db.execute(
                select(PriceReports)
                .where(
                    PriceReports.station_id == station_id,  # type: ignore[arg-type]
                    PriceReports.fuel_type == fuel_type,  # type: ignore[arg-type]
                    PriceReports.time_of_day == schedule,  # type: ignore[arg-type]
                    PriceReports.source == DataSource.user,  # type: ignore[arg-type]
                    PriceReports.reporter_user_id == user.user_id,  # type: ignore[arg-type]
                )
                .order_by(
                    PriceReports.updated_at.desc(),  # type: ignore[attr-defined]
                    PriceReports.price_id.desc(),  # type: ignore[union-attr]
                )
                .limit(1)
                .with_for_update()
            )
            row = result.scalar_one_or_none()
            if row is None:
                row = PriceReports(
                    station_id=station_id,
                    reporter_user_id=user.user_id,
                    fuel_type=fuel_type,
                    time_of_day=schedule,
                    price=price,
                    source=DataSource.user,
                    is_validated=True,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(row)
            else:
                row.price = price
                row.is_validated = True
                row.updated_at = now
            rows.append(row)

        await self.db.commit()

        logger.info(
            "station_price_set",
            station_id=station_id,
            fuel_type=fuel_type.value,
            time_of_day=time_of_day.value,
        )
        return rows

    async def update_price(
        self,
        user: Users,
        price_id: int,
        price: Decimal,
        time_of_day: TimeOfDay | None = None,
    ) -> PriceReports:
        """
        Correct a price row of the caller's station.

        The confirmation ledger and validated flag are left as they are.

        Raises:
            ValidationError: Price out of range, or `ambos` schedule
            NotFoundError: Price does not exist
            InvalidTargetError: Price comes from the official dataset
            ForbiddenError: Caller is neither the station creator nor an admin
        """
        check_price(price)
        if time_of_day == TimeOfDay.ambos:
            raise ValidationError.for_field("time_of_day", "Choose a single schedule")

        row = await self._get_editable(user, price_id)
        row.price = price
        if time_of_day is not None:
            row.time_of_day = time_of_day
        row.updated_at = utc_now()
        await self.db.commit()

        logger.info("price_updated", price_id=price_id, station_id=row.station_id)
        return row

    async def delete_price(self, user: Users, price_id: int) -> None:
        """
        Delete a price row of the caller's station, with its confirmations.

        Raises:
            NotFoundError: Price does not exist
            InvalidTargetError: Price comes from the official dataset
            ForbiddenError: Caller is neither the station creator nor an admin
        """
        row = await self._get_editable(user, price_id)

        await self.db.execute(
            delete(PriceConfirmations).where(
                PriceConfirmations.price_id == price_id  # type: ignore[arg-type]
            )
        )
        await self.db.delete(row)
        await self.db.commit()

        logger.info("price_deleted", price_id=price_id, station_id=row.station_id)

    async def get_station_prices(self, station_id: int) -> list[PriceReports]:
        """Every price row of a station, grouped by fuel and schedule, newest first."""
        if await self.db.get(Stations, station_id) is None:
            raise NotFoundError("Station not found")

        result = await self.db.execute(
            select(PriceReports)
            .where(PriceReports.station_id == station_id)  # type: ignore[arg-type]
            .order_by(
                PriceReports.fuel_type,  # type: ignore[arg-type]
                PriceReports.time_of_day,  # type: ignore[arg-type]
                PriceReports.updated_at.desc(),  # type: ignore[attr-defined]
                PriceReports.price_id.desc(),  # type: ignore[union-attr]
            )
        )
        return list(result.scalars().all())

    async def get_report_summary(
        self,
        station_id: int,
        days: int | None = None,
        fuel_type: FuelType | None = None,
        time_of_day: TimeOfDay | None = None,
    ) -> tuple[list[PriceReportSummaryItem], list[PriceReports]]:
        """
        Aggregate recent user reports per fuel and schedule.

        Returns:
            The per-(fuel, schedule) summary and the most recent reports
        """
        if await self.db.get(Stations, station_id) is None:
            raise NotFoundError("Station not found")

        window = days if days is not None else settings.PRICE_REPORT_SUMMARY_DAYS
        since = utc_now() - timedelta(days=window)

        filters = [
            PriceReports.station_id == station_id,
            PriceReports.source == DataSource.user,
            PriceReports.created_at >= since,  # type: ignore[operator]
        ]
        if fuel_type is not None:
            filters.append(PriceReports.fuel_type == fuel_type)
        if time_of_day is not None:
            schedules = time_of_day.expand()
            filters.append(PriceReports.time_of_day.in_(schedules))  # type: ignore[attr-defined]

        summary_result = await self.db.execute(
            select(  # type: ignore[call-overload]
                PriceReports.fuel_type,
                PriceReports.time_of_day,
                func.avg(PriceReports.price),
                func.min(PriceReports.price),
                func.max(PriceReports.price),
                func.count(),
                func.max(PriceReports.created_at),
            )
            .where(*filters)
            .group_by(PriceReports.fuel_type, PriceReports.time_of_day)
            .order_by(PriceReports.fuel_type, PriceReports.time_of_day)
        )
        summary = [
            PriceReportSummaryItem(
                fuel_type=fuel,
                time_of_day=schedule,
                average_price=round(float(avg), 2),
                min_price=float(low),
                max_price=float(high),
                report_count=count,
                last_reported_at=latest,
            )
            for fuel, schedule, avg, low, high, count, latest in summary_result.all()
        ]

        reports_result = await self.db.execute(
            select(PriceReports)
            .where(*filters)
            .order_by(
                PriceReports.created_at.desc(),  # type: ignore[attr-defined]
                PriceReports.price_id.desc(),  # type: ignore[union-attr]
            )
            .limit(SUMMARY_REPORT_LIMIT)
        )
        return summary, list(reports_result.scalars().all())

    async def _get_editable(self, user: Users, price_id: int) -> PriceReports:
        result = await self.db.execute(
            select(PriceReports)
            .where(PriceReports.price_id == price_id)  # type: ignore[arg-type]
            .with_for_update()
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Price not found")
        if row.source == DataSource.official:
            raise InvalidTargetError("Official prices cannot be changed")

        station = await self.db.get(Stations, row.station_id)
        is_creator = station is not None and station.creator_user_id == user.user_id
        if not (is_creator or user.is_admin):
            raise ForbiddenError("You cannot change prices of this station")
        return row
