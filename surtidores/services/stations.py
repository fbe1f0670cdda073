"""
User-created stations.

A regular user may have a single station waiting for review at a time.
Admin-created stations skip the queue and are published immediately.
Prices submitted together with the station are stored as ordinary
unvalidated user reports.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import (
    ARGENTINA_BOUNDS,
    DEFAULT_REGION,
    PROVINCE_TO_REGION,
    DataSource,
    NotificationKind,
    StationState,
)
from surtidores.core.errors import (
    ConflictError,
    FieldError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from surtidores.core.logging import get_logger
from surtidores.models.price import PriceReports
from surtidores.models.station import Stations
from surtidores.models.user import Users
from surtidores.schemas.station import StationCreate, StationUpdate
from surtidores.services.moderation import station_context
from surtidores.services.notifications import Notifier, dispatch_notification
from surtidores.utils import utc_now

logger = get_logger(__name__)


def region_for_province(province: str) -> str:
    return PROVINCE_TO_REGION.get(province.strip(), DEFAULT_REGION)


def check_coordinates(latitude: float, longitude: float) -> None:
    """
    Reject coordinates outside Argentina's bounding box.

    Raises:
        ValidationError: One entry per offending coordinate
    """
    errors = []
    if not ARGENTINA_BOUNDS["lat_min"] <= latitude <= ARGENTINA_BOUNDS["lat_max"]:
        errors.append(FieldError("latitude", "Latitude is outside Argentina"))
    if not ARGENTINA_BOUNDS["lng_min"] <= longitude <= ARGENTINA_BOUNDS["lng_max"]:
        errors.append(FieldError("longitude", "Longitude is outside Argentina"))
    if errors:
        raise ValidationError("Coordinates are outside Argentina", errors)


class StationService:
    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        self.db = db
        self.notifier = notifier

    async def create_station(self, user: Users, data: StationCreate) -> Stations:
        """
        Create a user station, pending review unless the creator is an admin.

        Stations added by an admin skip the moderation queue and are
        published as approved; everyone else starts in pending.

        Raises:
            ValidationError: Coordinates outside Argentina
            ConflictError: Non-admin caller already has a pending station
        """
        check_coordinates(data.latitude, data.longitude)

        if not user.is_admin:
            # Serialize concurrent creations by the same user on their row
            await self.db.execute(
                select(Users.user_id)  # type: ignore[call-overload]
                .where(Users.user_id == user.user_id)
                .with_for_update()
            )
            if await self.has_pending(user):
                raise ConflictError(
                    "You already have a station pending approval. "
                    "Wait until it is reviewed before adding another."
                )

        now = utc_now()
        station = Stations(
            name=data.name,
            company=data.company,
            address=data.address,
            locality=data.locality,
            province=data.province,
            region=region_for_province(data.province),
            latitude=data.latitude,
            longitude=data.longitude,
            google_maps_url=data.google_maps_url,
            source=DataSource.user,
            state=StationState.approved if user.is_admin else StationState.pending,
            creator_user_id=user.user_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(station)
        await self.db.flush()

        for initial in data.prices:
            for time_of_day in initial.time_of_day.expand():
                self.db.add(
                    PriceReports(
                        station_id=station.station_id,
                        reporter_user_id=user.user_id,
                        fuel_type=initial.fuel_type,
                        price=initial.price,
                        time_of_day=time_of_day,
                        source=DataSource.user,
                        is_validated=False,
                        created_at=now,
                        updated_at=now,
                    )
                )

        await self.db.commit()

        logger.info(
            "station_created",
            station_id=station.station_id,
            state=station.state.value,
            initial_prices=len(data.prices),
        )

        await dispatch_notification(
            self.notifier,
            NotificationKind.station_created,
            user,
            station_context(station),
        )
        return station

    async def get_station(self, station_id: int) -> Stations:
        station = await self.db.get(Stations, station_id)
        if station is None:
            raise NotFoundError("Station not found")
        return station

    async def update_station(self, user: Users, station_id: int, data: StationUpdate) -> Stations:
        """
        Edit the descriptive fields of a station. Coordinates stay fixed.

        Changing the province recomputes the region.

        Raises:
            NotFoundError: Station does not exist
            ForbiddenError: Caller is neither the creator nor an admin
        """
        result = await self.db.execute(
            select(Stations)
            .where(Stations.station_id == station_id)  # type: ignore[arg-type]
            .with_for_update()
        )
        station = result.scalar_one_or_none()
        if station is None:
            raise NotFoundError("Station not found")
        if station.creator_user_id != user.user_id and not user.is_admin:
            raise ForbiddenError("You cannot edit this station")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return station

        for field, value in changes.items():
            setattr(station, field, value)
        if "province" in changes:
            station.region = region_for_province(changes["province"])
        station.updated_at = utc_now()
        await self.db.commit()

        logger.info("station_updated", station_id=station_id, fields=sorted(changes))
        return station

    async def list_user_stations(self, user: Users) -> list[Stations]:
        """The caller's own stations, newest first."""
        result = await self.db.execute(
            select(Stations)
            .where(Stations.creator_user_id == user.user_id)  # type: ignore[arg-type]
            .order_by(
                Stations.created_at.desc(),  # type: ignore[attr-defined]
                Stations.station_id.desc(),  # type: ignore[union-attr]
            )
        )
        return list(result.scalars().all())

    async def has_pending(self, user: Users) -> bool:
        result = await self.db.execute(
            select(Stations.station_id)  # type: ignore[call-overload]
            .where(
                Stations.creator_user_id == user.user_id,
                Stations.state == StationState.pending,
            )
            .limit(1)
        )
        return result.first() is not None
