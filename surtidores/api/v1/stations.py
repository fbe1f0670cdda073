"""
Station, moderation and station price endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from surtidores.api.dependencies import (
    ModerationServiceDep,
    PaginationParams,
    PriceServiceDep,
    StationServiceDep,
)
from surtidores.config import FuelType, StationState, TimeOfDay, settings
from surtidores.core.auth import AdminUser, CurrentUser
from surtidores.schemas.price import (
    PriceReportBatchResponse,
    PriceReportResponse,
    PriceReportSummaryResponse,
    QuickPriceUpdate,
)
from surtidores.schemas.station import (
    ModerateRequest,
    ModerationRecordResponse,
    ModerationResult,
    StationCreate,
    StationListResponse,
    StationResponse,
    StationUpdate,
    UserStationsResponse,
)

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(
    station: StationCreate,
    current_user: CurrentUser,
    service: StationServiceDep,
) -> StationResponse:
    """
    Add a station that is missing from the official dataset.

    Your station stays pending until an admin reviews it, and you can only
    have one pending station at a time.
    """
    created = await service.create_station(current_user, station)
    return StationResponse.model_validate(created)


@router.get("/mine", response_model=UserStationsResponse)
async def list_my_stations(
    current_user: CurrentUser,
    service: StationServiceDep,
) -> UserStationsResponse:
    """Stations you created, with their moderation state."""
    stations = await service.list_user_stations(current_user)
    return UserStationsResponse(
        has_pending=any(s.state == StationState.pending for s in stations),
        stations=[StationResponse.model_validate(s) for s in stations],
    )


@router.get("/pending", response_model=StationListResponse)
async def list_pending_stations(
    pagination: Annotated[PaginationParams, Depends()],
    _admin: AdminUser,
    service: ModerationServiceDep,
) -> StationListResponse:
    """Moderation queue, oldest first. Admin only."""
    stations, total = await service.list_pending(
        limit=pagination.per_page, offset=pagination.offset
    )
    return StationListResponse(
        total=total,
        limit=pagination.per_page,
        offset=pagination.offset,
        stations=[StationResponse.model_validate(s) for s in stations],
    )


@router.get("/{station_id}", response_model=StationResponse)
async def get_station(station_id: int, service: StationServiceDep) -> StationResponse:
    """Get a single station."""
    return StationResponse.model_validate(await service.get_station(station_id))


@router.patch("/{station_id}", response_model=StationResponse)
async def update_station(
    station_id: int,
    update: StationUpdate,
    current_user: CurrentUser,
    service: StationServiceDep,
) -> StationResponse:
    """
    Edit the name, company, address, locality or province of your station.

    Admins can edit any station. The location cannot be changed.
    """
    station = await service.update_station(current_user, station_id, update)
    return StationResponse.model_validate(station)


@router.get("/{station_id}/prices", response_model=PriceReportBatchResponse)
async def get_station_prices(station_id: int, service: PriceServiceDep) -> PriceReportBatchResponse:
    """Every price on record for a station."""
    rows = await service.get_station_prices(station_id)
    return PriceReportBatchResponse(
        prices=[PriceReportResponse.model_validate(row) for row in rows]
    )


@router.get("/{station_id}/price-reports", response_model=PriceReportSummaryResponse)
async def get_price_report_summary(
    station_id: int,
    service: PriceServiceDep,
    days: Annotated[
        int, Query(ge=1, le=30, description="Look-back window in days")
    ] = settings.PRICE_REPORT_SUMMARY_DAYS,
    fuel_type: Annotated[FuelType | None, Query()] = None,
    time_of_day: Annotated[TimeOfDay | None, Query()] = None,
) -> PriceReportSummaryResponse:
    """
    Recent user reports for a station.

    Aggregated per fuel and schedule (average, min, max, count, latest),
    followed by the most recent individual reports.
    """
    summary, reports = await service.get_report_summary(
        station_id, days=days, fuel_type=fuel_type, time_of_day=time_of_day
    )
    return PriceReportSummaryResponse(
        station_id=station_id,
        days=days,
        summary=summary,
        reports=[PriceReportResponse.model_validate(r) for r in reports],
    )


@router.patch("/{station_id}/moderate", response_model=ModerationResult)
async def moderate_station(
    station_id: int,
    decision: ModerateRequest,
    current_user: CurrentUser,
    service: ModerationServiceDep,
) -> ModerationResult:
    """Approve or reject a pending station. Admin only."""
    station, record = await service.moderate(
        current_user, station_id, decision.action, decision.reason
    )
    return ModerationResult(
        station_id=station_id,
        state=station.state,
        reason=record.reason,
    )


@router.patch("/{station_id}/resubmit", response_model=ModerationResult)
async def resubmit_station(
    station_id: int,
    current_user: CurrentUser,
    service: ModerationServiceDep,
) -> ModerationResult:
    """Send your rejected station back for review after fixing it."""
    station, previous_reason = await service.resubmit(current_user, station_id)
    return ModerationResult(
        station_id=station_id,
        state=station.state,
        previous_reason=previous_reason,
    )


@router.get("/{station_id}/moderations", response_model=list[ModerationRecordResponse])
async def get_moderation_history(
    station_id: int,
    _admin: AdminUser,
    service: ModerationServiceDep,
) -> list[ModerationRecordResponse]:
    """Moderation audit trail of a station, newest first. Admin only."""
    records = await service.moderation_history(station_id)
    return [ModerationRecordResponse.model_validate(r) for r in records]


@router.patch("/{station_id}/prices/quick", response_model=PriceReportBatchResponse)
async def set_station_price(
    station_id: int,
    update: QuickPriceUpdate,
    current_user: CurrentUser,
    service: PriceServiceDep,
) -> PriceReportBatchResponse:
    """
    Set a price on your own approved station.

    Prices entered here are published as validated.
    """
    rows = await service.set_station_price(
        current_user,
        station_id,
        fuel_type=update.fuel_type,
        price=update.price,
        time_of_day=update.time_of_day,
    )
    return PriceReportBatchResponse(
        prices=[PriceReportResponse.model_validate(row) for row in rows]
    )
