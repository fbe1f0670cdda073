"""
Price report and confirmation endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from surtidores.api.dependencies import ConfirmationLedgerDep, PaginationParams, PriceServiceDep
from surtidores.core.auth import CurrentUser, OptionalCurrentUser
from surtidores.core.errors import ValidationError
from surtidores.schemas.common import MessageResponse
from surtidores.schemas.price import (
    ConfirmationCountsResponse,
    ConfirmationListResponse,
    ConfirmationResult,
    ConfirmationStatus,
    PriceReportBatchResponse,
    PriceReportCreate,
    PriceReportResponse,
    PriceUpdate,
)

router = APIRouter(prefix="/prices", tags=["prices"])

MAX_COUNT_IDS = 200


def parse_price_ids(raw: str) -> list[int]:
    """Parse a comma-separated id list such as ``1,2,3``."""
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not (part.isascii() and part.isdigit()):
            raise ValidationError.for_field("ids", f"Invalid price id: {part!r}")
        ids.append(int(part))
    if len(ids) > MAX_COUNT_IDS:
        raise ValidationError.for_field("ids", f"At most {MAX_COUNT_IDS} ids per request")
    return ids


@router.post("", response_model=PriceReportBatchResponse, status_code=status.HTTP_201_CREATED)
async def report_price(
    report: PriceReportCreate,
    current_user: CurrentUser,
    service: PriceServiceDep,
) -> PriceReportBatchResponse:
    """
    Report a price seen at a station.

    Reports start unvalidated. `time_of_day=ambos` stores one report for the
    day schedule and one for the night schedule.
    """
    rows = await service.report_price(
        current_user,
        station_id=report.station_id,
        fuel_type=report.fuel_type,
        price=report.price,
        time_of_day=report.time_of_day,
        notes=report.notes,
    )
    return PriceReportBatchResponse(
        prices=[PriceReportResponse.model_validate(row) for row in rows]
    )


@router.get("/confirmation-counts", response_model=ConfirmationCountsResponse)
async def get_confirmation_counts(
    ids: Annotated[str, Query(description="Comma-separated price ids")],
    ledger: ConfirmationLedgerDep,
) -> ConfirmationCountsResponse:
    """Confirmation counts for several prices. Unconfirmed prices count 0."""
    counts = await ledger.get_confirmation_counts(parse_price_ids(ids))
    return ConfirmationCountsResponse(counts=counts)


@router.get("/confirmations", response_model=ConfirmationListResponse)
async def list_confirmations(
    pagination: Annotated[PaginationParams, Depends()],
    ledger: ConfirmationLedgerDep,
    price_id: Annotated[int | None, Query(description="Filter by price")] = None,
    user_id: Annotated[int | None, Query(description="Filter by confirming user")] = None,
) -> ConfirmationListResponse:
    """List confirmations, newest first."""
    return await ledger.list_confirmations(
        price_id=price_id,
        user_id=user_id,
        limit=pagination.per_page,
        offset=pagination.offset,
    )


@router.post(
    "/{price_id}/confirmations",
    response_model=ConfirmationResult,
    status_code=status.HTTP_201_CREATED,
)
async def confirm_price(
    price_id: int,
    current_user: CurrentUser,
    ledger: ConfirmationLedgerDep,
) -> ConfirmationResult:
    """
    Confirm another user's price report.

    The report becomes validated once it gathers enough confirmations.
    """
    return await ledger.confirm_price(current_user, price_id)


@router.delete("/{price_id}/confirmations", response_model=ConfirmationResult)
async def remove_confirmation(
    price_id: int,
    current_user: CurrentUser,
    ledger: ConfirmationLedgerDep,
) -> ConfirmationResult:
    """Withdraw your confirmation. May drop the report back to unvalidated."""
    return await ledger.remove_confirmation(current_user, price_id)


@router.get("/{price_id}/confirmations/status", response_model=ConfirmationStatus)
async def get_confirmation_status(
    price_id: int,
    ledger: ConfirmationLedgerDep,
    current_user: OptionalCurrentUser,
) -> ConfirmationStatus:
    """Confirmation count, plus whether you confirmed it when signed in."""
    return await ledger.get_confirmation_status(price_id, current_user)


@router.patch("/{price_id}", response_model=PriceReportResponse)
async def update_price(
    price_id: int,
    update: PriceUpdate,
    current_user: CurrentUser,
    service: PriceServiceDep,
) -> PriceReportResponse:
    """
    Correct a price on your station. Admins can correct any station.

    Official prices cannot be changed.
    """
    row = await service.update_price(
        current_user, price_id, price=update.price, time_of_day=update.time_of_day
    )
    return PriceReportResponse.model_validate(row)


@router.delete("/{price_id}", response_model=MessageResponse)
async def delete_price(
    price_id: int,
    current_user: CurrentUser,
    service: PriceServiceDep,
) -> MessageResponse:
    """Delete a price on your station, together with its confirmations."""
    await service.delete_price(current_user, price_id)
    return MessageResponse(message="Price deleted")
