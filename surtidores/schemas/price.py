"""
Pydantic schemas for price report and confirmation endpoints
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from surtidores.config import MAX_PRICE, DataSource, FuelType, TimeOfDay
from surtidores.schemas.base import UTCDatetime


class PriceReportCreate(BaseModel):
    """Schema for a formal price report submitted by any user."""

    station_id: int = Field(description="Station the price was observed at")
    fuel_type: FuelType
    price: Decimal = Field(gt=0, le=MAX_PRICE, decimal_places=2, description="Price per unit")
    time_of_day: TimeOfDay = Field(
        default=TimeOfDay.diurno,
        description="diurno, nocturno, or ambos (creates one report per schedule)",
    )
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("notes", mode="before")
    @classmethod
    def sanitize_notes(cls, v: str | None) -> str | None:
        """Trim notes before the length check; blank notes are stored as null."""
        if isinstance(v, str):
            return v.strip() or None
        return v


class QuickPriceUpdate(BaseModel):
    """Schema for the station owner's quick price entry."""

    fuel_type: FuelType
    price: Decimal = Field(gt=0, le=MAX_PRICE, decimal_places=2)
    time_of_day: TimeOfDay = Field(default=TimeOfDay.diurno)


class PriceUpdate(BaseModel):
    """
    Correction of a single price row by the station creator or an admin.

    Only one schedule can be set here; `ambos` is rejected.
    """

    price: Decimal = Field(gt=0, le=MAX_PRICE, decimal_places=2)
    time_of_day: TimeOfDay | None = None

    @field_validator("time_of_day")
    @classmethod
    def single_schedule(cls, v: TimeOfDay | None) -> TimeOfDay | None:
        if v == TimeOfDay.ambos:
            raise ValueError("time_of_day must be 'diurno' or 'nocturno'")
        return v


class PriceReportResponse(BaseModel):
    """Schema for a price row."""

    price_id: int
    station_id: int
    reporter_user_id: int | None = None
    fuel_type: FuelType
    price: float
    time_of_day: TimeOfDay
    source: DataSource
    is_validated: bool
    notes: str | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime

    model_config = {"from_attributes": True}


class PriceReportBatchResponse(BaseModel):
    """Rows written by one submission (two when the schedule was ``ambos``)."""

    prices: list[PriceReportResponse]


class ConfirmationResult(BaseModel):
    """Outcome of confirming or un-confirming a price."""

    price_id: int
    confirmed: bool
    confirmation_count: int
    is_validated: bool


class ConfirmationStatus(BaseModel):
    """Confirmation aggregate for one price, with the viewer's own flag."""

    price_id: int
    confirmation_count: int
    confirmed: bool = False


class ConfirmationListItem(BaseModel):
    """A confirmation with the price and station it refers to."""

    confirmation_id: int
    price_id: int
    user_id: int
    created_at: UTCDatetime
    price: float | None = None
    fuel_type: FuelType | None = None
    time_of_day: TimeOfDay | None = None
    station_name: str | None = None
    station_company: str | None = None


class ConfirmationListResponse(BaseModel):
    """Page of confirmations, newest first."""

    limit: int
    offset: int
    has_more: bool
    items: list[ConfirmationListItem]


class PriceReportSummaryItem(BaseModel):
    """Aggregate of recent user reports for one fuel and schedule."""

    fuel_type: FuelType
    time_of_day: TimeOfDay
    average_price: float
    min_price: float
    max_price: float
    report_count: int
    last_reported_at: UTCDatetime


class PriceReportSummaryResponse(BaseModel):
    """Recent user reports for a station."""

    station_id: int
    days: int
    summary: list[PriceReportSummaryItem]
    reports: list[PriceReportResponse]


class ConfirmationCountsResponse(BaseModel):
    """Confirmation counts keyed by price id."""

    counts: dict[int, int]
