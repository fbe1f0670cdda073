"""
Pydantic schemas for station creation and moderation endpoints
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from surtidores.config import MAX_PRICE, DataSource, FuelType, ModerationAction, StationState, TimeOfDay
from surtidores.schemas.base import UTCDatetime


class InitialPrice(BaseModel):
    """Optional price submitted together with a new station."""

    fuel_type: FuelType
    price: Decimal = Field(gt=0, le=MAX_PRICE, decimal_places=2)
    time_of_day: TimeOfDay = Field(default=TimeOfDay.diurno)


class StationCreate(BaseModel):
    """
    Schema for creating a station.

    Coordinates arrive already resolved from the Google Maps link by the
    geocoding collaborator.
    """

    name: str = Field(min_length=3, max_length=200)
    company: str = Field(min_length=2, max_length=100)
    address: str = Field(min_length=5, max_length=300)
    locality: str = Field(min_length=2, max_length=100)
    province: str = Field(min_length=2, max_length=100)
    latitude: float
    longitude: float
    google_maps_url: str | None = Field(default=None, max_length=500)
    prices: list[InitialPrice] = Field(default_factory=list)

    @field_validator("name", "company", "address", "locality", "province", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class StationUpdate(BaseModel):
    """
    Descriptive fields a station creator or an admin may correct.

    Location is not editable. Omitted fields are left unchanged.
    """

    name: str | None = Field(default=None, min_length=3, max_length=200)
    company: str | None = Field(default=None, min_length=2, max_length=100)
    address: str | None = Field(default=None, min_length=5, max_length=300)
    locality: str | None = Field(default=None, min_length=2, max_length=100)
    province: str | None = Field(default=None, min_length=2, max_length=100)

    @field_validator("name", "company", "address", "locality", "province", mode="before")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip()
        return v


class StationResponse(BaseModel):
    """Schema for a station."""

    station_id: int
    name: str
    company: str
    address: str
    locality: str
    province: str
    region: str
    latitude: float
    longitude: float
    google_maps_url: str | None = None
    source: DataSource
    state: StationState
    creator_user_id: int | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime

    model_config = {"from_attributes": True}


class UserStationsResponse(BaseModel):
    """The caller's own stations."""

    has_pending: bool
    stations: list[StationResponse]


class StationListResponse(BaseModel):
    """Page of stations."""

    total: int
    limit: int
    offset: int
    stations: list[StationResponse]


class ModerateRequest(BaseModel):
    """Admin decision on a pending station."""

    action: ModerationAction = Field(description="approve or reject")
    reason: str | None = Field(default=None, max_length=1000)

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: ModerationAction) -> ModerationAction:
        """Resubmission is the creator's action, not a moderator's."""
        if v not in (ModerationAction.approve, ModerationAction.reject):
            raise ValueError("action must be 'approve' or 'reject'")
        return v

    @field_validator("reason", mode="before")
    @classmethod
    def sanitize_reason(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip() or None
        return v


class ModerationResult(BaseModel):
    """Station state after a moderation or resubmission."""

    station_id: int
    state: StationState
    reason: str | None = None
    previous_reason: str | None = None


class ModerationRecordResponse(BaseModel):
    """One entry of the moderation audit trail."""

    moderation_id: int
    station_id: int
    moderator_user_id: int | None = None
    action: ModerationAction
    reason: str | None = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}
