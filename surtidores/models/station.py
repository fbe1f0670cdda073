"""
SQLModel-based Station models with inheritance for security

StationBase (shared public fields)
    ├─> Stations (database table, adds ownership and moderation fields)
    └─> StationCreate/StationResponse (API schemas, defined in surtidores/schemas)

Official stations are loaded from the national energy secretariat dataset and
are never moderated. User-created stations go through the moderation state
machine in ``surtidores.services.moderation``.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer
from sqlmodel import Field, SQLModel

from surtidores.config import DataSource, StationState
from surtidores.utils import utc_now


class StationBase(SQLModel):
    """
    Base model with shared public fields for Stations.
    """

    name: str = Field(max_length=200)
    company: str = Field(max_length=100)
    address: str = Field(max_length=300)
    locality: str = Field(max_length=100)
    province: str = Field(max_length=100)

    latitude: float
    longitude: float

    google_maps_url: str | None = Field(default=None, max_length=500)


class Stations(StationBase, table=True):
    """
    Database table for stations.

    Extends StationBase with:
    - Primary key
    - Derived region
    - Source and moderation state
    - Creator reference (null for official stations)
    """

    __tablename__ = "stations"

    __table_args__ = (
        Index("idx_stations_creator_state", "creator_user_id", "state"),
        Index("idx_stations_state", "state"),
        Index("idx_stations_province", "province"),
    )

    station_id: int | None = Field(default=None, primary_key=True)

    region: str = Field(default="Otra", max_length=50)

    source: DataSource = Field(default=DataSource.official)
    state: StationState = Field(default=StationState.approved)

    creator_user_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="SET NULL", onupdate="CASCADE"),
            nullable=True,
        ),
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
