"""
SQLModel-based PriceReport and PriceConfirmation models

PriceReportBase (shared public fields)
    ├─> PriceReports (database table)
    └─> PriceReportResponse (API schema, defined in surtidores/schemas)

PriceConfirmations is the ledger of users vouching for someone else's price.
The ``is_validated`` flag on PriceReports is derived from it and recomputed
on every ledger write.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, UniqueConstraint
from sqlmodel import Field, SQLModel

from surtidores.config import DataSource, FuelType, TimeOfDay
from surtidores.utils import utc_now


class PriceReportBase(SQLModel):
    """
    Base model with shared public fields for PriceReports.
    """

    fuel_type: FuelType
    price: Decimal
    time_of_day: TimeOfDay = Field(default=TimeOfDay.diurno)
    notes: str | None = Field(default=None, max_length=500)


class PriceReports(PriceReportBase, table=True):
    """
    Database table for price observations.

    Official rows come from the government dataset and have no reporter.
    User rows are either formal reports (unvalidated until confirmed) or
    owner quick-entry prices (validated on write).
    """

    __tablename__ = "price_reports"

    __table_args__ = (
        Index("idx_price_reports_station_fuel", "station_id", "fuel_type", "time_of_day"),
        Index("idx_price_reports_reporter", "reporter_user_id"),
        Index("idx_price_reports_created_at", "created_at"),
    )

    price_id: int | None = Field(default=None, primary_key=True)

    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))

    station_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("stations.station_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    reporter_user_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="SET NULL", onupdate="CASCADE"),
            nullable=True,
        ),
    )

    source: DataSource = Field(default=DataSource.user)
    is_validated: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PriceConfirmations(SQLModel, table=True):
    """
    One user's confirmation of another user's price.

    Constraints:
    - Unique on (price_id, user_id): the storage layer is the race-safe guard
      against double confirmation.
    """

    __tablename__ = "price_confirmations"

    __table_args__ = (
        UniqueConstraint("price_id", "user_id", name="uq_price_confirmations_price_user"),
        Index("idx_price_confirmations_user", "user_id"),
    )

    confirmation_id: int | None = Field(default=None, primary_key=True)

    price_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("price_reports.price_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )

    created_at: datetime = Field(default_factory=utc_now)
