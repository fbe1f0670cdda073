"""
Shared dependencies for API endpoints.

Query parameter models are used with FastAPI's Depends() to provide reusable
parameter sets. Service providers build one service per request around the
request's database session, so tests can swap the notifier through
``app.dependency_overrides[get_notifier]``.
"""

from typing import Annotated

from fastapi import Depends
from pydantic import BaseModel, Field, computed_field
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import settings
from surtidores.core.database import get_db
from surtidores.services.comments import CommentService
from surtidores.services.confirmations import ConfirmationLedger
from surtidores.services.moderation import StationModerationService
from surtidores.services.notifications import Notifier, QueueNotifier
from surtidores.services.prices import PriceService
from surtidores.services.stations import StationService


class PaginationParams(BaseModel):
    """Common pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number")
    per_page: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def offset(self) -> int:
        """Calculate offset from page and per_page."""
        return (self.page - 1) * self.per_page


def get_notifier() -> Notifier:
    return QueueNotifier()


DbSession = Annotated[AsyncSession, Depends(get_db)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def get_confirmation_ledger(db: DbSession) -> ConfirmationLedger:
    return ConfirmationLedger(db)


def get_comment_service(db: DbSession, notifier: NotifierDep) -> CommentService:
    return CommentService(db, notifier)


def get_moderation_service(db: DbSession, notifier: NotifierDep) -> StationModerationService:
    return StationModerationService(db, notifier)


def get_station_service(db: DbSession, notifier: NotifierDep) -> StationService:
    return StationService(db, notifier)


def get_price_service(db: DbSession, notifier: NotifierDep) -> PriceService:
    return PriceService(db, notifier)


ConfirmationLedgerDep = Annotated[ConfirmationLedger, Depends(get_confirmation_ledger)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
ModerationServiceDep = Annotated[StationModerationService, Depends(get_moderation_service)]
StationServiceDep = Annotated[StationService, Depends(get_station_service)]
PriceServiceDep = Annotated[PriceService, Depends(get_price_service)]
