"""
Pydantic schemas for API responses and requests
"""

from surtidores.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentReportCreate,
    CommentResponse,
    CommentUpdate,
    CommentView,
    ReportResult,
    ReportStatus,
    VoteResult,
)
from surtidores.schemas.common import MessageResponse, UserSummary
from surtidores.schemas.price import (
    ConfirmationCountsResponse,
    ConfirmationListResponse,
    ConfirmationResult,
    ConfirmationStatus,
    PriceReportBatchResponse,
    PriceReportCreate,
    PriceReportResponse,
    PriceReportSummaryResponse,
    PriceUpdate,
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

__all__ = [
    # Comments
    "CommentCreate",
    "CommentListResponse",
    "CommentReportCreate",
    "CommentResponse",
    "CommentUpdate",
    "CommentView",
    "ReportResult",
    "ReportStatus",
    "VoteResult",
    # Common
    "MessageResponse",
    "UserSummary",
    # Prices
    "ConfirmationCountsResponse",
    "ConfirmationListResponse",
    "ConfirmationResult",
    "ConfirmationStatus",
    "PriceReportBatchResponse",
    "PriceReportCreate",
    "PriceReportResponse",
    "PriceReportSummaryResponse",
    "PriceUpdate",
    "QuickPriceUpdate",
    # Stations
    "ModerateRequest",
    "ModerationRecordResponse",
    "ModerationResult",
    "StationCreate",
    "StationListResponse",
    "StationResponse",
    "StationUpdate",
    "UserStationsResponse",
]
