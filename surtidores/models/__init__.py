"""
SQLModel tables - Database schema models.

For modifications:
1. Edit the appropriate model file in surtidores/models/
2. Create an Alembic migration to reflect the changes
3. Use Alembic to manage all schema changes going forward
"""

from surtidores.models.comment import StationComments
from surtidores.models.comment_report import CommentReports, CommentReportSubmissions
from surtidores.models.comment_vote import CommentVotes
from surtidores.models.moderation import ModerationRecords
from surtidores.models.price import PriceConfirmations, PriceReports
from surtidores.models.station import Stations
from surtidores.models.user import Users

__all__ = [
    # Core entity models
    "Users",
    "Stations",
    "PriceReports",
    # Social validation
    "PriceConfirmations",
    "StationComments",
    "CommentVotes",
    "CommentReports",
    "CommentReportSubmissions",
    # Audit trail
    "ModerationRecords",
]
