"""Email notification background jobs for arq worker."""

from typing import Any

from arq import Retry
from sqlalchemy import select

from surtidores.config import NotificationKind
from surtidores.core.database import get_async_session
from surtidores.core.logging import get_logger, job_context
from surtidores.models.user import Users
from surtidores.services.email import send_notification_email

logger = get_logger(__name__)


async def send_notification_email_job(
    ctx: dict[str, Any], kind: str, user_id: int, context: dict[str, Any]
) -> None:
    """
    Background task to send a notification email.

    Args:
        ctx: ARQ context dict
        kind: NotificationKind value naming the template
        user_id: ID of the recipient
        context: Template values (station name, reason, ...)

    Raises:
        Retry: If database query or email fails (will retry up to max_tries)
    """
    with job_context(task="send_notification_email", kind=kind, user_id=user_id):
        await _deliver(ctx, kind, user_id, context)


async def _deliver(ctx: dict[str, Any], kind: str, user_id: int, context: dict[str, Any]) -> None:
    try:
        notification_kind = NotificationKind(kind)
    except ValueError:
        logger.error("notification_email_unknown_kind", kind=kind)
        return

    try:
        async with get_async_session() as db:
            user_query = select(Users).where(Users.user_id == user_id)  # type: ignore[arg-type]
            user_result = await db.execute(user_query)
            user = user_result.scalar_one_or_none()

            if not user:
                logger.warning("notification_email_user_not_found", user_id=user_id)
                return

            if not user.active:
                logger.info(
                    "notification_email_skipped",
                    user_id=user_id,
                    reason="inactive_user",
                )
                return

            success = await send_notification_email(notification_kind, user, context)

            if success:
                logger.info("notification_email_sent", user_id=user_id, kind=kind)
            else:
                logger.error("notification_email_failed", user_id=user_id, kind=kind)
                raise Retry(defer=ctx["job_try"] * 5)

    except Exception as e:
        if isinstance(e, Retry):
            raise
        logger.error(
            "notification_email_task_error",
            user_id=user_id,
            kind=kind,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise Retry(defer=ctx["job_try"] * 5) from e
