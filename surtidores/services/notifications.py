"""
Best-effort notification hooks.

Domain services call ``dispatch_notification`` only after their transaction
has committed. Whatever happens inside the notifier (Redis down, template
error, ...) is logged and swallowed; the primary operation has already
succeeded and its result is never affected.
"""

from typing import Any, Protocol

from surtidores.config import NotificationKind, settings
from surtidores.core.logging import get_logger
from surtidores.models.user import Users
from surtidores.tasks.queue import enqueue_notification

logger = get_logger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a templated notification to a user."""

    async def send(self, kind: NotificationKind, user: Users, context: dict[str, Any]) -> None: ...


class QueueNotifier:
    """Hands notifications to the arq worker, which renders and emails them."""

    async def send(self, kind: NotificationKind, user: Users, context: dict[str, Any]) -> None:
        if not settings.NOTIFICATIONS_ENABLED:
            logger.debug("notification_disabled", kind=kind.value, user_id=user.user_id)
            return
        job_id = await enqueue_notification(kind, user.user_id, context)
        if job_id is None:
            raise RuntimeError(f"could not enqueue {kind.value} notification")


async def dispatch_notification(
    notifier: Notifier | None,
    kind: NotificationKind,
    user: Users | None,
    context: dict[str, Any],
) -> bool:
    """
    Fire a notification without letting it affect the caller.

    Returns:
        True if the notifier accepted the notification, False otherwise
    """
    if notifier is None or user is None:
        return False
    try:
        await notifier.send(kind, user, context)
    except Exception as e:
        logger.warning(
            "notification_dispatch_failed",
            kind=kind.value,
            user_id=user.user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
    logger.debug("notification_dispatched", kind=kind.value, user_id=user.user_id)
    return True
