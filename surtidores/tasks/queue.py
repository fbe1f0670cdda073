"""
arq client used by the API process to hand notification emails to the worker.
"""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings

from surtidores.config import NotificationKind, settings
from surtidores.core.logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_JOB = "send_notification_email_job"

# Shared pool, opened lazily by the first enqueue
_pool: ArqRedis | None = None


async def get_queue() -> ArqRedis:
    """Return the shared arq pool, connecting on first use."""
    global _pool
    if _pool is None:
        _pool = await create_pool(RedisSettings.from_dsn(settings.ARQ_REDIS_URL))
        logger.info("arq_pool_created", redis_url=settings.ARQ_REDIS_URL)
    return _pool


async def enqueue_notification(
    kind: NotificationKind, user_id: int, context: dict[str, Any]
) -> str | None:
    """
    Queue one notification email for the worker.

    Args:
        kind: Template to render
        user_id: Recipient; the worker reloads the user and skips inactive ones
        context: Template values (station name, reason, ...)

    Returns:
        The arq job id, or None if Redis refused or was unreachable
    """
    try:
        pool = await get_queue()
        job = await pool.enqueue_job(
            NOTIFICATION_JOB, kind=kind.value, user_id=user_id, context=context
        )
    except Exception as e:
        logger.error(
            "notification_enqueue_error",
            kind=kind.value,
            user_id=user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    if job is None:
        logger.warning("notification_enqueue_duplicate", kind=kind.value, user_id=user_id)
        return None
    logger.debug("notification_enqueued", kind=kind.value, user_id=user_id, job_id=job.job_id)
    return job.job_id


async def close_queue() -> None:
    """Close the shared pool (application shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("arq_pool_closed")
