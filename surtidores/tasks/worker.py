"""
ARQ worker configuration and job definitions.

Run worker with: arq surtidores.tasks.worker.WorkerSettings
"""

from typing import Any

from arq.connections import RedisSettings
from arq.worker import func

from surtidores.config import settings
from surtidores.core.logging import configure_logging, get_logger
from surtidores.tasks.email_jobs import send_notification_email_job


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup - initialize any shared resources."""
    configure_logging()
    logger = get_logger(__name__)
    logger.info("arq_worker_starting", redis_url=settings.ARQ_REDIS_URL)


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown - cleanup resources."""
    logger = get_logger(__name__)
    logger.info("arq_worker_shutdown")


class WorkerSettings:
    """ARQ worker configuration."""

    redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)

    # Worker behavior
    max_jobs = 10
    job_timeout = 120
    keep_result = settings.ARQ_KEEP_RESULT

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # Job functions
    functions = [
        func(send_notification_email_job, max_tries=settings.ARQ_MAX_TRIES),
    ]
