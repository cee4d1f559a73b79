"""Background task scheduler using APScheduler.

Manages scheduled jobs for:
- Expired assistant conversation purge (every 5 minutes)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import (  # type: ignore[import-untyped]
    AsyncIOScheduler,
)
from apscheduler.triggers.interval import (  # type: ignore[import-untyped]
    IntervalTrigger,
)

from dependencies.assistant import get_conversation_registry


logger = logging.getLogger(__name__)

scheduler: AsyncIOScheduler | None = None

PURGE_INTERVAL_MINUTES = 5


async def run_conversation_purge() -> None:
    """Scheduled job: drop assistant conversations idle past their TTL."""
    try:
        purged = get_conversation_registry().purge_expired()
        if purged > 0:
            logger.info(f"Conversation purge: {purged} conversations dropped")
    except Exception as e:
        logger.error(f"Conversation purge failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler:
    global scheduler
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        run_conversation_purge,
        trigger=IntervalTrigger(minutes=PURGE_INTERVAL_MINUTES),
        id="purge_assistant_conversations",
        name="Expired assistant conversation purge",
        replace_existing=True,
    )

    logger.info(
        f"Scheduler configured: conversation purge ({PURGE_INTERVAL_MINUTES} min)"
    )
    return scheduler


@asynccontextmanager
async def scheduler_lifespan() -> AsyncGenerator[None, None]:
    """Context manager for scheduler lifecycle.

    Usage in FastAPI:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with scheduler_lifespan():
                yield
    """
    setup_scheduler()
    if scheduler:
        scheduler.start()
        logger.info("Background scheduler started")
    try:
        yield
    finally:
        if scheduler and scheduler.running:
            scheduler.shutdown(wait=True)
            logger.info("Background scheduler shut down")
