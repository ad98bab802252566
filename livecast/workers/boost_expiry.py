"""Background task that clears expired boosts from stored content."""

import asyncio
from contextlib import suppress

from loguru import logger

from livecast.domain.feed.boost_domain import BoostService
from livecast.shared.api.utils import format_error


async def run_boost_expiry(boost_service: BoostService, interval_seconds: float):
    """Run `expire_boosts` every `interval_seconds` until cancelled.

    A failed run is logged and the loop continues; the feed already treats
    expired boosts as regular content, so a missed run only delays cleanup.
    """
    logger.info("Boost expiry task started (interval={}s)", interval_seconds)
    while True:
        try:
            await boost_service.expire_boosts()
        except asyncio.CancelledError:
            logger.info("Boost expiry task cancelled")
            raise
        except Exception as e:
            logger.warning("Boost expiry run failed: {}", format_error(e))
        await asyncio.sleep(interval_seconds)


def start_boost_expiry(boost_service: BoostService, interval_seconds: float) -> asyncio.Task | None:
    if interval_seconds <= 0:
        logger.info("Boost expiry task disabled")
        return None
    return asyncio.create_task(run_boost_expiry(boost_service, interval_seconds), name="boost-expiry")


async def stop_boost_expiry(task: asyncio.Task | None):
    if task is None or task.done():
        return
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task
