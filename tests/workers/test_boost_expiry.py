"""Tests for the boost expiry background task."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from livecast.domain.feed.boost_domain import BoostService
from livecast.shared.utils.timeutil import utc_now
from livecast.workers.boost_expiry import run_boost_expiry, start_boost_expiry, stop_boost_expiry
from tests.fixtures.store_fixtures import make_content


class TestRunBoostExpiry:
    async def test_clears_expired_boosts_in_the_background(self, memory_store):
        """Should clear a stored expired boost without anyone calling expire_boosts directly."""
        # Arrange
        now = utc_now()
        await memory_store.insert_content(
            make_content(
                "ct_expired",
                boost_level=2,
                boosted_at=now - timedelta(days=2),
                boost_expires_at=now - timedelta(hours=1),
            )
        )
        task = start_boost_expiry(BoostService(memory_store, max_conflict_retries=1), interval_seconds=0.01)

        # Act
        for _ in range(100):
            if not (await memory_store.get_content("ct_expired")).is_boosted:
                break
            await asyncio.sleep(0.01)
        await stop_boost_expiry(task)

        # Assert
        content = await memory_store.get_content("ct_expired")
        assert content.is_boosted is False
        assert content.boost_level == 0
        assert task.done()

    async def test_failed_run_does_not_stop_the_loop(self):
        """Should log a failing run and try again on the next tick."""
        # Arrange
        second_run = asyncio.Event()
        outcomes = iter([RuntimeError("store down"), 1])

        async def expire_boosts(now=None):
            outcome = next(outcomes, 0)
            if isinstance(outcome, Exception):
                raise outcome
            second_run.set()
            return outcome

        service = AsyncMock(spec=BoostService)
        service.expire_boosts.side_effect = expire_boosts

        # Act
        task = asyncio.create_task(run_boost_expiry(service, 0))
        await asyncio.wait_for(second_run.wait(), timeout=1)
        task.cancel()

        # Assert
        with pytest.raises(asyncio.CancelledError):
            await task
        assert service.expire_boosts.await_count >= 2


class TestStartBoostExpiry:
    def test_zero_interval_disables_task(self):
        service = AsyncMock(spec=BoostService)

        assert start_boost_expiry(service, 0) is None

    async def test_stop_accepts_disabled_task(self):
        await stop_boost_expiry(None)
