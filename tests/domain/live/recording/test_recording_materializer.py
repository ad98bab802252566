"""Tests for RecordingMaterializer."""

import asyncio

import pytest

from livecast.domain.live.lifecycle_models import AssetDetails
from livecast.domain.live.recording.recording_materializer import RecordingMaterializer
from livecast.schemas import Recording, RecordingStatus, SessionStatus
from livecast.utils.app_errors import AppError, AppErrorCode
from tests.fixtures.store_fixtures import make_session


def _asset(duration: float = 600, asset_id: str = "as_1", source: str | None = "st_test") -> AssetDetails:
    return AssetDetails(
        provider_asset_id=asset_id,
        source_session_id=source,
        playback_id="pb_1",
        playback_url="https://cdn.example.com/hls/pb_1/index.m3u8",
        duration_seconds=duration,
    )


class TestOnSessionEnded:
    """Tests for recording creation when a session ends."""

    async def test_creates_pending_recording(self, materializer, memory_store):
        # Arrange
        session = make_session(status=SessionStatus.ENDED, peak_viewer_count=12)

        # Act
        recording, created = await materializer.on_session_ended(session)

        # Assert
        assert created
        assert recording.status == RecordingStatus.PENDING
        assert recording.stream_id == session.session_id
        assert recording.creator_id == session.creator_id
        assert recording.peak_live_viewers == 12
        assert recording.recording_id.startswith("rec_")

    async def test_second_call_returns_existing(self, materializer, memory_store):
        session = make_session(status=SessionStatus.ENDED)

        first, first_created = await materializer.on_session_ended(session)
        second, second_created = await materializer.on_session_ended(session)

        assert first_created
        assert not second_created
        assert second.recording_id == first.recording_id

    async def test_concurrent_calls_create_one_recording(self, materializer, memory_store):
        session = make_session(status=SessionStatus.ENDED)

        results = await asyncio.gather(*(materializer.on_session_ended(session) for _ in range(5)))

        assert sum(1 for _, created in results if created) == 1
        assert len({r.recording_id for r, _ in results}) == 1

    async def test_interleaved_calls_create_one_recording(self, interleaving_store, mock_provider, recording_policy):
        """Every caller checks for an existing recording before any of them inserts."""
        materializer = RecordingMaterializer(
            interleaving_store, mock_provider, policy=recording_policy, max_conflict_retries=1
        )
        session = make_session(status=SessionStatus.ENDED)

        results = await asyncio.gather(*(materializer.on_session_ended(session) for _ in range(3)))

        assert sum(1 for _, created in results if created) == 1
        assert len(interleaving_store._recordings) == 1

    async def test_session_not_ended_is_rejected(self, materializer):
        with pytest.raises(AppError) as exc_info:
            await materializer.on_session_ended(make_session(status=SessionStatus.LIVE))

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_REQUEST


class TestAssetEvents:
    """Tests for asset-ready and asset-failed handling."""

    @pytest.fixture
    async def pending_recording(self, materializer, memory_store) -> Recording:
        session = make_session(status=SessionStatus.ENDED)
        await memory_store.insert_session(session)
        recording, _ = await materializer.on_session_ended(session)
        return recording

    async def test_asset_ready_found_via_source_session(self, materializer, memory_store, pending_recording):
        result = await materializer.on_asset_ready(_asset())

        assert result.applied
        assert result.record.recording_id == pending_recording.recording_id
        assert result.record.status == RecordingStatus.READY
        stored = await memory_store.get_recording(pending_recording.recording_id)
        assert stored.status == RecordingStatus.READY
        assert stored.provider_asset_id == "as_1"

    async def test_short_asset_fails_recording(self, materializer, memory_store, pending_recording):
        """A 45 second asset with a 60 second minimum fails, never ready."""
        result = await materializer.on_asset_ready(_asset(duration=45))

        assert result.record.status == RecordingStatus.FAILED
        stored = await memory_store.get_recording(pending_recording.recording_id)
        assert stored.status == RecordingStatus.FAILED
        assert stored.is_hidden

    async def test_replayed_asset_ready_is_noop(self, materializer, memory_store, pending_recording):
        await materializer.on_asset_ready(_asset())
        version_after_first = (await memory_store.get_recording(pending_recording.recording_id)).version

        result = await materializer.on_asset_ready(_asset())

        assert not result.applied
        stored = await memory_store.get_recording(pending_recording.recording_id)
        assert stored.version == version_after_first

    async def test_failed_after_ready_does_not_regress(self, materializer, memory_store, pending_recording):
        await materializer.on_asset_ready(_asset())

        result = await materializer.on_asset_failed(_asset())

        assert not result.applied
        assert result.record.status == RecordingStatus.READY

    async def test_asset_failed_marks_failed(self, materializer, pending_recording):
        result = await materializer.on_asset_failed(_asset())

        assert result.applied
        assert result.record.status == RecordingStatus.FAILED

    async def test_mark_processing_then_ready_by_asset_id(self, materializer, pending_recording):
        await materializer.mark_processing(_asset())

        result = await materializer.on_asset_ready(_asset(source=None))

        assert result.applied
        assert result.record.status == RecordingStatus.READY

    async def test_unknown_asset_is_noop(self, materializer, memory_store):
        result = await materializer.on_asset_ready(_asset(asset_id="as_unknown", source="st_unknown"))

        assert not result.applied
        assert result.record is None
        assert result.reason == "not_found"


class TestSoftDeleteRecording:
    @pytest.fixture
    async def ready_recording(self, materializer, memory_store) -> Recording:
        session = make_session(status=SessionStatus.ENDED)
        await memory_store.insert_session(session)
        await materializer.on_session_ended(session)
        result = await materializer.on_asset_ready(_asset())
        return result.record

    async def test_owner_can_delete(self, materializer, mock_provider, ready_recording):
        deleted = await materializer.soft_delete_recording(ready_recording.recording_id, "u.creator")

        assert deleted.status == RecordingStatus.DELETED
        assert deleted.is_deleted
        assert deleted.deleted_by == "u.creator"
        assert deleted.deleted_at is not None
        mock_provider.delete_asset.assert_awaited_once_with("as_1")

    async def test_non_owner_is_forbidden(self, materializer, ready_recording):
        with pytest.raises(AppError) as exc_info:
            await materializer.soft_delete_recording(ready_recording.recording_id, "u.other")

        assert exc_info.value.errcode == AppErrorCode.E_FORBIDDEN

    async def test_admin_can_delete_any(self, materializer, ready_recording):
        deleted = await materializer.soft_delete_recording(ready_recording.recording_id, "u.admin", is_admin=True)

        assert deleted.is_deleted

    async def test_delete_is_idempotent(self, materializer, mock_provider, ready_recording):
        first = await materializer.soft_delete_recording(ready_recording.recording_id, "u.creator")
        second = await materializer.soft_delete_recording(ready_recording.recording_id, "u.creator")

        assert second.version == first.version
        mock_provider.delete_asset.assert_awaited_once()

    async def test_provider_failure_keeps_soft_delete(self, materializer, mock_provider, memory_store, ready_recording):
        mock_provider.delete_asset.side_effect = AppError(errcode="E_PROVIDER_UNAVAILABLE", errmesg="down")

        deleted = await materializer.soft_delete_recording(ready_recording.recording_id, "u.creator")

        assert deleted.is_deleted
        stored = await memory_store.get_recording(ready_recording.recording_id)
        assert stored.status == RecordingStatus.DELETED

    async def test_missing_recording_is_not_found(self, materializer):
        with pytest.raises(AppError) as exc_info:
            await materializer.soft_delete_recording("rec_missing", "u.creator")

        assert exc_info.value.errcode == AppErrorCode.E_RECORDING_NOT_FOUND
