"""Tests for RecordingStateMachine and apply_recording_event."""

from datetime import timedelta

import pytest

from livecast.domain.live.lifecycle_models import AssetDetails, LifecycleEvent, RecordingPolicy
from livecast.domain.live.recording.recording_state_machine import (
    HIDDEN_REASON_INVALID_METADATA,
    HIDDEN_REASON_PROCESSING_FAILED,
    HIDDEN_REASON_TOO_SHORT,
    RecordingStateMachine,
    apply_recording_event,
)
from livecast.schemas import Recording, RecordingStatus
from tests.fixtures.store_fixtures import BASE_TIME

NOW = BASE_TIME + timedelta(hours=3)
POLICY = RecordingPolicy(min_duration_seconds=60, max_duration_seconds=43200)


def _recording(status: RecordingStatus = RecordingStatus.PENDING, **overrides) -> Recording:
    fields = {
        "recording_id": "rec_test",
        "stream_id": "se_test",
        "creator_id": "u.creator",
        "status": status,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    fields.update(overrides)
    return Recording(**fields)


def _asset(duration: float | None = 600, playback_url: str | None = "https://cdn/pb/index.m3u8", **overrides):
    fields = {
        "provider_asset_id": "as_test",
        "source_session_id": "st_test",
        "playback_id": "pb",
        "playback_url": playback_url,
        "duration_seconds": duration,
        "file_size_bytes": 1024,
        "resolution": "1280x720",
    }
    fields.update(overrides)
    return AssetDetails(**fields)


class TestRecordingStateMachineTable:
    def test_terminal_states(self):
        assert RecordingStateMachine.TERMINAL_STATES == {
            RecordingStatus.READY,
            RecordingStatus.FAILED,
            RecordingStatus.DELETED,
        }

    @pytest.mark.parametrize("status", [s for s in RecordingStatus if s != RecordingStatus.DELETED])
    def test_every_live_state_can_be_deleted(self, status):
        assert RecordingStateMachine.can_transition(status, RecordingStatus.DELETED)

    def test_ready_cannot_go_back_to_processing(self):
        assert not RecordingStateMachine.can_transition(RecordingStatus.READY, RecordingStatus.PROCESSING)

    def test_deleted_has_no_valid_transitions(self):
        assert RecordingStateMachine.get_valid_transitions(RecordingStatus.DELETED) == set()

    def test_ready_is_reachable_from_pending_and_processing(self):
        assert RecordingStateMachine.get_valid_sources(RecordingStatus.READY) == {
            RecordingStatus.PENDING,
            RecordingStatus.PROCESSING,
        }


class TestAssetReady:
    """Tests for the asset-ready event."""

    def test_valid_asset_makes_recording_ready(self):
        """Should copy playback metadata and mark the recording ready."""
        # Arrange
        recording = _recording()

        # Act
        transition = apply_recording_event(recording, LifecycleEvent.ASSET_READY, POLICY, NOW, _asset())

        # Assert
        assert transition.changed
        ready = transition.record
        assert ready.status == RecordingStatus.READY
        assert ready.provider_asset_id == "as_test"
        assert ready.playback_url == "https://cdn/pb/index.m3u8"
        assert ready.duration_seconds == 600
        assert ready.resolution == "1280x720"
        assert ready.ready_at == NOW
        assert not ready.is_hidden

    def test_short_recording_fails(self):
        """45 seconds against a 60 second minimum fails the recording."""
        transition = apply_recording_event(
            _recording(), LifecycleEvent.ASSET_READY, POLICY, NOW, _asset(duration=45)
        )

        assert transition.record.status == RecordingStatus.FAILED
        assert transition.record.is_hidden
        assert transition.record.hidden_reason == HIDDEN_REASON_TOO_SHORT
        assert transition.reason == "below_min_duration"

    def test_duration_exactly_at_minimum_is_ready(self):
        transition = apply_recording_event(
            _recording(), LifecycleEvent.ASSET_READY, POLICY, NOW, _asset(duration=60)
        )

        assert transition.record.status == RecordingStatus.READY

    def test_duration_is_capped_at_maximum(self):
        transition = apply_recording_event(
            _recording(), LifecycleEvent.ASSET_READY, POLICY, NOW, _asset(duration=50000)
        )

        assert transition.record.status == RecordingStatus.READY
        assert transition.record.duration_seconds == 43200

    @pytest.mark.parametrize(
        "asset",
        [
            _asset(duration=None),
            _asset(duration=0),
            _asset(playback_url=None),
            _asset(metadata_invalid=True),
        ],
    )
    def test_missing_metadata_fails(self, asset):
        transition = apply_recording_event(_recording(), LifecycleEvent.ASSET_READY, POLICY, NOW, asset)

        assert transition.record.status == RecordingStatus.FAILED
        assert transition.record.hidden_reason == HIDDEN_REASON_INVALID_METADATA

    def test_processing_recording_becomes_ready(self):
        recording = _recording(status=RecordingStatus.PROCESSING, provider_asset_id="as_test")

        transition = apply_recording_event(recording, LifecycleEvent.ASSET_READY, POLICY, NOW, _asset())

        assert transition.record.status == RecordingStatus.READY

    @pytest.mark.parametrize(
        "status", [RecordingStatus.READY, RecordingStatus.FAILED, RecordingStatus.DELETED]
    )
    def test_terminal_recording_is_not_changed(self, status):
        recording = _recording(status=status)

        transition = apply_recording_event(recording, LifecycleEvent.ASSET_READY, POLICY, NOW, _asset())

        assert not transition.changed
        assert transition.record.status == status

    def test_event_for_other_asset_is_ignored(self):
        recording = _recording(status=RecordingStatus.PROCESSING, provider_asset_id="as_other")

        transition = apply_recording_event(recording, LifecycleEvent.ASSET_READY, POLICY, NOW, _asset())

        assert not transition.changed
        assert transition.record.status == RecordingStatus.PROCESSING


class TestAssetFailedAndProcessing:
    def test_asset_failed_hides_recording(self):
        transition = apply_recording_event(
            _recording(), LifecycleEvent.ASSET_FAILED, POLICY, NOW, _asset(error_message="boom")
        )

        assert transition.record.status == RecordingStatus.FAILED
        assert transition.record.is_hidden
        assert transition.record.hidden_reason == HIDDEN_REASON_PROCESSING_FAILED

    def test_mark_processing_binds_asset(self):
        transition = apply_recording_event(
            _recording(), LifecycleEvent.MARK_PROCESSING, POLICY, NOW, _asset()
        )

        assert transition.record.status == RecordingStatus.PROCESSING
        assert transition.record.provider_asset_id == "as_test"

    def test_mark_processing_twice_is_noop(self):
        recording = _recording(status=RecordingStatus.PROCESSING, provider_asset_id="as_test")

        transition = apply_recording_event(recording, LifecycleEvent.MARK_PROCESSING, POLICY, NOW, _asset())

        assert not transition.changed

    def test_session_event_does_not_apply(self):
        transition = apply_recording_event(_recording(), LifecycleEvent.SESSION_IDLE, POLICY, NOW)

        assert not transition.changed
