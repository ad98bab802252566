"""Recording state machine for provider asset events."""

from datetime import datetime

from livecast.schemas import Recording, RecordingStatus

from ..lifecycle_models import AssetDetails, LifecycleEvent, RecordingPolicy, Transition

HIDDEN_REASON_PROCESSING_FAILED = "Recording processing failed"
HIDDEN_REASON_TOO_SHORT = "Recording shorter than minimum duration"
HIDDEN_REASON_INVALID_METADATA = "Recording metadata incomplete"


class RecordingStateMachine:
    """State machine for recording transitions.

    State flow with triggers:
    - PENDING (created when the session ended) -> PROCESSING (asset announced)
    - PENDING | PROCESSING -> READY (provider asset.ready webhook)
    - PENDING | PROCESSING -> FAILED (asset.failed webhook, or asset rejected by policy)
    - PENDING | PROCESSING | READY | FAILED -> DELETED (soft delete)
    - READY, FAILED and DELETED accept no further provider events
    """

    TRANSITIONS: dict[RecordingStatus, set[RecordingStatus]] = {
        RecordingStatus.PENDING: {
            RecordingStatus.PROCESSING,
            RecordingStatus.READY,
            RecordingStatus.FAILED,
            RecordingStatus.DELETED,
        },
        RecordingStatus.PROCESSING: {
            RecordingStatus.READY,
            RecordingStatus.FAILED,
            RecordingStatus.DELETED,
        },
        RecordingStatus.READY: {RecordingStatus.DELETED},
        RecordingStatus.FAILED: {RecordingStatus.DELETED},
        RecordingStatus.DELETED: set(),
    }

    # Provider events never move a recording out of these states
    TERMINAL_STATES: set[RecordingStatus] = {
        RecordingStatus.READY,
        RecordingStatus.FAILED,
        RecordingStatus.DELETED,
    }

    @classmethod
    def can_transition(cls, current: RecordingStatus, new: RecordingStatus) -> bool:
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: RecordingStatus) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: RecordingStatus) -> set[RecordingStatus]:
        return cls.TRANSITIONS.get(state, set())

    @classmethod
    def get_valid_sources(cls, target: RecordingStatus) -> set[RecordingStatus]:
        return {state for state, targets in cls.TRANSITIONS.items() if target in targets}


def _failed(recording: Recording, asset: AssetDetails | None, reason: str, now: datetime) -> Recording:
    update: dict = {
        "status": RecordingStatus.FAILED,
        "is_hidden": True,
        "hidden_reason": reason,
        "updated_at": now,
    }
    if asset is not None:
        update["provider_asset_id"] = asset.provider_asset_id
        if asset.duration_seconds is not None:
            update["duration_seconds"] = asset.duration_seconds
    return recording.model_copy(update=update)


def _apply_asset_ready(
    recording: Recording,
    asset: AssetDetails,
    policy: RecordingPolicy,
    now: datetime,
) -> Transition[Recording]:
    duration = asset.duration_seconds
    if asset.metadata_invalid or duration is None or duration <= 0 or not asset.playback_url:
        return Transition(
            record=_failed(recording, asset, HIDDEN_REASON_INVALID_METADATA, now),
            changed=True,
            reason="invalid_metadata",
        )

    if duration < policy.min_duration_seconds:
        return Transition(
            record=_failed(recording, asset, HIDDEN_REASON_TOO_SHORT, now),
            changed=True,
            reason="below_min_duration",
        )

    next_recording = recording.model_copy(
        update={
            "status": RecordingStatus.READY,
            "provider_asset_id": asset.provider_asset_id,
            "provider_playback_id": asset.playback_id,
            "playback_url": asset.playback_url,
            "download_url": asset.download_url,
            "duration_seconds": min(duration, policy.max_duration_seconds),
            "file_size_bytes": asset.file_size_bytes,
            "resolution": asset.resolution,
            "is_hidden": False,
            "hidden_reason": None,
            "ready_at": now,
            "updated_at": now,
        }
    )
    return Transition(record=next_recording, changed=True, reason="ready")


def apply_recording_event(
    recording: Recording,
    event: LifecycleEvent,
    policy: RecordingPolicy,
    now: datetime,
    asset: AssetDetails | None = None,
) -> Transition[Recording]:
    """
    Compute the next recording for an asset event.

    Pure: the input recording is never mutated. Events arriving after the
    recording reached READY, FAILED or DELETED are no-ops, as are events for an
    asset other than the one already bound to the recording.
    """
    status = recording.status

    if event not in (LifecycleEvent.ASSET_READY, LifecycleEvent.ASSET_FAILED, LifecycleEvent.MARK_PROCESSING):
        return Transition.unchanged(recording, f"event {event} does not apply to recordings")

    if RecordingStateMachine.is_terminal(status):
        return Transition.unchanged(recording, f"already {status}")

    if (
        asset is not None
        and recording.provider_asset_id
        and recording.provider_asset_id != asset.provider_asset_id
    ):
        return Transition.unchanged(recording, f"bound to asset {recording.provider_asset_id}")

    if event == LifecycleEvent.MARK_PROCESSING:
        if status != RecordingStatus.PENDING:
            return Transition.unchanged(recording, f"already {status}")
        update: dict = {"status": RecordingStatus.PROCESSING, "updated_at": now}
        if asset is not None:
            update["provider_asset_id"] = asset.provider_asset_id
        return Transition(record=recording.model_copy(update=update), changed=True, reason="processing")

    if event == LifecycleEvent.ASSET_FAILED:
        return Transition(
            record=_failed(recording, asset, HIDDEN_REASON_PROCESSING_FAILED, now),
            changed=True,
            reason="failed",
        )

    if asset is None:
        return Transition(
            record=_failed(recording, None, HIDDEN_REASON_INVALID_METADATA, now),
            changed=True,
            reason="invalid_metadata",
        )
    return _apply_asset_ready(recording, asset, policy, now)


__all__ = [
    "HIDDEN_REASON_INVALID_METADATA",
    "HIDDEN_REASON_PROCESSING_FAILED",
    "HIDDEN_REASON_TOO_SHORT",
    "RecordingStateMachine",
    "apply_recording_event",
]
