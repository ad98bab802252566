"""Creates and advances Recording records as sessions end and assets arrive."""

from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.domain.utils.idgen import new_recording_id
from livecast.schemas import LiveSession, Recording, RecordingStatus, SessionStatus
from livecast.services.integrations.provider_client import VideoProvider
from livecast.services.record_store.base import RecordStore
from livecast.shared.utils.timeutil import utc_now
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ..conditional import ConditionalResult, apply_conditionally
from ..lifecycle_models import AssetDetails, LifecycleEvent, RecordingPolicy
from .recording_state_machine import RecordingStateMachine, apply_recording_event


class RecordingMaterializer:
    def __init__(
        self,
        store: RecordStore,
        provider: VideoProvider,
        policy: RecordingPolicy | None = None,
        max_conflict_retries: int | None = None,
    ):
        self.store = store
        self.provider = provider
        self.policy = policy or RecordingPolicy.from_config()
        if max_conflict_retries is None:
            max_conflict_retries = get_app_environ_config().WEBHOOK_MAX_CONFLICT_RETRIES
        self.max_conflict_retries = max_conflict_retries

    async def on_session_ended(self, session: LiveSession) -> tuple[Recording, bool]:
        """
        Create the recording for an ended session unless one already exists.

        Keyed by stream_id, so duplicate or concurrent deliveries of the same
        idle event observe the existing recording and do nothing.

        Returns:
            The stored recording and whether this call created it
        """
        if session.status != SessionStatus.ENDED:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg=f"Session {session.session_id} has not ended (status={session.status})",
                status_code=HttpStatusCode.BAD_REQUEST,
            )

        now = utc_now()
        recording = Recording(
            recording_id=new_recording_id(),
            stream_id=session.session_id,
            creator_id=session.creator_id,
            title=session.title,
            visibility=session.visibility,
            status=RecordingStatus.PENDING,
            stream_started_at=session.started_at,
            stream_ended_at=session.ended_at,
            peak_live_viewers=session.peak_viewer_count,
            created_at=now,
            updated_at=now,
        )

        stored, created = await self.store.create_recording_if_absent(recording)
        if created:
            logger.info("✅ Recording {} created for session {}", stored.recording_id, session.session_id)
        else:
            logger.info("Recording for session {} already exists: {}", session.session_id, stored.recording_id)
        return stored, created

    async def find_recording_for_asset(self, asset: AssetDetails) -> Recording | None:
        """Resolve by provider asset id, then via the source stream's session."""
        recording = await self.store.find_recording_by_asset_id(asset.provider_asset_id)
        if recording is not None:
            return recording

        if not asset.source_session_id:
            return None

        session = await self.store.find_session_by_provider_id(asset.source_session_id)
        if session is None:
            return None
        return await self.store.find_recording_by_stream_id(session.session_id)

    async def _apply_asset_event(self, event: LifecycleEvent, asset: AssetDetails) -> ConditionalResult[Recording]:
        recording_id: str | None = None

        async def load() -> Recording | None:
            nonlocal recording_id
            if recording_id is None:
                found = await self.find_recording_for_asset(asset)
                recording_id = found.recording_id if found else None
                return found
            return await self.store.get_recording(recording_id)

        result = await apply_conditionally(
            load,
            lambda recording: apply_recording_event(recording, event, self.policy, utc_now(), asset),
            self.store.update_recording,
            max_retries=self.max_conflict_retries,
            label=f"recording({event}, asset={asset.provider_asset_id})",
        )

        if result.record is None:
            logger.warning("No recording found for asset {} ({})", asset.provider_asset_id, event)
        elif result.applied:
            logger.info(
                "✅ Recording {} -> {} ({})",
                result.record.recording_id,
                result.record.status,
                result.reason,
            )
        else:
            logger.info("Recording {} unchanged: {}", result.record.recording_id, result.reason)
        return result

    async def on_asset_ready(self, asset: AssetDetails) -> ConditionalResult[Recording]:
        return await self._apply_asset_event(LifecycleEvent.ASSET_READY, asset)

    async def on_asset_failed(self, asset: AssetDetails) -> ConditionalResult[Recording]:
        return await self._apply_asset_event(LifecycleEvent.ASSET_FAILED, asset)

    async def mark_processing(self, asset: AssetDetails) -> ConditionalResult[Recording]:
        return await self._apply_asset_event(LifecycleEvent.MARK_PROCESSING, asset)

    async def soft_delete_recording(self, recording_id: str, deleted_by: str, *, is_admin: bool = False) -> Recording:
        """
        Soft-delete a recording owned by `deleted_by` (or any recording for an admin).

        The provider asset is deleted best-effort afterwards; a provider failure
        does not undo the soft delete.

        Raises:
            AppError: E_RECORDING_NOT_FOUND, E_FORBIDDEN, or E_VERSION_CONFLICT
        """
        recording = await self.store.get_recording(recording_id)
        if recording is None:
            raise AppError(
                errcode=AppErrorCode.E_RECORDING_NOT_FOUND,
                errmesg=f"Recording {recording_id} not found",
                status_code=HttpStatusCode.NOT_FOUND,
            )

        if not is_admin and recording.creator_id != deleted_by:
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="Only the owner or an admin can delete this recording",
                status_code=HttpStatusCode.FORBIDDEN,
            )

        if recording.is_deleted:
            logger.info("Recording {} already deleted", recording_id)
            return recording

        if not RecordingStateMachine.can_transition(recording.status, RecordingStatus.DELETED):
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg=f"Recording {recording_id} cannot be deleted from {recording.status}",
                status_code=HttpStatusCode.BAD_REQUEST,
            )

        now = utc_now()
        deleted = recording.model_copy(
            update={
                "status": RecordingStatus.DELETED,
                "is_deleted": True,
                "deleted_at": now,
                "deleted_by": deleted_by,
                "updated_at": now,
            }
        )
        stored = await self.store.update_recording(deleted, recording.version)
        logger.info("✅ Recording {} soft-deleted by {}", recording_id, deleted_by)

        if recording.provider_asset_id:
            try:
                await self.provider.delete_asset(recording.provider_asset_id)
            except AppError as e:
                logger.warning(
                    "Provider asset {} not deleted for recording {}: {}",
                    recording.provider_asset_id,
                    recording_id,
                    e.errmesg,
                )

        return stored


__all__ = ["RecordingMaterializer"]
