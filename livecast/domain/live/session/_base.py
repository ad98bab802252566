"""Base service for session operations."""

from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.schemas import LiveSession, Recording, SessionStatus
from livecast.services.integrations.provider_client import VideoProvider
from livecast.services.record_store.base import RecordStore
from livecast.shared.utils.timeutil import utc_now
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ..conditional import ConditionalResult, apply_conditionally
from ..lifecycle_models import LifecycleEvent
from ..recording.recording_materializer import RecordingMaterializer
from .session_state_machine import apply_session_event


class BaseService:
    """Base service with shared session operation methods."""

    def __init__(
        self,
        store: RecordStore,
        provider: VideoProvider,
        materializer: RecordingMaterializer | None = None,
        max_conflict_retries: int | None = None,
    ):
        self.store = store
        self.provider = provider
        if max_conflict_retries is None:
            max_conflict_retries = get_app_environ_config().WEBHOOK_MAX_CONFLICT_RETRIES
        self.max_conflict_retries = max_conflict_retries
        self.materializer = materializer or RecordingMaterializer(
            store, provider, max_conflict_retries=max_conflict_retries
        )

    async def _get_session_by_id(self, session_id: str) -> LiveSession | None:
        return await self.store.get_session(session_id)

    async def _require_session(self, session_id: str) -> LiveSession:
        session = await self._get_session_by_id(session_id)
        if session is None:
            raise AppError(
                errcode=AppErrorCode.E_SESSION_NOT_FOUND,
                errmesg=f"Session not found: {session_id}",
                status_code=HttpStatusCode.NOT_FOUND,
            )
        return session

    async def _apply_session_event(
        self,
        session_id: str,
        event: LifecycleEvent,
        first: LiveSession | None = None,
    ) -> ConditionalResult[LiveSession]:
        """Apply a lifecycle event to the session with a conditional write.

        `first` is the already-loaded session for the first attempt; retries
        always re-read.
        """
        preloaded = [first] if first is not None else []

        async def load() -> LiveSession | None:
            if preloaded:
                return preloaded.pop()
            return await self.store.get_session(session_id)

        result = await apply_conditionally(
            load,
            lambda session: apply_session_event(session, event, utc_now()),
            self.store.update_session,
            max_retries=self.max_conflict_retries,
            label=f"session({event}, {session_id})",
        )

        if result.applied and result.record is not None:
            logger.info("✅ Session {} -> {} ({})", session_id, result.record.status, result.reason)
        return result

    async def _materialize_if_needed(
        self,
        result: ConditionalResult[LiveSession],
    ) -> tuple[Recording | None, bool]:
        """Create the recording for a session that ended after going live.

        Also runs for a replayed end event on an already-ended session, so a
        materialization lost to an earlier failure is completed on redelivery.
        Creation is idempotent on stream_id.
        """
        session = result.record
        if session is None or session.status != SessionStatus.ENDED:
            return None, False
        if session.terminated_early or session.started_at is None:
            return None, False
        if not result.materialize and result.applied:
            return None, False
        return await self.materializer.on_session_ended(session)
