"""Session domain service."""

from livecast.domain.auth.creator_authorizer import Caller, CreatorAuthorizer
from livecast.schemas import LiveSession, Recording
from livecast.services.integrations.provider_client import VideoProvider
from livecast.services.record_store.base import RecordStore

from ..conditional import ConditionalResult
from ..recording.recording_materializer import RecordingMaterializer
from ._end import EndSessionOperations
from ._lifecycle import LifecycleOperations
from ._sessions import SessionOperations
from .session_models import (
    SessionCreatedResponse,
    SessionCreateParams,
    SessionEndResult,
    SessionResponse,
    SessionStatusResponse,
)


class SessionService:
    """Facade over session operations sharing one store, provider and materializer."""

    def __init__(
        self,
        store: RecordStore,
        provider: VideoProvider,
        materializer: RecordingMaterializer | None = None,
        max_conflict_retries: int | None = None,
    ):
        self.materializer = materializer or RecordingMaterializer(
            store, provider, max_conflict_retries=max_conflict_retries
        )
        args = (store, provider, self.materializer, max_conflict_retries)
        self._sessions = SessionOperations(*args)
        self._end = EndSessionOperations(*args)
        self._lifecycle = LifecycleOperations(*args)

    # ==================== SESSIONS ====================

    async def create_session(
        self,
        params: SessionCreateParams,
        caller: Caller,
        authorizer: CreatorAuthorizer,
    ) -> SessionCreatedResponse:
        return await self._sessions.create_session(params=params, caller=caller, authorizer=authorizer)

    async def get_session(self, session_id: str) -> SessionResponse:
        """Raises AppError if session not found."""
        return await self._sessions.get_session(session_id=session_id)

    async def end_session(self, session_id: str, caller_id: str, *, is_admin: bool = False) -> SessionEndResult:
        return await self._end.end_session(session_id=session_id, caller_id=caller_id, is_admin=is_admin)

    # ==================== PROVIDER LIFECYCLE ====================

    async def on_stream_started(
        self, provider_session_id: str
    ) -> tuple[ConditionalResult[LiveSession], Recording | None]:
        return await self._lifecycle.on_stream_started(provider_session_id)

    async def on_stream_idle(
        self, provider_session_id: str
    ) -> tuple[ConditionalResult[LiveSession], Recording | None]:
        return await self._lifecycle.on_stream_idle(provider_session_id)

    async def refresh_session_status(self, session_id: str) -> SessionStatusResponse:
        return await self._lifecycle.refresh_session_status(session_id)
