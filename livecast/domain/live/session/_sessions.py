"""Session creation and lookup operations."""

from loguru import logger

from livecast.domain.auth.creator_authorizer import Caller, CreatorAuthorizer
from livecast.domain.utils.idgen import new_session_id
from livecast.schemas import LiveSession, SessionStatus
from livecast.services.integrations.provider_schemas import ProviderSessionConfig
from livecast.shared.utils.timeutil import utc_now
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ._base import BaseService
from .session_models import SessionCreatedResponse, SessionCreateParams, SessionResponse


class SessionOperations(BaseService):
    async def create_session(
        self,
        params: SessionCreateParams,
        caller: Caller,
        authorizer: CreatorAuthorizer,
    ) -> SessionCreatedResponse:
        """Allocate a provider stream and store the session in CONFIGURING.

        Raises:
            AppError: E_FORBIDDEN when the caller may not stream as the creator,
                E_PROVIDER_UNAVAILABLE when the provider call fails (retryable by the caller)
        """
        if not authorizer.can_create_session(caller, params.creator_id):
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="Only active creators can create sessions for themselves",
                status_code=HttpStatusCode.FORBIDDEN,
            )

        provider_session = await self.provider.create_session(
            ProviderSessionConfig(name=params.title, mode=params.mode)
        )

        now = utc_now()
        session = LiveSession(
            session_id=new_session_id(),
            provider_session_id=provider_session.provider_session_id,
            creator_id=params.creator_id,
            title=params.title,
            visibility=params.visibility,
            mode=params.mode,
            status=SessionStatus.CONFIGURING,
            ingest_url=provider_session.ingest_url,
            stream_key=provider_session.stream_key,
            playback_url=provider_session.playback_url,
            created_at=now,
            updated_at=now,
        )
        stored = await self.store.insert_session(session)

        logger.info(
            "✅ Session {} created for creator {} (provider stream {})",
            stored.session_id,
            stored.creator_id,
            stored.provider_session_id,
        )
        return SessionCreatedResponse.from_session(stored)

    async def get_session(self, session_id: str) -> SessionResponse:
        """Raises AppError if session not found."""
        session = await self._require_session(session_id)
        return SessionResponse.from_session(session)
