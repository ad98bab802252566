"""Session ending operations."""

from loguru import logger

from livecast.services.record_store.base import RecordVersionConflict
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ..conditional import REASON_VERSION_CONFLICT
from ..lifecycle_models import LifecycleEvent
from ._base import BaseService
from .session_models import SessionEndResult, SessionResponse


class EndSessionOperations(BaseService):
    """Operations for ending sessions on the creator's request."""

    async def end_session(
        self,
        session_id: str,
        caller_id: str,
        *,
        is_admin: bool = False,
    ) -> SessionEndResult:
        """End a session.

        A live session ends and its recording is materialized; a session that
        never went live ends flagged as terminated early. Ending an ended
        session returns it unchanged. The provider stream is deleted
        best-effort afterwards.

        Raises:
            AppError: E_SESSION_NOT_FOUND, E_FORBIDDEN
        """
        session = await self._require_session(session_id)
        if not is_admin and session.creator_id != caller_id:
            raise AppError(
                errcode=AppErrorCode.E_FORBIDDEN,
                errmesg="Only the creator or an admin can end this session",
                status_code=HttpStatusCode.FORBIDDEN,
            )

        logger.info(f"Ending session {session_id} (current state: {session.status})")

        result = await self._apply_session_event(session_id, LifecycleEvent.SESSION_TERMINATED, first=session)
        if result.record is None:
            # Deleted between the read and the write
            raise AppError(
                errcode=AppErrorCode.E_SESSION_NOT_FOUND,
                errmesg=f"Session not found: {session_id}",
                status_code=HttpStatusCode.NOT_FOUND,
            )

        if result.reason == REASON_VERSION_CONFLICT:
            raise RecordVersionConflict("session", session_id, result.record.version)

        recording, created = await self._materialize_if_needed(result)

        if result.applied:
            try:
                await self.provider.delete_session(session.provider_session_id)
            except AppError as e:
                logger.warning(
                    f"Failed to delete provider stream {session.provider_session_id} "
                    f"for session {session_id}: {e.errmesg}"
                )

        return SessionEndResult(
            session=SessionResponse.from_session(result.record),
            recording_id=recording.recording_id if recording else None,
            recording_created=created,
        )
