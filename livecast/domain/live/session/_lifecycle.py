"""Provider-driven session lifecycle operations (webhooks and status polling)."""

from loguru import logger

from livecast.schemas import LiveSession, Recording, SessionStatus
from livecast.shared.utils.timeutil import utc_now

from ..conditional import ConditionalResult, apply_conditionally
from ..lifecycle_models import LifecycleEvent, Transition
from ._base import BaseService
from .session_models import SessionResponse, SessionStatusResponse


class LifecycleOperations(BaseService):
    """Operations triggered by provider stream events."""

    async def _on_provider_event(
        self,
        provider_session_id: str,
        event: LifecycleEvent,
    ) -> tuple[ConditionalResult[LiveSession], Recording | None]:
        session = await self.store.find_session_by_provider_id(provider_session_id)
        if session is None:
            logger.warning("No session found for provider stream {} ({})", provider_session_id, event)
            return ConditionalResult(record=None, applied=False, reason="not_found"), None

        result = await self._apply_session_event(session.session_id, event, first=session)
        if not result.applied:
            logger.info("Session {} unchanged on {}: {}", session.session_id, event, result.reason)

        recording, _ = await self._materialize_if_needed(result)
        return result, recording

    async def on_stream_started(
        self, provider_session_id: str
    ) -> tuple[ConditionalResult[LiveSession], Recording | None]:
        return await self._on_provider_event(provider_session_id, LifecycleEvent.SESSION_STARTED)

    async def on_stream_idle(
        self, provider_session_id: str
    ) -> tuple[ConditionalResult[LiveSession], Recording | None]:
        return await self._on_provider_event(provider_session_id, LifecycleEvent.SESSION_IDLE)

    async def refresh_session_status(self, session_id: str) -> SessionStatusResponse:
        """Poll the provider and record the current viewer count of a live session.

        Raises:
            AppError: E_SESSION_NOT_FOUND, or E_PROVIDER_UNAVAILABLE when the provider call fails
        """
        session = await self._require_session(session_id)
        status = await self.provider.get_session_status(session.provider_session_id)

        def evaluate(current: LiveSession) -> Transition[LiveSession]:
            if current.status != SessionStatus.LIVE:
                return Transition.unchanged(current, f"not live ({current.status})")
            peak = max(current.peak_viewer_count, status.viewer_count)
            if current.viewer_count == status.viewer_count and current.peak_viewer_count == peak:
                return Transition.unchanged(current, "viewer count unchanged")
            return Transition(
                record=current.model_copy(
                    update={
                        "viewer_count": status.viewer_count,
                        "peak_viewer_count": peak,
                        "updated_at": utc_now(),
                    }
                ),
                changed=True,
                reason="viewers",
            )

        preloaded = [session]

        async def load() -> LiveSession | None:
            return preloaded.pop() if preloaded else await self.store.get_session(session_id)

        result = await apply_conditionally(
            load,
            evaluate,
            self.store.update_session,
            max_retries=self.max_conflict_retries,
            label=f"session(viewers, {session_id})",
        )

        return SessionStatusResponse(
            session=SessionResponse.from_session(result.record or session),
            is_active=status.is_active,
            is_healthy=status.is_healthy,
        )
