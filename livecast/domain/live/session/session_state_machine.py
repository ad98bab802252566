"""Session state machine for provider-driven lifecycle transitions."""

from datetime import datetime

from livecast.schemas import LiveSession, SessionStatus

from ..lifecycle_models import LifecycleEvent, Transition


class SessionStateMachine:
    """State machine for live session transitions.

    State flow with triggers:
    - CONFIGURING (session created) -> LIVE (provider stream.started webhook)
    - CONFIGURING -> ENDED (creator ends before ingest starts)
    - LIVE -> ENDED (provider stream.idle webhook, or creator ends the session)
    - ENDED is terminal

    Provider events are delivered at least once and out of order, so any event
    that does not move the session forward is a no-op rather than an error.
    """

    TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
        SessionStatus.CONFIGURING: {SessionStatus.LIVE, SessionStatus.ENDED},
        SessionStatus.LIVE: {SessionStatus.ENDED},
        SessionStatus.ENDED: set(),
    }

    TERMINAL_STATES: set[SessionStatus] = {SessionStatus.ENDED}

    @classmethod
    def can_transition(cls, current: SessionStatus, new: SessionStatus) -> bool:
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: SessionStatus) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: SessionStatus) -> set[SessionStatus]:
        return cls.TRANSITIONS.get(state, set())

    @classmethod
    def get_valid_sources(cls, target: SessionStatus) -> set[SessionStatus]:
        return {state for state, targets in cls.TRANSITIONS.items() if target in targets}


def apply_session_event(
    session: LiveSession,
    event: LifecycleEvent,
    now: datetime,
) -> Transition[LiveSession]:
    """
    Compute the next session for a lifecycle event.

    Pure: the input session is never mutated.

    - session-started: configuring -> live, sets started_at and resets viewer_count.
    - session-idle: live -> ended, sets ended_at and requests materialization.
      An idle event for a session that never went live is ignored.
    - session-terminated: creator ending the session; live -> ended with
      materialization, configuring -> ended flagged as terminated early.
    """
    status = session.status

    if event == LifecycleEvent.SESSION_STARTED:
        if status != SessionStatus.CONFIGURING:
            return Transition.unchanged(session, f"already {status}")
        next_session = session.model_copy(
            update={
                "status": SessionStatus.LIVE,
                "started_at": now,
                "viewer_count": 0,
                "updated_at": now,
            }
        )
        return Transition(record=next_session, changed=True, reason="started")

    if event == LifecycleEvent.SESSION_IDLE:
        if status != SessionStatus.LIVE:
            return Transition.unchanged(session, f"idle ignored while {status}")
        next_session = session.model_copy(
            update={"status": SessionStatus.ENDED, "ended_at": now, "updated_at": now}
        )
        return Transition(record=next_session, changed=True, reason="ended", materialize=True)

    if event == LifecycleEvent.SESSION_TERMINATED:
        if status == SessionStatus.ENDED:
            return Transition.unchanged(session, "already ended")
        was_live = status == SessionStatus.LIVE
        next_session = session.model_copy(
            update={
                "status": SessionStatus.ENDED,
                "ended_at": now,
                "updated_at": now,
                "terminated_early": not was_live,
            }
        )
        return Transition(
            record=next_session,
            changed=True,
            reason="ended" if was_live else "terminated_early",
            materialize=was_live,
        )

    return Transition.unchanged(session, f"event {event} does not apply to sessions")


__all__ = ["SessionStateMachine", "apply_session_event"]
