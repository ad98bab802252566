"""Tests for SessionStateMachine and apply_session_event."""

from datetime import timedelta

import pytest

from livecast.domain.live.lifecycle_models import LifecycleEvent
from livecast.domain.live.session.session_state_machine import SessionStateMachine, apply_session_event
from livecast.schemas import SessionStatus
from tests.fixtures.store_fixtures import BASE_TIME, make_session

NOW = BASE_TIME + timedelta(hours=2)


class TestSessionStateMachineTable:
    """Tests for the transition table helpers."""

    @pytest.mark.parametrize(
        ("current", "new", "expected"),
        [
            (SessionStatus.CONFIGURING, SessionStatus.LIVE, True),
            (SessionStatus.CONFIGURING, SessionStatus.ENDED, True),
            (SessionStatus.LIVE, SessionStatus.ENDED, True),
            (SessionStatus.LIVE, SessionStatus.CONFIGURING, False),
            (SessionStatus.ENDED, SessionStatus.LIVE, False),
            (SessionStatus.ENDED, SessionStatus.CONFIGURING, False),
        ],
    )
    def test_can_transition(self, current, new, expected):
        assert SessionStateMachine.can_transition(current, new) is expected

    def test_ended_is_only_terminal_state(self):
        assert SessionStateMachine.is_terminal(SessionStatus.ENDED)
        assert not SessionStateMachine.is_terminal(SessionStatus.LIVE)
        assert not SessionStateMachine.is_terminal(SessionStatus.CONFIGURING)

    def test_live_can_only_end(self):
        assert SessionStateMachine.get_valid_transitions(SessionStatus.LIVE) == {SessionStatus.ENDED}

    def test_get_valid_sources_for_ended(self):
        assert SessionStateMachine.get_valid_sources(SessionStatus.ENDED) == {
            SessionStatus.CONFIGURING,
            SessionStatus.LIVE,
        }


class TestSessionStarted:
    """Tests for the session-started event."""

    def test_configuring_becomes_live(self):
        """Should move configuring to live and stamp started_at."""
        # Arrange
        session = make_session(status=SessionStatus.CONFIGURING, viewer_count=7)

        # Act
        transition = apply_session_event(session, LifecycleEvent.SESSION_STARTED, NOW)

        # Assert
        assert transition.changed
        assert transition.record.status == SessionStatus.LIVE
        assert transition.record.started_at == NOW
        assert transition.record.viewer_count == 0
        assert not transition.materialize

    def test_input_session_is_not_mutated(self):
        session = make_session(status=SessionStatus.CONFIGURING)

        apply_session_event(session, LifecycleEvent.SESSION_STARTED, NOW)

        assert session.status == SessionStatus.CONFIGURING
        assert session.started_at is None

    def test_replay_on_live_session_is_noop(self):
        """A duplicate started event must not reset the viewer count."""
        # Arrange
        session = make_session(status=SessionStatus.LIVE, viewer_count=42)

        # Act
        transition = apply_session_event(session, LifecycleEvent.SESSION_STARTED, NOW)

        # Assert
        assert not transition.changed
        assert transition.record.viewer_count == 42
        assert transition.record.started_at == session.started_at

    def test_started_after_ended_is_noop(self):
        session = make_session(status=SessionStatus.ENDED)

        transition = apply_session_event(session, LifecycleEvent.SESSION_STARTED, NOW)

        assert not transition.changed
        assert transition.record.status == SessionStatus.ENDED


class TestSessionIdle:
    """Tests for the session-idle event."""

    def test_live_becomes_ended_and_requests_recording(self):
        session = make_session(status=SessionStatus.LIVE)

        transition = apply_session_event(session, LifecycleEvent.SESSION_IDLE, NOW)

        assert transition.changed
        assert transition.materialize
        assert transition.record.status == SessionStatus.ENDED
        assert transition.record.ended_at == NOW
        assert not transition.record.terminated_early

    def test_idle_while_configuring_is_noop(self):
        """A session that never went live is not ended by an idle event."""
        session = make_session(status=SessionStatus.CONFIGURING)

        transition = apply_session_event(session, LifecycleEvent.SESSION_IDLE, NOW)

        assert not transition.changed
        assert not transition.materialize
        assert transition.record.status == SessionStatus.CONFIGURING

    def test_idle_replay_on_ended_is_noop(self):
        session = make_session(status=SessionStatus.ENDED)

        transition = apply_session_event(session, LifecycleEvent.SESSION_IDLE, NOW)

        assert not transition.changed
        assert transition.record.ended_at == session.ended_at


class TestSessionTerminated:
    """Tests for the creator-initiated session-terminated event."""

    def test_live_session_ends_with_recording(self):
        session = make_session(status=SessionStatus.LIVE)

        transition = apply_session_event(session, LifecycleEvent.SESSION_TERMINATED, NOW)

        assert transition.changed
        assert transition.materialize
        assert transition.record.status == SessionStatus.ENDED
        assert not transition.record.terminated_early

    def test_configuring_session_is_terminated_early(self):
        session = make_session(status=SessionStatus.CONFIGURING)

        transition = apply_session_event(session, LifecycleEvent.SESSION_TERMINATED, NOW)

        assert transition.changed
        assert not transition.materialize
        assert transition.record.status == SessionStatus.ENDED
        assert transition.record.terminated_early
        assert transition.reason == "terminated_early"

    def test_already_ended_is_noop(self):
        session = make_session(status=SessionStatus.ENDED)

        transition = apply_session_event(session, LifecycleEvent.SESSION_TERMINATED, NOW)

        assert not transition.changed


class TestNonSessionEvents:
    @pytest.mark.parametrize("event", [LifecycleEvent.ASSET_READY, LifecycleEvent.ASSET_FAILED])
    def test_asset_events_do_not_apply(self, event):
        session = make_session(status=SessionStatus.LIVE)

        transition = apply_session_event(session, event, NOW)

        assert not transition.changed
