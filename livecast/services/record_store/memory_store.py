"""In-process record store used by tests and the demo backend."""

from datetime import datetime
from typing import Sequence

from loguru import logger

from livecast.schemas import Content, ContentStatus, ContentVisibility, LiveSession, Recording

from .base import (
    BoostedKey,
    DuplicateRecordError,
    RecordVersionConflict,
    RegularKey,
    bump_version,
)


def boosted_sort_key(content: Content):
    return (-content.boost_level, -content.boosted_at.timestamp(), content.content_id)  # type: ignore[union-attr]


def regular_sort_key(content: Content):
    return (-content.created_at.timestamp(), content.content_id)


class MemoryRecordStore:
    """
    Dict-backed store with the same conditional-write contract as the Mongo store.

    Records are copied on the way in and out so callers never share mutable state
    with the store.
    """

    def __init__(self):
        self._sessions: dict[str, LiveSession] = {}
        self._recordings: dict[str, Recording] = {}
        self._contents: dict[str, Content] = {}

    def clear(self):
        self._sessions.clear()
        self._recordings.clear()
        self._contents.clear()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_session(self, session_id: str) -> LiveSession | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def find_session_by_provider_id(self, provider_session_id: str) -> LiveSession | None:
        for session in self._sessions.values():
            if session.provider_session_id == provider_session_id:
                return session.model_copy(deep=True)
        return None

    async def insert_session(self, session: LiveSession) -> LiveSession:
        if session.session_id in self._sessions:
            raise DuplicateRecordError("session", session.session_id)
        if any(s.provider_session_id == session.provider_session_id for s in self._sessions.values()):
            raise DuplicateRecordError("session", session.provider_session_id)

        self._sessions[session.session_id] = session.model_copy(deep=True)
        return session.model_copy(deep=True)

    async def update_session(self, session: LiveSession, expected_version: int) -> LiveSession:
        stored = self._sessions.get(session.session_id)
        if stored is None or stored.version != expected_version:
            raise RecordVersionConflict("session", session.session_id, expected_version)

        updated = bump_version(session, expected_version)
        self._sessions[session.session_id] = updated
        logger.debug(
            "Session {} updated (version {} -> {})", session.session_id, expected_version, updated.version
        )
        return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    async def get_recording(self, recording_id: str) -> Recording | None:
        recording = self._recordings.get(recording_id)
        return recording.model_copy(deep=True) if recording else None

    async def find_recording_by_stream_id(self, stream_id: str) -> Recording | None:
        for recording in self._recordings.values():
            if recording.stream_id == stream_id:
                return recording.model_copy(deep=True)
        return None

    async def find_recording_by_asset_id(self, provider_asset_id: str) -> Recording | None:
        for recording in self._recordings.values():
            if recording.provider_asset_id == provider_asset_id:
                return recording.model_copy(deep=True)
        return None

    async def create_recording_if_absent(self, recording: Recording) -> tuple[Recording, bool]:
        existing = await self.find_recording_by_stream_id(recording.stream_id)
        if existing is not None:
            return existing, False

        self._recordings[recording.recording_id] = recording.model_copy(deep=True)
        return recording.model_copy(deep=True), True

    async def update_recording(self, recording: Recording, expected_version: int) -> Recording:
        stored = self._recordings.get(recording.recording_id)
        if stored is None or stored.version != expected_version:
            raise RecordVersionConflict("recording", recording.recording_id, expected_version)

        updated = bump_version(recording, expected_version)
        self._recordings[recording.recording_id] = updated
        return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def get_content(self, content_id: str) -> Content | None:
        content = self._contents.get(content_id)
        return content.model_copy(deep=True) if content else None

    async def insert_content(self, content: Content) -> Content:
        if content.content_id in self._contents:
            raise DuplicateRecordError("content", content.content_id)
        self._contents[content.content_id] = content.model_copy(deep=True)
        return content.model_copy(deep=True)

    async def update_content(self, content: Content, expected_version: int) -> Content:
        stored = self._contents.get(content.content_id)
        if stored is None or stored.version != expected_version:
            raise RecordVersionConflict("content", content.content_id, expected_version)

        updated = bump_version(content, expected_version)
        self._contents[content.content_id] = updated
        return updated.model_copy(deep=True)

    def _published(self, visibilities: Sequence[ContentVisibility]) -> list[Content]:
        allowed = set(visibilities)
        return [
            c for c in self._contents.values() if c.status == ContentStatus.PUBLISHED and c.visibility in allowed
        ]

    async def list_boosted_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: BoostedKey | None,
        limit: int,
    ) -> list[Content]:
        items = sorted((c for c in self._published(visibilities) if c.is_boost_active(now)), key=boosted_sort_key)
        if after is not None:
            pivot = (-after.boost_level, -after.boosted_at.timestamp(), after.content_id)
            items = [c for c in items if boosted_sort_key(c) > pivot]
        return [c.model_copy(deep=True) for c in items[:limit]]

    async def list_regular_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: RegularKey | None,
        limit: int,
    ) -> list[Content]:
        items = sorted(
            (c for c in self._published(visibilities) if not c.is_boost_active(now)), key=regular_sort_key
        )
        if after is not None:
            pivot = (-after.created_at.timestamp(), after.content_id)
            items = [c for c in items if regular_sort_key(c) > pivot]
        return [c.model_copy(deep=True) for c in items[:limit]]

    async def list_expired_boosts(self, now: datetime, limit: int) -> list[Content]:
        items = [
            c
            for c in self._contents.values()
            if c.is_boosted and c.boost_expires_at is not None and c.boost_expires_at <= now
        ]
        items.sort(key=lambda c: (c.boost_expires_at, c.content_id))
        return [c.model_copy(deep=True) for c in items[:limit]]


__all__ = ["MemoryRecordStore", "boosted_sort_key", "regular_sort_key"]
