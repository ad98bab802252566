"""Record store backed by MongoDB through the Beanie documents."""

from datetime import datetime
from typing import Any, Sequence, TypeVar

from beanie import Document
from beanie.odm.operators.update.general import Set
from loguru import logger
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from livecast.schemas import (
    Content,
    ContentDocument,
    ContentStatus,
    ContentVisibility,
    LiveSession,
    Recording,
    RecordingDocument,
    SessionDocument,
)

from .base import (
    BoostedKey,
    DuplicateRecordError,
    RecordVersionConflict,
    RegularKey,
    bump_version,
)

M = TypeVar("M", bound=BaseModel)

BOOSTED_SORT = ("-boost_level", "-boosted_at", "+content_id")
REGULAR_SORT = ("-created_at", "+content_id")


def _to_record(model: type[M], doc: Document | None) -> M | None:
    if doc is None:
        return None
    return model.model_validate(doc.model_dump(include=set(model.model_fields)))


def _active_boost_filter(now: datetime) -> dict[str, Any]:
    return {
        "is_boosted": True,
        "$or": [{"boost_expires_at": None}, {"boost_expires_at": {"$gt": now}}],
    }


def _inactive_boost_filter(now: datetime) -> dict[str, Any]:
    return {"$or": [{"is_boosted": False}, {"boost_expires_at": {"$lte": now}}]}


def _published_filter(visibilities: Sequence[ContentVisibility]) -> dict[str, Any]:
    return {
        "status": ContentStatus.PUBLISHED.value,
        "visibility": {"$in": [v.value for v in visibilities]},
    }


def _after_boosted(after: BoostedKey) -> dict[str, Any]:
    return {
        "$or": [
            {"boost_level": {"$lt": after.boost_level}},
            {"boost_level": after.boost_level, "boosted_at": {"$lt": after.boosted_at}},
            {
                "boost_level": after.boost_level,
                "boosted_at": after.boosted_at,
                "content_id": {"$gt": after.content_id},
            },
        ]
    }


def _after_regular(after: RegularKey) -> dict[str, Any]:
    return {
        "$or": [
            {"created_at": {"$lt": after.created_at}},
            {"created_at": after.created_at, "content_id": {"$gt": after.content_id}},
        ]
    }


class MongoRecordStore:
    """
    Beanie-backed store.

    Conditional updates filter on the natural key and the expected version and
    `$set` the whole record with the version incremented. Uniqueness of
    session ids, provider stream ids and one recording per stream is enforced by
    unique indexes.
    """

    async def _conditional_set(
        self,
        document: type[Document],
        kind: str,
        key_field: str,
        record: M,
        expected_version: int,
    ) -> M:
        key = getattr(record, key_field)
        updated = bump_version(record, expected_version)

        result = await document.find({key_field: key, "version": expected_version}).update(
            Set(updated.model_dump())  # type: ignore[arg-type]
        )

        if not result or result.matched_count == 0:
            logger.debug("{} {} version conflict (expected {})", kind, key, expected_version)
            raise RecordVersionConflict(kind, key, expected_version)

        return updated

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_session(self, session_id: str) -> LiveSession | None:
        doc = await SessionDocument.find_one({"session_id": session_id})
        return _to_record(LiveSession, doc)

    async def find_session_by_provider_id(self, provider_session_id: str) -> LiveSession | None:
        doc = await SessionDocument.find_one({"provider_session_id": provider_session_id})
        return _to_record(LiveSession, doc)

    async def insert_session(self, session: LiveSession) -> LiveSession:
        try:
            await SessionDocument(**session.model_dump()).insert()
        except DuplicateKeyError as e:
            raise DuplicateRecordError("session", session.session_id) from e
        return session

    async def update_session(self, session: LiveSession, expected_version: int) -> LiveSession:
        return await self._conditional_set(SessionDocument, "session", "session_id", session, expected_version)

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    async def get_recording(self, recording_id: str) -> Recording | None:
        doc = await RecordingDocument.find_one({"recording_id": recording_id})
        return _to_record(Recording, doc)

    async def find_recording_by_stream_id(self, stream_id: str) -> Recording | None:
        doc = await RecordingDocument.find_one({"stream_id": stream_id})
        return _to_record(Recording, doc)

    async def find_recording_by_asset_id(self, provider_asset_id: str) -> Recording | None:
        doc = await RecordingDocument.find_one({"provider_asset_id": provider_asset_id})
        return _to_record(Recording, doc)

    async def create_recording_if_absent(self, recording: Recording) -> tuple[Recording, bool]:
        try:
            await RecordingDocument(**recording.model_dump()).insert()
        except DuplicateKeyError:
            existing = await self.find_recording_by_stream_id(recording.stream_id)
            if existing is None:
                raise
            logger.debug("Recording for stream {} already exists", recording.stream_id)
            return existing, False
        return recording, True

    async def update_recording(self, recording: Recording, expected_version: int) -> Recording:
        return await self._conditional_set(
            RecordingDocument, "recording", "recording_id", recording, expected_version
        )

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def get_content(self, content_id: str) -> Content | None:
        doc = await ContentDocument.find_one({"content_id": content_id})
        return _to_record(Content, doc)

    async def insert_content(self, content: Content) -> Content:
        try:
            await ContentDocument(**content.model_dump()).insert()
        except DuplicateKeyError as e:
            raise DuplicateRecordError("content", content.content_id) from e
        return content

    async def update_content(self, content: Content, expected_version: int) -> Content:
        return await self._conditional_set(ContentDocument, "content", "content_id", content, expected_version)

    async def list_boosted_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: BoostedKey | None,
        limit: int,
    ) -> list[Content]:
        conditions = [_published_filter(visibilities), _active_boost_filter(now)]
        if after is not None:
            conditions.append(_after_boosted(after))

        docs = await ContentDocument.find({"$and": conditions}).sort(*BOOSTED_SORT).limit(limit).to_list()
        return [_to_record(Content, doc) for doc in docs]  # type: ignore[misc]

    async def list_regular_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: RegularKey | None,
        limit: int,
    ) -> list[Content]:
        conditions = [_published_filter(visibilities), _inactive_boost_filter(now)]
        if after is not None:
            conditions.append(_after_regular(after))

        docs = await ContentDocument.find({"$and": conditions}).sort(*REGULAR_SORT).limit(limit).to_list()
        return [_to_record(Content, doc) for doc in docs]  # type: ignore[misc]

    async def list_expired_boosts(self, now: datetime, limit: int) -> list[Content]:
        docs = (
            await ContentDocument.find({"is_boosted": True, "boost_expires_at": {"$ne": None, "$lte": now}})
            .sort("+boost_expires_at", "+content_id")
            .limit(limit)
            .to_list()
        )
        return [_to_record(Content, doc) for doc in docs]  # type: ignore[misc]


__all__ = ["MongoRecordStore"]
