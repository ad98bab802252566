"""Beanie documents persisting the record models."""

from beanie import Document
from pymongo import ASCENDING, DESCENDING, IndexModel

from .content import Content
from .live_session import LiveSession
from .recording import Recording


class SessionDocument(Document, LiveSession):
    class Settings:
        name = "session"
        indexes = [
            IndexModel([("session_id", ASCENDING)], unique=True),
            IndexModel([("provider_session_id", ASCENDING)], unique=True),
            IndexModel([("creator_id", ASCENDING), ("created_at", DESCENDING)]),
        ]


class RecordingDocument(Document, Recording):
    class Settings:
        name = "recording"
        indexes = [
            IndexModel([("recording_id", ASCENDING)], unique=True),
            # At most one recording per session
            IndexModel([("stream_id", ASCENDING)], unique=True),
            IndexModel([("provider_asset_id", ASCENDING)], sparse=True),
        ]


class ContentDocument(Document, Content):
    class Settings:
        name = "content"
        indexes = [
            IndexModel([("content_id", ASCENDING)], unique=True),
            IndexModel(
                [
                    ("status", ASCENDING),
                    ("is_boosted", ASCENDING),
                    ("boost_level", DESCENDING),
                    ("boosted_at", DESCENDING),
                    ("content_id", ASCENDING),
                ]
            ),
            IndexModel(
                [
                    ("status", ASCENDING),
                    ("created_at", DESCENDING),
                    ("content_id", ASCENDING),
                ]
            ),
        ]


__all__ = ["ContentDocument", "RecordingDocument", "SessionDocument"]
