"""Record models and their Beanie documents."""

from .content import Content
from .documents import ContentDocument, RecordingDocument, SessionDocument
from .init import init_beanie_odm
from .lifecycle_states import (
    BoostedBy,
    ContentStatus,
    ContentVisibility,
    RecordingStatus,
    SessionMode,
    SessionStatus,
    SessionVisibility,
)
from .live_session import LiveSession
from .recording import Recording

__all__ = [
    "BoostedBy",
    "Content",
    "ContentDocument",
    "ContentStatus",
    "ContentVisibility",
    "LiveSession",
    "Recording",
    "RecordingDocument",
    "RecordingStatus",
    "SessionDocument",
    "SessionMode",
    "SessionStatus",
    "SessionVisibility",
    "init_beanie_odm",
]
