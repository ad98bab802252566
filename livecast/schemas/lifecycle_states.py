"""Common enums used across schemas."""

from enum import Enum


class SessionStatus(str, Enum):
    """Live session lifecycle states.

    State Transition Flow:

    CONFIGURING → LIVE → ENDED
         ↓                 ↑
         └─────────────────┘  (creator ends before going live)

    State Descriptions:
    - CONFIGURING: Session created, provider stream allocated, no ingest yet.
    - LIVE: Provider reported ingest started (stream.started webhook).
    - ENDED: Provider reported ingest idle, or the creator ended the session.

    Terminal states (no further transitions): ENDED
    """

    CONFIGURING = "configuring"
    LIVE = "live"
    ENDED = "ended"

    def __str__(self) -> str:
        return self.value


class RecordingStatus(str, Enum):
    """Recording lifecycle states.

    State Transition Flow:

    PENDING → PROCESSING → READY
       ↓          ↓
       ├──────────┴──────→ FAILED
       └─────────────────→ READY

    State Descriptions:
    - PENDING: Recording created when its session ended; asset not announced yet.
    - PROCESSING: Provider is preparing the asset.
    - READY: Asset ready; playback fields populated.
    - FAILED: Provider failure or asset rejected by the recording policy.
    - DELETED: Recording soft-deleted by its owner or an admin.

    Terminal states (no further transitions): READY, FAILED, DELETED
    """

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


class ContentStatus(str, Enum):
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"
    REMOVED = "removed"

    def __str__(self) -> str:
        return self.value


class SessionVisibility(str, Enum):
    PUBLIC = "public"
    MEMBERS = "members"
    PRIVATE = "private"

    def __str__(self) -> str:
        return self.value


class SessionMode(str, Enum):
    VIDEO = "video"
    AUDIO_ONLY = "audio_only"
    AVATAR = "avatar"

    def __str__(self) -> str:
        return self.value


class ContentVisibility(str, Enum):
    PUBLIC = "public"
    MEMBERS_ONLY = "members_only"

    def __str__(self) -> str:
        return self.value


class BoostedBy(str, Enum):
    CREATOR = "creator"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


__all__ = [
    "BoostedBy",
    "ContentStatus",
    "ContentVisibility",
    "RecordingStatus",
    "SessionMode",
    "SessionStatus",
    "SessionVisibility",
]
