"""
Record store interface.

Every write is either a create-if-absent on the record's natural key or a
conditional update guarded by the record version. Lookups return None when the
record does not exist.
"""

from datetime import datetime
from typing import NamedTuple, Protocol, Sequence

from livecast.schemas import Content, ContentVisibility, LiveSession, Recording
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


class RecordVersionConflict(AppError):
    """Conditional write lost: the stored version no longer matches the expected one."""

    def __init__(self, kind: str, key: str, expected_version: int):
        self.kind = kind
        self.key = key
        self.expected_version = expected_version
        super().__init__(
            errcode=AppErrorCode.E_VERSION_CONFLICT,
            errmesg=f"{kind} {key} was modified concurrently (expected version {expected_version})",
            status_code=HttpStatusCode.CONFLICT,
        )


class DuplicateRecordError(AppError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(
            errcode=AppErrorCode.E_DUPLICATE_RECORD,
            errmesg=f"{kind} {key} already exists",
            status_code=HttpStatusCode.CONFLICT,
        )


class BoostedKey(NamedTuple):
    """Sort key of the boosted feed segment: level desc, boosted_at desc, content_id asc."""

    boost_level: int
    boosted_at: datetime
    content_id: str


class RegularKey(NamedTuple):
    """Sort key of the regular feed segment: created_at desc, content_id asc."""

    created_at: datetime
    content_id: str


class RecordStore(Protocol):
    # Sessions
    async def get_session(self, session_id: str) -> LiveSession | None: ...

    async def find_session_by_provider_id(self, provider_session_id: str) -> LiveSession | None: ...

    async def insert_session(self, session: LiveSession) -> LiveSession: ...

    async def update_session(self, session: LiveSession, expected_version: int) -> LiveSession: ...

    # Recordings
    async def get_recording(self, recording_id: str) -> Recording | None: ...

    async def find_recording_by_stream_id(self, stream_id: str) -> Recording | None: ...

    async def find_recording_by_asset_id(self, provider_asset_id: str) -> Recording | None: ...

    async def create_recording_if_absent(self, recording: Recording) -> tuple[Recording, bool]:
        """Insert unless a recording with the same stream_id exists.

        Returns the stored recording and whether this call created it.
        """
        ...

    async def update_recording(self, recording: Recording, expected_version: int) -> Recording: ...

    # Content
    async def get_content(self, content_id: str) -> Content | None: ...

    async def insert_content(self, content: Content) -> Content: ...

    async def update_content(self, content: Content, expected_version: int) -> Content: ...

    async def list_boosted_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: BoostedKey | None,
        limit: int,
    ) -> list[Content]:
        """Published content with an active boost, in boosted order, strictly after `after`."""
        ...

    async def list_regular_content(
        self,
        visibilities: Sequence[ContentVisibility],
        now: datetime,
        after: RegularKey | None,
        limit: int,
    ) -> list[Content]:
        """Published content without an active boost, in recency order, strictly after `after`."""
        ...

    async def list_expired_boosts(self, now: datetime, limit: int) -> list[Content]: ...


def bump_version(record, expected_version: int):
    """Copy of `record` as it will be stored by a conditional update."""
    return record.model_copy(update={"version": expected_version + 1}, deep=True)


__all__ = [
    "BoostedKey",
    "DuplicateRecordError",
    "RecordStore",
    "RecordVersionConflict",
    "RegularKey",
    "bump_version",
]
