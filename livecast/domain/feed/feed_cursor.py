"""Opaque feed cursor codec.

A cursor is the url-safe base64 (unpadded) of a compact JSON document naming
the segment and the sort key of the last item served:

    {"s": "b", "k": [boost_level, boosted_at], "i": content_id}
    {"s": "r", "k": [created_at], "i": content_id}
"""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ValidationError

from livecast.services.record_store.base import BoostedKey, RegularKey
from livecast.shared.utils.timeutil import ensure_utc
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .feed_models import FeedSegment


@dataclass(frozen=True)
class FeedPosition:
    segment: FeedSegment
    boosted: BoostedKey | None = None
    regular: RegularKey | None = None

    def __post_init__(self):
        if self.segment == FeedSegment.BOOSTED and self.boosted is None:
            raise ValueError("boosted position requires a boosted key")
        if self.segment == FeedSegment.REGULAR and self.regular is None:
            raise ValueError("regular position requires a regular key")

    @property
    def content_id(self) -> str:
        key = self.boosted if self.segment == FeedSegment.BOOSTED else self.regular
        return key.content_id  # type: ignore[union-attr]


class _CursorPayload(BaseModel):
    s: Literal["b", "r"]
    k: list[Any]
    i: str


def _invalid(reason: str) -> AppError:
    return AppError(
        errcode=AppErrorCode.E_INVALID_CURSOR,
        errmesg=f"Invalid feed cursor: {reason}",
        status_code=HttpStatusCode.BAD_REQUEST,
    )


def _parse_time(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError("timestamp must be a string")
    return ensure_utc(datetime.fromisoformat(value))  # type: ignore[return-value]


def encode_cursor(position: FeedPosition) -> str:
    if position.segment == FeedSegment.BOOSTED:
        boosted = position.boosted
        if boosted is None:
            raise _invalid("boosted position without a key")
        payload = {"s": "b", "k": [boosted.boost_level, boosted.boosted_at.isoformat()], "i": boosted.content_id}
    else:
        key = position.regular
        if key is None:
            raise _invalid("regular position without a key")
        payload = {"s": "r", "k": [key.created_at.isoformat()], "i": key.content_id}

    return base64.urlsafe_b64encode(orjson.dumps(payload)).rstrip(b"=").decode("ascii")


def decode_cursor(cursor: str) -> FeedPosition:
    """
    Decode a cursor produced by encode_cursor.

    Raises:
        AppError: E_INVALID_CURSOR (400) for anything malformed
    """
    try:
        raw = base64.urlsafe_b64decode(cursor + "=" * (-len(cursor) % 4))
        payload = _CursorPayload.model_validate(orjson.loads(raw))
    except (binascii.Error, ValueError, orjson.JSONDecodeError, ValidationError) as e:
        raise _invalid("undecodable") from e

    if not payload.i:
        raise _invalid("missing content id")

    try:
        if payload.s == FeedSegment.BOOSTED.value:
            if len(payload.k) != 2 or not isinstance(payload.k[0], int) or isinstance(payload.k[0], bool):
                raise ValueError("boosted key must be [level, boosted_at]")
            key = BoostedKey(boost_level=payload.k[0], boosted_at=_parse_time(payload.k[1]), content_id=payload.i)
            return FeedPosition(segment=FeedSegment.BOOSTED, boosted=key)

        if len(payload.k) != 1:
            raise ValueError("regular key must be [created_at]")
        key = RegularKey(created_at=_parse_time(payload.k[0]), content_id=payload.i)
        return FeedPosition(segment=FeedSegment.REGULAR, regular=key)
    except ValueError as e:
        raise _invalid(str(e)) from e


__all__ = ["FeedPosition", "decode_cursor", "encode_cursor"]
