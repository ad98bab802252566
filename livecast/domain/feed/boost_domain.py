"""Boost operations on published content."""

from datetime import datetime

from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.domain.live.conditional import REASON_VERSION_CONFLICT, apply_conditionally
from livecast.domain.live.lifecycle_models import Transition
from livecast.schemas import BoostedBy, Content, ContentStatus
from livecast.schemas.content import MAX_BOOST_LEVEL, MIN_BOOST_LEVEL
from livecast.services.record_store.base import RecordStore, RecordVersionConflict
from livecast.shared.utils.timeutil import utc_now
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .boost_models import DEFAULT_ADMIN_BOOST_LEVEL, BoostDuration, BoostResponse

EXPIRE_BATCH_SIZE = 100


def clamp_boost_level(level: int) -> int:
    return max(MIN_BOOST_LEVEL, min(MAX_BOOST_LEVEL, level))


def _cleared(content: Content, now: datetime) -> Content:
    return content.model_copy(
        update={
            "is_boosted": False,
            "boost_level": 0,
            "boosted_at": None,
            "boosted_by": None,
            "boost_expires_at": None,
            "updated_at": now,
        }
    )


class BoostService:
    def __init__(self, store: RecordStore, max_conflict_retries: int | None = None):
        self.store = store
        if max_conflict_retries is None:
            max_conflict_retries = get_app_environ_config().WEBHOOK_MAX_CONFLICT_RETRIES
        self.max_conflict_retries = max_conflict_retries

    async def _update(self, content_id: str, evaluate, label: str) -> Content:
        result = await apply_conditionally(
            lambda: self.store.get_content(content_id),
            evaluate,
            self.store.update_content,
            max_retries=self.max_conflict_retries,
            label=label,
        )
        if result.record is None:
            raise AppError(
                errcode=AppErrorCode.E_CONTENT_NOT_FOUND,
                errmesg=f"Content not found: {content_id}",
                status_code=HttpStatusCode.NOT_FOUND,
            )
        if result.reason == REASON_VERSION_CONFLICT:
            raise RecordVersionConflict("content", content_id, result.record.version)
        return result.record

    @staticmethod
    def _require_published(content: Content):
        if content.status != ContentStatus.PUBLISHED:
            raise AppError(
                errcode=AppErrorCode.E_CONTENT_NOT_PUBLISHED,
                errmesg="Only published content can be boosted",
                status_code=HttpStatusCode.BAD_REQUEST,
            )

    def _boosted(
        self,
        content: Content,
        level: int,
        duration: BoostDuration,
        boosted_by: BoostedBy,
        now: datetime,
    ) -> Content:
        return content.model_copy(
            update={
                "is_boosted": True,
                "boost_level": clamp_boost_level(level),
                "boosted_at": now,
                "boosted_by": boosted_by,
                "boost_expires_at": duration.expires_at(now),
                "updated_at": now,
            }
        )

    async def boost_content(
        self,
        content_id: str,
        creator_id: str,
        level: int,
        duration: BoostDuration = BoostDuration.HOURS_24,
    ) -> BoostResponse:
        """Boost the creator's own published content.

        Raises:
            AppError: E_CONTENT_NOT_FOUND, E_FORBIDDEN, E_CONTENT_NOT_PUBLISHED,
                E_CONTENT_ALREADY_BOOSTED, E_VERSION_CONFLICT
        """

        def evaluate(content: Content) -> Transition[Content]:
            if content.creator_id != creator_id:
                raise AppError(
                    errcode=AppErrorCode.E_FORBIDDEN,
                    errmesg="You can only boost your own content",
                    status_code=HttpStatusCode.FORBIDDEN,
                )
            self._require_published(content)
            now = utc_now()
            if content.is_boost_active(now):
                raise AppError(
                    errcode=AppErrorCode.E_CONTENT_ALREADY_BOOSTED,
                    errmesg="This content is already boosted",
                    status_code=HttpStatusCode.CONFLICT,
                )
            return Transition(
                record=self._boosted(content, level, duration, BoostedBy.CREATOR, now),
                changed=True,
                reason="boosted",
            )

        content = await self._update(content_id, evaluate, f"content(boost, {content_id})")
        logger.info(
            "✅ Content {} boosted by creator {} (level={}, duration={})",
            content_id,
            creator_id,
            content.boost_level,
            duration,
        )
        return BoostResponse.from_content(content)

    async def admin_force_boost(
        self,
        content_id: str,
        admin_id: str,
        level: int = DEFAULT_ADMIN_BOOST_LEVEL,
        duration: BoostDuration = BoostDuration.UNLIMITED,
    ) -> BoostResponse:
        """Boost any published content, replacing an existing boost."""

        def evaluate(content: Content) -> Transition[Content]:
            self._require_published(content)
            return Transition(
                record=self._boosted(content, level, duration, BoostedBy.ADMIN, utc_now()),
                changed=True,
                reason="force_boosted",
            )

        content = await self._update(content_id, evaluate, f"content(force_boost, {content_id})")
        logger.info(
            "✅ Content {} force-boosted by admin {} (level={}, duration={})",
            content_id,
            admin_id,
            content.boost_level,
            duration,
        )
        return BoostResponse.from_content(content)

    async def remove_boost(self, content_id: str, actor_id: str, is_admin: bool = False) -> BoostResponse:
        """Remove a boost; the owner or an admin may do so.

        Raises:
            AppError: E_CONTENT_NOT_FOUND, E_FORBIDDEN, E_CONTENT_NOT_BOOSTED, E_VERSION_CONFLICT
        """

        def evaluate(content: Content) -> Transition[Content]:
            if not is_admin and content.creator_id != actor_id:
                raise AppError(
                    errcode=AppErrorCode.E_FORBIDDEN,
                    errmesg="You can only remove boost from your own content",
                    status_code=HttpStatusCode.FORBIDDEN,
                )
            if not content.is_boosted:
                raise AppError(
                    errcode=AppErrorCode.E_CONTENT_NOT_BOOSTED,
                    errmesg="Content is not boosted",
                    status_code=HttpStatusCode.BAD_REQUEST,
                )
            return Transition(record=_cleared(content, utc_now()), changed=True, reason="unboosted")

        content = await self._update(content_id, evaluate, f"content(remove_boost, {content_id})")
        logger.info("✅ Boost removed from content {} by {}", content_id, actor_id)
        return BoostResponse.from_content(content)

    async def expire_boosts(self, now: datetime | None = None) -> int:
        """Clear boosts whose expiry has passed. Returns how many were cleared.

        The feed already treats expired boosts as regular content, so this only
        tidies stored state; losing a race to another writer skips the item.
        """
        now = now or utc_now()
        expired = await self.store.list_expired_boosts(now, EXPIRE_BATCH_SIZE)
        cleared = 0

        for candidate in expired:

            def evaluate(content: Content) -> Transition[Content]:
                if content.is_boost_active(now) or not content.is_boosted:
                    return Transition.unchanged(content, "boost no longer expired")
                return Transition(record=_cleared(content, now), changed=True, reason="expired")

            result = await apply_conditionally(
                lambda cid=candidate.content_id: self.store.get_content(cid),
                evaluate,
                self.store.update_content,
                max_retries=self.max_conflict_retries,
                label=f"content(expire_boost, {candidate.content_id})",
            )
            if result.applied:
                cleared += 1

        if cleared:
            logger.info("Expired {} boosts", cleared)
        return cleared


__all__ = ["BoostService", "clamp_boost_level"]
