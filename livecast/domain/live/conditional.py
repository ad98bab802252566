"""Read, evaluate, conditionally write, and re-evaluate once on a lost race."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from loguru import logger

from livecast.services.record_store.base import RecordVersionConflict

from .lifecycle_models import Transition

R = TypeVar("R")

REASON_NOT_FOUND = "not_found"
REASON_VERSION_CONFLICT = "version_conflict"


@dataclass(frozen=True)
class ConditionalResult(Generic[R]):
    record: R | None
    applied: bool
    reason: str
    transition: Transition[R] | None = None

    @property
    def materialize(self) -> bool:
        return self.applied and self.transition is not None and self.transition.materialize


async def apply_conditionally(
    load: Callable[[], Awaitable[R | None]],
    evaluate: Callable[[R], Transition[R]],
    persist: Callable[[R, int], Awaitable[R]],
    *,
    max_retries: int,
    label: str,
) -> ConditionalResult[R]:
    """
    Apply a pure transition with optimistic locking.

    `persist(next_record, expected_version)` must raise RecordVersionConflict when
    the stored version moved. On conflict the record is re-read and the transition
    re-evaluated, so a competing writer that already applied the same event turns
    this call into a no-op. After `max_retries` re-reads the write is dropped with
    a warning.
    """
    attempts = 0
    while True:
        current = await load()
        if current is None:
            return ConditionalResult(record=None, applied=False, reason=REASON_NOT_FOUND)

        transition = evaluate(current)
        if not transition.changed:
            return ConditionalResult(
                record=current, applied=False, reason=transition.reason, transition=transition
            )

        try:
            stored = await persist(transition.record, current.version)  # type: ignore[attr-defined]
        except RecordVersionConflict as e:
            if attempts >= max_retries:
                logger.warning(
                    "⚠️ Dropping {} update after {} retries: {}", label, attempts, e.errmesg
                )
                return ConditionalResult(
                    record=current,
                    applied=False,
                    reason=REASON_VERSION_CONFLICT,
                    transition=transition,
                )
            attempts += 1
            logger.debug("{} version conflict, re-evaluating (attempt {}/{})", label, attempts, max_retries)
            continue

        return ConditionalResult(record=stored, applied=True, reason=transition.reason, transition=transition)


__all__ = ["REASON_NOT_FOUND", "REASON_VERSION_CONFLICT", "ConditionalResult", "apply_conditionally"]
