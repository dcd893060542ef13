from dataclasses import dataclass

import structlog
from django.db import transaction

from ..config import REVIEW_ACTION, REVIEW_MAX_ATTEMPTS
from ..data.models import CardProgress
from ..data.repos import (
    append_log,
    compare_and_swap,
    get_existing_idempotent,
    get_progress,
    get_progress_for_update,
    insert_progress,
)
from ..domain.enums import Grade
from ..domain.logic import Seen, Unseen, schedule
from ..errors import ConcurrencyConflict, InvalidArgument, NotFound
from ..utils import time as clock

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReviewResult:
    progress: CardProgress
    replayed: bool


def record_review(user_id, card_id, grade, *, time_taken_ms=None, idempotency_key=None, now=None):
    """
    Apply one graded review to (user, card) and persist the new progress plus a
    StudyLog row, both or neither. The caller has already verified that the
    user may review the card.
    """
    if not isinstance(grade, Grade):
        raise InvalidArgument(f"Invalid grade: {grade!r}")

    logger.info("review_received",
        user_id=str(user_id),
        card_id=str(card_id),
        grade=grade.value,
        idempotency_key=idempotency_key,
    )

    # Fast path: return previous result if same idempotency_key
    replay = _replay(user_id, card_id, idempotency_key)
    if replay:
        return replay

    for attempt in range(1, REVIEW_MAX_ATTEMPTS + 1):
        try:
            row = _apply_review(user_id, card_id, grade, time_taken_ms, idempotency_key, now)
            break
        except ConcurrencyConflict:
            if attempt == REVIEW_MAX_ATTEMPTS:
                logger.warning("review_conflict",
                    user_id=str(user_id),
                    card_id=str(card_id),
                    attempts=attempt,
                )
                raise
            logger.info("review_conflict_retry",
                user_id=str(user_id),
                card_id=str(card_id),
                attempt=attempt,
            )
            # The racing request may have carried the same key
            replay = _replay(user_id, card_id, idempotency_key)
            if replay:
                return replay

    logger.info("review_scheduled",
        user_id=str(user_id),
        card_id=str(card_id),
        learning_state=row.learning_state,
        interval_days=row.interval,
        ease_factor=row.ease_factor,
        repetitions=row.repetitions,
        next_review_utc=row.next_review.isoformat(),
    )
    return ReviewResult(progress=row, replayed=False)


def _apply_review(user_id, card_id, grade, time_taken_ms, idempotency_key, now):
    with transaction.atomic():
        # Serialize schedule update per (user, card)
        row = get_progress_for_update(user_id, card_id)
        status = Unseen() if row is None else Seen(row.to_progress())

        review_time = now or clock.now()
        nxt = schedule(status.progress, grade, review_time)

        if row is None:
            row = insert_progress(user_id, card_id, nxt, review_time)
        else:
            row = compare_and_swap(row, nxt, review_time)

        append_log(
            user_id, card_id, grade, REVIEW_ACTION, review_time,
            time_taken_ms=time_taken_ms, idem_key=idempotency_key,
        )
    return row


def _replay(user_id, card_id, idempotency_key):
    existing = get_existing_idempotent(user_id, card_id, idempotency_key)
    if not existing:
        return None
    row = get_progress(user_id, card_id)
    logger.info("idempotent_reuse",
        user_id=str(user_id),
        card_id=str(card_id),
        reviewed_at=existing.reviewed_at.isoformat(),
        next_review_utc=row.next_review.isoformat(),
    )
    return ReviewResult(progress=row, replayed=True)


def get_card_progress(user_id, card_id) -> CardProgress:
    row = get_progress(user_id, card_id)
    if row is None:
        logger.warning("card_progress_not_found", user_id=str(user_id), card_id=str(card_id))
        raise NotFound("Card progress not found")
    return row
