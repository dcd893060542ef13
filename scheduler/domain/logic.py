"""SM-2 scheduling and card classification.

Everything here is pure: no database access and no clock. Callers pass the
review time in explicitly.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional, Union

from ..config import (
    AGAIN_EASE_PENALTY,
    ALMOST_DONE_INTERVAL,
    EASY_BONUS,
    EASY_EASE_BONUS,
    HARD_EASE_PENALTY,
    HARD_MULTIPLIER,
    INITIAL_EASE,
    MASTERED_INTERVAL,
    MAX_INTERVAL,
    MIN_EASE,
    MIN_INTERVAL,
)
from ..errors import InvalidArgument
from .enums import Grade, LearningState, MasteryLevel, StudyState


@dataclass(frozen=True)
class Progress:
    learning_state: Union[LearningState, StudyState]
    interval: int
    ease_factor: float
    repetitions: int
    next_review: Optional[datetime] = None


SEED = Progress(
    learning_state=LearningState.NEW,
    interval=0,
    ease_factor=INITIAL_EASE,
    repetitions=0,
    next_review=None,
)


@dataclass(frozen=True)
class Unseen:
    """A card the user has never reviewed; nothing is stored for it."""

    @property
    def progress(self) -> Progress:
        return SEED


@dataclass(frozen=True)
class Seen:
    progress: Progress


CardStatus = Union[Unseen, Seen]


def _grow(interval: int, factor: float) -> int:
    # round first so float noise (e.g. 10 * 1.2) can't add a day
    grown = math.ceil(round(interval * factor, 9))
    return min(MAX_INTERVAL, max(MIN_INTERVAL, grown))


def schedule(progress: Progress, grade: Grade, now: datetime) -> Progress:
    """Apply one graded review to ``progress`` and return the next state.

    The incoming learning state is ignored: the transition depends only on
    interval, ease factor and repetitions.
    """
    if not isinstance(grade, Grade):
        raise InvalidArgument(f"Invalid grade: {grade!r}")

    ef = progress.ease_factor
    iv = progress.interval
    reps = progress.repetitions

    if grade is Grade.AGAIN:
        # failure always collapses to the minimum, whatever the history
        nxt = Progress(
            learning_state=LearningState.RELEARNING,
            interval=MIN_INTERVAL,
            ease_factor=max(MIN_EASE, ef - AGAIN_EASE_PENALTY),
            repetitions=0,
        )
    elif grade is Grade.HARD:
        nxt = Progress(
            learning_state=LearningState.REVIEWING,
            interval=_grow(iv, HARD_MULTIPLIER),
            ease_factor=max(MIN_EASE, ef - HARD_EASE_PENALTY),
            repetitions=reps + 1,
        )
    elif grade is Grade.GOOD:
        nxt = Progress(
            learning_state=LearningState.REVIEWING,
            interval=MIN_INTERVAL if iv == 0 else _grow(iv, ef),
            ease_factor=ef,
            repetitions=reps + 1,
        )
    else:
        nxt = Progress(
            learning_state=LearningState.REVIEWING,
            interval=2 * MIN_INTERVAL if iv == 0 else _grow(iv, ef * EASY_BONUS),
            ease_factor=ef + EASY_EASE_BONUS,
            repetitions=reps + 1,
        )

    return replace(nxt, next_review=now + timedelta(days=nxt.interval))


def is_due(status: CardStatus, now: datetime) -> bool:
    if isinstance(status, Unseen):
        return True
    next_review = status.progress.next_review
    return next_review is None or next_review <= now


def classify_mastery(learning_state, interval) -> MasteryLevel:
    """Mastery level from ``(learning_state, interval)`` alone.

    ``learning_state`` may be None for a card without stored progress.
    """
    if learning_state is None:
        return MasteryLevel.NEW
    state = StudyState(getattr(learning_state, "value", learning_state))
    if state is StudyState.NEW:
        return MasteryLevel.NEW
    if state is not StudyState.REVIEWING:
        return MasteryLevel.STILL_LEARNING
    if interval is not None and interval >= MASTERED_INTERVAL:
        return MasteryLevel.MASTERED
    if interval is not None and interval >= ALMOST_DONE_INTERVAL:
        return MasteryLevel.ALMOST_DONE
    return MasteryLevel.STILL_LEARNING


def status_mastery(status: CardStatus) -> MasteryLevel:
    if isinstance(status, Unseen):
        return MasteryLevel.NEW
    return classify_mastery(status.progress.learning_state, status.progress.interval)
