import logging
from datetime import timedelta

import pytest
from django.db import transaction

from scheduler.data import repos
from scheduler.data.models import CardProgress, StudyLog
from scheduler.domain.enums import Grade, LearningState
from scheduler.domain.logic import schedule, SEED
from scheduler.errors import ConcurrencyConflict, InvalidArgument, NotFound
from scheduler.services import reviews
from scheduler.services.reviews import get_card_progress, record_review

logger = logging.getLogger(__name__)


def flaky_cas(fail_times):
    """compare_and_swap that loses the race ``fail_times`` times first."""
    calls = {"n": 0}
    real = repos.compare_and_swap

    def _cas(row, progress, now):
        calls["n"] += 1
        if calls["n"] <= fail_times:
            raise ConcurrencyConflict()
        return real(row, progress, now)

    return _cas, calls


@pytest.mark.django_db
def test_first_review_creates_progress_and_log(user, card, now):
    result = record_review(user.id, card.id, Grade.GOOD, time_taken_ms=1500, now=now)
    row = result.progress

    assert result.replayed is False
    assert row.learning_state == LearningState.REVIEWING.value
    assert row.interval == 1
    assert row.repetitions == 1
    assert row.ease_factor == pytest.approx(2.5)
    assert row.next_review == now + timedelta(days=1)
    assert row.version == 1

    log = StudyLog.objects.get(user_id=user.id, card_id=card.id)
    assert log.grade == "GOOD"
    assert log.action == "REVIEW"
    assert log.time_taken_ms == 1500
    assert log.reviewed_at == now
    logger.info("✓ Passed: first review persisted progress and log")


@pytest.mark.django_db
def test_second_review_updates_same_row(user, card, now):
    record_review(user.id, card.id, Grade.GOOD, now=now)
    row = record_review(user.id, card.id, Grade.GOOD, now=now + timedelta(days=1)).progress

    assert CardProgress.objects.filter(user_id=user.id, card_id=card.id).count() == 1
    assert StudyLog.objects.filter(user_id=user.id, card_id=card.id).count() == 2
    assert row.interval == 3
    assert row.repetitions == 2
    assert row.version == 2
    assert row.next_review == now + timedelta(days=4)

    stored = CardProgress.objects.get(pk=row.pk)
    assert (stored.interval, stored.repetitions, stored.version) == (3, 2, 2)


@pytest.mark.django_db
def test_again_after_progress_resets(user, card, now):
    for grade in (Grade.GOOD, Grade.GOOD, Grade.EASY):
        record_review(user.id, card.id, grade, now=now)
    row = record_review(user.id, card.id, Grade.AGAIN, now=now).progress

    assert row.learning_state == LearningState.RELEARNING.value
    assert row.repetitions == 0
    assert row.interval == 1
    assert row.ease_factor == pytest.approx(2.45)


@pytest.mark.django_db
def test_stored_state_matches_pure_schedule(user, card, now):
    """The orchestrator persists exactly what the scheduler computes."""
    expected = schedule(schedule(SEED, Grade.EASY, now), Grade.HARD, now)

    record_review(user.id, card.id, Grade.EASY, now=now)
    row = record_review(user.id, card.id, Grade.HARD, now=now).progress

    assert row.to_progress().interval == expected.interval
    assert row.ease_factor == pytest.approx(expected.ease_factor)
    assert row.next_review == expected.next_review


@pytest.mark.django_db
def test_invalid_grade_writes_nothing(user, card, now):
    with pytest.raises(InvalidArgument):
        record_review(user.id, card.id, "GOOD", now=now)

    assert not CardProgress.objects.exists()
    assert not StudyLog.objects.exists()


@pytest.mark.django_db
def test_review_is_all_or_nothing(user, card, now, monkeypatch):
    """A failure while logging must roll back the progress write."""
    def boom(*args, **kwargs):
        raise RuntimeError("log store down")

    monkeypatch.setattr(reviews, "append_log", boom)

    with pytest.raises(RuntimeError):
        record_review(user.id, card.id, Grade.GOOD, now=now)

    assert not CardProgress.objects.exists()
    assert not StudyLog.objects.exists()


@pytest.mark.django_db
def test_idempotency_key_replays(user, card, now):
    first = record_review(user.id, card.id, Grade.EASY, idempotency_key="idem-1", now=now)
    second = record_review(
        user.id, card.id, Grade.EASY, idempotency_key="idem-1", now=now + timedelta(hours=1)
    )

    assert first.replayed is False
    assert second.replayed is True
    assert second.progress.next_review == first.progress.next_review
    assert second.progress.repetitions == 1
    assert StudyLog.objects.count() == 1

    third = record_review(user.id, card.id, Grade.EASY, idempotency_key="idem-2", now=now)
    assert third.replayed is False
    assert third.progress.repetitions == 2
    logger.info("✓ Passed: idempotency handled correctly")


@pytest.mark.django_db
def test_conflict_is_retried_once(user, card, now, monkeypatch):
    record_review(user.id, card.id, Grade.GOOD, now=now)
    cas, calls = flaky_cas(fail_times=1)
    monkeypatch.setattr(reviews, "compare_and_swap", cas)

    row = record_review(user.id, card.id, Grade.GOOD, now=now).progress

    assert calls["n"] == 2
    assert row.interval == 3
    assert StudyLog.objects.count() == 2


@pytest.mark.django_db
def test_repeated_conflict_surfaces(user, card, now, monkeypatch):
    record_review(user.id, card.id, Grade.GOOD, now=now)
    cas, calls = flaky_cas(fail_times=5)
    monkeypatch.setattr(reviews, "compare_and_swap", cas)

    with pytest.raises(ConcurrencyConflict):
        record_review(user.id, card.id, Grade.EASY, now=now)

    assert calls["n"] == 2
    stored = CardProgress.objects.get(user_id=user.id, card_id=card.id)
    assert (stored.interval, stored.repetitions) == (1, 1)
    assert StudyLog.objects.count() == 1


@pytest.mark.django_db
def test_stale_version_loses(user, card, now):
    """Two readers of the same version: only the first write lands."""
    record_review(user.id, card.id, Grade.GOOD, now=now)
    reader_a = CardProgress.objects.get(user_id=user.id, card_id=card.id)
    reader_b = CardProgress.objects.get(user_id=user.id, card_id=card.id)

    nxt = schedule(reader_a.to_progress(), Grade.GOOD, now)
    repos.compare_and_swap(reader_a, nxt, now)

    with pytest.raises(ConcurrencyConflict):
        repos.compare_and_swap(reader_b, nxt, now)

    assert CardProgress.objects.get(pk=reader_a.pk).version == 2


@pytest.mark.django_db
def test_duplicate_first_insert_conflicts(user, card, now):
    nxt = schedule(SEED, Grade.GOOD, now)
    repos.insert_progress(user.id, card.id, nxt, now)

    with pytest.raises(ConcurrencyConflict):
        with transaction.atomic():
            repos.insert_progress(user.id, card.id, nxt, now)

    assert CardProgress.objects.count() == 1


@pytest.mark.django_db
def test_reviews_of_other_users_are_independent(user, other_user, card, now):
    record_review(user.id, card.id, Grade.EASY, now=now)
    row = record_review(other_user.id, card.id, Grade.AGAIN, now=now).progress

    assert row.learning_state == LearningState.RELEARNING.value
    assert get_card_progress(user.id, card.id).learning_state == LearningState.REVIEWING.value


@pytest.mark.django_db
def test_get_card_progress_not_found(user, card):
    with pytest.raises(NotFound):
        get_card_progress(user.id, card.id)
