from django.db import IntegrityError
from django.db.models import F, Q

from ..domain.logic import Progress
from ..errors import ConcurrencyConflict
from .models import CardProgress, StudyLog


def get_progress(user_id, card_id):
    return CardProgress.objects.filter(user_id=user_id, card_id=card_id).first()


def get_progress_for_update(user_id, card_id):
    """
    Fetch the progress row and lock it until the surrounding transaction ends.
    Returns None for a card that was never reviewed. Must be called inside
    ``transaction.atomic()``.
    """
    return (
        CardProgress.objects.select_for_update()
        .filter(user_id=user_id, card_id=card_id)
        .first()
    )


def insert_progress(user_id, card_id, progress: Progress, now):
    """
    First review of a card. A concurrent first review trips the unique
    (user_id, card_id) constraint.
    """
    try:
        return CardProgress.objects.create(
            user_id=user_id,
            card_id=card_id,
            learning_state=progress.learning_state.value,
            interval=progress.interval,
            ease_factor=progress.ease_factor,
            repetitions=progress.repetitions,
            next_review=progress.next_review,
            version=1,
            created_at=now,
            updated_at=now,
        )
    except IntegrityError as exc:
        raise ConcurrencyConflict() from exc


def compare_and_swap(row: CardProgress, progress: Progress, now):
    """
    Write ``progress`` over ``row`` only if nobody has written it since it was
    read. Raises ConcurrencyConflict when the stored version moved on.
    """
    fields = dict(
        learning_state=progress.learning_state.value,
        interval=progress.interval,
        ease_factor=progress.ease_factor,
        repetitions=progress.repetitions,
        next_review=progress.next_review,
        updated_at=now,
    )
    updated = CardProgress.objects.filter(pk=row.pk, version=row.version).update(
        version=F("version") + 1, **fields
    )
    if updated != 1:
        raise ConcurrencyConflict()

    for name, value in fields.items():
        setattr(row, name, value)
    row.version += 1
    return row


def get_existing_idempotent(user_id, card_id, idem_key):
    if not idem_key:
        return None
    return StudyLog.objects.filter(
        user_id=user_id, card_id=card_id, idempotency_key=idem_key
    ).first()


def append_log(user_id, card_id, grade, action, reviewed_at, time_taken_ms=None, idem_key=None):
    """
    Insert a StudyLog row. A duplicate idempotency key means a concurrent
    request with the same key won the race.
    """
    try:
        return StudyLog.objects.create(
            user_id=user_id,
            card_id=card_id,
            grade=grade.value,
            action=action,
            time_taken_ms=time_taken_ms,
            idempotency_key=idem_key or None,
            reviewed_at=reviewed_at,
        )
    except IntegrityError as exc:
        raise ConcurrencyConflict() from exc


def progress_for_user(user_id, card_ids=None):
    qs = CardProgress.objects.filter(user_id=user_id)
    if card_ids is not None:
        qs = qs.filter(card_id__in=list(card_ids))
    return qs


def progress_by_card(user_id, card_ids):
    return {row.card_id: row for row in progress_for_user(user_id, card_ids)}


def due_progress(user_id, now, card_ids=None):
    """Stored rows due at ``now``, oldest first."""
    return (
        progress_for_user(user_id, card_ids)
        .filter(Q(next_review__lte=now) | Q(next_review__isnull=True))
        .order_by(F("next_review").asc(nulls_first=True))
    )


def logs_for_user(user_id, since=None):
    qs = StudyLog.objects.filter(user_id=user_id)
    if since is not None:
        qs = qs.filter(reviewed_at__gte=since)
    return qs.order_by("-reviewed_at")
