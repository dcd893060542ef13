import uuid

from django.db import models
from django.utils import timezone

from ..config import INITIAL_EASE
from ..domain.enums import GRADE_CHOICES, STUDY_STATE_CHOICES, StudyState
from ..domain.logic import Progress


class CardProgress(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    card_id = models.UUIDField()
    learning_state = models.CharField(
        max_length=30, choices=STUDY_STATE_CHOICES, default=StudyState.NEW.value
    )
    interval = models.PositiveIntegerField(default=0)  # days
    ease_factor = models.FloatField(default=INITIAL_EASE)
    repetitions = models.PositiveIntegerField(default=0)
    next_review = models.DateTimeField(null=True, blank=True)  # UTC
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "card_progress"
        unique_together = (("user_id", "card_id"),)
        indexes = [
            models.Index(fields=["user_id", "next_review"], name="progress_user_next_idx"),
            models.Index(fields=["user_id", "learning_state"], name="progress_user_state_idx"),
        ]

    def to_progress(self) -> Progress:
        return Progress(
            learning_state=StudyState(self.learning_state),
            interval=self.interval,
            ease_factor=self.ease_factor,
            repetitions=self.repetitions,
            next_review=self.next_review,
        )


class StudyLog(models.Model):
    user_id = models.UUIDField()
    card_id = models.UUIDField()
    grade = models.CharField(max_length=10, choices=GRADE_CHOICES)
    action = models.CharField(max_length=20)
    time_taken_ms = models.PositiveIntegerField(null=True, blank=True)
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "study_logs"
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "card_id", "idempotency_key"],
                condition=models.Q(idempotency_key__isnull=False),
                name="uq_study_log_idempotency",
            ),
        ]
        indexes = [
            models.Index(fields=["user_id", "reviewed_at"], name="studylog_user_time_idx"),
            models.Index(fields=["user_id", "card_id", "reviewed_at"], name="studylog_user_card_time_idx"),
        ]
