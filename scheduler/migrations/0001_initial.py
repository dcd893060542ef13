import django.utils.timezone
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CardProgress",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.UUIDField()),
                ("card_id", models.UUIDField()),
                ("learning_state", models.CharField(choices=[("NEW", "New"), ("LEARNING_MCQ", "Learning Mcq"), ("LEARNING_TYPING", "Learning Typing"), ("REVIEWING", "Reviewing"), ("RELEARNING", "Relearning")], default="NEW", max_length=30)),
                ("interval", models.PositiveIntegerField(default=0)),
                ("ease_factor", models.FloatField(default=2.5)),
                ("repetitions", models.PositiveIntegerField(default=0)),
                ("next_review", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "card_progress",
                "indexes": [
                    models.Index(fields=["user_id", "next_review"], name="progress_user_next_idx"),
                    models.Index(fields=["user_id", "learning_state"], name="progress_user_state_idx"),
                ],
                "unique_together": {("user_id", "card_id")},
            },
        ),
        migrations.CreateModel(
            name="StudyLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.UUIDField()),
                ("card_id", models.UUIDField()),
                ("grade", models.CharField(choices=[("AGAIN", "Again"), ("HARD", "Hard"), ("GOOD", "Good"), ("EASY", "Easy")], max_length=10)),
                ("action", models.CharField(max_length=20)),
                ("time_taken_ms", models.PositiveIntegerField(blank=True, null=True)),
                ("idempotency_key", models.CharField(blank=True, max_length=64, null=True)),
                ("reviewed_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "study_logs",
                "indexes": [
                    models.Index(fields=["user_id", "reviewed_at"], name="studylog_user_time_idx"),
                    models.Index(fields=["user_id", "card_id", "reviewed_at"], name="studylog_user_card_time_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("idempotency_key__isnull", False)), fields=("user_id", "card_id", "idempotency_key"), name="uq_study_log_idempotency"),
                ],
            },
        ),
    ]
