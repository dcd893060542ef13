from rest_framework import serializers

from ..config import INITIAL_EASE
from ..data.models import CardProgress
from ..domain.enums import Grade, LearningState


class ReviewInSerializer(serializers.Serializer):
    grade = serializers.ChoiceField(choices=[g.value for g in Grade])
    timeTakenMs = serializers.IntegerField(
        source="time_taken_ms", min_value=0, required=False, allow_null=True
    )
    idempotencyKey = serializers.CharField(
        source="idempotency_key", max_length=64, required=False, allow_blank=False
    )


class DeckScopeSerializer(serializers.Serializer):
    deckId = serializers.UUIDField(source="deck_id", required=False)


class CardProgressSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source="user_id")
    cardId = serializers.UUIDField(source="card_id")
    learningState = serializers.CharField(source="learning_state")
    nextReview = serializers.DateTimeField(source="next_review")
    easeFactor = serializers.FloatField(source="ease_factor")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = CardProgress
        fields = [
            "id",
            "userId",
            "cardId",
            "learningState",
            "nextReview",
            "interval",
            "easeFactor",
            "repetitions",
            "createdAt",
            "updatedAt",
        ]


def due_entry_data(user_id, entry, card):
    """Due list item; never-reviewed cards appear as an unsaved NEW record."""
    if entry.row is not None:
        data = dict(CardProgressSerializer(entry.row).data)
    else:
        data = {
            "id": None,
            "userId": str(user_id),
            "cardId": str(entry.card_id),
            "learningState": LearningState.NEW.value,
            "nextReview": None,
            "interval": 0,
            "easeFactor": INITIAL_EASE,
            "repetitions": 0,
            "createdAt": None,
            "updatedAt": None,
        }
    data["card"] = card
    return data


def due_summary_data(summary):
    return {
        "totalDueCards": summary.total_due_cards,
        "decksDue": [
            {"deckId": str(d.deck_id), "deckTitle": d.deck_title, "dueCount": d.due_count}
            for d in summary.decks_due
        ],
    }


def mastery_data(stats):
    return {
        "total": stats["total"],
        "newCards": stats["new"],
        "stillLearning": stats["still_learning"],
        "almostDone": stats["almost_done"],
        "mastered": stats["mastered"],
        "newCardsPercentage": stats["new_percentage"],
        "stillLearningPercentage": stats["still_learning_percentage"],
        "almostDonePercentage": stats["almost_done_percentage"],
        "masteredPercentage": stats["mastered_percentage"],
    }
