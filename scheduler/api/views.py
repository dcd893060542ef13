import uuid

import structlog
from rest_framework import views
from rest_framework.response import Response

from decks.lookup import CardLookup

from ..data.repos import progress_for_user
from ..domain.enums import Grade
from ..services.activity import activity_summary
from ..services.due import attach_card, due_cards, due_summary, mastery_stats, review_stats
from ..services.reviews import get_card_progress, record_review
from ..utils import time as clock
from .serializers import (
    CardProgressSerializer,
    DeckScopeSerializer,
    ReviewInSerializer,
    due_entry_data,
    due_summary_data,
    mastery_data,
)

base_logger = structlog.get_logger()


def _request_logger(request):
    # Create a unique request_id
    return base_logger.bind(request_id=str(uuid.uuid4()), user_id=str(request.user.id))


def _deck_scope(request):
    qs = DeckScopeSerializer(data=request.query_params)
    qs.is_valid(raise_exception=True)
    return qs.validated_data.get("deck_id")


class ReviewView(views.APIView):
    lookup = CardLookup()

    def post(self, request, card_id):
        logger = _request_logger(request)

        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        grade = Grade(s.validated_data["grade"])

        self.lookup.ensure_reviewable(request.user.id, card_id)
        result = record_review(
            request.user.id,
            card_id,
            grade,
            time_taken_ms=s.validated_data.get("time_taken_ms"),
            idempotency_key=s.validated_data.get("idempotency_key"),
        )
        progress = result.progress

        logger.info(
            "review_api_response",
            card_id=str(card_id),
            grade=grade.value,
            idempotent=result.replayed,
            learning_state=progress.learning_state,
            interval_days=progress.interval,
            next_review_utc=progress.next_review.isoformat(),
            next_review_local=clock.to_local_iso(progress.next_review),
        )

        data = CardProgressSerializer(progress).data
        data["idempotent"] = result.replayed
        return Response(data)


class CardProgressView(views.APIView):
    def get(self, request, card_id):
        progress = get_card_progress(request.user.id, card_id)
        return Response(CardProgressSerializer(progress).data)


class DueCardsView(views.APIView):
    lookup = CardLookup()

    def get(self, request):
        logger = _request_logger(request)
        deck_id = _deck_scope(request)

        entries = due_cards(request.user.id, clock.now(), deck_id=deck_id)
        results = [
            due_entry_data(request.user.id, entry, attach_card(entry, self.lookup))
            for entry in entries
        ]

        logger.info(
            "due_cards_api_response",
            deck_id=str(deck_id) if deck_id else None,
            card_count=len(results),
        )
        return Response(results)


class ReviewStatsView(views.APIView):
    def get(self, request):
        stats = review_stats(request.user.id, clock.now(), deck_id=_deck_scope(request))
        return Response(
            {
                "dueCount": stats.due_count,
                "newCount": stats.new_count,
                "reviewingCount": stats.reviewing_count,
            }
        )


class AllProgressView(views.APIView):
    def get(self, request):
        rows = progress_for_user(request.user.id).order_by("created_at")
        return Response(CardProgressSerializer(rows, many=True).data)


class MasteryView(views.APIView):
    def get(self, request):
        stats = mastery_stats(request.user.id, deck_id=_deck_scope(request))
        return Response(mastery_data(stats))


class ActivityView(views.APIView):
    def get(self, request):
        summary = activity_summary(request.user.id, clock.now())
        return Response(
            {
                "streak": summary["streak"],
                "totalCardsStudied": summary["total_cards_studied"],
                "heatmap": summary["heatmap"],
            }
        )


class DueSummaryView(views.APIView):
    def get(self, request):
        logger = _request_logger(request)
        summary = due_summary(request.user.id, clock.now())
        logger.info("due_summary_api_response", total_due_cards=summary.total_due_cards)
        return Response(due_summary_data(summary))
