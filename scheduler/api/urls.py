from django.urls import path

from .views import (
    ActivityView,
    AllProgressView,
    CardProgressView,
    DueCardsView,
    DueSummaryView,
    MasteryView,
    ReviewStatsView,
    ReviewView,
)

urlpatterns = [
    path("cards/due/summary", DueSummaryView.as_view(), name="due-summary"),
    path("cards/<uuid:card_id>/review", ReviewView.as_view(), name="card-review"),
    path("cards/<uuid:card_id>/progress", CardProgressView.as_view(), name="card-progress"),
    path("reviews/due", DueCardsView.as_view(), name="reviews-due"),
    path("reviews/stats", ReviewStatsView.as_view(), name="reviews-stats"),
    path("reviews/progress", AllProgressView.as_view(), name="reviews-progress"),
    path("reviews/mastery", MasteryView.as_view(), name="reviews-mastery"),
    path("reviews/activity", ActivityView.as_view(), name="reviews-activity"),
]
