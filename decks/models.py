import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Deck(models.Model):
    """
    Read-only view of the deck catalogue. Decks and cards are owned and edited
    elsewhere; the review engine only needs ownership and soft-delete flags.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="decks"
    )
    title = models.CharField(max_length=255)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return self.title


class Card(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE, related_name="cards")
    term = models.TextField()
    definition = models.TextField()
    position = models.PositiveIntegerField(default=0)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=["deck", "position"], name="card_deck_position_idx"),
        ]

    def __str__(self):
        return self.term
