from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import structlog

from scheduler.errors import NotFound, Unauthorized

from .models import Card, Deck

logger = structlog.get_logger()

CARD_NOT_FOUND = "Card not found"


@dataclass(frozen=True)
class CardInfo:
    exists: bool
    deleted: bool = False
    deck_id: Optional[UUID] = None
    deck_owner_id: Optional[UUID] = None


class CardLookup:
    """Card existence and ownership checks run before a review is recorded."""

    def verify(self, user_id, card_id) -> CardInfo:
        card = Card.objects.select_related("deck").filter(pk=card_id).first()
        if card is None:
            return CardInfo(exists=False)
        return CardInfo(
            exists=True,
            deleted=card.is_deleted or card.deck.is_deleted,
            deck_id=card.deck_id,
            deck_owner_id=card.deck.owner_id,
        )

    def ensure_reviewable(self, user_id, card_id) -> CardInfo:
        info = self.verify(user_id, card_id)
        if not info.exists or info.deleted:
            logger.warning("card_not_reviewable",
                user_id=str(user_id),
                card_id=str(card_id),
                exists=info.exists,
                deleted=info.deleted,
            )
            raise NotFound(CARD_NOT_FOUND)
        if info.deck_owner_id != user_id:
            logger.warning("card_unauthorized",
                user_id=str(user_id),
                card_id=str(card_id),
                deck_owner_id=str(info.deck_owner_id),
            )
            raise Unauthorized()
        return info

    def card_payload(self, card_id) -> dict:
        card = Card.objects.filter(pk=card_id, is_deleted=False, deck__is_deleted=False).first()
        if card is None:
            raise NotFound(CARD_NOT_FOUND)
        return {
            "id": str(card.id),
            "deckId": str(card.deck_id),
            "term": card.term,
            "definition": card.definition,
        }


def live_decks(user_id, deck_id=None):
    qs = Deck.objects.filter(owner_id=user_id, is_deleted=False)
    if deck_id is not None:
        qs = qs.filter(pk=deck_id)
    return qs


def live_cards(user_id, deck_id=None):
    """Cards the user can study: not deleted, in one of their live decks."""
    qs = Card.objects.filter(
        deck__owner_id=user_id, deck__is_deleted=False, is_deleted=False
    )
    if deck_id is not None:
        qs = qs.filter(deck_id=deck_id)
    return qs
