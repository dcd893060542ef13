"""Read-side queries: what is due, what is new, how well is a deck known.

Card scope (which cards belong to the user, and to which deck) comes from the
deck catalogue; scheduling state comes from the progress store. Reads are not
isolated from concurrent reviews.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Optional

import structlog

from decks.lookup import CardLookup, live_cards, live_decks

from ..data.models import CardProgress
from ..data.repos import progress_by_card
from ..domain.enums import MasteryLevel, StudyState
from ..domain.logic import CardStatus, Seen, Unseen, is_due, status_mastery
from ..errors import NotFound

logger = structlog.get_logger()

PLACEHOLDER_CARD = {
    "term": "Card not found",
    "definition": "This card may have been deleted",
}


@dataclass(frozen=True)
class ScopedCard:
    card_id: object
    deck_id: object
    row: Optional[CardProgress]

    @property
    def status(self) -> CardStatus:
        return Unseen() if self.row is None else Seen(self.row.to_progress())


@dataclass(frozen=True)
class ReviewStats:
    due_count: int
    new_count: int
    reviewing_count: int


@dataclass(frozen=True)
class DeckDue:
    deck_id: object
    deck_title: str
    due_count: int


@dataclass(frozen=True)
class DueSummary:
    total_due_cards: int
    decks_due: list


def scoped_cards(user_id, deck_id=None):
    cards = list(
        live_cards(user_id, deck_id)
        .order_by("deck__title", "deck_id", "position")
        .values_list("id", "deck_id")
    )
    rows = progress_by_card(user_id, [card_id for card_id, _ in cards])
    return [ScopedCard(card_id, d_id, rows.get(card_id)) for card_id, d_id in cards]


def review_stats(user_id, now, deck_id=None) -> ReviewStats:
    scope = scoped_cards(user_id, deck_id)
    return ReviewStats(
        due_count=sum(1 for c in scope if is_due(c.status, now)),
        new_count=sum(1 for c in scope if c.row is None),
        reviewing_count=sum(
            1 for c in scope
            if c.row is not None and c.row.learning_state == StudyState.REVIEWING.value
        ),
    )


def due_cards(user_id, now, deck_id=None):
    """
    Due entries: never-reviewed cards first in deck order, then stored rows
    oldest due first.
    """
    due = [c for c in scoped_cards(user_id, deck_id) if is_due(c.status, now)]
    unseen = [c for c in due if c.row is None]
    seen = sorted(
        (c for c in due if c.row is not None),
        key=lambda c: (c.row.next_review is not None, c.row.next_review or now),
    )
    return unseen + seen


def attach_card(entry: ScopedCard, lookup: CardLookup) -> dict:
    """Card payload for a due entry, or a placeholder if it can't be fetched."""
    try:
        return lookup.card_payload(entry.card_id)
    except NotFound:
        logger.warning("due_card_enrichment_failed", card_id=str(entry.card_id))
        return {"id": str(entry.card_id), **PLACEHOLDER_CARD}


def due_summary(user_id, now) -> DueSummary:
    titles = dict(live_decks(user_id).values_list("id", "title"))
    per_deck = Counter(
        c.deck_id for c in scoped_cards(user_id) if is_due(c.status, now)
    )
    decks_due = [
        DeckDue(deck_id=d_id, deck_title=title, due_count=per_deck[d_id])
        for d_id, title in titles.items()
        if per_deck[d_id] > 0
    ]
    # stable: ties keep deck title order
    decks_due.sort(key=lambda d: d.due_count, reverse=True)

    summary = DueSummary(
        total_due_cards=sum(d.due_count for d in decks_due),
        decks_due=decks_due,
    )
    logger.info("due_summary",
        user_id=str(user_id),
        total_due_cards=summary.total_due_cards,
        deck_count=len(decks_due),
    )
    return summary


def mastery_stats(user_id, deck_id=None) -> dict:
    levels = Counter(status_mastery(c.status) for c in scoped_cards(user_id, deck_id))
    total = sum(levels.values())

    def pct(level):
        return levels[level] * 100.0 / total if total else 0.0

    stats = {"total": total}
    for level in MasteryLevel:
        stats[level.value] = levels[level]
        stats[f"{level.value}_percentage"] = pct(level)

    logger.info("mastery_levels",
        user_id=str(user_id),
        deck_id=str(deck_id) if deck_id else None,
        **{level.value: levels[level] for level in MasteryLevel},
    )
    return stats
