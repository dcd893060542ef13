from datetime import datetime, timezone

import pytest

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def user(db, django_user_model):
    return django_user_model.objects.create_user(username="learner")


@pytest.fixture
def other_user(db, django_user_model):
    return django_user_model.objects.create_user(username="someone-else")


@pytest.fixture
def make_deck(db):
    from decks.models import Card, Deck

    def _make(owner, title="Deck", n_cards=3, **kwargs):
        deck = Deck.objects.create(owner=owner, title=title, **kwargs)
        for i in range(n_cards):
            Card.objects.create(deck=deck, term=f"{title} term {i}", definition=f"def {i}", position=i)
        return deck
    return _make


@pytest.fixture
def deck(user, make_deck):
    return make_deck(user, title="Spanish")


@pytest.fixture
def card(deck):
    return deck.cards.order_by("position").first()


@pytest.fixture
def api(user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(HTTP_X_USER_NAME=user.username)
    return client
