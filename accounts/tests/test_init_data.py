import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import User
from decks.models import Card, Deck
from scheduler.data.models import CardProgress, StudyLog
from scheduler.domain.enums import Grade
from scheduler.services.reviews import record_review


@pytest.mark.django_db
def test_init_data_loads_mock_users_and_decks():
    call_command("init_data")

    assert set(User.objects.values_list("username", flat=True)) == {
        "testuser", "testuser1", "testuser2",
    }
    owner = User.objects.get(username="testuser")
    assert list(Deck.objects.filter(owner=owner).values_list("title", flat=True)) == [
        "Chemistry symbols", "Spanish basics",
    ]
    assert Card.objects.count() == 10


@pytest.mark.django_db
def test_init_data_replaces_review_history():
    call_command("init_data")
    owner = User.objects.get(username="testuser")
    record_review(owner.id, Card.objects.filter(deck__owner=owner).first().id, Grade.GOOD)

    call_command("init_data")

    assert not CardProgress.objects.exists()
    assert not StudyLog.objects.exists()
    assert Card.objects.count() == 10


@pytest.mark.django_db
def test_init_data_missing_file():
    with pytest.raises(CommandError):
        call_command("init_data", file="does-not-exist.json")
