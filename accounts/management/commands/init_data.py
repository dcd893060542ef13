import json
import os

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User
from decks.models import Card, Deck
from scheduler.data.models import CardProgress, StudyLog


class Command(BaseCommand):
    help = "Replace all users, decks, cards and review history with mock data"

    def add_arguments(self, parser):
        parser.add_argument(
            "--file", default="MOCK_DATA.json", help="JSON file name to load data from"
        )

    def handle(self, *args, **options):
        file_name = options.get("file", "MOCK_DATA.json")
        json_file_path = os.path.join(os.path.dirname(__file__), file_name)

        try:
            with open(json_file_path) as json_file:
                data = json.load(json_file)
        except (OSError, ValueError) as e:
            raise CommandError(f"Error loading data: {e}") from e

        with transaction.atomic():
            StudyLog.objects.all().delete()
            CardProgress.objects.all().delete()
            User.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("All existing data has been deleted"))

            card_count = 0
            for entry in data.get("users", []):
                user = User.objects.create_user(
                    entry["username"],
                    email=entry.get("email", f"{entry['username']}@example.com"),
                    password=entry.get("password", "testpassword"),
                )
                for deck_data in entry.get("decks", []):
                    deck = Deck.objects.create(owner=user, title=deck_data["title"])
                    Card.objects.bulk_create(
                        Card(deck=deck, term=c["term"], definition=c["definition"], position=i)
                        for i, c in enumerate(deck_data.get("cards", []))
                    )
                    card_count += len(deck_data.get("cards", []))

        self.stdout.write(
            self.style.SUCCESS(
                f"Mock data loaded successfully from {file_name} "
                f"({len(data.get('users', []))} users, {card_count} cards)"
            )
        )
