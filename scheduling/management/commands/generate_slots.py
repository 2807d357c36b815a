from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from scheduling.errors import SlotsAlreadyGenerated, ValidationError
from scheduling.slots import generate_slots, parse_date


class Command(BaseCommand):
    help = "Create the bookable slots for one or more dates from the daily template."

    def add_arguments(self, parser):
        parser.add_argument("dates", nargs="+", help="Dates in YYYY-MM-DD format.")
        parser.add_argument(
            "--times",
            default="",
            help="Comma-separated HH:MM list overriding AGENDA_SLOT_TEMPLATE.",
        )

    def handle(self, *args, **options):
        times = [t.strip() for t in options["times"].split(",") if t.strip()] or None

        created = 0
        skipped = 0
        for value in options["dates"]:
            try:
                created += len(generate_slots(parse_date(value), times))
            except SlotsAlreadyGenerated as exc:
                skipped += 1
                self.stdout.write(self.style.WARNING(str(exc)))
            except ValidationError as exc:
                raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.SUCCESS(f"Slots created={created} dates_skipped={skipped}"))
