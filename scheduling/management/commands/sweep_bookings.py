from __future__ import annotations

from django.core.management.base import BaseCommand

from scheduling.retention import RetentionSweeper


class Command(BaseCommand):
    help = "Delete served bookings older than AGENDA_RETENTION_DAYS (once, or periodically with --loop)."

    def add_arguments(self, parser):
        parser.add_argument("--loop", action="store_true", help="Keep running, sweeping every --interval seconds.")
        parser.add_argument("--interval", type=float, default=None, help="Seconds between sweeps in --loop mode.")
        parser.add_argument("--days", type=int, default=None, help="Override the retention window in days.")

    def handle(self, *args, **options):
        sweeper = RetentionSweeper(interval_seconds=options["interval"], retention_days=options["days"])

        if not options["loop"]:
            deleted = sweeper.run_once()
            self.stdout.write(self.style.SUCCESS(f"Sweep completed: deleted={deleted}"))
            return

        try:
            sweeper.run_forever()
        except KeyboardInterrupt:
            sweeper.stop()
            self.stdout.write("Sweeper interrupted.")
