from __future__ import annotations

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction


class Command(BaseCommand):
    help = "Create (or reset) the admin account used by the scheduling panel. Passwords are stored hashed."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=os.environ.get("AGENDA_ADMIN_USERNAME", ""))
        parser.add_argument("--password", default=os.environ.get("AGENDA_ADMIN_PASSWORD", ""))
        parser.add_argument(
            "--reset-password",
            action="store_true",
            help="Overwrite the password if the account already exists.",
        )

    def handle(self, *args, **options):
        username = (options["username"] or "").strip()
        password = options["password"] or ""
        if not username or not password:
            raise CommandError(
                "Provide --username and --password (or AGENDA_ADMIN_USERNAME / AGENDA_ADMIN_PASSWORD)."
            )

        User = get_user_model()
        with transaction.atomic():
            user, created = User.objects.get_or_create(username=username, defaults={"is_staff": True})
            if not created and not options["reset_password"]:
                self.stdout.write(self.style.WARNING(f"Admin '{username}' already exists; nothing changed."))
                return

            user.is_staff = True
            user.is_active = True
            user.set_password(password)
            user.save()

        action = "created" if created else "password reset"
        self.stdout.write(self.style.SUCCESS(f"Admin '{username}' {action}."))
