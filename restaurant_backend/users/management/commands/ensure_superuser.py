"""
PATH: users/management/commands/ensure_superuser.py

Deploy-time superuser bootstrap.

- Reads AUTO_ADMIN_EMAIL + AUTO_ADMIN_PASSWORD from env (django-environ).
- Idempotent: creates the superuser if missing; refreshes password + flags if present.
- Optionally assigns every existing branch so the admin sees all data immediately.
- Never prints the password.
"""

from __future__ import annotations

import environ
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from branches.models import Branch


class Command(BaseCommand):
    help = "Create/update an initial superuser from env vars (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--all-branches",
            action="store_true",
            help="Assign every existing branch to the superuser.",
        )

    def handle(self, *args, **options):
        env = environ.Env()
        email = (env("AUTO_ADMIN_EMAIL", default="") or "").strip()
        password = (env("AUTO_ADMIN_PASSWORD", default="") or "").strip()

        if not email or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()

            if user:
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.role = "admin"
                user.set_password(password)
                user.save()
                action = "updated"
            else:
                user = User.objects.create_superuser(email=email, password=password)
                action = "created"

            if options["all_branches"]:
                user.branches.set(Branch.objects.all())

        self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {email} ({action})"))
