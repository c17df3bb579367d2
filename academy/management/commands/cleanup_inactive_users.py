"""
Cleanup Inactive Users Management Command

Deletes accounts that were created by an administrator but whose owner never
set the initial password within the allowed time.

Features:
- Timeout taken from PASSWORD_RESET_TIMEOUT (default one hour)
- Dry run mode listing the accounts without deleting them
- Detailed output for monitoring

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError
from django.utils import timezone

User = get_user_model()

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = (
        "Deletes users that were created but did not set their initial password "
        "within PASSWORD_RESET_TIMEOUT seconds (default: 1 hour)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only list the users that would be deleted.",
        )

    def handle(self, *args, **options):
        timeout_seconds = getattr(settings, "PASSWORD_RESET_TIMEOUT", 3600)
        expiration_time = timezone.now() - timedelta(seconds=timeout_seconds)

        self.stdout.write(
            f"Looking for users created before {expiration_time:%Y-%m-%d %H:%M:%S} "
            "that still have to set their password..."
        )

        # Superusers are never removed, even with a pending password change.
        users_to_delete = User.objects.filter(
            profile__isnull=False,
            profile__force_password_change=True,
            date_joined__lt=expiration_time,
            is_superuser=False,
        )

        try:
            count = users_to_delete.count()
            if count == 0:
                self.stdout.write(self.style.SUCCESS("No expired users found."))
                return

            self.stdout.write(f"Found {count} user(s) to delete:")
            for user in users_to_delete:
                self.stdout.write(
                    f"  - {user.email or user.username} (ID: {user.id}), "
                    f"created {user.date_joined:%Y-%m-%d %H:%M:%S}"
                )

            if options["dry_run"]:
                self.stdout.write(self.style.WARNING("Dry run, nothing deleted."))
                return

            deleted_users = users_to_delete.count()
            users_to_delete.delete()
        except DatabaseError as e:
            logger.error("cleanup_inactive_users failed: %s", e, exc_info=True)
            raise CommandError(f"An error occurred: {e}")

        logger.info("Deleted %s inactive users", deleted_users)
        self.stdout.write(self.style.SUCCESS(f"{deleted_users} user(s) deleted."))
