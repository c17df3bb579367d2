"""
Cleanup Expired Notices Management Command

Deactivates active notices whose expiry date has passed. Meant to be run
periodically (cron) next to the ``cleanup-expired`` API endpoint.

Author: Academy Development Team
Version: 1.0.0
"""

import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from academy.notices.models import Notice, deactivate_expired_notices

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Deactivates notices whose expiration date has passed."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only count the notices that would be deactivated.",
        )

    def handle(self, *args, **options):
        try:
            if options["dry_run"]:
                count = Notice.objects.filter(is_active=True).expired().count()
                self.stdout.write(
                    self.style.WARNING(f"Dry run, {count} notice(s) would be deactivated.")
                )
                return
            count = deactivate_expired_notices()
        except DatabaseError as e:
            logger.error("cleanup_expired_notices failed: %s", e, exc_info=True)
            raise CommandError(f"An error occurred: {e}")

        logger.info("Deactivated %s expired notices", count)
        self.stdout.write(self.style.SUCCESS(f"{count} notice(s) deactivated."))
