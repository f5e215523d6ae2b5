"""
Django management command to check and mark expired licenses.

This command should be run periodically (e.g., via cron or scheduled task)
where Celery beat is not available.
"""

import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from core.domain.serialization import utc_now
from core.infrastructure.container import get_services

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check and mark expired licenses."""

    help = "Mark active licenses past their validity window as expired"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually update licenses",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        lifecycle = get_services().lifecycle

        if options["dry_run"]:
            expirable = async_to_sync(lifecycle.license_repository.find_expirable)(utc_now())
            self.stdout.write(f"Found {len(expirable)} expired license(s)")
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for license in expirable[:10]:
                self.stdout.write(f"  - License {license.id} expired at {license.valid_until}")
            return

        updated = async_to_sync(lifecycle.expire_licenses)()
        self.stdout.write(
            self.style.SUCCESS(f"Successfully marked {updated} license(s) as expired")
        )
