"""
Django management command to expire overdue approval requests.

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
    """Command to expire overdue approval requests."""

    help = "Expire pending approval requests past their deadline"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually expire requests",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        engine = get_services().approvals

        if options["dry_run"]:
            overdue = async_to_sync(engine.approval_repository.find_overdue)(utc_now())
            self.stdout.write(f"Found {len(overdue)} overdue approval request(s)")
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for approval in overdue[:10]:
                self.stdout.write(
                    f"  - Approval {approval.id} ({approval.approval_type.value}) "
                    f"expired at {approval.expires_at}"
                )
            return

        expired = async_to_sync(engine.expire_approvals)()
        self.stdout.write(
            self.style.SUCCESS(f"Successfully expired {expired} approval request(s)")
        )
