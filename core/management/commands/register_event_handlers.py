"""
Django management command to register event handlers.

Handlers are registered by the project app config at startup; this
command registers them in a shell or one-off process and lists them.
"""
import logging

from django.core.management.base import BaseCommand

from core.infrastructure.event_handlers import register_event_handlers

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to register event handlers."""

    help = "Register license, approval and notification handlers with the event bus"

    def add_arguments(self, parser):
        parser.add_argument(
            "--verbose-list",
            action="store_true",
            help="List every event type that received a handler",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        event_types = register_event_handlers()
        if options["verbose_list"]:
            for event_type in event_types:
                self.stdout.write(f"  - {event_type.__name__}")
        self.stdout.write(
            self.style.SUCCESS(f"Registered handlers for {len(event_types)} event type(s)")
        )
