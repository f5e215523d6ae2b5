"""
Event handlers for domain events.

These handlers process domain events after the transaction that raised
them has committed, for side effects like structured logging and
notification delivery.
"""

import logging

from approvals.domain.events import ApprovalResolved, ApprovalSubmitted
from core.domain.events import DomainEvent, EventHandler
from core.infrastructure.notifications import NotificationRequested
from licenses.domain.events import (
    LicenseActivated,
    LicenseApproved,
    LicenseCreated,
    LicenseExpired,
    LicenseModified,
    LicenseRejected,
    LicenseRenewed,
    LicenseRevoked,
    LicenseSuspended,
)

logger = logging.getLogger(__name__)

LICENSE_EVENTS = (
    LicenseCreated,
    LicenseApproved,
    LicenseRejected,
    LicenseActivated,
    LicenseRenewed,
    LicenseSuspended,
    LicenseRevoked,
    LicenseModified,
    LicenseExpired,
)

APPROVAL_EVENTS = (ApprovalSubmitted, ApprovalResolved)


class DomainEventLogHandler(EventHandler):
    """
    Writes every license and approval event to the structured log.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Domain event: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


class NotificationLogHandler(EventHandler):
    """
    Delivers notification requests to the log.

    Outbound channels (mail, chat) subscribe alongside this handler.
    """

    async def handle(self, event: NotificationRequested) -> None:
        request = event.request
        logger.info(
            "Notification %s for approval %s",
            request.event.value,
            request.approval_id,
            extra={
                "notification_event": request.event.value,
                "recipients": list(request.recipients),
                "approval_id": request.approval_id,
                "license_id": request.license_id,
            },
        )


def register_event_handlers(bus=None):
    """
    Register all event handlers with the event bus.

    Returns:
        Event types that received a subscription
    """
    if bus is None:
        from core.infrastructure.events import event_bus as bus

    log_handler = DomainEventLogHandler()
    for event_type in LICENSE_EVENTS + APPROVAL_EVENTS:
        bus.subscribe(event_type, log_handler)
    bus.subscribe(NotificationRequested, NotificationLogHandler())

    logger.info("Event handlers registered")
    return LICENSE_EVENTS + APPROVAL_EVENTS + (NotificationRequested,)
