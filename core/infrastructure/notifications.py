"""
Notification dispatch through the event bus.
"""

import logging
from dataclasses import dataclass

from core.domain.events import DomainEvent, EventBus
from core.domain.notifications import NotificationDispatcher, NotificationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class NotificationRequested(DomainEvent):
    """Event raised when the core asks for a notification to be delivered."""

    request: NotificationRequest

    def to_dict(self):
        data = super().to_dict()
        data.update(
            {
                "notification_event": self.request.event.value,
                "recipients": list(self.request.recipients),
                "approval_id": self.request.approval_id,
                "license_id": self.request.license_id,
            }
        )
        return data


class EventBusNotificationDispatcher(NotificationDispatcher):
    """Publishes notification requests for delivery subscribers to pick up."""

    def __init__(self, bus: EventBus):
        self.bus = bus

    async def dispatch(self, request: NotificationRequest) -> None:
        logger.debug(
            "Dispatching %s notification to %d recipient(s)",
            request.event.value,
            len(request.recipients),
            extra={"approval_id": request.approval_id},
        )
        await self.bus.publish(
            NotificationRequested(aggregate_id=request.approval_id, request=request)
        )
