"""
Notification requests.

The core decides who should hear about an approval event; delivery
(e-mail, chat, in-app) happens outside of it behind NotificationDispatcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from core.domain.value_objects import NotificationEvent


@dataclass(frozen=True)
class NotificationRequest:
    """A request to notify a set of users about an approval event."""

    event: NotificationEvent
    recipients: Tuple[str, ...]
    approval_id: str
    license_id: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.recipients:
            raise ValueError("Notification request needs at least one recipient")


class NotificationDispatcher(ABC):
    """Port for handing notification requests to the delivery system."""

    @abstractmethod
    async def dispatch(self, request: NotificationRequest) -> None:
        """
        Hand a notification request over for delivery.

        Args:
            request: Notification request
        """
        pass
