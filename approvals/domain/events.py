"""
Approval domain events.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.events import DomainEvent
from core.domain.value_objects import ApprovalStatus, ApprovalType


@dataclass(frozen=True, kw_only=True)
class ApprovalSubmitted(DomainEvent):
    """Event raised when an approval request is opened."""

    approval_id: uuid.UUID
    license_id: uuid.UUID
    approval_type: ApprovalType
    requested_by: str


@dataclass(frozen=True, kw_only=True)
class ApprovalResolved(DomainEvent):
    """Event raised when an approval request is approved, rejected or expired."""

    approval_id: uuid.UUID
    license_id: uuid.UUID
    status: ApprovalStatus
    resolved_by: Optional[str] = None
