"""
License domain events.

Domain events represent something that happened in the license domain.
They are published once the transaction that produced them commits.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.events import DomainEvent
from core.domain.value_objects import LicenseStatus


@dataclass(frozen=True, kw_only=True)
class LicenseEvent(DomainEvent):
    """Base class of events about one license."""

    license_id: uuid.UUID
    performed_by: str


@dataclass(frozen=True, kw_only=True)
class LicenseCreated(LicenseEvent):
    """Event raised when a license is created."""

    license_type: str
    approval_id: Optional[uuid.UUID] = None


@dataclass(frozen=True, kw_only=True)
class LicenseApproved(LicenseEvent):
    """Event raised when a license is approved."""


@dataclass(frozen=True, kw_only=True)
class LicenseRejected(LicenseEvent):
    """Event raised when a license creation is rejected."""

    reason: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class LicenseActivated(LicenseEvent):
    """Event raised when a license is activated."""


@dataclass(frozen=True, kw_only=True)
class LicenseRenewed(LicenseEvent):
    """Event raised when a license is renewed."""

    previous_status: LicenseStatus


@dataclass(frozen=True, kw_only=True)
class LicenseSuspended(LicenseEvent):
    """Event raised when a license is suspended."""

    reason: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class LicenseRevoked(LicenseEvent):
    """Event raised when a license is revoked."""

    reason: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class LicenseModified(LicenseEvent):
    """Event raised when features, limits, metadata or the parent change."""


@dataclass(frozen=True, kw_only=True)
class LicenseExpired(LicenseEvent):
    """Event raised when the expiry sweep expires a license."""
