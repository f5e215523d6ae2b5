"""
LicenseAuditLogEntry domain entity.

One immutable record per state-changing action on a license or on one
of its approval requests.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain.serialization import utc_now
from core.domain.value_objects import AuditAction


@dataclass(frozen=True)
class LicenseAuditLogEntry:
    """
    LicenseAuditLogEntry domain entity.

    `new_state` is the snapshot of the row after the mutation,
    `previous_state` the snapshot before it, when there was one.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    action: AuditAction
    performed_by: str
    new_state: Dict[str, Any]
    created_at: datetime
    previous_state: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate audit entry."""
        if not self.license_id:
            raise ValueError("License ID is required")
        if not self.performed_by:
            raise ValueError("Actor is required")
        if not isinstance(self.new_state, dict):
            raise ValueError("New state snapshot is required")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        action: AuditAction,
        performed_by: str,
        new_state: Dict[str, Any],
        previous_state: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "LicenseAuditLogEntry":
        """
        Create a new audit entry.

        Args:
            license_id: License the action applies to
            action: Audited action
            performed_by: Acting user id, or "system" for sweeps
            new_state: Snapshot after the mutation
            previous_state: Snapshot before the mutation
            reason: Free text reason
            ip_address: Client address of the originating request
            user_agent: User agent of the originating request
            metadata: Additional context (correlation id, approval id)

        Returns:
            LicenseAuditLogEntry entity instance
        """
        return cls(
            id=uuid.uuid4(),
            license_id=license_id,
            action=action,
            performed_by=performed_by,
            new_state=new_state,
            created_at=utc_now(),
            previous_state=previous_state,
            reason=reason,
            ip_address=ip_address,
            user_agent=user_agent,
            metadata=dict(metadata or {}),
        )
