"""
Value objects for the domain.

Enumerations shared by the owners, approvals and licenses modules.
Values are the strings persisted in the database and written to
audit snapshots.
"""
from enum import Enum


class LicenseType(Enum):
    """License type value object."""

    COMMUNITY = "community"
    TRIAL = "trial"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"

    def __str__(self) -> str:
        """Return type as string."""
        return self.value


class LicenseStatus(Enum):
    """License status value object."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class LicenseApprovalStatus(Enum):
    """Approval state recorded on the license itself."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class ApprovalStatus(Enum):
    """Status of a change request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"

    def __str__(self) -> str:
        return self.value


class ApprovalType(Enum):
    """Kind of change a request asks for."""

    CREATION = "creation"
    MODIFICATION = "modification"
    RENEWAL = "renewal"
    REVOCATION = "revocation"

    def __str__(self) -> str:
        return self.value


class ApprovalPriority(Enum):
    """Priority of a change request."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Numeric ordering, higher is more urgent."""
        return _PRIORITY_RANKS[self]

    def __str__(self) -> str:
        return self.value


_PRIORITY_RANKS = {
    ApprovalPriority.LOW: 1,
    ApprovalPriority.MEDIUM: 2,
    ApprovalPriority.HIGH: 3,
    ApprovalPriority.CRITICAL: 4,
}


class ApprovalDecision(Enum):
    """Owner decision on a pending request."""

    APPROVE = "approve"
    REJECT = "reject"

    def __str__(self) -> str:
        return self.value


class AuditAction(Enum):
    """Action recorded in the license audit log."""

    CREATED = "created"
    ACTIVATED = "activated"
    SUSPENDED = "suspended"
    RENEWED = "renewed"
    REVOKED = "revoked"
    MODIFIED = "modified"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUESTED = "requested"
    EXPIRED = "expired"

    def __str__(self) -> str:
        return self.value


class OwnerPermission(Enum):
    """Owner capability flags."""

    CREATE_LICENSES = "can_create_licenses"
    APPROVE_LICENSES = "can_approve_licenses"
    REVOKE_LICENSES = "can_revoke_licenses"
    MANAGE_TEMPLATES = "can_manage_templates"
    DELEGATE_PERMISSIONS = "can_delegate_permissions"
    VIEW_AUDIT_LOGS = "can_view_audit_logs"
    MANAGE_SUBSCRIPTIONS = "can_manage_subscriptions"

    def __str__(self) -> str:
        return self.value


class NotificationEvent(Enum):
    """Approval events that produce a notification request."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"

    def __str__(self) -> str:
        return self.value


# Actor recorded for changes made by sweeps rather than a person.
SYSTEM_ACTOR = "system"
