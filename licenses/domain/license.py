"""
License domain entity.

This is the core domain entity representing a license.
It contains business logic and is independent of infrastructure.
"""
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from core.domain.exceptions import InvalidLicenseHierarchyError, InvalidLicenseStatusError
from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseApprovalStatus, LicenseStatus, LicenseType

TERMINAL_STATUSES = frozenset({LicenseStatus.EXPIRED, LicenseStatus.REVOKED})


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    A time-boxed entitlement granting features and limits to a holder.
    This is an immutable value object; transitions return new instances.
    `version` is the optimistic concurrency counter maintained by the
    repository.
    """

    id: uuid.UUID
    license_key: str
    license_type: LicenseType
    status: LicenseStatus
    approval_status: LicenseApprovalStatus
    issued_to: str
    issued_by: str
    valid_from: datetime
    valid_until: datetime
    created_at: datetime
    updated_at: datetime
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    subscription_id: Optional[str] = None
    parent_license_id: Optional[uuid.UUID] = None
    template_id: Optional[uuid.UUID] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    version: int = 1

    def __post_init__(self):
        """Validate license entity."""
        if not self.license_key or len(self.license_key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if not self.issued_to:
            raise ValueError("License holder is required")
        if not self.issued_by:
            raise ValueError("Issuer is required")
        if self.valid_from >= self.valid_until:
            raise ValueError("valid_from must be before valid_until")
        if (
            self.status == LicenseStatus.ACTIVE
            and self.approval_status != LicenseApprovalStatus.APPROVED
        ):
            raise ValueError("An active license must be approved")
        if self.parent_license_id is not None and self.parent_license_id == self.id:
            raise ValueError("A license cannot be its own parent")

    @classmethod
    def create(
        cls,
        license_key: str,
        license_type: LicenseType,
        issued_to: str,
        issued_by: str,
        validity_days: int,
        features: Optional[Mapping[str, Any]] = None,
        limits: Optional[Mapping[str, Any]] = None,
        subscription_id: Optional[str] = None,
        parent_license_id: Optional[uuid.UUID] = None,
        template_id: Optional[uuid.UUID] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        license_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "License":
        """
        Create a new pending License entity.

        Args:
            license_key: Unique license key
            license_type: Type of the license
            issued_to: Holder user id
            issued_by: Issuing owner id
            validity_days: Length of the validity window
            features: Feature flags and amounts
            limits: Numeric limits
            subscription_id: Optional billing correlation id
            parent_license_id: Optional parent license
            template_id: Template the license was created from
            metadata: Opaque metadata
            license_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to utc now)

        Returns:
            License entity instance
        """
        if validity_days < 1:
            raise ValueError("Validity must be at least one day")
        now = now or utc_now()
        return cls(
            id=license_id or uuid.uuid4(),
            license_key=license_key,
            license_type=license_type,
            status=LicenseStatus.PENDING,
            approval_status=LicenseApprovalStatus.PENDING,
            issued_to=issued_to,
            issued_by=issued_by,
            valid_from=now,
            valid_until=now + timedelta(days=validity_days),
            created_at=now,
            updated_at=now,
            features=dict(features or {}),
            limits=dict(limits or {}),
            subscription_id=subscription_id,
            parent_license_id=parent_license_id,
            template_id=template_id,
            metadata=dict(metadata or {}),
        )

    @property
    def is_approved(self) -> bool:
        return self.approval_status == LicenseApprovalStatus.APPROVED

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _replace(self, **changes: Any) -> "License":
        return dataclasses.replace(self, updated_at=utc_now(), **changes)

    def approve(self, approved_by: str, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance marked as approved.

        The license stays pending until it is activated.
        """
        if self.approval_status == LicenseApprovalStatus.APPROVED:
            raise InvalidLicenseStatusError("License is already approved")
        if self.approval_status != LicenseApprovalStatus.PENDING:
            raise InvalidLicenseStatusError(
                f"Cannot approve a license whose approval is {self.approval_status.value}"
            )
        if self.status != LicenseStatus.PENDING:
            raise InvalidLicenseStatusError(f"Cannot approve a {self.status.value} license")
        return self._replace(
            approval_status=LicenseApprovalStatus.APPROVED,
            approved_by=approved_by,
            approved_at=now or utc_now(),
            rejection_reason=None,
        )

    def reject(self, reason: Optional[str] = None) -> "License":
        """
        Create a new License instance marked as rejected.

        The draft stays pending and can be resubmitted.
        """
        if self.approval_status != LicenseApprovalStatus.PENDING:
            raise InvalidLicenseStatusError(
                f"Cannot reject a license whose approval is {self.approval_status.value}"
            )
        return self._replace(
            approval_status=LicenseApprovalStatus.REJECTED,
            rejection_reason=reason,
        )

    def resubmit(self) -> "License":
        """
        Create a new License instance returned to approval pending.

        A rejected draft can be resubmitted, and so can an unapproved
        draft whose request lapsed. The caller checks that no request
        is still open.
        """
        if self.status != LicenseStatus.PENDING or self.approval_status not in (
            LicenseApprovalStatus.REJECTED,
            LicenseApprovalStatus.PENDING,
        ):
            raise InvalidLicenseStatusError("Only an unapproved draft license can be resubmitted")
        return self._replace(
            approval_status=LicenseApprovalStatus.PENDING,
            rejection_reason=None,
        )

    def activate(self) -> "License":
        """
        Create a new License instance with active status.

        Returns:
            New License instance with active status
        """
        if not self.is_approved:
            raise InvalidLicenseStatusError("License is not approved")
        if self.status != LicenseStatus.PENDING:
            raise InvalidLicenseStatusError(f"Cannot activate a {self.status.value} license")
        return self._replace(status=LicenseStatus.ACTIVE)

    def suspend(self) -> "License":
        """
        Create a new License instance with suspended status.

        Returns:
            New License instance with suspended status
        """
        if self.status != LicenseStatus.ACTIVE:
            raise InvalidLicenseStatusError(f"Cannot suspend a {self.status.value} license")
        return self._replace(status=LicenseStatus.SUSPENDED)

    def revoke(self) -> "License":
        """
        Create a new License instance with revoked status.

        Returns:
            New License instance with revoked status
        """
        if self.status not in (LicenseStatus.ACTIVE, LicenseStatus.SUSPENDED):
            raise InvalidLicenseStatusError(f"Cannot revoke a {self.status.value} license")
        return self._replace(status=LicenseStatus.REVOKED)

    def renew(self, period_days: int, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with an extended validity window.

        The window is extended from the later of its current end and now.
        A suspended license is reactivated.

        Args:
            period_days: Extension in days
            now: Reference time (defaults to utc now)

        Returns:
            New License instance with renewed validity
        """
        if self.is_terminal:
            raise InvalidLicenseStatusError(f"Cannot renew a {self.status.value} license")
        if period_days < 1:
            raise ValueError("Renewal period must be at least one day")
        now = now or utc_now()
        status = (
            LicenseStatus.ACTIVE if self.status == LicenseStatus.SUSPENDED else self.status
        )
        return self._replace(
            valid_until=max(self.valid_until, now) + timedelta(days=period_days),
            status=status,
        )

    def mark_expired(self, now: Optional[datetime] = None) -> "License":
        """
        Create a new License instance with expired status.

        Returns:
            New License instance with expired status
        """
        if self.status != LicenseStatus.ACTIVE:
            raise InvalidLicenseStatusError(f"Cannot expire a {self.status.value} license")
        if self.valid_until >= (now or utc_now()):
            raise InvalidLicenseStatusError("License validity has not ended yet")
        return self._replace(status=LicenseStatus.EXPIRED)

    def modify(
        self,
        features: Optional[Mapping[str, Any]] = None,
        limits: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> "License":
        """
        Create a new License instance with merged features, limits and metadata.

        Keys given here replace existing ones.
        """
        if self.is_terminal:
            raise InvalidLicenseStatusError(f"Cannot modify a {self.status.value} license")
        return self._replace(
            features={**self.features, **dict(features or {})},
            limits={**self.limits, **dict(limits or {})},
            metadata={**self.metadata, **dict(metadata or {})},
        )

    def with_parent(self, parent_license_id: Optional[uuid.UUID]) -> "License":
        if parent_license_id is not None and parent_license_id == self.id:
            raise InvalidLicenseHierarchyError("A license cannot be its own parent")
        return self._replace(parent_license_id=parent_license_id)
