"""
LicenseApproval domain entity.

A change request against exactly one license. It leaves `pending`
exactly once, to approved, rejected or expired, and is immutable after.
"""
import dataclasses
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from core.domain.exceptions import ApprovalNotPendingError
from core.domain.serialization import utc_now
from core.domain.value_objects import ApprovalPriority, ApprovalStatus, ApprovalType


@dataclass(frozen=True)
class LicenseApproval:
    """
    LicenseApproval domain entity.

    `owner_id` names the owner whose settings governed the deadline and
    who is notified about the request; None means every owner.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    requested_by: str
    approval_type: ApprovalType
    request_data: Dict[str, Any]
    status: ApprovalStatus
    priority: ApprovalPriority
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    owner_id: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def __post_init__(self):
        """Validate approval entity."""
        if not self.requested_by:
            raise ValueError("Requester is required")
        if (self.approved_by is not None) != (self.status == ApprovalStatus.APPROVED):
            raise ValueError("approved_by is set if and only if the request is approved")
        if (self.rejected_by is not None) != (self.status == ApprovalStatus.REJECTED):
            raise ValueError("rejected_by is set if and only if the request is rejected")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        requested_by: str,
        approval_type: ApprovalType,
        request_data: Optional[Dict[str, Any]],
        priority: ApprovalPriority,
        timeout: timedelta,
        owner_id: Optional[str] = None,
        approval_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "LicenseApproval":
        """
        Create a new pending approval request.

        Args:
            license_id: License the request is about
            requested_by: Requesting user id
            approval_type: Kind of change requested
            request_data: Opaque payload describing the change
            priority: Request priority
            timeout: Time until the request expires
            owner_id: Governing owner, if any
            approval_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to utc now)

        Returns:
            LicenseApproval entity instance
        """
        now = now or utc_now()
        return cls(
            id=approval_id or uuid.uuid4(),
            license_id=license_id,
            requested_by=requested_by,
            approval_type=approval_type,
            request_data=dict(request_data or {}),
            status=ApprovalStatus.PENDING,
            priority=priority,
            expires_at=now + timeout,
            created_at=now,
            updated_at=now,
            owner_id=owner_id,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """True when still pending and past its deadline."""
        return self.is_pending and self.expires_at < (now or utc_now())

    def _require_pending(self) -> None:
        if not self.is_pending:
            raise ApprovalNotPendingError(
                f"Approval request {self.id} is already {self.status.value}"
            )

    def approve(self, approved_by: str, now: Optional[datetime] = None) -> "LicenseApproval":
        """
        Create a new instance resolved as approved.

        Raises:
            ApprovalNotPendingError: If the request already left pending
        """
        self._require_pending()
        now = now or utc_now()
        return dataclasses.replace(
            self,
            status=ApprovalStatus.APPROVED,
            approved_by=approved_by,
            approved_at=now,
            updated_at=now,
        )

    def reject(
        self,
        rejected_by: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "LicenseApproval":
        """
        Create a new instance resolved as rejected.

        Raises:
            ApprovalNotPendingError: If the request already left pending
        """
        self._require_pending()
        now = now or utc_now()
        return dataclasses.replace(
            self,
            status=ApprovalStatus.REJECTED,
            rejected_by=rejected_by,
            rejected_at=now,
            rejection_reason=reason,
            updated_at=now,
        )

    def expire(self, now: Optional[datetime] = None) -> "LicenseApproval":
        """
        Create a new instance resolved as expired.

        Raises:
            ApprovalNotPendingError: If the request already left pending
        """
        self._require_pending()
        return dataclasses.replace(
            self, status=ApprovalStatus.EXPIRED, updated_at=now or utc_now()
        )
