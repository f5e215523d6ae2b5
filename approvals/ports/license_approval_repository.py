"""
LicenseApproval repository port (interface).

This defines the contract for approval request persistence.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from approvals.domain.approval import LicenseApproval
from core.domain.value_objects import ApprovalPriority, ApprovalStatus, ApprovalType


@dataclass(frozen=True)
class ApprovalQueueFilters:
    """Filters of the approval queue. Unset fields do not filter."""

    status: Optional[ApprovalStatus] = ApprovalStatus.PENDING
    approval_type: Optional[ApprovalType] = None
    priority: Optional[ApprovalPriority] = None
    requested_by: Optional[str] = None
    license_id: Optional[uuid.UUID] = None
    owner_id: Optional[str] = None
    expires_before: Optional[datetime] = None
    limit: Optional[int] = None


class LicenseApprovalRepository(ABC):
    """
    Abstract repository for LicenseApproval entities.
    """

    @abstractmethod
    async def add(self, approval: LicenseApproval) -> LicenseApproval:
        """
        Insert a new approval request.

        Args:
            approval: Pending approval request

        Returns:
            Saved approval request
        """
        pass

    @abstractmethod
    async def find_by_id(self, approval_id: uuid.UUID) -> Optional[LicenseApproval]:
        """
        Find an approval request by ID.

        Args:
            approval_id: Approval UUID

        Returns:
            LicenseApproval entity or None if not found
        """
        pass

    @abstractmethod
    async def resolve(self, approval: LicenseApproval) -> bool:
        """
        Persist a terminal transition if the stored request is still pending.

        Args:
            approval: Approval carrying its terminal state

        Returns:
            True if this call performed the transition, False if the
            stored request had already left pending
        """
        pass

    @abstractmethod
    async def find_overdue(self, now: datetime) -> List[LicenseApproval]:
        """
        Find pending requests whose deadline has passed.

        Args:
            now: Reference time

        Returns:
            List of LicenseApproval entities
        """
        pass

    @abstractmethod
    async def find_expiring_between(
        self, start: datetime, end: datetime
    ) -> List[LicenseApproval]:
        """
        Find pending requests whose deadline falls within [start, end].

        Args:
            start: Window start
            end: Window end

        Returns:
            List of LicenseApproval entities
        """
        pass

    @abstractmethod
    async def find_with_filters(self, filters: ApprovalQueueFilters) -> List[LicenseApproval]:
        """
        List requests matching filters, most urgent priority first, then oldest.

        Args:
            filters: Queue filters

        Returns:
            List of LicenseApproval entities
        """
        pass

    @abstractmethod
    async def find_by_license(self, license_id: uuid.UUID) -> List[LicenseApproval]:
        """
        List every request about a license, oldest first.

        Args:
            license_id: License UUID

        Returns:
            List of LicenseApproval entities
        """
        pass

    @abstractmethod
    async def count_by_status(self, status: ApprovalStatus) -> int:
        """
        Count requests in a status.

        Args:
            status: Approval status

        Returns:
            Number of requests
        """
        pass
