"""
Approval domain services.

Pure rules applied to approval requests.
"""
from typing import Any, Mapping, Optional

from approvals.domain.approval import LicenseApproval
from approvals.domain.request_payloads import DEFAULT_REQUESTED_VALIDITY_DAYS
from core.domain.value_objects import ApprovalPriority


class AutoApprovalPolicy:
    """
    Matches approval requests against an owner's auto-approval criteria.

    Supported criteria keys:
        maxValidityDays: requested validity (default 365) must not exceed it
        allowedLicenseTypes: requested license type must be listed
        maxPriority: request priority must not rank above it
    """

    @staticmethod
    def requested_validity_days(approval: LicenseApproval) -> int:
        days = approval.request_data.get("validity_days")
        return int(days) if days else DEFAULT_REQUESTED_VALIDITY_DAYS

    @staticmethod
    def requested_license_type(approval: LicenseApproval) -> Optional[str]:
        return approval.request_data.get("license_type")

    @classmethod
    def matches(cls, approval: LicenseApproval, criteria: Mapping[str, Any]) -> bool:
        """
        Check a request against auto-approval criteria.

        Args:
            approval: Pending approval request
            criteria: Owner's auto-approval criteria

        Returns:
            True if every configured criterion accepts the request
        """
        max_days = criteria.get("maxValidityDays")
        if max_days and cls.requested_validity_days(approval) > int(max_days):
            return False

        allowed_types = criteria.get("allowedLicenseTypes")
        if allowed_types and cls.requested_license_type(approval) not in allowed_types:
            return False

        max_priority = criteria.get("maxPriority")
        if max_priority and approval.priority.rank > ApprovalPriority(max_priority).rank:
            return False

        return True
