"""
Unit tests for AutoApprovalPolicy.
"""

import uuid
from datetime import timedelta

from approvals.domain.approval import LicenseApproval
from approvals.domain.services import AutoApprovalPolicy
from core.domain.value_objects import ApprovalPriority, ApprovalType


def _request(validity_days=None, license_type="trial", priority=ApprovalPriority.MEDIUM):
    return LicenseApproval.create(
        license_id=uuid.uuid4(),
        requested_by="user-1",
        approval_type=ApprovalType.CREATION,
        request_data={"license_type": license_type, "validity_days": validity_days},
        priority=priority,
        timeout=timedelta(days=7),
    )


class TestAutoApprovalPolicy:
    """Tests for auto-approval criteria matching."""

    def test_empty_criteria_accept_everything(self):
        assert AutoApprovalPolicy.matches(_request(), {})

    def test_validity_above_maximum_is_refused(self):
        criteria = {"maxValidityDays": 30}

        assert AutoApprovalPolicy.matches(_request(validity_days=30), criteria)
        assert not AutoApprovalPolicy.matches(_request(validity_days=31), criteria)

    def test_missing_validity_counts_as_a_year(self):
        assert not AutoApprovalPolicy.matches(_request(), {"maxValidityDays": 364})
        assert AutoApprovalPolicy.matches(_request(), {"maxValidityDays": 365})

    def test_license_type_must_be_allowed(self):
        criteria = {"allowedLicenseTypes": ["trial", "community"]}

        assert AutoApprovalPolicy.matches(_request(license_type="community"), criteria)
        assert not AutoApprovalPolicy.matches(_request(license_type="enterprise"), criteria)

    def test_priority_ceiling(self):
        criteria = {"maxPriority": "medium"}

        assert AutoApprovalPolicy.matches(_request(priority=ApprovalPriority.LOW), criteria)
        assert not AutoApprovalPolicy.matches(_request(priority=ApprovalPriority.HIGH), criteria)
