"""
Unit tests for LicenseValidator and LicenseHierarchy.
"""

import uuid
from datetime import timedelta

import pytest

from core.domain.exceptions import InvalidLicenseHierarchyError
from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseApprovalStatus, LicenseStatus
from licenses.domain.services import LicenseHierarchy, LicenseValidator, UsageData
from tests.fakes import build_license


class TestLicenseValidator:
    """Tests for LicenseValidator.evaluate."""

    def test_valid_license_reports_entitlements(self):
        license = build_license(features={"sso": True}, limits={"maxUsers": 10})

        result = LicenseValidator.evaluate(license)

        assert result.is_valid
        assert result.error is None
        assert result.details["features"] == {"sso": True}
        assert result.details["limits"] == {"maxUsers": 10}

    def test_approval_is_reported_before_status(self):
        license = build_license(
            status=LicenseStatus.PENDING, approval_status=LicenseApprovalStatus.REJECTED
        )

        assert LicenseValidator.evaluate(license).error == "License is not approved"

    def test_status_is_reported_before_window(self):
        now = utc_now()
        license = build_license(status=LicenseStatus.SUSPENDED, now=now - timedelta(days=60))

        assert LicenseValidator.evaluate(license, now).error == "License is suspended"

    def test_not_yet_valid(self):
        now = utc_now()
        license = build_license(valid_from=now + timedelta(days=1))

        assert LicenseValidator.evaluate(license, now).error == "License is not yet valid"

    def test_expired_window(self):
        now = utc_now()
        license = build_license(now=now - timedelta(days=60))

        assert LicenseValidator.evaluate(license, now).error == "License has expired"

    def test_activation_check(self):
        pending = build_license(status=LicenseStatus.PENDING)

        assert LicenseValidator.evaluate_activation(pending).is_valid
        assert (
            LicenseValidator.evaluate_activation(build_license()).error
            == "License is already active"
        )

    @pytest.mark.parametrize(
        "value,enabled",
        [(True, True), (False, False), (3, True), (0, False), (-1, False), ("basic", True), (None, False)],
    )
    def test_has_feature(self, value, enabled):
        assert LicenseValidator.has_feature({"feature": value}, "feature") is enabled

    def test_missing_feature_is_disabled(self):
        assert not LicenseValidator.has_feature({}, "feature")

    def test_limits_collect_every_violation(self):
        limits = {"maxUsers": 10, "rateLimitPerMinute": 100, "maxWorkflowsPerUser": 5}
        usage = UsageData(total_users=11, requests_per_minute=150, active_workflows=5)

        result = LicenseValidator.check_limits(limits, usage)

        assert not result.is_valid
        assert result.violations == (
            "Total users (11) exceeds limit (10)",
            "Requests per minute (150) exceeds limit (100)",
        )

    def test_zero_limit_is_enforced(self):
        result = LicenseValidator.check_limits({"maxUsers": 0}, UsageData(total_users=1))

        assert not result.is_valid

    def test_missing_limit_or_usage_is_unbounded(self):
        result = LicenseValidator.check_limits(
            {"maxUsers": 10}, UsageData(data_size=10 ** 9)
        )

        assert result.is_valid

    def test_days_until_expiry_rounds_up(self):
        now = utc_now()
        license = build_license(valid_until=now + timedelta(days=2, hours=1))

        assert LicenseValidator.days_until_expiry(license, now) == 3


@pytest.mark.asyncio
class TestLicenseHierarchy:
    """Tests for LicenseHierarchy.ensure_acyclic."""

    async def test_chain_without_cycle(self):
        root = build_license()
        child = build_license(parent_license_id=root.id)
        licenses = {root.id: root, child.id: child}

        async def load(license_id):
            return licenses.get(license_id)

        await LicenseHierarchy.ensure_acyclic(uuid.uuid4(), child.id, load)

    async def test_ancestor_cannot_become_descendant(self):
        root = build_license()
        child = build_license(parent_license_id=root.id)
        licenses = {root.id: root, child.id: child}

        async def load(license_id):
            return licenses.get(license_id)

        with pytest.raises(InvalidLicenseHierarchyError):
            await LicenseHierarchy.ensure_acyclic(root.id, child.id, load)
