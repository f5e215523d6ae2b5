"""
Unit tests for License entity.
"""

import uuid
from datetime import timedelta

import pytest

from core.domain.exceptions import InvalidLicenseHierarchyError, InvalidLicenseStatusError
from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseApprovalStatus, LicenseStatus, LicenseType
from licenses.domain.license import License
from tests.fakes import build_license


def _draft(**overrides):
    values = {
        "license_key": "ENT-ABCDEF-AAAA-BBBB-CCCC-DDDD",
        "license_type": LicenseType.ENTERPRISE,
        "issued_to": "user-1",
        "issued_by": "owner-1",
        "validity_days": 30,
    }
    values.update(overrides)
    return License.create(**values)


class TestLicenseEntity:
    """Tests for License entity."""

    def test_create_starts_pending_and_unapproved(self):
        now = utc_now()

        license = _draft(now=now)

        assert license.status == LicenseStatus.PENDING
        assert license.approval_status == LicenseApprovalStatus.PENDING
        assert license.valid_until == now + timedelta(days=30)
        assert license.version == 1

    def test_create_requires_positive_validity(self):
        with pytest.raises(ValueError):
            _draft(validity_days=0)

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError, match="License key cannot be empty"):
            _draft(license_key="  ")

    def test_active_license_must_be_approved(self):
        with pytest.raises(ValueError, match="must be approved"):
            build_license(approval_status=LicenseApprovalStatus.PENDING)

    def test_window_must_be_ordered(self):
        now = utc_now()
        with pytest.raises(ValueError):
            build_license(valid_from=now, valid_until=now)

    def test_license_cannot_parent_itself(self):
        license_id = uuid.uuid4()
        with pytest.raises(ValueError):
            build_license(id=license_id, parent_license_id=license_id)
        with pytest.raises(InvalidLicenseHierarchyError):
            build_license(id=license_id).with_parent(license_id)

    def test_approve_then_activate(self):
        approved = _draft().approve("owner-1")

        assert approved.status == LicenseStatus.PENDING
        assert approved.approved_by == "owner-1"
        assert approved.activate().status == LicenseStatus.ACTIVE

    def test_activate_requires_approval(self):
        with pytest.raises(InvalidLicenseStatusError, match="not approved"):
            _draft().activate()

    def test_reject_and_resubmit(self):
        rejected = _draft().reject("Missing contract")

        assert rejected.approval_status == LicenseApprovalStatus.REJECTED
        assert rejected.rejection_reason == "Missing contract"
        with pytest.raises(InvalidLicenseStatusError):
            rejected.approve("owner-1")

        resubmitted = rejected.resubmit()
        assert resubmitted.approval_status == LicenseApprovalStatus.PENDING
        assert resubmitted.rejection_reason is None

    def test_lapsed_draft_can_be_resubmitted(self):
        draft = _draft()

        assert draft.resubmit().approval_status == LicenseApprovalStatus.PENDING
        with pytest.raises(InvalidLicenseStatusError):
            draft.approve("owner-1").resubmit()
        with pytest.raises(InvalidLicenseStatusError):
            build_license().resubmit()

    def test_suspend_only_active(self):
        assert build_license().suspend().status == LicenseStatus.SUSPENDED
        with pytest.raises(InvalidLicenseStatusError):
            _draft().approve("owner-1").suspend()

    def test_revoke_is_terminal(self):
        revoked = build_license().revoke()

        assert revoked.is_terminal
        for transition in (revoked.suspend, revoked.revoke, lambda: revoked.renew(30)):
            with pytest.raises(InvalidLicenseStatusError):
                transition()

    def test_renew_extends_from_current_end(self):
        license = build_license()

        renewed = license.renew(30)

        assert renewed.valid_until == license.valid_until + timedelta(days=30)

    def test_renew_lapsed_license_extends_from_now(self):
        now = utc_now()
        license = build_license(
            now=now - timedelta(days=60),
            status=LicenseStatus.SUSPENDED,
        )

        renewed = license.renew(30, now=now)

        assert renewed.valid_until == now + timedelta(days=30)
        assert renewed.status == LicenseStatus.ACTIVE

    def test_mark_expired_requires_ended_window(self):
        now = utc_now()
        with pytest.raises(InvalidLicenseStatusError):
            build_license().mark_expired(now)

        lapsed = build_license(now=now - timedelta(days=40))
        assert lapsed.mark_expired(now).status == LicenseStatus.EXPIRED

    def test_modify_merges_keys(self):
        license = build_license(features={"sso": True, "api": False}, limits={"maxUsers": 5})

        modified = license.modify(features={"api": True}, limits={"maxUsers": 10})

        assert modified.features == {"sso": True, "api": True}
        assert modified.limits == {"maxUsers": 10}
