"""
Unit tests for the OwnerManagement entity.
"""

import pytest

from core.domain.value_objects import OwnerPermission
from owners.domain.owner_management import (
    NotificationPreferences,
    OwnerManagement,
    OwnerPermissions,
    OwnerSettings,
)


class TestOwnerManagementEntity:
    """Tests for OwnerManagement and its value objects."""

    def test_default_record_grants_everything(self):
        record = OwnerManagement.create_default("owner-1")

        assert all(record.has_permission(p) for p in OwnerPermission)
        assert record.delegated_users == ()
        assert record.settings.auto_approval_enabled is False
        assert record.settings.approval_timeout_days == 7
        assert record.settings.notification_preferences == NotificationPreferences()

    def test_with_permissions_replaces_named_flags_only(self):
        record = OwnerManagement.create_default("owner-1")

        updated = record.with_permissions({"can_revoke_licenses": False})

        assert not updated.has_permission(OwnerPermission.REVOKE_LICENSES)
        assert updated.has_permission(OwnerPermission.CREATE_LICENSES)
        assert record.has_permission(OwnerPermission.REVOKE_LICENSES)

    def test_unknown_permission_is_refused(self):
        with pytest.raises(ValueError):
            OwnerPermissions().merge({"can_fly": True})

    def test_settings_merge_notification_preferences_by_key(self):
        settings = OwnerSettings()

        merged = settings.merge(
            {"notification_preferences": {"email_on_license_expiry": False}}
        )

        assert merged.notification_preferences.email_on_license_expiry is False
        assert merged.notification_preferences.email_on_approval_request is True

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            OwnerSettings(approval_timeout_days=0)

    def test_settings_from_dict_fills_defaults(self):
        settings = OwnerSettings.from_dict({"auto_approval_enabled": True})

        assert settings.auto_approval_enabled is True
        assert settings.approval_timeout_days == 7
        assert settings.auto_approval_criteria == {}

    def test_delegate_is_idempotent(self):
        record = OwnerManagement.create_default("owner-1")

        once = record.delegate("user-2")
        twice = once.delegate("user-2")

        assert once.delegated_users == ("user-2",)
        assert twice is once

    def test_revoke_unknown_delegation_is_noop(self):
        record = OwnerManagement.create_default("owner-1")

        assert record.revoke_delegation("user-2") is record

    def test_owner_cannot_delegate_to_self(self):
        record = OwnerManagement.create_default("owner-1")

        with pytest.raises(ValueError):
            record.delegate("owner-1")
