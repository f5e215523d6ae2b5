"""
OwnerManagement domain entity.

Per-owner governance record: capability flags, delegated users and
approval settings. Records are provisioned lazily with permissive
defaults the first time an owner-scoped operation runs.
"""
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from core.domain.serialization import utc_now
from core.domain.value_objects import OwnerPermission

DEFAULT_APPROVAL_TIMEOUT_DAYS = 7


@dataclass(frozen=True)
class OwnerPermissions:
    """Capability flags of an owner. Defaults grant everything."""

    can_create_licenses: bool = True
    can_approve_licenses: bool = True
    can_revoke_licenses: bool = True
    can_manage_templates: bool = True
    can_delegate_permissions: bool = True
    can_view_audit_logs: bool = True
    can_manage_subscriptions: bool = True

    def allows(self, permission: OwnerPermission) -> bool:
        return bool(getattr(self, permission.value))

    def merge(self, changes: Mapping[str, bool]) -> "OwnerPermissions":
        """
        Return a copy with the given flags replaced.

        Args:
            changes: Mapping of permission name to flag

        Returns:
            New OwnerPermissions instance
        """
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ValueError(f"Unknown permission(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **{k: bool(v) for k, v in changes.items()})

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "OwnerPermissions":
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: bool(v) for k, v in (data or {}).items() if k in names})


@dataclass(frozen=True)
class NotificationPreferences:
    """Which notifications an owner wants to receive."""

    email_on_approval_request: bool = True
    email_on_license_expiry: bool = True
    email_on_suspicious_activity: bool = True


@dataclass(frozen=True)
class OwnerSettings:
    """Approval settings of an owner."""

    auto_approval_enabled: bool = False
    auto_approval_criteria: Dict[str, Any] = field(default_factory=dict)
    notification_preferences: NotificationPreferences = field(
        default_factory=NotificationPreferences
    )
    approval_timeout_days: int = DEFAULT_APPROVAL_TIMEOUT_DAYS

    def __post_init__(self):
        if self.approval_timeout_days < 1:
            raise ValueError("Approval timeout must be at least one day")

    def merge(self, changes: Mapping[str, Any]) -> "OwnerSettings":
        """
        Return a copy with the given settings replaced.

        Notification preferences are merged key by key.

        Args:
            changes: Mapping of setting name to value

        Returns:
            New OwnerSettings instance
        """
        allowed = {f.name for f in dataclasses.fields(self)}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        values = dict(changes)
        if "notification_preferences" in values:
            prefs = values["notification_preferences"]
            if not isinstance(prefs, NotificationPreferences):
                prefs = dataclasses.replace(self.notification_preferences, **dict(prefs))
            values["notification_preferences"] = prefs
        if "auto_approval_criteria" in values:
            values["auto_approval_criteria"] = dict(values["auto_approval_criteria"] or {})
        return dataclasses.replace(self, **values)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "OwnerSettings":
        data = dict(data or {})
        prefs = NotificationPreferences(**dict(data.pop("notification_preferences", None) or {}))
        return cls(
            auto_approval_enabled=bool(data.get("auto_approval_enabled", False)),
            auto_approval_criteria=dict(data.get("auto_approval_criteria") or {}),
            notification_preferences=prefs,
            approval_timeout_days=int(
                data.get("approval_timeout_days", DEFAULT_APPROVAL_TIMEOUT_DAYS)
            ),
        )


@dataclass(frozen=True)
class OwnerManagement:
    """
    OwnerManagement domain entity.

    At most one record exists per owner.
    """

    id: uuid.UUID
    owner_id: str
    permissions: OwnerPermissions
    delegated_users: Tuple[str, ...]
    settings: OwnerSettings
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate owner record."""
        if not self.owner_id:
            raise ValueError("Owner ID is required")
        if self.owner_id in self.delegated_users:
            raise ValueError("An owner cannot delegate to themselves")

    @classmethod
    def create_default(
        cls, owner_id: str, record_id: Optional[uuid.UUID] = None
    ) -> "OwnerManagement":
        """
        Create the permissive default record for an owner.

        Args:
            owner_id: Owner user id
            record_id: Optional UUID (generated if not provided)

        Returns:
            OwnerManagement entity instance
        """
        now = utc_now()
        return cls(
            id=record_id or uuid.uuid4(),
            owner_id=owner_id,
            permissions=OwnerPermissions(),
            delegated_users=(),
            settings=OwnerSettings(),
            created_at=now,
            updated_at=now,
        )

    def has_permission(self, permission: OwnerPermission) -> bool:
        return self.permissions.allows(permission)

    def is_delegated(self, user_id: str) -> bool:
        return user_id in self.delegated_users

    def with_permissions(self, changes: Mapping[str, bool]) -> "OwnerManagement":
        return dataclasses.replace(
            self, permissions=self.permissions.merge(changes), updated_at=utc_now()
        )

    def with_settings(self, changes: Mapping[str, Any]) -> "OwnerManagement":
        return dataclasses.replace(
            self, settings=self.settings.merge(changes), updated_at=utc_now()
        )

    def delegate(self, user_id: str) -> "OwnerManagement":
        """Add a delegated user. Adding an existing one is a no-op."""
        if self.is_delegated(user_id):
            return self
        return dataclasses.replace(
            self,
            delegated_users=self.delegated_users + (user_id,),
            updated_at=utc_now(),
        )

    def revoke_delegation(self, user_id: str) -> "OwnerManagement":
        """Remove a delegated user. Removing an unknown one is a no-op."""
        if not self.is_delegated(user_id):
            return self
        return dataclasses.replace(
            self,
            delegated_users=tuple(u for u in self.delegated_users if u != user_id),
            updated_at=utc_now(),
        )
