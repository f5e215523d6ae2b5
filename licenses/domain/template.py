"""
LicenseTemplate domain entity.

Named defaults for license creation. Inactive templates are never
offered for new licenses but stay referenced by historical ones.
"""
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseType

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "license_type",
        "default_features",
        "default_limits",
        "default_validity_days",
        "requires_approval",
    }
)


@dataclass(frozen=True)
class LicenseTemplate:
    """LicenseTemplate domain entity."""

    id: uuid.UUID
    name: str
    license_type: LicenseType
    default_validity_days: int
    requires_approval: bool
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime
    default_features: Dict[str, Any] = field(default_factory=dict)
    default_limits: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None

    def __post_init__(self):
        """Validate template entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Template name cannot be empty")
        if len(self.name) > 255:
            raise ValueError("Template name too long")
        if self.default_validity_days < 1:
            raise ValueError("Default validity must be at least one day")
        if not self.created_by:
            raise ValueError("Template creator is required")

    @classmethod
    def create(
        cls,
        name: str,
        license_type: LicenseType,
        created_by: str,
        default_validity_days: int = 365,
        default_features: Optional[Mapping[str, Any]] = None,
        default_limits: Optional[Mapping[str, Any]] = None,
        requires_approval: bool = True,
        description: Optional[str] = None,
        is_active: bool = True,
        template_id: Optional[uuid.UUID] = None,
    ) -> "LicenseTemplate":
        """
        Create a new LicenseTemplate entity.

        Args:
            name: Unique template name
            license_type: Type of licenses created from it
            created_by: Creating owner id
            default_validity_days: Default validity window
            default_features: Default features
            default_limits: Default limits
            requires_approval: Whether licenses from it need sign-off
            description: Optional description
            is_active: Whether it is offered for new licenses
            template_id: Optional UUID (generated if not provided)

        Returns:
            LicenseTemplate entity instance
        """
        now = utc_now()
        return cls(
            id=template_id or uuid.uuid4(),
            name=name.strip(),
            license_type=license_type,
            default_validity_days=default_validity_days,
            requires_approval=requires_approval,
            is_active=is_active,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            default_features=dict(default_features or {}),
            default_limits=dict(default_limits or {}),
            description=description,
        )

    def update(self, changes: Mapping[str, Any]) -> "LicenseTemplate":
        """
        Create a new instance with the given fields replaced.

        Args:
            changes: Mapping of field name to new value

        Returns:
            New LicenseTemplate instance
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update template field(s): {', '.join(sorted(unknown))}")
        values = dict(changes)
        if isinstance(values.get("license_type"), str):
            values["license_type"] = LicenseType(values["license_type"])
        if "name" in values:
            values["name"] = values["name"].strip()
        return dataclasses.replace(self, updated_at=utc_now(), **values)

    def activate(self) -> "LicenseTemplate":
        return dataclasses.replace(self, is_active=True, updated_at=utc_now())

    def deactivate(self) -> "LicenseTemplate":
        return dataclasses.replace(self, is_active=False, updated_at=utc_now())

    def clone(self, name: str, created_by: str) -> "LicenseTemplate":
        """Copy of this template under a new name. Clones start inactive."""
        return LicenseTemplate.create(
            name=name,
            license_type=self.license_type,
            created_by=created_by,
            default_validity_days=self.default_validity_days,
            default_features=self.default_features,
            default_limits=self.default_limits,
            requires_approval=self.requires_approval,
            description=self.description,
            is_active=False,
        )
