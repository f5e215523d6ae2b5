"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity. Validity rules are pure functions over
License snapshots, so they can be evaluated anywhere a snapshot exists.
"""
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from core.domain.exceptions import InvalidLicenseHierarchyError
from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a license validity check."""

    is_valid: bool
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LimitValidationResult:
    """Outcome of a limit check. Lists every exceeded dimension."""

    is_valid: bool
    violations: Tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class UsageData:
    """Current consumption figures. Unset figures are not checked."""

    active_workflows: Optional[float] = None
    executions_this_period: Optional[float] = None
    total_users: Optional[float] = None
    data_size: Optional[float] = None
    requests_per_minute: Optional[float] = None


# usage attribute, limit key, label
LIMIT_DIMENSIONS: Tuple[Tuple[str, str, str], ...] = (
    ("active_workflows", "maxWorkflowsPerUser", "Active workflows"),
    ("executions_this_period", "maxExecutionsPerMonth", "Monthly executions"),
    ("total_users", "maxUsers", "Total users"),
    ("data_size", "maxExecutionDataSize", "Data size"),
    ("requests_per_minute", "rateLimitPerMinute", "Requests per minute"),
)


class LicenseValidator:
    """Domain service for license validation."""

    @staticmethod
    def evaluate(license: License, now: Optional[datetime] = None) -> ValidationResult:
        """
        Check whether a license may be relied upon right now.

        Reasons are reported in priority order: not approved, not active,
        not yet valid, expired.

        Args:
            license: License snapshot
            now: Reference time (defaults to utc now)

        Returns:
            ValidationResult, with type/features/limits/window when valid
        """
        now = now or utc_now()
        if not license.is_approved:
            return ValidationResult(
                False,
                "License is not approved",
                {"approval_status": license.approval_status.value},
            )
        if license.status != LicenseStatus.ACTIVE:
            return ValidationResult(
                False,
                f"License is {license.status.value}",
                {"status": license.status.value},
            )
        if now < license.valid_from:
            return ValidationResult(
                False, "License is not yet valid", {"valid_from": license.valid_from}
            )
        if now > license.valid_until:
            return ValidationResult(
                False, "License has expired", {"valid_until": license.valid_until}
            )
        return ValidationResult(
            True,
            None,
            {
                "license_type": license.license_type.value,
                "valid_from": license.valid_from,
                "valid_until": license.valid_until,
                "features": dict(license.features),
                "limits": dict(license.limits),
            },
        )

    @staticmethod
    def evaluate_activation(
        license: License, now: Optional[datetime] = None
    ) -> ValidationResult:
        """
        Check whether a license can move from pending to active.

        Approval is not checked here; activation reports it separately.

        Args:
            license: License snapshot
            now: Reference time (defaults to utc now)

        Returns:
            ValidationResult
        """
        now = now or utc_now()
        if license.status == LicenseStatus.ACTIVE:
            return ValidationResult(False, "License is already active", {"status": "active"})
        if license.status != LicenseStatus.PENDING:
            return ValidationResult(
                False,
                f"License is {license.status.value}",
                {"status": license.status.value},
            )
        if now < license.valid_from:
            return ValidationResult(
                False, "License is not yet valid", {"valid_from": license.valid_from}
            )
        if now > license.valid_until:
            return ValidationResult(
                False, "License has expired", {"valid_until": license.valid_until}
            )
        return ValidationResult(True)

    @staticmethod
    def has_feature(features: Mapping[str, Any], name: str) -> bool:
        """
        Check whether a feature is enabled.

        Booleans must be True, numbers must be positive, any other present
        non-null value counts as enabled.
        """
        value = features.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value > 0
        return value is not None

    @staticmethod
    def check_limits(limits: Mapping[str, Any], usage: UsageData) -> LimitValidationResult:
        """
        Compare usage with limits, collecting every violation.

        Args:
            limits: License limits
            usage: Current usage figures

        Returns:
            LimitValidationResult
        """
        violations: List[str] = []
        for attribute, limit_key, label in LIMIT_DIMENSIONS:
            limit = limits.get(limit_key)
            amount = getattr(usage, attribute)
            if limit is None or amount is None:
                continue
            if amount > limit:
                violations.append(f"{label} ({amount}) exceeds limit ({limit})")

        if violations:
            return LimitValidationResult(False, tuple(violations), "License limits exceeded")
        return LimitValidationResult(True)

    @staticmethod
    def days_until_expiry(license: License, now: Optional[datetime] = None) -> int:
        """Whole days until valid_until, rounded up; negative once expired."""
        remaining = license.valid_until - (now or utc_now())
        return math.ceil(remaining.total_seconds() / 86400)


class LicenseHierarchy:
    """Domain service guarding parent/child license relationships."""

    @staticmethod
    async def ensure_acyclic(
        license_id: uuid.UUID,
        parent_license_id: Optional[uuid.UUID],
        load: Callable[[uuid.UUID], Awaitable[Optional[License]]],
    ) -> None:
        """
        Refuse a parent whose ancestor chain contains the license.

        Args:
            license_id: License receiving the parent
            parent_license_id: Proposed parent
            load: Loader returning a license by id

        Raises:
            InvalidLicenseHierarchyError: If the assignment creates a cycle
        """
        seen = set()
        current = parent_license_id
        while current is not None:
            if current == license_id:
                raise InvalidLicenseHierarchyError(
                    f"License {license_id} cannot be a descendant of itself"
                )
            if current in seen:
                raise InvalidLicenseHierarchyError(
                    f"License hierarchy above {parent_license_id} already contains a cycle"
                )
            seen.add(current)
            ancestor = await load(current)
            current = ancestor.parent_license_id if ancestor else None
