"""
License validation service.

Read-only checks consumed by privileged and unprivileged callers alike.
Business invalidity is reported inside the result, never raised.
"""
import logging
import uuid
from typing import Iterable, Optional

from core.metrics import license_validations_total
from licenses.application.dto.license_dto import LicenseUsageInfoDTO
from licenses.domain.license import License
from licenses.domain.services import (
    LicenseValidator,
    LimitValidationResult,
    UsageData,
    ValidationResult,
)
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

NOT_FOUND = "License not found"


def _observe(check: str, is_valid: bool) -> None:
    license_validations_total.labels(check=check, result="valid" if is_valid else "invalid").inc()


class LicenseValidationService:
    """Validates licenses by key or id against the current time."""

    def __init__(self, license_repository: LicenseRepository):
        self.license_repository = license_repository

    def validate_license(self, license: License) -> ValidationResult:
        """Evaluate a license snapshot now."""
        return LicenseValidator.evaluate(license)

    def validate_for_activation(self, license: License) -> ValidationResult:
        result = LicenseValidator.evaluate_activation(license)
        _observe("activation", result.is_valid)
        return result

    async def validate_license_key(self, license_key: str) -> ValidationResult:
        """
        Validate a license by its key.

        Args:
            license_key: License key string

        Returns:
            ValidationResult; unknown keys yield "License not found"
        """
        logger.debug("Validating license key")
        license = await self.license_repository.find_by_license_key(license_key)
        if license is None:
            result = ValidationResult(False, NOT_FOUND)
        else:
            result = self.validate_license(license)
        _observe("key", result.is_valid)
        return result

    async def validate_license_features(
        self, license_id: uuid.UUID, feature_names: Iterable[str]
    ) -> bool:
        """
        Check that a valid license enables every named feature.

        Args:
            license_id: License UUID
            feature_names: Features that must be enabled

        Returns:
            False if the license is missing or invalid, or a feature is off
        """
        license = await self.license_repository.find_by_id(license_id)
        if license is None or not self.validate_license(license).is_valid:
            _observe("features", False)
            return False
        allowed = all(LicenseValidator.has_feature(license.features, n) for n in feature_names)
        _observe("features", allowed)
        logger.debug("Feature check for license %s: %s", license_id, allowed)
        return allowed

    async def validate_license_limits(
        self, license_id: uuid.UUID, usage: UsageData
    ) -> LimitValidationResult:
        """
        Compare usage with the limits of a valid license.

        Args:
            license_id: License UUID
            usage: Current usage figures

        Returns:
            LimitValidationResult listing every exceeded dimension
        """
        license = await self.license_repository.find_by_id(license_id)
        if license is None:
            _observe("limits", False)
            return LimitValidationResult(False, (), NOT_FOUND)

        validity = self.validate_license(license)
        if not validity.is_valid:
            _observe("limits", False)
            return LimitValidationResult(False, (), validity.error)

        result = LicenseValidator.check_limits(license.limits, usage)
        _observe("limits", result.is_valid)
        return result

    async def validate_license_status(self, license_id: uuid.UUID) -> bool:
        license = await self.license_repository.find_by_id(license_id)
        is_valid = license is not None and self.validate_license(license).is_valid
        _observe("status", is_valid)
        return is_valid

    async def get_active_license_for_user(self, user_id: str) -> Optional[License]:
        """
        Return the first license issued to a user that passes validation.

        Args:
            user_id: Holder user id

        Returns:
            License entity or None
        """
        for license in await self.license_repository.find_by_issued_to(user_id):
            if self.validate_license(license).is_valid:
                return license
        return None

    async def get_license_usage_info(
        self, license_id: uuid.UUID
    ) -> Optional[LicenseUsageInfoDTO]:
        """
        Project a license for display, valid or not.

        Args:
            license_id: License UUID

        Returns:
            LicenseUsageInfoDTO or None if the license does not exist
        """
        license = await self.license_repository.find_by_id(license_id)
        if license is None:
            return None
        validity = self.validate_license(license)
        return LicenseUsageInfoDTO(
            license_id=license.id,
            is_valid=validity.is_valid,
            status=license.status.value,
            approval_status=license.approval_status.value,
            valid_from=license.valid_from,
            valid_until=license.valid_until,
            days_until_expiry=LicenseValidator.days_until_expiry(license),
            features=dict(license.features),
            limits=dict(license.limits),
            error=validity.error,
        )
