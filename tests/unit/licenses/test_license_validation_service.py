"""
Unit tests for LicenseValidationService.
"""

import uuid
from datetime import timedelta

import pytest

from core.domain.serialization import utc_now
from core.domain.value_objects import LicenseStatus
from licenses.domain.services import UsageData
from tests.fakes import build_license


@pytest.mark.asyncio
class TestLicenseValidationService:
    """Tests for LicenseValidationService."""

    async def test_unknown_key(self, validation_service):
        result = await validation_service.validate_license_key("ENT-000000-AAAA-BBBB-CCCC-DDDD")

        assert not result.is_valid
        assert result.error == "License not found"

    async def test_valid_key(self, validation_service, license_repository):
        license = await license_repository.add(build_license())

        result = await validation_service.validate_license_key(license.license_key)

        assert result.is_valid

    async def test_lapsed_license_is_invalid_before_sweep(
        self, validation_service, license_repository
    ):
        license = await license_repository.add(
            build_license(now=utc_now() - timedelta(days=60))
        )

        result = await validation_service.validate_license_key(license.license_key)

        assert result.error == "License has expired"
        assert (await license_repository.find_by_id(license.id)).status == LicenseStatus.ACTIVE

    async def test_features(self, validation_service, license_repository):
        license = await license_repository.add(
            build_license(features={"sso": True, "audit": 0})
        )

        assert await validation_service.validate_license_features(license.id, ["sso"])
        assert not await validation_service.validate_license_features(license.id, ["sso", "audit"])
        assert not await validation_service.validate_license_features(uuid.uuid4(), ["sso"])

    async def test_features_of_invalid_license(self, validation_service, license_repository):
        license = await license_repository.add(
            build_license(status=LicenseStatus.SUSPENDED, features={"sso": True})
        )

        assert not await validation_service.validate_license_features(license.id, ["sso"])

    async def test_limits(self, validation_service, license_repository):
        license = await license_repository.add(build_license(limits={"maxUsers": 5}))

        within = await validation_service.validate_license_limits(
            license.id, UsageData(total_users=5)
        )
        over = await validation_service.validate_license_limits(
            license.id, UsageData(total_users=6)
        )

        assert within.is_valid
        assert not over.is_valid
        assert over.violations == ("Total users (6) exceeds limit (5)",)

    async def test_limits_of_missing_license(self, validation_service):
        result = await validation_service.validate_license_limits(uuid.uuid4(), UsageData())

        assert not result.is_valid
        assert result.error == "License not found"

    async def test_active_license_for_user_skips_invalid(
        self, validation_service, license_repository
    ):
        await license_repository.add(build_license(status=LicenseStatus.SUSPENDED))
        valid = await license_repository.add(build_license())

        assert await validation_service.get_active_license_for_user("user-1") == valid
        assert await validation_service.get_active_license_for_user("user-9") is None

    async def test_usage_info(self, validation_service, license_repository):
        license = await license_repository.add(build_license(status=LicenseStatus.SUSPENDED))

        info = await validation_service.get_license_usage_info(license.id)

        assert not info.is_valid
        assert info.status == "suspended"
        assert info.error == "License is suspended"
        assert await validation_service.get_license_usage_info(uuid.uuid4()) is None
