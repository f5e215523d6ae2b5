"""
Unit tests for LicenseTemplateService.
"""

import uuid

import pytest

from core.domain.exceptions import (
    DuplicateTemplateNameError,
    PermissionDeniedError,
    TemplateNotFoundError,
)
from core.domain.value_objects import LicenseType
from licenses.application.commands.create_template import CreateTemplateCommand
from tests.conftest import OWNER


def _command(**overrides):
    values = {
        "name": "Enterprise Annual",
        "license_type": LicenseType.ENTERPRISE,
        "default_validity_days": 365,
        "default_features": {"sso": True},
        "default_limits": {"maxUsers": 100},
    }
    values.update(overrides)
    return CreateTemplateCommand(**values)


@pytest.mark.asyncio
class TestLicenseTemplateService:
    """Tests for LicenseTemplateService."""

    async def test_create_template(self, template_service):
        template = await template_service.create_template(_command(), OWNER)

        assert template.is_active
        assert template.created_by == OWNER
        assert await template_service.list_active_templates() == [template]

    async def test_names_are_unique(self, template_service):
        await template_service.create_template(_command(), OWNER)

        with pytest.raises(DuplicateTemplateNameError):
            await template_service.create_template(_command(name=" Enterprise Annual "), OWNER)

    async def test_requires_manage_templates(self, template_service, access_control):
        await access_control.update_owner_permissions(
            OWNER, OWNER, {"can_manage_templates": False}
        )

        with pytest.raises(PermissionDeniedError):
            await template_service.create_template(_command(), OWNER)

    async def test_update_template(self, template_service):
        template = await template_service.create_template(_command(), OWNER)

        updated = await template_service.update_template(
            template.id, {"default_validity_days": 30, "license_type": "trial"}, OWNER
        )

        assert updated.default_validity_days == 30
        assert updated.license_type == LicenseType.TRIAL

    async def test_update_rejects_unknown_fields(self, template_service):
        template = await template_service.create_template(_command(), OWNER)

        with pytest.raises(ValueError):
            await template_service.update_template(template.id, {"created_by": "x"}, OWNER)

    async def test_inactive_template_is_not_offered(self, template_service):
        template = await template_service.create_template(_command(), OWNER)

        await template_service.deactivate_template(template.id, OWNER)

        assert await template_service.list_active_templates() == []
        with pytest.raises(TemplateNotFoundError):
            await template_service.get_active_template(template.id)
        assert (await template_service.get_template(template.id)).id == template.id

    async def test_clone_starts_inactive(self, template_service):
        template = await template_service.create_template(_command(), OWNER)

        clone = await template_service.clone_template(template.id, "Enterprise Copy", OWNER)

        assert not clone.is_active
        assert clone.id != template.id
        assert clone.default_features == template.default_features
        activated = await template_service.activate_template(clone.id, OWNER)
        assert activated.is_active

    async def test_unknown_template(self, template_service):
        with pytest.raises(TemplateNotFoundError):
            await template_service.get_template(uuid.uuid4())
