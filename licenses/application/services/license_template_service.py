"""
License template service.

Owner-managed catalogue of license defaults.
"""
import logging
import uuid
from typing import Any, List, Mapping, Optional

from core.domain.exceptions import DuplicateTemplateNameError, TemplateNotFoundError
from core.domain.value_objects import OwnerPermission
from licenses.application.commands.create_template import CreateTemplateCommand
from licenses.domain.template import LicenseTemplate
from licenses.ports.template_repository import LicenseTemplateRepository
from owners.application.services.owner_access_control import OwnerAccessControl

logger = logging.getLogger(__name__)


class LicenseTemplateService:
    """Creates, edits and looks up license templates."""

    def __init__(
        self,
        template_repository: LicenseTemplateRepository,
        access_control: OwnerAccessControl,
    ):
        self.template_repository = template_repository
        self.access_control = access_control

    async def _ensure_name_free(
        self, name: str, template_id: Optional[uuid.UUID] = None
    ) -> None:
        existing = await self.template_repository.find_by_name(name.strip())
        if existing is not None and existing.id != template_id:
            raise DuplicateTemplateNameError(f"License template '{name}' already exists")

    async def get_template(self, template_id: uuid.UUID) -> LicenseTemplate:
        template = await self.template_repository.find_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(f"License template {template_id} not found")
        return template

    async def get_active_template(self, template_id: uuid.UUID) -> LicenseTemplate:
        """
        Return a template that may be used for new licenses.

        Raises:
            TemplateNotFoundError: If the template is missing or inactive
        """
        template = await self.get_template(template_id)
        if not template.is_active:
            raise TemplateNotFoundError(f"License template {template_id} is not active")
        return template

    async def list_active_templates(self) -> List[LicenseTemplate]:
        return await self.template_repository.find_active()

    async def create_template(
        self, command: CreateTemplateCommand, owner_id: str
    ) -> LicenseTemplate:
        """
        Create a template.

        Args:
            command: CreateTemplateCommand
            owner_id: Acting owner

        Returns:
            Created template

        Raises:
            PermissionDeniedError: If the owner may not manage templates
            DuplicateTemplateNameError: If the name is taken
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.MANAGE_TEMPLATES
        )
        await self._ensure_name_free(command.name)
        template = LicenseTemplate.create(
            name=command.name,
            license_type=command.license_type,
            created_by=owner_id,
            default_validity_days=command.default_validity_days,
            default_features=command.default_features,
            default_limits=command.default_limits,
            requires_approval=command.requires_approval,
            description=command.description,
        )
        saved = await self.template_repository.save(template)
        logger.info(
            "License template created",
            extra={"template_id": str(saved.id), "template_name": saved.name},
        )
        return saved

    async def update_template(
        self, template_id: uuid.UUID, changes: Mapping[str, Any], owner_id: str
    ) -> LicenseTemplate:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.MANAGE_TEMPLATES
        )
        template = await self.get_template(template_id)
        if "name" in changes:
            await self._ensure_name_free(changes["name"], template_id)
        saved = await self.template_repository.save(template.update(changes))
        logger.info("License template updated", extra={"template_id": str(template_id)})
        return saved

    async def activate_template(self, template_id: uuid.UUID, owner_id: str) -> LicenseTemplate:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.MANAGE_TEMPLATES
        )
        template = await self.get_template(template_id)
        return await self.template_repository.save(template.activate())

    async def deactivate_template(self, template_id: uuid.UUID, owner_id: str) -> LicenseTemplate:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.MANAGE_TEMPLATES
        )
        template = await self.get_template(template_id)
        return await self.template_repository.save(template.deactivate())

    async def clone_template(
        self, template_id: uuid.UUID, new_name: str, owner_id: str
    ) -> LicenseTemplate:
        """
        Copy a template under a new name. The copy starts inactive.

        Args:
            template_id: Template to copy
            new_name: Name of the copy
            owner_id: Acting owner

        Returns:
            Cloned template
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.MANAGE_TEMPLATES
        )
        source = await self.get_template(template_id)
        await self._ensure_name_free(new_name)
        clone = await self.template_repository.save(source.clone(new_name, owner_id))
        logger.info(
            "License template cloned",
            extra={"template_id": str(clone.id), "source_template_id": str(template_id)},
        )
        return clone
