"""
Django implementation of LicenseTemplateRepository port.
"""
import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from core.domain.exceptions import DuplicateTemplateNameError
from core.domain.value_objects import LicenseType
from licenses.domain.template import LicenseTemplate
from licenses.infrastructure.models import LicenseTemplate as LicenseTemplateModel
from licenses.ports.template_repository import LicenseTemplateRepository


class DjangoLicenseTemplateRepository(LicenseTemplateRepository):
    """
    Django ORM implementation of LicenseTemplateRepository.
    """

    def _to_domain(self, model: LicenseTemplateModel) -> LicenseTemplate:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseTemplate model

        Returns:
            LicenseTemplate domain entity
        """
        return LicenseTemplate(
            id=model.id,
            name=model.name,
            license_type=LicenseType(model.license_type),
            default_validity_days=model.default_validity_days,
            requires_approval=model.requires_approval,
            is_active=model.is_active,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
            default_features=dict(model.default_features or {}),
            default_limits=dict(model.default_limits or {}),
            description=model.description,
        )

    @sync_to_async
    def save(self, template: LicenseTemplate) -> LicenseTemplate:
        """
        Insert or update a template.

        Args:
            template: LicenseTemplate entity to save

        Returns:
            Saved template entity
        """
        try:
            with transaction.atomic():
                model, _ = LicenseTemplateModel.objects.update_or_create(
                    id=template.id,
                    defaults={
                        "name": template.name,
                        "description": template.description,
                        "license_type": template.license_type.value,
                        "default_features": template.default_features,
                        "default_limits": template.default_limits,
                        "default_validity_days": template.default_validity_days,
                        "requires_approval": template.requires_approval,
                        "is_active": template.is_active,
                        "created_by": template.created_by,
                        "created_at": template.created_at,
                        "updated_at": template.updated_at,
                    },
                )
        except IntegrityError as e:
            raise DuplicateTemplateNameError(
                f"License template '{template.name}' already exists"
            ) from e
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, template_id: uuid.UUID) -> Optional[LicenseTemplate]:
        try:
            return self._to_domain(LicenseTemplateModel.objects.get(id=template_id))
        except LicenseTemplateModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_name(self, name: str) -> Optional[LicenseTemplate]:
        try:
            return self._to_domain(LicenseTemplateModel.objects.get(name=name))
        except LicenseTemplateModel.DoesNotExist:
            return None

    @sync_to_async
    def find_active(self) -> List[LicenseTemplate]:
        models = LicenseTemplateModel.objects.filter(is_active=True).order_by("name")
        return [self._to_domain(m) for m in models]
