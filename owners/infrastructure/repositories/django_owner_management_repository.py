"""
Django implementation of OwnerManagementRepository port.
"""
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from core.domain.serialization import to_primitive
from owners.domain.owner_management import OwnerManagement, OwnerPermissions, OwnerSettings
from owners.infrastructure.models import OwnerManagement as OwnerManagementModel
from owners.ports.owner_management_repository import OwnerManagementRepository


class DjangoOwnerManagementRepository(OwnerManagementRepository):
    """
    Django ORM implementation of OwnerManagementRepository.
    """

    def _to_domain(self, model: OwnerManagementModel) -> OwnerManagement:
        """
        Convert Django model to domain entity.

        Args:
            model: Django OwnerManagement model

        Returns:
            OwnerManagement domain entity
        """
        return OwnerManagement(
            id=model.id,
            owner_id=model.owner_id,
            permissions=OwnerPermissions.from_dict(model.permissions),
            delegated_users=tuple(model.delegated_users or ()),
            settings=OwnerSettings.from_dict(model.settings),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _fields_of(self, record: OwnerManagement) -> dict:
        return {
            "owner_id": record.owner_id,
            "permissions": to_primitive(record.permissions),
            "delegated_users": list(record.delegated_users),
            "settings": to_primitive(record.settings),
        }

    @sync_to_async
    def get_or_create_default(self, owner_id: str) -> OwnerManagement:
        default = OwnerManagement.create_default(owner_id)
        fields = self._fields_of(default)
        fields.pop("owner_id")
        try:
            with transaction.atomic():
                model, _ = OwnerManagementModel.objects.get_or_create(
                    owner_id=owner_id,
                    defaults={"id": default.id, **fields},
                )
        except IntegrityError:
            # Lost a concurrent first-provisioning race.
            model = OwnerManagementModel.objects.get(owner_id=owner_id)
        return self._to_domain(model)

    @sync_to_async
    def find_by_owner_id(self, owner_id: str) -> Optional[OwnerManagement]:
        try:
            return self._to_domain(OwnerManagementModel.objects.get(owner_id=owner_id))
        except OwnerManagementModel.DoesNotExist:
            return None

    @sync_to_async
    def find_all(self) -> List[OwnerManagement]:
        return [self._to_domain(m) for m in OwnerManagementModel.objects.order_by("created_at")]

    @sync_to_async
    def find_with_auto_approval(self) -> List[OwnerManagement]:
        models = OwnerManagementModel.objects.filter(
            settings__auto_approval_enabled=True
        ).order_by("created_at")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def save(self, record: OwnerManagement) -> OwnerManagement:
        """
        Save an owner record.

        Args:
            record: OwnerManagement entity to save

        Returns:
            Saved OwnerManagement entity
        """
        fields = self._fields_of(record)
        model, created = OwnerManagementModel.objects.get_or_create(
            id=record.id,
            defaults={**fields, "created_at": record.created_at},
        )
        if not created:
            for name, value in fields.items():
                setattr(model, name, value)
            model.save()
        return self._to_domain(model)
