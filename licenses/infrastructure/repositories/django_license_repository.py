"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import F

from core.domain.exceptions import ConcurrentModificationError, LicenseKeyConflictError
from core.domain.value_objects import LicenseApprovalStatus, LicenseStatus, LicenseType
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            license_key=model.license_key,
            license_type=LicenseType(model.license_type),
            status=LicenseStatus(model.status),
            approval_status=LicenseApprovalStatus(model.approval_status),
            issued_to=model.issued_to,
            issued_by=model.issued_by,
            valid_from=model.valid_from,
            valid_until=model.valid_until,
            created_at=model.created_at,
            updated_at=model.updated_at,
            features=dict(model.features or {}),
            limits=dict(model.limits or {}),
            subscription_id=model.subscription_id,
            parent_license_id=model.parent_license_id,
            template_id=model.template_id,
            metadata=dict(model.metadata or {}),
            approved_by=model.approved_by,
            approved_at=model.approved_at,
            rejection_reason=model.rejection_reason,
            version=model.version,
        )

    def _mutable_fields(self, license: License) -> dict:
        """Columns an update may change."""
        return {
            "license_type": license.license_type.value,
            "status": license.status.value,
            "approval_status": license.approval_status.value,
            "issued_to": license.issued_to,
            "valid_from": license.valid_from,
            "valid_until": license.valid_until,
            "features": license.features,
            "limits": license.limits,
            "subscription_id": license.subscription_id,
            "parent_license_id": license.parent_license_id,
            "template_id": license.template_id,
            "metadata": license.metadata,
            "approved_by": license.approved_by,
            "approved_at": license.approved_at,
            "rejection_reason": license.rejection_reason,
            "updated_at": license.updated_at,
        }

    @sync_to_async
    def add(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity
        """
        try:
            with transaction.atomic():
                model = LicenseModel.objects.create(
                    id=license.id,
                    license_key=license.license_key,
                    issued_by=license.issued_by,
                    created_at=license.created_at,
                    version=license.version,
                    **self._mutable_fields(license),
                )
        except IntegrityError as e:
            if LicenseModel.objects.filter(license_key=license.license_key).exists():
                raise LicenseKeyConflictError(
                    f"License key {license.license_key} is already in use"
                ) from e
            raise
        return self._to_domain(model)

    @sync_to_async
    def update(self, license: License) -> License:
        """
        Update a license if its stored version still matches.

        Args:
            license: License entity carrying the version it was read at

        Returns:
            Saved license entity with its new version
        """
        updated = LicenseModel.objects.filter(id=license.id, version=license.version).update(
            version=F("version") + 1,
            **self._mutable_fields(license),
        )
        if updated != 1:
            raise ConcurrentModificationError(
                f"License {license.id} was modified concurrently"
            )
        return self._to_domain(LicenseModel.objects.get(id=license.id))

    @sync_to_async
    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        try:
            return self._to_domain(LicenseModel.objects.get(id=license_id))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_license_key(self, license_key: str) -> Optional[License]:
        try:
            return self._to_domain(LicenseModel.objects.get(license_key=license_key))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def key_exists(self, license_key: str) -> bool:
        return LicenseModel.objects.filter(license_key=license_key).exists()

    @sync_to_async
    def find_by_issued_to(self, user_id: str) -> List[License]:
        models = LicenseModel.objects.filter(issued_to=user_id).order_by("-created_at")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def find_children(self, parent_license_id: uuid.UUID) -> List[License]:
        models = LicenseModel.objects.filter(parent_license_id=parent_license_id).order_by(
            "created_at"
        )
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def find_expirable(self, now: datetime) -> List[License]:
        """
        Find active licenses whose validity ended.

        Args:
            now: Reference time

        Returns:
            List of License entities, longest expired first
        """
        models = LicenseModel.objects.filter(
            status=LicenseStatus.ACTIVE.value, valid_until__lt=now
        ).order_by("valid_until")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def count(self) -> int:
        return LicenseModel.objects.count()

    @sync_to_async
    def count_by_status(self, status: LicenseStatus) -> int:
        return LicenseModel.objects.filter(status=status.value).count()

    @sync_to_async
    def count_by_type(self, license_type: LicenseType) -> int:
        return LicenseModel.objects.filter(license_type=license_type.value).count()
