"""
Django implementation of LicenseAuditLogRepository port.
"""
import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async

from core.domain.value_objects import AuditAction
from licenses.domain.audit_log import LicenseAuditLogEntry
from licenses.infrastructure.models import LicenseAuditLog as LicenseAuditLogModel
from licenses.ports.audit_log_repository import LicenseAuditLogRepository


class DjangoLicenseAuditLogRepository(LicenseAuditLogRepository):
    """
    Django ORM implementation of LicenseAuditLogRepository.

    Only inserts; the model refuses updates and deletes.
    """

    def _to_domain(self, model: LicenseAuditLogModel) -> LicenseAuditLogEntry:
        return LicenseAuditLogEntry(
            id=model.id,
            license_id=model.license_id,
            action=AuditAction(model.action),
            performed_by=model.performed_by,
            new_state=dict(model.new_state or {}),
            created_at=model.created_at,
            previous_state=model.previous_state,
            reason=model.reason,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            metadata=dict(model.metadata or {}),
        )

    @sync_to_async
    def append(self, entry: LicenseAuditLogEntry) -> LicenseAuditLogEntry:
        """
        Append an audit entry.

        Args:
            entry: Audit entry to append

        Returns:
            Stored audit entry
        """
        model = LicenseAuditLogModel(
            id=entry.id,
            license_id=entry.license_id,
            action=entry.action.value,
            performed_by=entry.performed_by,
            previous_state=entry.previous_state,
            new_state=entry.new_state,
            reason=entry.reason,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )
        model.save()
        return self._to_domain(model)

    @sync_to_async
    def find_by_license(
        self, license_id: uuid.UUID, action: Optional[AuditAction] = None
    ) -> List[LicenseAuditLogEntry]:
        queryset = LicenseAuditLogModel.objects.filter(license_id=license_id)
        if action is not None:
            queryset = queryset.filter(action=action.value)
        return [self._to_domain(m) for m in queryset.order_by("created_at")]

    @sync_to_async
    def find_recent(self, limit: int) -> List[LicenseAuditLogEntry]:
        models = LicenseAuditLogModel.objects.order_by("-created_at")[:limit]
        return [self._to_domain(m) for m in models]
