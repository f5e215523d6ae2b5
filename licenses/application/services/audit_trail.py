"""
Audit trail service.

Appends audit entries stamped with the origin of the request being
served. Callers invoke it inside the unit of work that performs the
audited mutation, so the entry commits or rolls back with it.
"""
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from core.domain.value_objects import AuditAction
from core.middleware.request_origin import RequestOrigin, get_request_origin
from licenses.domain.audit_log import LicenseAuditLogEntry
from licenses.ports.audit_log_repository import LicenseAuditLogRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """Writes and reads the license audit log."""

    def __init__(
        self,
        audit_log_repository: LicenseAuditLogRepository,
        origin_provider: Callable[[], RequestOrigin] = get_request_origin,
    ):
        self.audit_log_repository = audit_log_repository
        self.origin_provider = origin_provider

    async def record(
        self,
        license_id: uuid.UUID,
        action: AuditAction,
        performed_by: str,
        new_state: Dict[str, Any],
        previous_state: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LicenseAuditLogEntry:
        """
        Append one audit entry.

        Args:
            license_id: License the action applies to
            action: Audited action
            performed_by: Acting user id
            new_state: Snapshot after the mutation
            previous_state: Snapshot before the mutation
            reason: Free text reason
            metadata: Additional context

        Returns:
            Stored audit entry
        """
        origin = self.origin_provider()
        context = dict(metadata or {})
        if origin.correlation_id:
            context.setdefault("correlation_id", origin.correlation_id)

        entry = LicenseAuditLogEntry.create(
            license_id=license_id,
            action=action,
            performed_by=performed_by,
            new_state=new_state,
            previous_state=previous_state,
            reason=reason,
            ip_address=origin.ip_address,
            user_agent=origin.user_agent,
            metadata=context,
        )
        stored = await self.audit_log_repository.append(entry)
        logger.debug(
            "Audit entry %s recorded for license %s",
            action.value,
            license_id,
            extra={"audit_id": str(stored.id), "performed_by": performed_by},
        )
        return stored

    async def history(
        self, license_id: uuid.UUID, action: Optional[AuditAction] = None
    ) -> List[LicenseAuditLogEntry]:
        return await self.audit_log_repository.find_by_license(license_id, action)

    async def recent(self, limit: int) -> List[LicenseAuditLogEntry]:
        return await self.audit_log_repository.find_recent(limit)
