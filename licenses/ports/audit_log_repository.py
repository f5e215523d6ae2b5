"""
Audit log repository port (interface).

The audit log is append-only: the contract has no update or delete.
"""
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain.value_objects import AuditAction
from licenses.domain.audit_log import LicenseAuditLogEntry


class LicenseAuditLogRepository(ABC):
    """
    Abstract append-only store of LicenseAuditLogEntry entities.
    """

    @abstractmethod
    async def append(self, entry: LicenseAuditLogEntry) -> LicenseAuditLogEntry:
        """
        Append an audit entry.

        Args:
            entry: Audit entry to append

        Returns:
            Stored audit entry
        """
        pass

    @abstractmethod
    async def find_by_license(
        self, license_id: uuid.UUID, action: Optional[AuditAction] = None
    ) -> List[LicenseAuditLogEntry]:
        """
        List the entries of a license, oldest first.

        Args:
            license_id: License UUID
            action: Optional action filter

        Returns:
            List of LicenseAuditLogEntry entities
        """
        pass

    @abstractmethod
    async def find_recent(self, limit: int) -> List[LicenseAuditLogEntry]:
        """
        List the most recent entries, newest first.

        Args:
            limit: Maximum number of entries

        Returns:
            List of LicenseAuditLogEntry entities
        """
        pass
