"""
In-memory adapters for exercising the application services without a database.
"""
import contextlib
import copy
import dataclasses
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from approvals.domain.approval import LicenseApproval
from approvals.ports.license_approval_repository import (
    ApprovalQueueFilters,
    LicenseApprovalRepository,
)
from core.domain.exceptions import (
    ConcurrentModificationError,
    DuplicateTemplateNameError,
    LicenseKeyConflictError,
)
from core.domain.notifications import NotificationDispatcher, NotificationRequest
from core.domain.serialization import utc_now
from core.domain.value_objects import (
    ApprovalStatus,
    AuditAction,
    LicenseApprovalStatus,
    LicenseStatus,
    LicenseType,
)
from core.infrastructure.database import UnitOfWork
from licenses.domain.audit_log import LicenseAuditLogEntry
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.domain.template import LicenseTemplate
from licenses.ports.audit_log_repository import LicenseAuditLogRepository
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.template_repository import LicenseTemplateRepository
from owners.domain.owner_management import OwnerManagement
from owners.ports.owner_management_repository import OwnerManagementRepository
from owners.ports.user_directory import UserDirectory


class _Store:
    """Dict-backed store that a unit of work can snapshot and restore."""

    def __init__(self):
        self.rows: Dict = {}

    def snapshot(self):
        return copy.copy(self.rows)

    def restore(self, rows) -> None:
        self.rows = rows


class InMemoryUnitOfWork(UnitOfWork):
    """Rolls the given stores back when the outermost block raises."""

    def __init__(self, *stores: _Store):
        self.stores = stores
        self.commits = 0
        self.rollbacks = 0

    @contextlib.asynccontextmanager
    async def _transaction(self):
        snapshots = [store.snapshot() for store in self.stores]
        try:
            yield
        except BaseException:
            for store, rows in zip(self.stores, snapshots):
                store.restore(rows)
            self.rollbacks += 1
            raise
        self.commits += 1


class InMemoryOwnerManagementRepository(_Store, OwnerManagementRepository):
    async def get_or_create_default(self, owner_id: str) -> OwnerManagement:
        if owner_id not in self.rows:
            self.rows[owner_id] = OwnerManagement.create_default(owner_id)
        return self.rows[owner_id]

    async def find_by_owner_id(self, owner_id: str) -> Optional[OwnerManagement]:
        return self.rows.get(owner_id)

    async def find_all(self) -> List[OwnerManagement]:
        return sorted(self.rows.values(), key=lambda r: r.created_at)

    async def find_with_auto_approval(self) -> List[OwnerManagement]:
        return [r for r in await self.find_all() if r.settings.auto_approval_enabled]

    async def save(self, record: OwnerManagement) -> OwnerManagement:
        self.rows[record.owner_id] = record
        return record


class InMemoryLicenseRepository(_Store, LicenseRepository):
    async def add(self, license: License) -> License:
        if await self.key_exists(license.license_key):
            raise LicenseKeyConflictError(f"License key {license.license_key} is already in use")
        self.rows[license.id] = license
        return license

    async def update(self, license: License) -> License:
        stored = self.rows.get(license.id)
        if stored is None or stored.version != license.version:
            raise ConcurrentModificationError(f"License {license.id} was modified concurrently")
        saved = dataclasses.replace(license, version=license.version + 1)
        self.rows[license.id] = saved
        return saved

    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        return self.rows.get(license_id)

    async def find_by_license_key(self, license_key: str) -> Optional[License]:
        return next((l for l in self.rows.values() if l.license_key == license_key), None)

    async def key_exists(self, license_key: str) -> bool:
        return any(l.license_key == license_key for l in self.rows.values())

    async def find_by_issued_to(self, user_id: str) -> List[License]:
        matches = [l for l in self.rows.values() if l.issued_to == user_id]
        return sorted(matches, key=lambda l: l.created_at, reverse=True)

    async def find_children(self, parent_license_id: uuid.UUID) -> List[License]:
        return [l for l in self.rows.values() if l.parent_license_id == parent_license_id]

    async def find_expirable(self, now: datetime) -> List[License]:
        return [
            l
            for l in self.rows.values()
            if l.status == LicenseStatus.ACTIVE and l.valid_until < now
        ]

    async def count(self) -> int:
        return len(self.rows)

    async def count_by_status(self, status: LicenseStatus) -> int:
        return sum(1 for l in self.rows.values() if l.status == status)

    async def count_by_type(self, license_type: LicenseType) -> int:
        return sum(1 for l in self.rows.values() if l.license_type == license_type)


class InMemoryLicenseApprovalRepository(_Store, LicenseApprovalRepository):
    async def add(self, approval: LicenseApproval) -> LicenseApproval:
        self.rows[approval.id] = approval
        return approval

    async def find_by_id(self, approval_id: uuid.UUID) -> Optional[LicenseApproval]:
        return self.rows.get(approval_id)

    async def resolve(self, approval: LicenseApproval) -> bool:
        stored = self.rows.get(approval.id)
        if stored is None or stored.status != ApprovalStatus.PENDING:
            return False
        self.rows[approval.id] = approval
        return True

    async def find_overdue(self, now: datetime) -> List[LicenseApproval]:
        return [a for a in self.rows.values() if a.is_pending and a.expires_at < now]

    async def find_expiring_between(self, start: datetime, end: datetime) -> List[LicenseApproval]:
        return [a for a in self.rows.values() if a.is_pending and start <= a.expires_at <= end]

    async def find_with_filters(self, filters: ApprovalQueueFilters) -> List[LicenseApproval]:
        matches = [
            a
            for a in self.rows.values()
            if (filters.status is None or a.status == filters.status)
            and (filters.approval_type is None or a.approval_type == filters.approval_type)
            and (filters.priority is None or a.priority == filters.priority)
            and (not filters.requested_by or a.requested_by == filters.requested_by)
            and (not filters.license_id or a.license_id == filters.license_id)
            and (not filters.owner_id or a.owner_id == filters.owner_id)
            and (not filters.expires_before or a.expires_at < filters.expires_before)
        ]
        matches.sort(key=lambda a: (-a.priority.rank, a.created_at))
        return matches[: filters.limit] if filters.limit else matches

    async def find_by_license(self, license_id: uuid.UUID) -> List[LicenseApproval]:
        matches = [a for a in self.rows.values() if a.license_id == license_id]
        return sorted(matches, key=lambda a: a.created_at)

    async def count_by_status(self, status: ApprovalStatus) -> int:
        return sum(1 for a in self.rows.values() if a.status == status)


class InMemoryLicenseTemplateRepository(_Store, LicenseTemplateRepository):
    async def save(self, template: LicenseTemplate) -> LicenseTemplate:
        clash = await self.find_by_name(template.name)
        if clash is not None and clash.id != template.id:
            raise DuplicateTemplateNameError(f"License template '{template.name}' already exists")
        self.rows[template.id] = template
        return template

    async def find_by_id(self, template_id: uuid.UUID) -> Optional[LicenseTemplate]:
        return self.rows.get(template_id)

    async def find_by_name(self, name: str) -> Optional[LicenseTemplate]:
        return next((t for t in self.rows.values() if t.name == name), None)

    async def find_active(self) -> List[LicenseTemplate]:
        return sorted((t for t in self.rows.values() if t.is_active), key=lambda t: t.name)


class InMemoryLicenseAuditLogRepository(_Store, LicenseAuditLogRepository):
    """Keyed by insertion order so that snapshots stay cheap."""

    async def append(self, entry: LicenseAuditLogEntry) -> LicenseAuditLogEntry:
        self.rows[entry.id] = entry
        return entry

    @property
    def entries(self) -> List[LicenseAuditLogEntry]:
        return list(self.rows.values())

    async def find_by_license(
        self, license_id: uuid.UUID, action: Optional[AuditAction] = None
    ) -> List[LicenseAuditLogEntry]:
        return [
            e
            for e in self.rows.values()
            if e.license_id == license_id and (action is None or e.action == action)
        ]

    async def find_recent(self, limit: int) -> List[LicenseAuditLogEntry]:
        return list(reversed(self.entries))[:limit]


class RecordingNotifier(NotificationDispatcher):
    def __init__(self):
        self.requests: List[NotificationRequest] = []

    async def dispatch(self, request: NotificationRequest) -> None:
        self.requests.append(request)

    def events(self):
        return [r.event for r in self.requests]


class StaticUserDirectory(UserDirectory):
    def __init__(self, *user_ids: str):
        self.user_ids = set(user_ids)

    async def user_exists(self, user_id: str) -> bool:
        return user_id in self.user_ids


def build_license(**overrides) -> License:
    """Active, approved license valid for thirty days unless overridden."""
    now = overrides.pop("now", None) or utc_now()
    values = {
        "id": uuid.uuid4(),
        "license_key": generate_license_key(LicenseType.ENTERPRISE, "owner-1"),
        "license_type": LicenseType.ENTERPRISE,
        "status": LicenseStatus.ACTIVE,
        "approval_status": LicenseApprovalStatus.APPROVED,
        "issued_to": "user-1",
        "issued_by": "owner-1",
        "valid_from": now - timedelta(days=1),
        "valid_until": now + timedelta(days=30),
        "created_at": now - timedelta(days=1),
        "updated_at": now - timedelta(days=1),
        "approved_by": "owner-1",
    }
    values.update(overrides)
    if values["approval_status"] != LicenseApprovalStatus.APPROVED and "approved_by" not in overrides:
        values["approved_by"] = None
    return License(**values)
