"""
Pytest configuration and shared fixtures.
"""

import pytest

from approvals.application.services.approval_workflow import ApprovalWorkflowEngine
from core.domain.events import EventHandler
from core.infrastructure.events import InMemoryEventBus
from licenses.application.services.audit_trail import AuditTrail
from licenses.application.services.license_lifecycle_manager import LicenseLifecycleManager
from licenses.application.services.license_template_service import LicenseTemplateService
from licenses.application.services.license_validation_service import LicenseValidationService
from owners.application.services.owner_access_control import OwnerAccessControl
from tests.fakes import (
    InMemoryLicenseApprovalRepository,
    InMemoryLicenseAuditLogRepository,
    InMemoryLicenseRepository,
    InMemoryLicenseTemplateRepository,
    InMemoryOwnerManagementRepository,
    InMemoryUnitOfWork,
    RecordingNotifier,
)

OWNER = "owner-1"
OTHER_OWNER = "owner-2"
HOLDER = "user-1"


class RecordingHandler(EventHandler):
    """Collects every event it receives."""

    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)


@pytest.fixture
def owner_repository():
    """Fixture for OwnerManagementRepository."""
    return InMemoryOwnerManagementRepository()


@pytest.fixture
def license_repository():
    """Fixture for LicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def approval_repository():
    """Fixture for LicenseApprovalRepository."""
    return InMemoryLicenseApprovalRepository()


@pytest.fixture
def template_repository():
    """Fixture for LicenseTemplateRepository."""
    return InMemoryLicenseTemplateRepository()


@pytest.fixture
def audit_repository():
    """Fixture for LicenseAuditLogRepository."""
    return InMemoryLicenseAuditLogRepository()


@pytest.fixture
def uow(owner_repository, license_repository, approval_repository, audit_repository):
    """Unit of work rolling back every in-memory store."""
    return InMemoryUnitOfWork(
        owner_repository, license_repository, approval_repository, audit_repository
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def event_bus():
    """Fresh event bus per test."""
    return InMemoryEventBus()


@pytest.fixture
def access_control(owner_repository):
    return OwnerAccessControl(owner_repository)


@pytest.fixture
def audit_trail(audit_repository):
    return AuditTrail(audit_repository)


@pytest.fixture
def validation_service(license_repository):
    return LicenseValidationService(license_repository)


@pytest.fixture
def template_service(template_repository, access_control):
    return LicenseTemplateService(template_repository, access_control)


@pytest.fixture
def approval_engine(approval_repository, access_control, audit_trail, uow, notifier, event_bus):
    return ApprovalWorkflowEngine(
        approval_repository=approval_repository,
        access_control=access_control,
        audit_trail=audit_trail,
        uow=uow,
        notifier=notifier,
        event_bus=event_bus,
    )


@pytest.fixture
def lifecycle(
    license_repository,
    approval_repository,
    template_service,
    validation_service,
    access_control,
    approval_engine,
    audit_trail,
    uow,
    event_bus,
):
    """Fixture for LicenseLifecycleManager over in-memory adapters."""
    return LicenseLifecycleManager(
        license_repository=license_repository,
        approval_repository=approval_repository,
        template_service=template_service,
        validation_service=validation_service,
        access_control=access_control,
        approval_engine=approval_engine,
        audit_trail=audit_trail,
        uow=uow,
        event_bus=event_bus,
    )


@pytest.fixture
def recorded_events(event_bus):
    """Subscribe a recording handler to every license and approval event."""
    from core.infrastructure.event_handlers import APPROVAL_EVENTS, LICENSE_EVENTS

    handler = RecordingHandler()
    for event_type in LICENSE_EVENTS + APPROVAL_EVENTS:
        event_bus.subscribe(event_type, handler)
    return handler.events
