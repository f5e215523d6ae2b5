"""
Composition root.

Wires the Django adapters into the application services. Tunables come
from the LICENSE_GOVERNANCE settings dict.
"""
import functools
from dataclasses import dataclass
from typing import Any, Dict

from django.conf import settings

from approvals.application.services.approval_workflow import ApprovalWorkflowEngine
from approvals.infrastructure.repositories.django_license_approval_repository import (
    DjangoLicenseApprovalRepository,
)
from core.infrastructure.database import DjangoUnitOfWork
from core.infrastructure.events import event_bus
from core.infrastructure.notifications import EventBusNotificationDispatcher
from licenses.application.services.audit_trail import AuditTrail
from licenses.application.services.license_lifecycle_manager import LicenseLifecycleManager
from licenses.application.services.license_template_service import LicenseTemplateService
from licenses.application.services.license_validation_service import LicenseValidationService
from licenses.infrastructure.repositories.django_audit_log_repository import (
    DjangoLicenseAuditLogRepository,
)
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_template_repository import (
    DjangoLicenseTemplateRepository,
)
from owners.application.services.owner_access_control import OwnerAccessControl
from owners.infrastructure.django_user_directory import DjangoUserDirectory
from owners.infrastructure.repositories.django_owner_management_repository import (
    DjangoOwnerManagementRepository,
)

DEFAULTS: Dict[str, Any] = {
    "DEFAULT_VALIDITY_DAYS": 365,
    "DEFAULT_APPROVAL_TIMEOUT_DAYS": 7,
    "KEY_GENERATION_ATTEMPTS": 5,
    "RECENT_ACTIVITY_LIMIT": 20,
    "APPROVAL_REMINDER_HOURS": 24,
    "VERIFY_USERS": True,
}


def governance_setting(name: str) -> Any:
    """Read one LICENSE_GOVERNANCE value, falling back to its default."""
    return getattr(settings, "LICENSE_GOVERNANCE", {}).get(name, DEFAULTS[name])


@dataclass(frozen=True)
class Services:
    """Application services sharing one set of adapters."""

    access_control: OwnerAccessControl
    audit_trail: AuditTrail
    validation: LicenseValidationService
    templates: LicenseTemplateService
    approvals: ApprovalWorkflowEngine
    lifecycle: LicenseLifecycleManager


def build_services() -> Services:
    """Create the application services over the Django adapters."""
    uow = DjangoUnitOfWork()
    license_repository = DjangoLicenseRepository()
    approval_repository = DjangoLicenseApprovalRepository()

    access_control = OwnerAccessControl(
        DjangoOwnerManagementRepository(),
        DjangoUserDirectory() if governance_setting("VERIFY_USERS") else None,
    )
    audit_trail = AuditTrail(DjangoLicenseAuditLogRepository())
    validation = LicenseValidationService(license_repository)
    templates = LicenseTemplateService(DjangoLicenseTemplateRepository(), access_control)
    approvals = ApprovalWorkflowEngine(
        approval_repository=approval_repository,
        access_control=access_control,
        audit_trail=audit_trail,
        uow=uow,
        notifier=EventBusNotificationDispatcher(event_bus),
        event_bus=event_bus,
        default_timeout_days=governance_setting("DEFAULT_APPROVAL_TIMEOUT_DAYS"),
    )
    lifecycle = LicenseLifecycleManager(
        license_repository=license_repository,
        approval_repository=approval_repository,
        template_service=templates,
        validation_service=validation,
        access_control=access_control,
        approval_engine=approvals,
        audit_trail=audit_trail,
        uow=uow,
        event_bus=event_bus,
        default_validity_days=governance_setting("DEFAULT_VALIDITY_DAYS"),
        key_generation_attempts=governance_setting("KEY_GENERATION_ATTEMPTS"),
        recent_activity_limit=governance_setting("RECENT_ACTIVITY_LIMIT"),
    )
    return Services(
        access_control=access_control,
        audit_trail=audit_trail,
        validation=validation,
        templates=templates,
        approvals=approvals,
        lifecycle=lifecycle,
    )


@functools.lru_cache(maxsize=None)
def get_services() -> Services:
    """Process-wide services."""
    return build_services()
