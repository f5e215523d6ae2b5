"""
License lifecycle manager.

Single entry point for creating, activating, renewing, suspending and
revoking licenses and for resolving their approval requests. Each
operation authorizes the caller, mutates the license, opens or resolves
the approval request and appends the audit entry inside one unit of
work; events and notifications go out after it commits.
"""
import functools
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from approvals.application.services.approval_workflow import (
    ApprovalWorkflowEngine,
    ResolutionOutcome,
)
from approvals.domain.approval import LicenseApproval
from approvals.domain.request_payloads import (
    CreationRequest,
    ModificationRequest,
    RenewalRequest,
    RevocationRequest,
    parse_request_data,
)
from approvals.ports.license_approval_repository import LicenseApprovalRepository
from core.domain.events import DomainEvent, EventBus
from core.domain.exceptions import (
    ConcurrentModificationError,
    InvalidLicenseStatusError,
    LicenseKeyConflictError,
    LicenseNotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from core.domain.serialization import snapshot_of, utc_now
from core.domain.value_objects import (
    SYSTEM_ACTOR,
    ApprovalDecision,
    ApprovalStatus,
    ApprovalType,
    AuditAction,
    LicenseStatus,
    LicenseType,
    OwnerPermission,
)
from core.infrastructure.database import UnitOfWork
from core.metrics import license_transitions_total, licenses_created_total
from licenses.application.commands.create_license import CreateLicenseCommand
from licenses.application.commands.request_license_change import RequestLicenseChangeCommand
from licenses.application.commands.submit_license_request import SubmitLicenseRequestCommand
from licenses.application.dto.license_dto import LicenseReportDTO
from licenses.application.services.audit_trail import AuditTrail
from licenses.application.services.license_template_service import LicenseTemplateService
from licenses.application.services.license_validation_service import LicenseValidationService
from licenses.domain.audit_log import LicenseAuditLogEntry
from licenses.domain.events import (
    LicenseActivated,
    LicenseApproved,
    LicenseCreated,
    LicenseExpired,
    LicenseModified,
    LicenseRejected,
    LicenseRenewed,
    LicenseRevoked,
    LicenseSuspended,
)
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.domain.services import LicenseHierarchy
from licenses.domain.template import LicenseTemplate
from licenses.ports.license_repository import LicenseRepository
from owners.application.services.owner_access_control import OwnerAccessControl

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_DAYS = 365
AUTO_APPROVAL_REASON = "Auto-approved based on criteria"


class LicenseLifecycleManager:
    """Orchestrates license state changes."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        approval_repository: LicenseApprovalRepository,
        template_service: LicenseTemplateService,
        validation_service: LicenseValidationService,
        access_control: OwnerAccessControl,
        approval_engine: ApprovalWorkflowEngine,
        audit_trail: AuditTrail,
        uow: UnitOfWork,
        event_bus: Optional[EventBus] = None,
        default_validity_days: int = DEFAULT_VALIDITY_DAYS,
        key_generation_attempts: int = 5,
        recent_activity_limit: int = 20,
    ):
        self.license_repository = license_repository
        self.approval_repository = approval_repository
        self.template_service = template_service
        self.validation_service = validation_service
        self.access_control = access_control
        self.approval_engine = approval_engine
        self.audit_trail = audit_trail
        self.uow = uow
        self.event_bus = event_bus
        self.default_validity_days = default_validity_days
        self.key_generation_attempts = key_generation_attempts
        self.recent_activity_limit = recent_activity_limit

    # Helpers

    async def _get(self, license_id: uuid.UUID) -> License:
        license = await self.license_repository.find_by_id(license_id)
        if license is None:
            raise LicenseNotFoundError(f"License {license_id} not found")
        return license

    async def _generate_unique_key(self, license_type: LicenseType, issued_by: str) -> str:
        """
        Generate a license key not used by any license yet.

        Raises:
            LicenseKeyConflictError: If every attempt collided
        """
        for attempt in range(self.key_generation_attempts):
            key = generate_license_key(license_type, issued_by)
            if not await self.license_repository.key_exists(key):
                return key
            logger.warning("License key collision, regenerating", extra={"attempt": attempt + 1})
        raise LicenseKeyConflictError(
            f"Could not generate a unique license key after {self.key_generation_attempts} attempts"
        )

    async def _find_template(self, template_id) -> Optional[LicenseTemplate]:
        """Template of a license, active or not; None if it is gone."""
        if not template_id:
            return None
        return await self.template_service.template_repository.find_by_id(
            uuid.UUID(str(template_id))
        )

    async def _renewal_period(self, license: License, validity_days: Optional[int]) -> int:
        if validity_days:
            return validity_days
        template = await self._find_template(license.template_id)
        if template is not None:
            return template.default_validity_days
        return self.default_validity_days

    async def _publish(self, event: DomainEvent) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(event)

    async def _publish_after_commit(self, event: DomainEvent) -> None:
        await self.uow.on_commit(functools.partial(self._publish, event))

    async def _ensure_parent_exists(self, parent_license_id: Optional[uuid.UUID]) -> None:
        if parent_license_id is not None:
            await self._get(parent_license_id)

    async def _try_auto_approve(self, approval: LicenseApproval) -> LicenseApproval:
        """Resolve a fresh request at once if an owner's criteria accept it."""
        approver = await self.approval_engine.find_auto_approver(approval)
        if approver is None:
            return approval
        logger.info(
            "Auto-approving approval request",
            extra={"approval_id": str(approval.id), "owner_id": approver.owner_id},
        )
        return await self.process_approval(
            approval.id, ApprovalDecision.APPROVE, approver.owner_id, AUTO_APPROVAL_REASON
        )

    async def _transition(
        self,
        license: License,
        updated: License,
        action: AuditAction,
        performed_by: str,
        reason: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> License:
        """Persist a license change and its audit entry. Runs inside a unit of work."""
        saved = await self.license_repository.update(updated)
        await self.audit_trail.record(
            license_id=saved.id,
            action=action,
            performed_by=performed_by,
            new_state=snapshot_of(saved),
            previous_state=snapshot_of(license),
            reason=reason,
            metadata=metadata,
        )
        license_transitions_total.labels(action=action.value).inc()
        return saved

    # Creation

    async def create_license(self, command: CreateLicenseCommand, owner_id: str) -> License:
        """
        Create a license, directly or from a template.

        Args:
            command: CreateLicenseCommand
            owner_id: Issuing owner

        Returns:
            The created license; approved but still pending when approval
            was skipped or auto-approved

        Raises:
            PermissionDeniedError: If the owner may not create licenses
            TemplateNotFoundError: If the template is missing or inactive
            LicenseNotFoundError: If the parent license does not exist
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.CREATE_LICENSES
        )

        template = None
        if command.template_id:
            template = await self.template_service.get_active_template(command.template_id)

        license_type = command.license_type or (template.license_type if template else None)
        if license_type is None:
            raise ValueError("A license type or a template is required")
        features = {**(template.default_features if template else {}), **command.features}
        limits = {**(template.default_limits if template else {}), **command.limits}
        validity_days = (
            command.validity_days
            or (template.default_validity_days if template else None)
            or self.default_validity_days
        )
        skip_approval = command.skip_approval or (
            template is not None and not template.requires_approval
        )
        await self._ensure_parent_exists(command.parent_license_id)

        approval = None
        async with self.uow.atomic():
            license = License.create(
                license_key=await self._generate_unique_key(license_type, owner_id),
                license_type=license_type,
                issued_to=command.issued_to,
                issued_by=owner_id,
                validity_days=validity_days,
                features=features,
                limits=limits,
                subscription_id=command.subscription_id,
                parent_license_id=command.parent_license_id,
                template_id=template.id if template else None,
                metadata=command.metadata,
            )
            if skip_approval:
                license = license.approve(owner_id)
            saved = await self.license_repository.add(license)

            if not skip_approval:
                payload = CreationRequest(
                    license_type=license_type,
                    issued_to=command.issued_to,
                    validity_days=validity_days,
                    features=features,
                    limits=limits,
                    template_id=str(template.id) if template else None,
                    subscription_id=command.subscription_id,
                    parent_license_id=(
                        str(command.parent_license_id) if command.parent_license_id else None
                    ),
                    metadata=command.metadata,
                )
                approval = await self.approval_engine.submit_approval(
                    license_id=saved.id,
                    requested_by=owner_id,
                    approval_type=ApprovalType.CREATION,
                    request_data=payload.to_request_data(),
                    priority=command.priority,
                    record_audit=False,
                )

            await self.audit_trail.record(
                license_id=saved.id,
                action=AuditAction.CREATED,
                performed_by=owner_id,
                new_state=snapshot_of(saved),
                reason="License created",
                metadata={
                    "approval_id": str(approval.id) if approval else None,
                    "skip_approval": skip_approval,
                    "template_id": str(template.id) if template else None,
                },
            )
            await self._publish_after_commit(
                LicenseCreated(
                    aggregate_id=str(saved.id),
                    license_id=saved.id,
                    performed_by=owner_id,
                    license_type=license_type.value,
                    approval_id=approval.id if approval else None,
                )
            )

        licenses_created_total.labels(
            license_type=license_type.value,
            approval="skipped" if skip_approval else "required",
        ).inc()
        logger.info(
            "License created",
            extra={
                "license_id": str(saved.id),
                "license_type": license_type.value,
                "issued_to": saved.issued_to,
                "skip_approval": skip_approval,
            },
        )

        if approval is not None:
            resolved = await self._try_auto_approve(approval)
            if not resolved.is_pending:
                return await self._get(saved.id)
        return saved

    async def submit_license_request(
        self, command: SubmitLicenseRequestCommand, requested_by: str
    ) -> LicenseApproval:
        """
        Ask owners for a license that does not exist yet.

        A license id is reserved; the license is materialized under it
        when the request is approved.

        Args:
            command: SubmitLicenseRequestCommand
            requested_by: Requesting user

        Returns:
            The approval request (already resolved if auto-approved)
        """
        if command.template_id:
            await self.template_service.get_active_template(uuid.UUID(str(command.template_id)))
        payload = CreationRequest(
            license_type=command.license_type,
            issued_to=command.issued_to or requested_by,
            validity_days=command.validity_days,
            features=command.features,
            limits=command.limits,
            template_id=str(command.template_id) if command.template_id else None,
            subscription_id=command.subscription_id,
            metadata=command.metadata,
        )
        approval = await self.approval_engine.submit_approval(
            license_id=uuid.uuid4(),
            requested_by=requested_by,
            approval_type=ApprovalType.CREATION,
            request_data=payload.to_request_data(),
            priority=command.priority,
            owner_id=command.owner_id,
        )
        logger.info(
            "License request submitted",
            extra={"approval_id": str(approval.id), "requested_by": requested_by},
        )
        return await self._try_auto_approve(approval)

    async def request_license_change(
        self, command: RequestLicenseChangeCommand, requested_by: str
    ) -> LicenseApproval:
        """
        Open a modification, renewal or revocation request.

        The requester must hold the license or act for its issuer.

        Args:
            command: RequestLicenseChangeCommand
            requested_by: Requesting user

        Returns:
            The approval request (already resolved if auto-approved)
        """
        license = await self._get(command.license_id)
        if requested_by != license.issued_to:
            await self.access_control.validate_license_access(requested_by, license.issued_by)
        if license.is_terminal:
            raise InvalidLicenseStatusError(
                f"Cannot request changes to a {license.status.value} license"
            )
        if command.approval_type == ApprovalType.REVOCATION and license.status not in (
            LicenseStatus.ACTIVE,
            LicenseStatus.SUSPENDED,
        ):
            raise InvalidLicenseStatusError(f"Cannot revoke a {license.status.value} license")

        if command.approval_type == ApprovalType.MODIFICATION:
            payload = ModificationRequest(
                license_type=license.license_type,
                features=command.features,
                limits=command.limits,
                metadata=command.metadata,
            )
        elif command.approval_type == ApprovalType.RENEWAL:
            payload = RenewalRequest(
                license_type=license.license_type, validity_days=command.validity_days
            )
        else:
            payload = RevocationRequest(license_type=license.license_type, reason=command.reason)

        approval = await self.approval_engine.submit_approval(
            license_id=license.id,
            requested_by=requested_by,
            approval_type=command.approval_type,
            request_data=payload.to_request_data(),
            priority=command.priority,
            owner_id=command.owner_id or license.issued_by,
        )
        return await self._try_auto_approve(approval)

    async def resubmit_license(self, license_id: uuid.UUID, owner_id: str) -> LicenseApproval:
        """
        Return an unapproved draft license to approval.

        Applies to a rejected draft and to a draft whose creation request
        expired. Refused while a request for the license is still open.

        Args:
            license_id: License UUID
            owner_id: Acting owner

        Returns:
            The new creation approval request
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.CREATE_LICENSES
        )
        async with self.uow.atomic():
            license = await self._get(license_id)
            open_requests = [
                a for a in await self.approval_repository.find_by_license(license_id) if a.is_pending
            ]
            if open_requests:
                raise InvalidLicenseStatusError(
                    f"License {license_id} already has an open approval request"
                )
            resubmitted = license.resubmit()
            payload = CreationRequest(
                license_type=license.license_type,
                issued_to=license.issued_to,
                validity_days=max(1, (license.valid_until - license.valid_from).days),
                features=license.features,
                limits=license.limits,
                template_id=str(license.template_id) if license.template_id else None,
                subscription_id=license.subscription_id,
                metadata=license.metadata,
            )
            approval = await self.approval_engine.submit_approval(
                license_id=license.id,
                requested_by=owner_id,
                approval_type=ApprovalType.CREATION,
                request_data=payload.to_request_data(),
                record_audit=False,
            )
            await self._transition(
                license,
                resubmitted,
                AuditAction.REQUESTED,
                owner_id,
                reason="License resubmitted for approval",
                metadata={"approval_id": str(approval.id)},
            )
        logger.info("License resubmitted", extra={"license_id": str(license_id)})
        return await self._try_auto_approve(approval)

    # Approval resolution

    async def process_approval(
        self,
        approval_id: uuid.UUID,
        decision: ApprovalDecision,
        owner_id: str,
        reason: Optional[str] = None,
    ) -> LicenseApproval:
        """
        Approve or reject a request and apply the requested license change.

        Args:
            approval_id: Approval UUID
            decision: Approve or reject
            owner_id: Deciding owner
            reason: Optional reason

        Returns:
            Resolved approval request

        Raises:
            PermissionDeniedError: If the owner may not approve licenses
            ApprovalNotFoundError: If the request does not exist
            InvalidStateError: If the request is not pending or has expired
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.APPROVE_LICENSES
        )
        return await self.approval_engine.process_approval(
            approval_id,
            decision,
            owner_id,
            reason=reason,
            on_resolved=self._apply_resolution,
        )

    async def _apply_resolution(self, approval: LicenseApproval) -> Optional[ResolutionOutcome]:
        """Apply a resolved request to its license. Runs inside the resolving unit of work."""
        approved = approval.status == ApprovalStatus.APPROVED
        resolver = approval.approved_by or approval.rejected_by
        payload = parse_request_data(approval.approval_type, approval.request_data)

        if approval.approval_type == ApprovalType.CREATION:
            license = await self.license_repository.find_by_id(approval.license_id)
            if license is None:
                if not approved:
                    return None
                saved = await self._materialize(approval, payload)
                return ResolutionOutcome(new_state=snapshot_of(saved))
            if approved:
                updated = license.approve(resolver)
                event = LicenseApproved(
                    aggregate_id=str(license.id), license_id=license.id, performed_by=resolver
                )
            else:
                updated = license.reject(approval.rejection_reason)
                event = LicenseRejected(
                    aggregate_id=str(license.id),
                    license_id=license.id,
                    performed_by=resolver,
                    reason=approval.rejection_reason,
                )
            saved = await self.license_repository.update(updated)
            license_transitions_total.labels(
                action=AuditAction.APPROVED.value if approved else AuditAction.REJECTED.value
            ).inc()
            await self._publish_after_commit(event)
            return ResolutionOutcome(
                new_state=snapshot_of(saved), previous_state=snapshot_of(license)
            )

        if not approved:
            return None

        license = await self._get(approval.license_id)
        if approval.approval_type == ApprovalType.MODIFICATION:
            updated = license.modify(payload.features, payload.limits, payload.metadata)
            event = LicenseModified(
                aggregate_id=str(license.id), license_id=license.id, performed_by=resolver
            )
        elif approval.approval_type == ApprovalType.RENEWAL:
            period = await self._renewal_period(license, payload.validity_days)
            updated = license.renew(period)
            event = LicenseRenewed(
                aggregate_id=str(license.id),
                license_id=license.id,
                performed_by=resolver,
                previous_status=license.status,
            )
        else:
            updated = license.revoke()
            event = LicenseRevoked(
                aggregate_id=str(license.id),
                license_id=license.id,
                performed_by=resolver,
                reason=payload.reason,
            )
        saved = await self.license_repository.update(updated)
        license_transitions_total.labels(action=approval.approval_type.value).inc()
        await self._publish_after_commit(event)
        return ResolutionOutcome(new_state=snapshot_of(saved), previous_state=snapshot_of(license))

    async def _materialize(self, approval: LicenseApproval, payload: CreationRequest) -> License:
        """Create the license a self-service request asked for."""
        template = await self._find_template(payload.template_id)
        validity_days = (
            payload.validity_days
            or (template.default_validity_days if template else None)
            or self.default_validity_days
        )
        license = License.create(
            license_key=await self._generate_unique_key(payload.license_type, approval.approved_by),
            license_type=payload.license_type,
            issued_to=payload.issued_to or approval.requested_by,
            issued_by=approval.approved_by,
            validity_days=validity_days,
            features={**(template.default_features if template else {}), **payload.features},
            limits={**(template.default_limits if template else {}), **payload.limits},
            subscription_id=payload.subscription_id,
            parent_license_id=(
                uuid.UUID(payload.parent_license_id) if payload.parent_license_id else None
            ),
            template_id=template.id if template else None,
            metadata={**payload.metadata, "requested_by": approval.requested_by},
            license_id=approval.license_id,
        ).approve(approval.approved_by)
        saved = await self.license_repository.add(license)
        licenses_created_total.labels(
            license_type=saved.license_type.value, approval="requested"
        ).inc()
        await self._publish_after_commit(
            LicenseCreated(
                aggregate_id=str(saved.id),
                license_id=saved.id,
                performed_by=approval.approved_by,
                license_type=saved.license_type.value,
                approval_id=approval.id,
            )
        )
        return saved

    # Transitions

    async def activate_license(self, license_key: str, acting_user_id: str) -> License:
        """
        Activate an approved pending license by its key.

        Args:
            license_key: License key string
            acting_user_id: License holder, or the issuer or one of its delegates

        Returns:
            Active license

        Raises:
            LicenseNotFoundError: If the key is unknown
            PermissionDeniedError: If the acting user is not entitled
            ValidationFailedError: If the license may not be activated now
            InvalidLicenseStatusError: If the license is not approved
        """
        license = await self.license_repository.find_by_license_key(license_key)
        if license is None:
            raise LicenseNotFoundError("License not found")
        if acting_user_id != license.issued_to and not await self.access_control.can_user_access_license(
            acting_user_id, license.issued_by
        ):
            raise PermissionDeniedError(
                "license_holder", f"User {acting_user_id} does not hold license {license.id}"
            )

        validity = self.validation_service.validate_for_activation(license)
        if not validity.is_valid:
            raise ValidationFailedError(validity.error, validity.details)
        if not license.is_approved:
            raise InvalidLicenseStatusError("License is not approved")

        async with self.uow.atomic():
            activated = await self._transition(
                license,
                license.activate(),
                AuditAction.ACTIVATED,
                acting_user_id,
                reason="License activated",
            )
            await self._publish_after_commit(
                LicenseActivated(
                    aggregate_id=str(license.id), license_id=license.id, performed_by=acting_user_id
                )
            )
        logger.info("License activated", extra={"license_id": str(license.id)})
        return activated

    async def renew_license(
        self,
        license_id: uuid.UUID,
        owner_id: str,
        validity_days: Optional[int] = None,
    ) -> License:
        """
        Extend a license from the later of its current end and now.

        The period is `validity_days`, else the default validity of the
        license's template, else the configured default. A suspended
        license is reactivated.

        Args:
            license_id: License UUID
            owner_id: Acting owner
            validity_days: Optional explicit period

        Returns:
            Renewed license
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.CREATE_LICENSES
        )
        async with self.uow.atomic():
            license = await self._get(license_id)
            period = await self._renewal_period(license, validity_days)
            renewed = await self._transition(
                license,
                license.renew(period),
                AuditAction.RENEWED,
                owner_id,
                reason=f"License renewed for {period} days",
                metadata={"period_days": period},
            )
            await self._publish_after_commit(
                LicenseRenewed(
                    aggregate_id=str(license.id),
                    license_id=license.id,
                    performed_by=owner_id,
                    previous_status=license.status,
                )
            )
        logger.info(
            "License renewed",
            extra={"license_id": str(license_id), "valid_until": renewed.valid_until.isoformat()},
        )
        return renewed

    async def suspend_license(
        self, license_id: uuid.UUID, owner_id: str, reason: Optional[str] = None
    ) -> License:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.REVOKE_LICENSES
        )
        async with self.uow.atomic():
            license = await self._get(license_id)
            suspended = await self._transition(
                license, license.suspend(), AuditAction.SUSPENDED, owner_id, reason=reason
            )
            await self._publish_after_commit(
                LicenseSuspended(
                    aggregate_id=str(license.id),
                    license_id=license.id,
                    performed_by=owner_id,
                    reason=reason,
                )
            )
        logger.info("License suspended", extra={"license_id": str(license_id), "reason": reason})
        return suspended

    async def revoke_license(
        self, license_id: uuid.UUID, owner_id: str, reason: Optional[str] = None
    ) -> License:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.REVOKE_LICENSES
        )
        async with self.uow.atomic():
            license = await self._get(license_id)
            revoked = await self._transition(
                license, license.revoke(), AuditAction.REVOKED, owner_id, reason=reason
            )
            await self._publish_after_commit(
                LicenseRevoked(
                    aggregate_id=str(license.id),
                    license_id=license.id,
                    performed_by=owner_id,
                    reason=reason,
                )
            )
        logger.info("License revoked", extra={"license_id": str(license_id), "reason": reason})
        return revoked

    async def reassign_parent(
        self,
        license_id: uuid.UUID,
        parent_license_id: Optional[uuid.UUID],
        owner_id: str,
    ) -> License:
        """
        Attach a license to a parent, or detach it with None.

        Raises:
            InvalidLicenseHierarchyError: If the license would become its own ancestor
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.CREATE_LICENSES
        )
        async with self.uow.atomic():
            license = await self._get(license_id)
            await self._ensure_parent_exists(parent_license_id)
            await LicenseHierarchy.ensure_acyclic(
                license.id, parent_license_id, self.license_repository.find_by_id
            )
            updated = await self._transition(
                license,
                license.with_parent(parent_license_id),
                AuditAction.MODIFIED,
                owner_id,
                reason="Parent license changed",
            )
            await self._publish_after_commit(
                LicenseModified(
                    aggregate_id=str(license.id), license_id=license.id, performed_by=owner_id
                )
            )
        return updated

    async def expire_licenses(self, now: Optional[datetime] = None) -> int:
        """
        Move active licenses past their validity window to expired.

        Licenses updated concurrently are skipped and picked up by the
        next sweep.

        Args:
            now: Reference time (defaults to utc now)

        Returns:
            Number of licenses this sweep expired
        """
        now = now or utc_now()
        candidates = await self.license_repository.find_expirable(now)
        expired = 0
        for license in candidates:
            try:
                async with self.uow.atomic():
                    await self._transition(
                        license,
                        license.mark_expired(now),
                        AuditAction.EXPIRED,
                        SYSTEM_ACTOR,
                        reason="License validity ended",
                    )
                    await self._publish_after_commit(
                        LicenseExpired(
                            aggregate_id=str(license.id),
                            license_id=license.id,
                            performed_by=SYSTEM_ACTOR,
                        )
                    )
                expired += 1
            except ConcurrentModificationError:
                logger.debug("License %s changed during expiry sweep", license.id)
            except Exception:
                logger.error("Failed to expire license %s", license.id, exc_info=True)
        logger.info("Expired licenses", extra={"count": expired})
        return expired

    # Queries

    async def get_license(self, license_id: uuid.UUID) -> License:
        return await self._get(license_id)

    async def get_sub_licenses(self, license_id: uuid.UUID) -> List[License]:
        await self._get(license_id)
        return await self.license_repository.find_children(license_id)

    async def get_license_audit_log(
        self, license_id: uuid.UUID, owner_id: str
    ) -> List[LicenseAuditLogEntry]:
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.VIEW_AUDIT_LOGS
        )
        return await self.audit_trail.history(license_id)

    async def generate_license_report(self, owner_id: str) -> LicenseReportDTO:
        """
        Aggregate counts and recent activity.

        Args:
            owner_id: Acting owner

        Returns:
            LicenseReportDTO with every type and status present
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.VIEW_AUDIT_LOGS
        )
        by_status = {
            status.value: await self.license_repository.count_by_status(status)
            for status in LicenseStatus
        }
        by_type = {
            license_type.value: await self.license_repository.count_by_type(license_type)
            for license_type in LicenseType
        }
        return LicenseReportDTO(
            total_licenses=await self.license_repository.count(),
            active_licenses=by_status[LicenseStatus.ACTIVE.value],
            expired_licenses=by_status[LicenseStatus.EXPIRED.value],
            pending_approvals=await self.approval_repository.count_by_status(
                ApprovalStatus.PENDING
            ),
            licenses_by_type=by_type,
            licenses_by_status=by_status,
            recent_activity=await self.audit_trail.recent(self.recent_activity_limit),
            generated_at=utc_now(),
        )
