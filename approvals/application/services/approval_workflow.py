"""
Approval workflow engine.

Opens, resolves and expires change requests against licenses. Every
transition is a conditional update on `status = pending`, so concurrent
decisions and concurrent expiry sweeps resolve a request exactly once.
"""
import functools
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from approvals.domain.approval import LicenseApproval
from approvals.domain.events import ApprovalResolved, ApprovalSubmitted
from approvals.domain.services import AutoApprovalPolicy
from approvals.ports.license_approval_repository import (
    ApprovalQueueFilters,
    LicenseApprovalRepository,
)
from core.domain.events import EventBus
from core.domain.exceptions import (
    ApprovalExpiredError,
    ApprovalNotFoundError,
    ApprovalNotPendingError,
)
from core.domain.notifications import NotificationDispatcher, NotificationRequest
from core.domain.serialization import snapshot_of, utc_now
from core.domain.value_objects import (
    SYSTEM_ACTOR,
    ApprovalDecision,
    ApprovalPriority,
    ApprovalStatus,
    ApprovalType,
    AuditAction,
    NotificationEvent,
    OwnerPermission,
)
from core.infrastructure.database import UnitOfWork
from core.metrics import approvals_resolved_total, approvals_submitted_total
from licenses.application.services.audit_trail import AuditTrail
from owners.application.services.owner_access_control import OwnerAccessControl
from owners.domain.owner_management import DEFAULT_APPROVAL_TIMEOUT_DAYS, OwnerManagement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionOutcome:
    """License change applied while resolving a request."""

    new_state: Dict[str, Any]
    previous_state: Optional[Dict[str, Any]] = None


ResolutionHook = Callable[[LicenseApproval], Awaitable[Optional[ResolutionOutcome]]]


class ApprovalWorkflowEngine:
    """Lifecycle of license change requests."""

    def __init__(
        self,
        approval_repository: LicenseApprovalRepository,
        access_control: OwnerAccessControl,
        audit_trail: AuditTrail,
        uow: UnitOfWork,
        notifier: NotificationDispatcher,
        event_bus: Optional[EventBus] = None,
        default_timeout_days: int = DEFAULT_APPROVAL_TIMEOUT_DAYS,
    ):
        """
        Initialize engine.

        Args:
            approval_repository: Approval request repository
            access_control: Owner access control
            audit_trail: Audit log writer
            uow: Transaction boundary
            notifier: Notification dispatch port
            event_bus: Optional bus for approval events
            default_timeout_days: Timeout used when no owner settings apply
        """
        self.approval_repository = approval_repository
        self.access_control = access_control
        self.audit_trail = audit_trail
        self.uow = uow
        self.notifier = notifier
        self.event_bus = event_bus
        self.default_timeout_days = default_timeout_days

    async def _timeout_for(self, owner_id: str) -> timedelta:
        record = await self.access_control.owner_repository.find_by_owner_id(owner_id)
        days = record.settings.approval_timeout_days if record else self.default_timeout_days
        return timedelta(days=days)

    async def submit_approval(
        self,
        license_id: uuid.UUID,
        requested_by: str,
        approval_type: ApprovalType,
        request_data: Optional[Dict[str, Any]] = None,
        priority: ApprovalPriority = ApprovalPriority.MEDIUM,
        owner_id: Optional[str] = None,
        record_audit: bool = True,
    ) -> LicenseApproval:
        """
        Open a pending change request.

        The deadline is now plus the approval timeout of the governing
        owner (the requester when no owner is named), falling back to the
        configured default when that owner has no record.

        Args:
            license_id: License the request is about
            requested_by: Requesting user id
            approval_type: Kind of change requested
            request_data: Opaque payload describing the change
            priority: Request priority
            owner_id: Governing owner, if any
            record_audit: False when the caller folds the submission into
                its own audit entry

        Returns:
            Pending LicenseApproval
        """
        timeout = await self._timeout_for(owner_id or requested_by)
        approval = LicenseApproval.create(
            license_id=license_id,
            requested_by=requested_by,
            approval_type=approval_type,
            request_data=request_data,
            priority=priority,
            timeout=timeout,
            owner_id=owner_id,
        )

        async with self.uow.atomic():
            approval = await self.approval_repository.add(approval)
            if record_audit:
                await self.audit_trail.record(
                    license_id=license_id,
                    action=AuditAction.REQUESTED,
                    performed_by=requested_by,
                    new_state=snapshot_of(approval),
                    metadata={"approval_id": str(approval.id)},
                )
            await self.uow.on_commit(functools.partial(self._after_submission, approval))

        approvals_submitted_total.labels(approval_type=approval_type.value).inc()
        logger.info(
            "Approval request submitted",
            extra={
                "approval_id": str(approval.id),
                "license_id": str(license_id),
                "approval_type": approval_type.value,
                "priority": priority.value,
                "expires_at": approval.expires_at.isoformat(),
            },
        )
        return approval

    async def find_auto_approver(self, approval: LicenseApproval) -> Optional[OwnerManagement]:
        """
        Find the first owner whose auto-approval criteria accept a request.

        Args:
            approval: Pending approval request

        Returns:
            Owner record allowed to approve it, or None
        """
        for owner in await self.access_control.owner_repository.find_with_auto_approval():
            if not owner.settings.auto_approval_enabled:
                continue
            if not owner.has_permission(OwnerPermission.APPROVE_LICENSES):
                continue
            if AutoApprovalPolicy.matches(approval, owner.settings.auto_approval_criteria):
                return owner
        return None

    async def process_approval(
        self,
        approval_id: uuid.UUID,
        decision: ApprovalDecision,
        processed_by: str,
        reason: Optional[str] = None,
        on_resolved: Optional[ResolutionHook] = None,
    ) -> LicenseApproval:
        """
        Approve or reject a pending request.

        `on_resolved` runs inside the same transaction after the request
        has been resolved and applies the license change, if any. One
        audit entry records the resolution.

        Args:
            approval_id: Approval UUID
            decision: Approve or reject
            processed_by: Deciding owner
            reason: Optional reason, stored as rejection reason
            on_resolved: Optional hook applying the requested change

        Returns:
            Resolved LicenseApproval

        Raises:
            PermissionDeniedError: If processed_by may not approve licenses
            ApprovalNotFoundError: If the request does not exist
            ApprovalNotPendingError: If the request was already resolved
            ApprovalExpiredError: If the request is past its deadline
        """
        await self.access_control.validate_owner_permission(
            processed_by, OwnerPermission.APPROVE_LICENSES
        )

        async with self.uow.atomic():
            approval = await self.approval_repository.find_by_id(approval_id)
            if approval is None:
                raise ApprovalNotFoundError(f"Approval request {approval_id} not found")
            if not approval.is_pending:
                raise ApprovalNotPendingError(
                    f"Approval request {approval_id} is already {approval.status.value}"
                )

            now = utc_now()
            if approval.is_overdue(now):
                raise ApprovalExpiredError(f"Approval request {approval_id} has expired")

            if decision == ApprovalDecision.APPROVE:
                resolved = approval.approve(processed_by, now)
                action = AuditAction.APPROVED
            else:
                resolved = approval.reject(processed_by, reason, now)
                action = AuditAction.REJECTED

            if not await self.approval_repository.resolve(resolved):
                raise ApprovalNotPendingError(
                    f"Approval request {approval_id} was resolved concurrently"
                )

            outcome = await on_resolved(resolved) if on_resolved else None
            approval_snapshot = snapshot_of(resolved)
            await self.audit_trail.record(
                license_id=resolved.license_id,
                action=action,
                performed_by=processed_by,
                new_state=outcome.new_state if outcome else approval_snapshot,
                previous_state=outcome.previous_state if outcome else snapshot_of(approval),
                reason=reason,
                metadata={
                    "approval_id": str(resolved.id),
                    "approval_type": resolved.approval_type.value,
                    "approval": approval_snapshot,
                },
            )
            await self.uow.on_commit(functools.partial(self._after_resolution, resolved))

        approvals_resolved_total.labels(status=resolved.status.value).inc()
        logger.info(
            "Approval request %s",
            resolved.status.value,
            extra={
                "approval_id": str(resolved.id),
                "license_id": str(resolved.license_id),
                "processed_by": processed_by,
            },
        )
        return resolved

    async def expire_approvals(self, now: Optional[datetime] = None) -> int:
        """
        Expire every pending request whose deadline has passed.

        Idempotent and safe to run from several processes at once: a
        request is counted and audited only by the sweep that won its
        conditional update.

        Args:
            now: Reference time (defaults to utc now)

        Returns:
            Number of requests this sweep expired
        """
        now = now or utc_now()
        overdue = await self.approval_repository.find_overdue(now)
        logger.info("Expiring overdue approval requests", extra={"candidates": len(overdue)})

        expired = 0
        for approval in overdue:
            try:
                if await self._expire_one(approval, now):
                    expired += 1
            except Exception:
                logger.error(
                    "Failed to expire approval request %s", approval.id, exc_info=True
                )

        logger.info("Expired overdue approval requests", extra={"count": expired})
        return expired

    async def _expire_one(self, approval: LicenseApproval, now: datetime) -> bool:
        async with self.uow.atomic():
            expired = approval.expire(now)
            if not await self.approval_repository.resolve(expired):
                logger.debug("Approval request %s already resolved", approval.id)
                return False
            await self.audit_trail.record(
                license_id=approval.license_id,
                action=AuditAction.EXPIRED,
                performed_by=SYSTEM_ACTOR,
                new_state=snapshot_of(expired),
                previous_state=snapshot_of(approval),
                reason="Approval request expired",
                metadata={"approval_id": str(approval.id)},
            )
            await self.uow.on_commit(functools.partial(self._after_resolution, expired))
        approvals_resolved_total.labels(status=ApprovalStatus.EXPIRED.value).inc()
        return True

    async def remind_expiring_approvals(
        self, within: timedelta, now: Optional[datetime] = None
    ) -> int:
        """
        Notify governing owners about requests that expire soon.

        Args:
            within: Reminder window from now
            now: Reference time (defaults to utc now)

        Returns:
            Number of requests a reminder was sent for
        """
        now = now or utc_now()
        expiring = await self.approval_repository.find_expiring_between(now, now + within)
        reminded = 0
        for approval in expiring:
            recipients = await self._owner_recipients(approval.owner_id)
            if recipients:
                await self._notify(NotificationEvent.EXPIRING_SOON, approval, recipients)
                reminded += 1
        logger.info("Sent approval expiry reminders", extra={"count": reminded})
        return reminded

    async def get_approval_queue(
        self, owner_id: str, filters: Optional[ApprovalQueueFilters] = None
    ) -> List[LicenseApproval]:
        """
        List approval requests for review.

        Args:
            owner_id: Reviewing owner
            filters: Queue filters (defaults to every pending request)

        Returns:
            Requests ordered by priority, most urgent first, then by age
        """
        await self.access_control.validate_owner_permission(
            owner_id, OwnerPermission.APPROVE_LICENSES
        )
        return await self.approval_repository.find_with_filters(
            filters or ApprovalQueueFilters()
        )

    async def get_approval(self, approval_id: uuid.UUID) -> LicenseApproval:
        approval = await self.approval_repository.find_by_id(approval_id)
        if approval is None:
            raise ApprovalNotFoundError(f"Approval request {approval_id} not found")
        return approval

    async def _owner_recipients(self, owner_id: Optional[str]) -> List[str]:
        """Owners (and their delegated users) who want approval notifications."""
        repository = self.access_control.owner_repository
        if owner_id:
            record = await repository.find_by_owner_id(owner_id)
            if record is None:
                return [owner_id]
            owners = [record]
        else:
            owners = await repository.find_all()

        recipients: List[str] = []
        for owner in owners:
            if not owner.settings.notification_preferences.email_on_approval_request:
                continue
            for user_id in (owner.owner_id,) + owner.delegated_users:
                if user_id not in recipients:
                    recipients.append(user_id)
        return recipients

    async def _notify(
        self,
        event: NotificationEvent,
        approval: LicenseApproval,
        recipients: Sequence[str],
    ) -> None:
        await self.notifier.dispatch(
            NotificationRequest(
                event=event,
                recipients=tuple(recipients),
                approval_id=str(approval.id),
                license_id=str(approval.license_id),
                payload={
                    "approval_type": approval.approval_type.value,
                    "priority": approval.priority.value,
                    "status": approval.status.value,
                    "requested_by": approval.requested_by,
                    "expires_at": approval.expires_at.isoformat(),
                },
            )
        )

    async def _after_submission(self, approval: LicenseApproval) -> None:
        recipients = await self._owner_recipients(approval.owner_id)
        if recipients:
            await self._notify(NotificationEvent.SUBMITTED, approval, recipients)
        if self.event_bus is not None:
            await self.event_bus.publish(
                ApprovalSubmitted(
                    aggregate_id=str(approval.id),
                    approval_id=approval.id,
                    license_id=approval.license_id,
                    approval_type=approval.approval_type,
                    requested_by=approval.requested_by,
                )
            )

    async def _after_resolution(self, approval: LicenseApproval) -> None:
        event = {
            ApprovalStatus.APPROVED: NotificationEvent.APPROVED,
            ApprovalStatus.REJECTED: NotificationEvent.REJECTED,
            ApprovalStatus.EXPIRED: NotificationEvent.EXPIRED,
        }[approval.status]
        await self._notify(event, approval, [approval.requested_by])
        if self.event_bus is not None:
            await self.event_bus.publish(
                ApprovalResolved(
                    aggregate_id=str(approval.id),
                    approval_id=approval.id,
                    license_id=approval.license_id,
                    status=approval.status,
                    resolved_by=approval.approved_by or approval.rejected_by or SYSTEM_ACTOR,
                )
            )
