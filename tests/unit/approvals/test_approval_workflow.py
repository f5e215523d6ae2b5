"""
Unit tests for ApprovalWorkflowEngine.
"""

import asyncio
import uuid
from datetime import timedelta

import pytest

from approvals.application.services.approval_workflow import ResolutionOutcome
from approvals.domain.approval import LicenseApproval
from approvals.domain.events import ApprovalResolved, ApprovalSubmitted
from approvals.ports.license_approval_repository import ApprovalQueueFilters
from core.domain.exceptions import (
    ApprovalExpiredError,
    ApprovalNotFoundError,
    ApprovalNotPendingError,
    InvalidStateError,
    PermissionDeniedError,
)
from core.domain.serialization import utc_now
from core.domain.value_objects import (
    SYSTEM_ACTOR,
    ApprovalDecision,
    ApprovalPriority,
    ApprovalStatus,
    ApprovalType,
    AuditAction,
    NotificationEvent,
)
from tests.conftest import HOLDER, OTHER_OWNER, OWNER


async def _submit(engine, **overrides):
    values = {
        "license_id": uuid.uuid4(),
        "requested_by": HOLDER,
        "approval_type": ApprovalType.RENEWAL,
        "request_data": {"validity_days": 30},
        "owner_id": OWNER,
    }
    values.update(overrides)
    return await engine.submit_approval(**values)


async def _store_overdue(approval_repository, **overrides):
    values = {
        "license_id": uuid.uuid4(),
        "requested_by": HOLDER,
        "approval_type": ApprovalType.RENEWAL,
        "request_data": {},
        "priority": ApprovalPriority.MEDIUM,
        "timeout": timedelta(days=1),
        "owner_id": OWNER,
        "now": utc_now() - timedelta(days=2),
    }
    values.update(overrides)
    return await approval_repository.add(LicenseApproval.create(**values))


@pytest.mark.asyncio
class TestSubmitApproval:
    """Tests for opening approval requests."""

    async def test_deadline_uses_governing_owner_timeout(self, approval_engine, access_control):
        await access_control.update_owner_settings(OWNER, {"approval_timeout_days": 2})

        approval = await _submit(approval_engine)

        assert approval.status == ApprovalStatus.PENDING
        assert approval.expires_at - approval.created_at == timedelta(days=2)

    async def test_deadline_falls_back_to_default_timeout(self, approval_engine):
        approval = await _submit(approval_engine, owner_id=None)

        assert approval.expires_at - approval.created_at == timedelta(days=7)

    async def test_submission_is_audited(self, approval_engine, audit_repository):
        approval = await _submit(approval_engine)

        [entry] = audit_repository.entries
        assert entry.action == AuditAction.REQUESTED
        assert entry.license_id == approval.license_id
        assert entry.performed_by == HOLDER
        assert entry.metadata["approval_id"] == str(approval.id)

    async def test_submission_audit_can_be_folded_into_caller(
        self, approval_engine, audit_repository
    ):
        await _submit(approval_engine, record_audit=False)

        assert audit_repository.entries == []

    async def test_owner_and_delegates_are_notified(
        self, approval_engine, access_control, notifier, recorded_events
    ):
        await access_control.delegate_user(OWNER, "delegate-1")

        approval = await _submit(approval_engine)

        [request] = notifier.requests
        assert request.event == NotificationEvent.SUBMITTED
        assert request.recipients == (OWNER, "delegate-1")
        assert request.approval_id == str(approval.id)
        assert [type(e) for e in recorded_events] == [ApprovalSubmitted]

    async def test_owner_who_opted_out_is_not_notified(
        self, approval_engine, access_control, notifier
    ):
        await access_control.update_owner_settings(
            OWNER, {"notification_preferences": {"email_on_approval_request": False}}
        )

        await _submit(approval_engine)

        assert notifier.requests == []

    async def test_unscoped_request_notifies_every_owner(
        self, approval_engine, access_control, notifier
    ):
        await access_control.get_or_provision(OWNER)
        await access_control.get_or_provision(OTHER_OWNER)

        await _submit(approval_engine, owner_id=None)

        assert set(notifier.requests[0].recipients) == {OWNER, OTHER_OWNER}


@pytest.mark.asyncio
class TestProcessApproval:
    """Tests for resolving approval requests."""

    async def test_approve(self, approval_engine, audit_repository, notifier, recorded_events):
        approval = await _submit(approval_engine)

        resolved = await approval_engine.process_approval(
            approval.id, ApprovalDecision.APPROVE, OWNER
        )

        assert resolved.status == ApprovalStatus.APPROVED
        assert resolved.approved_by == OWNER
        entry = audit_repository.entries[-1]
        assert entry.action == AuditAction.APPROVED
        assert entry.previous_state["status"] == "pending"
        assert entry.new_state["status"] == "approved"
        assert notifier.requests[-1].event == NotificationEvent.APPROVED
        assert notifier.requests[-1].recipients == (HOLDER,)
        assert isinstance(recorded_events[-1], ApprovalResolved)

    async def test_reject_keeps_reason(self, approval_engine, audit_repository):
        approval = await _submit(approval_engine)

        resolved = await approval_engine.process_approval(
            approval.id, ApprovalDecision.REJECT, OWNER, reason="Budget"
        )

        assert resolved.status == ApprovalStatus.REJECTED
        assert resolved.rejection_reason == "Budget"
        assert audit_repository.entries[-1].reason == "Budget"

    async def test_resolution_hook_state_is_audited(self, approval_engine, audit_repository):
        approval = await _submit(approval_engine)

        async def hook(resolved):
            return ResolutionOutcome(new_state={"status": "active"}, previous_state={"status": "x"})

        await approval_engine.process_approval(
            approval.id, ApprovalDecision.APPROVE, OWNER, on_resolved=hook
        )

        entry = audit_repository.entries[-1]
        assert entry.new_state == {"status": "active"}
        assert entry.metadata["approval"]["status"] == "approved"

    async def test_failing_hook_rolls_back_resolution(
        self, approval_engine, approval_repository, notifier
    ):
        approval = await _submit(approval_engine)
        submitted_notifications = len(notifier.requests)

        async def hook(resolved):
            raise RuntimeError("license update failed")

        with pytest.raises(RuntimeError):
            await approval_engine.process_approval(
                approval.id, ApprovalDecision.APPROVE, OWNER, on_resolved=hook
            )

        assert (await approval_repository.find_by_id(approval.id)).is_pending
        assert len(notifier.requests) == submitted_notifications

    async def test_requires_approve_permission(self, approval_engine, access_control):
        approval = await _submit(approval_engine)
        await access_control.update_owner_permissions(
            OWNER, OWNER, {"can_approve_licenses": False}
        )

        with pytest.raises(PermissionDeniedError):
            await approval_engine.process_approval(approval.id, ApprovalDecision.APPROVE, OWNER)

    async def test_unknown_request(self, approval_engine):
        with pytest.raises(ApprovalNotFoundError):
            await approval_engine.process_approval(uuid.uuid4(), ApprovalDecision.APPROVE, OWNER)

    async def test_second_decision_is_refused(self, approval_engine):
        approval = await _submit(approval_engine)
        await approval_engine.process_approval(approval.id, ApprovalDecision.APPROVE, OWNER)

        with pytest.raises(ApprovalNotPendingError):
            await approval_engine.process_approval(
                approval.id, ApprovalDecision.REJECT, OTHER_OWNER
            )

    async def test_concurrent_decisions_resolve_once(self, approval_engine, audit_repository):
        approval = await _submit(approval_engine)

        results = await asyncio.gather(
            approval_engine.process_approval(approval.id, ApprovalDecision.APPROVE, OWNER),
            approval_engine.process_approval(approval.id, ApprovalDecision.REJECT, OTHER_OWNER),
            return_exceptions=True,
        )

        resolved = [r for r in results if isinstance(r, LicenseApproval)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(resolved) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], InvalidStateError)
        resolutions = [
            e for e in audit_repository.entries
            if e.action in (AuditAction.APPROVED, AuditAction.REJECTED)
        ]
        assert len(resolutions) == 1

    async def test_overdue_request_cannot_be_approved(
        self, approval_engine, approval_repository
    ):
        approval = await _store_overdue(approval_repository)

        with pytest.raises(ApprovalExpiredError):
            await approval_engine.process_approval(approval.id, ApprovalDecision.APPROVE, OWNER)

        assert (await approval_repository.find_by_id(approval.id)).is_pending


@pytest.mark.asyncio
class TestExpireApprovals:
    """Tests for the approval expiry sweep."""

    async def test_sweep_expires_overdue_requests_once(
        self, approval_engine, approval_repository, audit_repository, notifier
    ):
        overdue = await _store_overdue(approval_repository)
        current = await _submit(approval_engine)

        assert await approval_engine.expire_approvals() == 1
        assert await approval_engine.expire_approvals() == 0

        assert (await approval_repository.find_by_id(overdue.id)).status == ApprovalStatus.EXPIRED
        assert (await approval_repository.find_by_id(current.id)).is_pending
        [entry] = [e for e in audit_repository.entries if e.action == AuditAction.EXPIRED]
        assert entry.performed_by == SYSTEM_ACTOR
        assert entry.license_id == overdue.license_id
        assert notifier.events()[-1] == NotificationEvent.EXPIRED

    async def test_concurrent_sweeps_expire_each_request_once(
        self, approval_engine, approval_repository, audit_repository
    ):
        overdue = await _store_overdue(approval_repository)
        now = utc_now()

        counts = await asyncio.gather(
            approval_engine.expire_approvals(now), approval_engine.expire_approvals(now)
        )

        assert sum(counts) == 1
        assert (await approval_repository.find_by_id(overdue.id)).status == ApprovalStatus.EXPIRED
        expired_entries = [e for e in audit_repository.entries if e.action == AuditAction.EXPIRED]
        assert len(expired_entries) == 1

    async def test_sweep_continues_after_a_failure(
        self, approval_engine, approval_repository, monkeypatch
    ):
        first = await _store_overdue(approval_repository)
        second = await _store_overdue(approval_repository)
        original = approval_repository.resolve

        async def flaky_resolve(approval):
            if approval.id == first.id:
                raise RuntimeError("database unavailable")
            return await original(approval)

        monkeypatch.setattr(approval_repository, "resolve", flaky_resolve)

        assert await approval_engine.expire_approvals() == 1
        assert (await approval_repository.find_by_id(second.id)).status == ApprovalStatus.EXPIRED
        assert (await approval_repository.find_by_id(first.id)).is_pending

    async def test_reminders_go_to_governing_owner(
        self, approval_engine, approval_repository, access_control, notifier
    ):
        await access_control.get_or_provision(OWNER)
        await approval_repository.add(
            LicenseApproval.create(
                license_id=uuid.uuid4(),
                requested_by=HOLDER,
                approval_type=ApprovalType.RENEWAL,
                request_data={},
                priority=ApprovalPriority.MEDIUM,
                timeout=timedelta(hours=12),
                owner_id=OWNER,
            )
        )
        await _submit(approval_engine, owner_id=OTHER_OWNER)
        notifier.requests.clear()

        assert await approval_engine.remind_expiring_approvals(timedelta(hours=24)) == 1
        [request] = notifier.requests
        assert request.event == NotificationEvent.EXPIRING_SOON
        assert request.recipients == (OWNER,)


@pytest.mark.asyncio
class TestApprovalQueue:
    """Tests for the approval queue."""

    async def test_queue_orders_by_priority_then_age(self, approval_engine):
        low = await _submit(approval_engine, priority=ApprovalPriority.LOW)
        first_high = await _submit(approval_engine, priority=ApprovalPriority.HIGH)
        critical = await _submit(approval_engine, priority=ApprovalPriority.CRITICAL)
        second_high = await _submit(approval_engine, priority=ApprovalPriority.HIGH)

        queue = await approval_engine.get_approval_queue(OWNER)

        assert [a.id for a in queue] == [critical.id, first_high.id, second_high.id, low.id]

    async def test_queue_filters(self, approval_engine):
        renewal = await _submit(approval_engine)
        await _submit(approval_engine, approval_type=ApprovalType.REVOCATION, request_data={})
        resolved = await _submit(approval_engine)
        await approval_engine.process_approval(resolved.id, ApprovalDecision.APPROVE, OWNER)

        queue = await approval_engine.get_approval_queue(
            OWNER, ApprovalQueueFilters(approval_type=ApprovalType.RENEWAL)
        )

        assert [a.id for a in queue] == [renewal.id]

    async def test_queue_requires_approve_permission(self, approval_engine, access_control):
        await access_control.update_owner_permissions(
            OWNER, OTHER_OWNER, {"can_approve_licenses": False}
        )

        with pytest.raises(PermissionDeniedError):
            await approval_engine.get_approval_queue(OTHER_OWNER)
