"""
Django implementation of LicenseApprovalRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db.models import Case, IntegerField, Value, When

from approvals.domain.approval import LicenseApproval
from approvals.infrastructure.models import LicenseApproval as LicenseApprovalModel
from approvals.ports.license_approval_repository import (
    ApprovalQueueFilters,
    LicenseApprovalRepository,
)
from core.domain.value_objects import (
    ApprovalPriority,
    ApprovalStatus,
    ApprovalType,
)

PRIORITY_RANK = Case(
    *[When(priority=p.value, then=Value(p.rank)) for p in ApprovalPriority],
    default=Value(0),
    output_field=IntegerField(),
)


class DjangoLicenseApprovalRepository(LicenseApprovalRepository):
    """
    Django ORM implementation of LicenseApprovalRepository.
    """

    def _to_domain(self, model: LicenseApprovalModel) -> LicenseApproval:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseApproval model

        Returns:
            LicenseApproval domain entity
        """
        return LicenseApproval(
            id=model.id,
            license_id=model.license_id,
            requested_by=model.requested_by,
            approval_type=ApprovalType(model.approval_type),
            request_data=dict(model.request_data or {}),
            status=ApprovalStatus(model.status),
            priority=ApprovalPriority(model.priority),
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            owner_id=model.owner_id,
            approved_by=model.approved_by,
            approved_at=model.approved_at,
            rejected_by=model.rejected_by,
            rejected_at=model.rejected_at,
            rejection_reason=model.rejection_reason,
        )

    @sync_to_async
    def add(self, approval: LicenseApproval) -> LicenseApproval:
        model = LicenseApprovalModel.objects.create(
            id=approval.id,
            license_id=approval.license_id,
            requested_by=approval.requested_by,
            approval_type=approval.approval_type.value,
            request_data=approval.request_data,
            status=approval.status.value,
            priority=approval.priority.value,
            expires_at=approval.expires_at,
            owner_id=approval.owner_id,
            created_at=approval.created_at,
            updated_at=approval.updated_at,
        )
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, approval_id: uuid.UUID) -> Optional[LicenseApproval]:
        try:
            return self._to_domain(LicenseApprovalModel.objects.get(id=approval_id))
        except LicenseApprovalModel.DoesNotExist:
            return None

    @sync_to_async
    def resolve(self, approval: LicenseApproval) -> bool:
        """
        Persist a terminal transition if the stored request is still pending.

        Args:
            approval: Approval carrying its terminal state

        Returns:
            True if exactly this call moved the row out of pending
        """
        updated = LicenseApprovalModel.objects.filter(
            id=approval.id, status=ApprovalStatus.PENDING.value
        ).update(
            status=approval.status.value,
            approved_by=approval.approved_by,
            approved_at=approval.approved_at,
            rejected_by=approval.rejected_by,
            rejected_at=approval.rejected_at,
            rejection_reason=approval.rejection_reason,
            updated_at=approval.updated_at,
        )
        return updated == 1

    @sync_to_async
    def find_overdue(self, now: datetime) -> List[LicenseApproval]:
        models = LicenseApprovalModel.objects.filter(
            status=ApprovalStatus.PENDING.value, expires_at__lt=now
        ).order_by("expires_at")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def find_expiring_between(self, start: datetime, end: datetime) -> List[LicenseApproval]:
        models = LicenseApprovalModel.objects.filter(
            status=ApprovalStatus.PENDING.value,
            expires_at__gte=start,
            expires_at__lte=end,
        ).order_by("expires_at")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def find_with_filters(self, filters: ApprovalQueueFilters) -> List[LicenseApproval]:
        """
        List requests matching filters.

        Args:
            filters: Queue filters

        Returns:
            Requests, most urgent priority first, then oldest first
        """
        queryset = LicenseApprovalModel.objects.all()
        if filters.status is not None:
            queryset = queryset.filter(status=filters.status.value)
        if filters.approval_type is not None:
            queryset = queryset.filter(approval_type=filters.approval_type.value)
        if filters.priority is not None:
            queryset = queryset.filter(priority=filters.priority.value)
        if filters.requested_by:
            queryset = queryset.filter(requested_by=filters.requested_by)
        if filters.license_id:
            queryset = queryset.filter(license_id=filters.license_id)
        if filters.owner_id:
            queryset = queryset.filter(owner_id=filters.owner_id)
        if filters.expires_before:
            queryset = queryset.filter(expires_at__lt=filters.expires_before)

        queryset = queryset.annotate(priority_rank=PRIORITY_RANK).order_by(
            "-priority_rank", "created_at"
        )
        if filters.limit:
            queryset = queryset[: filters.limit]
        return [self._to_domain(m) for m in queryset]

    @sync_to_async
    def find_by_license(self, license_id: uuid.UUID) -> List[LicenseApproval]:
        models = LicenseApprovalModel.objects.filter(license_id=license_id).order_by("created_at")
        return [self._to_domain(m) for m in models]

    @sync_to_async
    def count_by_status(self, status: ApprovalStatus) -> int:
        return LicenseApprovalModel.objects.filter(status=status.value).count()
