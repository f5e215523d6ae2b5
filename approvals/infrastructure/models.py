"""
LicenseApproval model.
"""
import uuid

from django.db import models
from django.utils import timezone


class LicenseApproval(models.Model):
    """
    A change request against one license.

    `license_id` is a plain reference: a self-service creation request
    points at a license id that is only materialized on approval.
    """

    APPROVAL_TYPE_CHOICES = [
        ("creation", "Creation"),
        ("modification", "Modification"),
        ("renewal", "Renewal"),
        ("revocation", "Revocation"),
    ]

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("expired", "Expired"),
    ]

    PRIORITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
        ("critical", "Critical"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_id = models.UUIDField(db_index=True)
    requested_by = models.CharField(max_length=255, db_index=True)
    approval_type = models.CharField(max_length=20, choices=APPROVAL_TYPE_CHOICES)
    request_data = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default="medium")
    expires_at = models.DateTimeField()
    owner_id = models.CharField(max_length=255, null=True, blank=True)
    approved_by = models.CharField(max_length=255, null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.CharField(max_length=255, null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_approvals"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"]),
            models.Index(fields=["status", "priority"]),
            models.Index(fields=["license_id", "status"]),
        ]

    def __str__(self):
        return f"{self.approval_type} {self.license_id} ({self.status})"
