"""
License, LicenseTemplate and LicenseAuditLog models.
"""
import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

LICENSE_TYPE_CHOICES = [
    ("community", "Community"),
    ("trial", "Trial"),
    ("enterprise", "Enterprise"),
    ("custom", "Custom"),
]


class LicenseTemplate(models.Model):
    """
    Named defaults for creating licenses.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(null=True, blank=True)
    license_type = models.CharField(max_length=20, choices=LICENSE_TYPE_CHOICES)
    default_features = models.JSONField(default=dict, blank=True)
    default_limits = models.JSONField(default=dict, blank=True)
    default_validity_days = models.PositiveIntegerField(default=365)
    requires_approval = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.CharField(max_length=255)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_templates"
        ordering = ["name"]

    def __str__(self):
        return self.name


class License(models.Model):
    """
    A time-boxed entitlement granting features and limits to a holder.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("active", "Active"),
        ("suspended", "Suspended"),
        ("expired", "Expired"),
        ("revoked", "Revoked"),
    ]

    APPROVAL_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.CharField(max_length=64, unique=True)
    license_type = models.CharField(max_length=20, choices=LICENSE_TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    approval_status = models.CharField(
        max_length=20, choices=APPROVAL_STATUS_CHOICES, default="pending"
    )
    issued_to = models.CharField(max_length=255, db_index=True)
    issued_by = models.CharField(max_length=255)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    features = models.JSONField(default=dict, blank=True)
    limits = models.JSONField(default=dict, blank=True)
    subscription_id = models.CharField(max_length=255, null=True, blank=True)
    parent_license = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sub_licenses",
    )
    template = models.ForeignKey(
        LicenseTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="licenses",
    )
    metadata = models.JSONField(default=dict, blank=True)
    approved_by = models.CharField(max_length=255, null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "valid_until"]),
            models.Index(fields=["issued_to", "status"]),
            models.Index(fields=["license_type"]),
        ]
        constraints = [
            models.CheckConstraint(
                check=Q(valid_from__lt=F("valid_until")),
                name="license_valid_window",
            ),
            models.CheckConstraint(
                check=~Q(status="active") | Q(approval_status="approved"),
                name="license_active_requires_approval",
            ),
        ]

    def __str__(self):
        return f"{self.license_key} ({self.status})"

    @property
    def is_valid(self) -> bool:
        """
        Check if license is currently usable.

        Returns:
            True if approved, active and inside its validity window
        """
        now = timezone.now()
        return (
            self.approval_status == "approved"
            and self.status == "active"
            and self.valid_from <= now <= self.valid_until
        )


class LicenseAuditLog(models.Model):
    """
    Immutable audit trail of license and approval changes.

    Rows are inserted once and never updated or deleted.
    """

    ACTION_CHOICES = [
        ("created", "Created"),
        ("activated", "Activated"),
        ("suspended", "Suspended"),
        ("renewed", "Renewed"),
        ("revoked", "Revoked"),
        ("modified", "Modified"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("requested", "Requested"),
        ("expired", "Expired"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_id = models.UUIDField(db_index=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    performed_by = models.CharField(max_length=255)
    previous_state = models.JSONField(null=True, blank=True)
    new_state = models.JSONField(default=dict)
    reason = models.TextField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "license_audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license_id", "created_at"]),
            models.Index(fields=["action"]),
            models.Index(fields=["performed_by"]),
        ]

    def __str__(self):
        return f"{self.action} - {self.license_id}"

    def save(self, *args, **kwargs):
        """Insert only."""
        if not self._state.adding:
            raise ValueError("Audit log entries cannot be modified")
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries cannot be deleted")
