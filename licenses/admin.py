"""
Django admin configuration for licenses app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import License, LicenseAuditLog, LicenseTemplate


def _json_block(value):
    if value:
        return format_html(
            '<pre style="background: #f5f5f5; padding: 10px; '
            'border-radius: 4px; overflow-x: auto;">{}</pre>',
            json.dumps(value, indent=2, default=str),
        )
    return "-"


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "license_key",
        "license_type",
        "status_display",
        "approval_status",
        "issued_to",
        "valid_until",
        "created_at",
    ]
    list_filter = ["status", "approval_status", "license_type", "valid_until", "created_at"]
    search_fields = ["license_key", "issued_to", "issued_by", "subscription_id"]
    readonly_fields = [
        "id",
        "license_key",
        "version",
        "approved_by",
        "approved_at",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license_key", "license_type", "issued_to", "issued_by"),
            },
        ),
        (
            "Status",
            {
                "fields": (
                    "status",
                    "approval_status",
                    "approved_by",
                    "approved_at",
                    "rejection_reason",
                ),
            },
        ),
        (
            "Validity",
            {
                "fields": ("valid_from", "valid_until"),
            },
        ),
        (
            "Entitlements",
            {
                "fields": ("features", "limits"),
            },
        ),
        (
            "Relations",
            {
                "fields": ("parent_license", "template", "subscription_id", "metadata"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("version", "created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "pending": "blue",
            "active": "green",
            "suspended": "orange",
            "revoked": "red",
            "expired": "gray",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("template", "parent_license")


@admin.register(LicenseTemplate)
class LicenseTemplateAdmin(admin.ModelAdmin):
    """Admin interface for LicenseTemplate model."""

    list_display = [
        "name",
        "license_type",
        "default_validity_days",
        "requires_approval",
        "is_active",
        "created_at",
    ]
    list_filter = ["license_type", "requires_approval", "is_active"]
    search_fields = ["name", "description", "created_by"]
    readonly_fields = ["id", "created_by", "created_at", "updated_at"]


@admin.register(LicenseAuditLog)
class LicenseAuditLogAdmin(admin.ModelAdmin):
    """Admin interface for LicenseAuditLog model."""

    list_display = [
        "action",
        "license_id",
        "performed_by",
        "ip_address",
        "created_at",
    ]
    list_filter = ["action", "created_at"]
    search_fields = ["license_id", "performed_by", "ip_address"]
    readonly_fields = [
        "id",
        "license_id",
        "action",
        "performed_by",
        "reason",
        "ip_address",
        "user_agent",
        "previous_state_display",
        "new_state_display",
        "metadata_display",
        "created_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license_id", "action", "performed_by", "reason"),
            },
        ),
        (
            "State",
            {
                "fields": ("previous_state_display", "new_state_display"),
            },
        ),
        (
            "Origin",
            {
                "fields": ("ip_address", "user_agent", "metadata_display", "created_at"),
            },
        ),
    )

    def previous_state_display(self, obj):
        return _json_block(obj.previous_state)

    previous_state_display.short_description = "Previous State"

    def new_state_display(self, obj):
        return _json_block(obj.new_state)

    new_state_display.short_description = "New State"

    def metadata_display(self, obj):
        return _json_block(obj.metadata)

    metadata_display.short_description = "Metadata"

    def has_add_permission(self, request):
        """Audit logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Audit logs are read-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Audit logs should not be deleted."""
        return False
