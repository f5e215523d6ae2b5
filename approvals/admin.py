"""
Django admin configuration for approvals app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from approvals.infrastructure.models import LicenseApproval


@admin.register(LicenseApproval)
class LicenseApprovalAdmin(admin.ModelAdmin):
    """Admin interface for LicenseApproval model."""

    list_display = [
        "id",
        "license_id",
        "approval_type",
        "status_display",
        "priority",
        "requested_by",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "approval_type", "priority", "created_at"]
    search_fields = ["license_id", "requested_by", "approved_by", "rejected_by"]
    readonly_fields = [
        "id",
        "license_id",
        "requested_by",
        "approval_type",
        "request_data_display",
        "status",
        "approved_by",
        "approved_at",
        "rejected_by",
        "rejected_at",
        "rejection_reason",
        "created_at",
        "updated_at",
    ]
    exclude = ["request_data"]
    fieldsets = (
        (
            "Request",
            {
                "fields": (
                    "id",
                    "license_id",
                    "requested_by",
                    "approval_type",
                    "priority",
                    "request_data_display",
                ),
            },
        ),
        (
            "Resolution",
            {
                "fields": (
                    "status",
                    "owner_id",
                    "expires_at",
                    "approved_by",
                    "approved_at",
                    "rejected_by",
                    "rejected_at",
                    "rejection_reason",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "pending": "orange",
            "approved": "green",
            "rejected": "red",
            "expired": "gray",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def request_data_display(self, obj):
        """Display request payload in a formatted way."""
        if obj.request_data:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.request_data, indent=2),
            )
        return "-"

    request_data_display.short_description = "Request Data"
