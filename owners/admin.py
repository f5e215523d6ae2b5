"""
Django admin configuration for owners app.
"""
from django.contrib import admin

from owners.infrastructure.models import OwnerManagement


@admin.register(OwnerManagement)
class OwnerManagementAdmin(admin.ModelAdmin):
    """Admin interface for OwnerManagement model."""

    list_display = [
        "owner_id",
        "auto_approval_display",
        "delegated_count",
        "created_at",
    ]
    list_filter = ["created_at", "updated_at"]
    search_fields = ["owner_id"]
    readonly_fields = ["id", "owner_id", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "owner_id"),
            },
        ),
        (
            "Governance",
            {
                "fields": ("permissions", "delegated_users", "settings"),
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

    def auto_approval_display(self, obj):
        """Display whether auto-approval is on."""
        return obj.auto_approval_enabled

    auto_approval_display.short_description = "Auto-approval"
    auto_approval_display.boolean = True

    def delegated_count(self, obj):
        """Display number of delegated users."""
        return len(obj.delegated_users or [])

    delegated_count.short_description = "Delegated Users"
