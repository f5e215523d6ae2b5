"""
OwnerManagement model.
"""
import uuid

from django.db import models
from django.utils import timezone


class OwnerManagement(models.Model):
    """
    Governance record of an owner: capability flags, delegated users
    and approval settings. One row per owner.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=255, unique=True)
    permissions = models.JSONField(default=dict)
    delegated_users = models.JSONField(default=list, blank=True)
    settings = models.JSONField(default=dict)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "owner_management"
        ordering = ["created_at"]
        verbose_name = "owner management record"

    def __str__(self):
        return self.owner_id

    @property
    def auto_approval_enabled(self) -> bool:
        return bool((self.settings or {}).get("auto_approval_enabled"))
