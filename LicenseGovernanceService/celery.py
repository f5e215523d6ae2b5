"""
Celery configuration for background tasks.

Used for the periodic expiry sweeps and approval reminders.
"""
import os

from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "LicenseGovernanceService.settings.base")

app = Celery("LicenseGovernanceService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "expire-approvals": {
        "task": "core.tasks.expire_approvals_task",
        "schedule": crontab(minute="*/15"),
    },
    "expire-licenses": {
        "task": "core.tasks.expire_licenses_task",
        "schedule": crontab(minute=5),
    },
    "remind-expiring-approvals": {
        "task": "core.tasks.remind_expiring_approvals_task",
        "schedule": crontab(hour=8, minute=0),
    },
}
