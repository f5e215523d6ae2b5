"""
Celery tasks for background processing.

Periodic expiry sweeps and approval reminders. Every sweep is
idempotent, so overlapping runs are harmless.
"""
import logging
from datetime import timedelta

from asgiref.sync import async_to_sync

from LicenseGovernanceService.celery import app

from core.infrastructure.container import get_services, governance_setting
from core.metrics import errors_total, sweep_duration_seconds

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def expire_approvals_task(self):
    """
    Celery task expiring overdue approval requests.

    Returns:
        Number of requests expired
    """
    try:
        with sweep_duration_seconds.labels(sweep="approvals").time():
            count = async_to_sync(get_services().approvals.expire_approvals)()
    except Exception as exc:
        errors_total.labels(error_type=type(exc).__name__, operation="expire_approvals").inc()
        logger.error("Approval expiry sweep failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    logger.info("Approval expiry sweep finished", extra={"expired": count})
    return count


@app.task(bind=True, max_retries=3)
def expire_licenses_task(self):
    """
    Celery task expiring active licenses past their validity window.

    Returns:
        Number of licenses expired
    """
    try:
        with sweep_duration_seconds.labels(sweep="licenses").time():
            count = async_to_sync(get_services().lifecycle.expire_licenses)()
    except Exception as exc:
        errors_total.labels(error_type=type(exc).__name__, operation="expire_licenses").inc()
        logger.error("License expiry sweep failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    logger.info("License expiry sweep finished", extra={"expired": count})
    return count


@app.task
def remind_expiring_approvals_task(hours=None):
    """
    Celery task reminding owners of requests about to expire.

    Args:
        hours: Reminder window (defaults to APPROVAL_REMINDER_HOURS)
    """
    window = timedelta(hours=hours or governance_setting("APPROVAL_REMINDER_HOURS"))
    with sweep_duration_seconds.labels(sweep="reminders").time():
        return async_to_sync(get_services().approvals.remind_expiring_approvals)(window)
