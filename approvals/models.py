from approvals.infrastructure.models import LicenseApproval  # noqa: F401
