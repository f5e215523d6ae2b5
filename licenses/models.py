from licenses.infrastructure.models import License, LicenseAuditLog, LicenseTemplate  # noqa: F401
