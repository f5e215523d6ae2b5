"""
License DTOs returned to the controller layer.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from licenses.domain.audit_log import LicenseAuditLogEntry


@dataclass
class LicenseUsageInfoDTO:
    """Read-only projection of a license for display and reporting."""

    license_id: uuid.UUID
    is_valid: bool
    status: str
    approval_status: str
    valid_from: datetime
    valid_until: datetime
    days_until_expiry: int
    features: Dict[str, Any]
    limits: Dict[str, Any]
    error: Optional[str] = None


@dataclass
class LicenseReportDTO:
    """Aggregate view of the license estate."""

    total_licenses: int
    active_licenses: int
    expired_licenses: int
    pending_approvals: int
    licenses_by_type: Dict[str, int]
    licenses_by_status: Dict[str, int]
    recent_activity: List[LicenseAuditLogEntry] = field(default_factory=list)
    generated_at: Optional[datetime] = None
