"""
SubmitLicenseRequestCommand.

Self-service request for a license that does not exist yet.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.domain.value_objects import ApprovalPriority, LicenseType


@dataclass
class SubmitLicenseRequestCommand:
    """
    Command to ask owners for a new license.

    The license is materialized under a reserved id once the request
    is approved, issued to `issued_to` or to the requester.
    """

    license_type: LicenseType
    validity_days: Optional[int] = None
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    issued_to: Optional[str] = None
    template_id: Optional[str] = None
    subscription_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    priority: ApprovalPriority = ApprovalPriority.MEDIUM
    owner_id: Optional[str] = None
