"""
RequestLicenseChangeCommand.

Request to modify, renew or revoke an existing license through approval.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.domain.value_objects import ApprovalPriority, ApprovalType


@dataclass
class RequestLicenseChangeCommand:
    """
    Command to open a modification, renewal or revocation request.

    Only the fields relevant to `approval_type` are read.
    """

    license_id: uuid.UUID
    approval_type: ApprovalType
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    validity_days: Optional[int] = None
    reason: Optional[str] = None
    priority: ApprovalPriority = ApprovalPriority.MEDIUM
    owner_id: Optional[str] = None

    def __post_init__(self):
        if self.approval_type == ApprovalType.CREATION:
            raise ValueError("Creation requests are submitted with SubmitLicenseRequestCommand")
