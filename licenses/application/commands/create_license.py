"""
CreateLicenseCommand.

Command to issue a license, directly or from a template.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.domain.value_objects import ApprovalPriority, LicenseType


@dataclass
class CreateLicenseCommand:
    """
    Command to create a license.

    Explicit fields take precedence over template defaults; features and
    limits are merged key by key. Unless approval is skipped (by the
    command or by a template that does not require it), a creation
    approval request is opened.
    """

    issued_to: str
    license_type: Optional[LicenseType] = None
    validity_days: Optional[int] = None
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    template_id: Optional[uuid.UUID] = None
    subscription_id: Optional[str] = None
    parent_license_id: Optional[uuid.UUID] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    skip_approval: bool = False
    priority: ApprovalPriority = ApprovalPriority.MEDIUM
