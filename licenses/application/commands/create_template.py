"""
CreateTemplateCommand.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.domain.value_objects import LicenseType


@dataclass
class CreateTemplateCommand:
    """Command to create a license template."""

    name: str
    license_type: LicenseType
    default_validity_days: int = 365
    default_features: Dict[str, Any] = field(default_factory=dict)
    default_limits: Dict[str, Any] = field(default_factory=dict)
    requires_approval: bool = True
    description: Optional[str] = None
