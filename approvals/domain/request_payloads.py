"""
Typed views of approval request payloads.

`LicenseApproval.request_data` is stored as an opaque JSON map. Each
approval type reads it through its own payload class, so the
open-ended shape stays out of the approval state machine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type, Union

from core.domain.value_objects import ApprovalType, LicenseType

DEFAULT_REQUESTED_VALIDITY_DAYS = 365


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class CreationRequest:
    """Desired state of a license that does not exist yet."""

    license_type: LicenseType
    issued_to: Optional[str] = None
    validity_days: Optional[int] = None
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    template_id: Optional[str] = None
    subscription_id: Optional[str] = None
    parent_license_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_request_data(self) -> Dict[str, Any]:
        return {
            "license_type": self.license_type.value,
            "issued_to": self.issued_to,
            "validity_days": self.validity_days,
            "features": dict(self.features),
            "limits": dict(self.limits),
            "template_id": self.template_id,
            "subscription_id": self.subscription_id,
            "parent_license_id": self.parent_license_id,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_request_data(cls, data: Mapping[str, Any]) -> "CreationRequest":
        return cls(
            license_type=LicenseType(data["license_type"]),
            issued_to=data.get("issued_to"),
            validity_days=_optional_int(data.get("validity_days")),
            features=dict(data.get("features") or {}),
            limits=dict(data.get("limits") or {}),
            template_id=data.get("template_id"),
            subscription_id=data.get("subscription_id"),
            parent_license_id=data.get("parent_license_id"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class ModificationRequest:
    """Features, limits and metadata to merge into an existing license."""

    license_type: Optional[LicenseType] = None
    features: Dict[str, Any] = field(default_factory=dict)
    limits: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_request_data(self) -> Dict[str, Any]:
        return {
            "license_type": self.license_type.value if self.license_type else None,
            "features": dict(self.features),
            "limits": dict(self.limits),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_request_data(cls, data: Mapping[str, Any]) -> "ModificationRequest":
        license_type = data.get("license_type")
        return cls(
            license_type=LicenseType(license_type) if license_type else None,
            features=dict(data.get("features") or {}),
            limits=dict(data.get("limits") or {}),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class RenewalRequest:
    """Extension of an existing license."""

    license_type: Optional[LicenseType] = None
    validity_days: Optional[int] = None

    def to_request_data(self) -> Dict[str, Any]:
        return {
            "license_type": self.license_type.value if self.license_type else None,
            "validity_days": self.validity_days,
        }

    @classmethod
    def from_request_data(cls, data: Mapping[str, Any]) -> "RenewalRequest":
        license_type = data.get("license_type")
        return cls(
            license_type=LicenseType(license_type) if license_type else None,
            validity_days=_optional_int(data.get("validity_days")),
        )


@dataclass(frozen=True)
class RevocationRequest:
    """Revocation of an existing license."""

    license_type: Optional[LicenseType] = None
    reason: Optional[str] = None

    def to_request_data(self) -> Dict[str, Any]:
        return {
            "license_type": self.license_type.value if self.license_type else None,
            "reason": self.reason,
        }

    @classmethod
    def from_request_data(cls, data: Mapping[str, Any]) -> "RevocationRequest":
        license_type = data.get("license_type")
        return cls(
            license_type=LicenseType(license_type) if license_type else None,
            reason=data.get("reason"),
        )


RequestPayload = Union[CreationRequest, ModificationRequest, RenewalRequest, RevocationRequest]

PAYLOAD_TYPES: Dict[ApprovalType, Type] = {
    ApprovalType.CREATION: CreationRequest,
    ApprovalType.MODIFICATION: ModificationRequest,
    ApprovalType.RENEWAL: RenewalRequest,
    ApprovalType.REVOCATION: RevocationRequest,
}


def parse_request_data(approval_type: ApprovalType, data: Mapping[str, Any]) -> RequestPayload:
    """
    Read a stored payload as the typed request of its approval type.

    Args:
        approval_type: Approval type of the request
        data: Stored request payload

    Returns:
        Typed payload instance

    Raises:
        ValueError: If the payload does not fit the approval type
    """
    try:
        return PAYLOAD_TYPES[approval_type].from_request_data(data)
    except KeyError as e:
        raise ValueError(f"{approval_type.value} request is missing {e}") from e
