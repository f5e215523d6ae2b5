"""
License key generation.

Keys read `<TYPE>-<ISSUER>-XXXX-XXXX-XXXX-XXXX`: the first three letters
of the license type, six hex digits derived from the issuing owner and
four random groups.
"""

import hashlib
import re
import secrets
import string

from core.domain.value_objects import LicenseType

KEY_ALPHABET = string.ascii_uppercase + string.digits
KEY_PATTERN = re.compile(r"^[A-Z]{3}-[0-9A-F]{6}(-[A-Z0-9]{4}){4}$")


def issuer_code(issued_by: str) -> str:
    """Six upper-case hex digits identifying the issuer."""
    return hashlib.sha256(issued_by.encode()).hexdigest()[:6].upper()


def generate_license_key(license_type: LicenseType, issued_by: str) -> str:
    """
    Generate a license key in format: TYP-ISSUER-XXXX-XXXX-XXXX-XXXX.

    Args:
        license_type: Type of the license
        issued_by: Issuing owner id

    Returns:
        Generated license key string
    """
    prefix = license_type.value[:3].upper()
    parts = ["".join(secrets.choice(KEY_ALPHABET) for _ in range(4)) for _ in range(4)]
    return f"{prefix}-{issuer_code(issued_by)}-{'-'.join(parts)}"


def is_well_formed(key: str) -> bool:
    return bool(KEY_PATTERN.match(key or ""))
