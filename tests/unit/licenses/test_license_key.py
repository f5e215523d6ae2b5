"""
Unit tests for license key generation.
"""

from core.domain.value_objects import LicenseType
from licenses.domain.license_key import generate_license_key, is_well_formed, issuer_code


class TestLicenseKey:
    """Tests for generate_license_key."""

    def test_key_format(self):
        key = generate_license_key(LicenseType.ENTERPRISE, "owner-1")

        assert is_well_formed(key)
        assert key.startswith(f"ENT-{issuer_code('owner-1')}-")

    def test_issuer_code_is_stable(self):
        assert issuer_code("owner-1") == issuer_code("owner-1")
        assert issuer_code("owner-1") != issuer_code("owner-2")

    def test_keys_are_random(self):
        keys = {generate_license_key(LicenseType.TRIAL, "owner-1") for _ in range(50)}

        assert len(keys) == 50

    def test_malformed_keys(self):
        assert not is_well_formed("")
        assert not is_well_formed("ENT-XYZ-AAAA")
        assert not is_well_formed("ent-ABCDEF-AAAA-BBBB-CCCC-DDDD")
