"""Tests for the access code allow-list."""

import pytest

from concierge_intake.services.access_codes import AccessCodeRegistry, hash_code, normalize_code


class TestNormalizeCode:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (" ic-1234 ", "IC-1234"),
            ("ic–1234", "IC-1234"),
            ("IC—1234", "IC-1234"),
            ("i c - 1 2 3 4", "IC-1234"),
            ("vip456\n", "VIP456"),
            (None, ""),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_code(raw) == expected


class TestAccessCodeRegistry:
    """Tests for AccessCodeRegistry.is_valid."""

    def test_plain_codes(self):
        registry = AccessCodeRegistry(["IC-1234", "vip456"])

        assert registry.is_valid("IC-1234")
        assert registry.is_valid("  ic–1234")
        assert registry.is_valid("VIP456")
        assert not registry.is_valid("IC-9999")

    def test_hashed_codes(self):
        """Codes can be configured as SHA-256 digests of the normalized code."""
        registry = AccessCodeRegistry(hashes=[hash_code("IC-1234").upper()])

        assert registry.is_valid("ic-1234")
        assert not registry.is_valid("IC-12345")

    def test_empty_candidate_never_matches(self):
        registry = AccessCodeRegistry(["IC-1234"])

        assert not registry.is_valid("")
        assert not registry.is_valid("   ")
        assert not registry.is_valid(None)

    def test_empty_registry_rejects_everything(self):
        registry = AccessCodeRegistry()

        assert len(registry) == 0
        assert not registry.is_valid("IC-1234")

    def test_blank_config_entries_are_ignored(self):
        registry = AccessCodeRegistry(["", "  ", "IC-1234"], hashes=["", " "])

        assert len(registry) == 1
