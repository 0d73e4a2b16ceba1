"""
Tests for referral code cleanup.
"""

import pytest

from whitelist_import.referral import (
    REFERRAL_CODE_LENGTH,
    clean_referral_code,
    strip_referral_tags,
    truncate_referral_code,
)


class TestCleanReferralCode:
    """Test the full cleanup chain."""

    @pytest.mark.parametrize("raw", [None, "", " ", "   \t\n"])
    def test_blank_is_absent(self, raw):
        assert clean_referral_code(raw) is None

    def test_plain_code_unchanged(self):
        code = "0x" + "1" * 40
        assert clean_referral_code(code) == code

    def test_both_tags_removed_then_truncated(self):
        raw = "dke02sxdke02sx60x1111111111111111111111111111111111111111111111"

        assert clean_referral_code(raw) == "0x1111111111111111111111111111111111111111"

    def test_tagged_code_with_long_tail(self):
        raw = "dke02sx6" + "0xABC" + "Z" * 60

        cleaned = clean_referral_code(raw)

        assert len(cleaned) == REFERRAL_CODE_LENGTH
        assert cleaned.startswith("0xABC")
        assert "dke02sx6" not in cleaned
        assert "dke02sx" not in cleaned

    def test_tag_only_is_absent(self):
        assert clean_referral_code("dke02sx6") is None
        assert clean_referral_code("dke02sxdke02sx6") is None

    def test_number_cell_converted_to_text(self):
        assert clean_referral_code(12345) == "12345"


class TestCleanupRules:
    """Test the individual rules."""

    def test_longer_tag_stripped_first(self):
        # stripping "dke02sx" first would leave a stray "6"
        assert strip_referral_tags("dke02sx60xabc") == "0xabc"

    def test_every_occurrence_stripped(self):
        assert strip_referral_tags("dke02sx0xdke02sxab") == "0xab"

    def test_truncate_only_when_longer(self):
        assert truncate_referral_code("0x12") == "0x12"
        assert truncate_referral_code("x" * 42) == "x" * 42
        assert truncate_referral_code("x" * 43) == "x" * 42
