# SPDX-License-Identifier: MIT
"""
Tests for entropy and false-positive filters.
"""
import pytest

from leakwatch.accuracy import (
    is_known_false_positive,
    is_likely_uuid,
    is_programming_pattern,
    shannon_entropy,
)


class TestEntropy:
    """Shannon entropy."""

    def test_empty(self):
        """Empty strings have no entropy."""
        assert shannon_entropy("") == 0.0

    def test_uniform(self):
        """A single repeated character has zero entropy."""
        assert shannon_entropy("aaaaaaaa") == 0.0

    def test_distinct_characters(self):
        """Sixteen distinct characters carry four bits each."""
        assert shannon_entropy("0123456789abcdef") == pytest.approx(4.0)


class TestFalsePositives:
    """Known false-positive corpus."""

    @pytest.mark.parametrize(
        "value,reason",
        [
            ("EXAMPLE", "matches term: example"),
            ("my-example-key-123", "contains term: example"),
            ("a94a8fe5ccb19ba61c4c0873d391e987982fbbd3", "matches hash pattern"),
            ("123e4567-e89b-12d3-a456-426614174000", "matches UUID pattern"),
        ],
    )
    def test_rejected(self, value, reason):
        """Corpus terms, hashes and UUIDs are rejected with a reason."""
        assert is_known_false_positive(value) == (True, reason)

    def test_uuid_allowed(self):
        """The UUID check can be disabled."""
        assert is_known_false_positive("123e4567-e89b-12d3-a456-426614174000", allow_uuid=True) == (False, "")

    def test_real_looking_key(self):
        """Random-looking keys pass."""
        assert is_known_false_positive("Xq7Lm2Pz9Rt4Vw8Ny3Kb6Hd1") == (False, "")

    def test_uuid_helper(self):
        """UUID detection is case-insensitive."""
        assert is_likely_uuid("123E4567-E89B-12D3-A456-426614174000")
        assert not is_likely_uuid("123e4567e89b12d3a456426614174000")


class TestProgrammingPatterns:
    """Identifier-shaped candidates."""

    @pytest.mark.parametrize(
        "value",
        ["ResponseBufferParser", "getUserProfile", "MAX_RETRY_COUNT", "snake_case_name", "x-amz-server-side-encryption"],
    )
    def test_identifiers(self, value):
        """Source identifiers are recognized."""
        assert is_programming_pattern(value)

    def test_random_token(self):
        """Random tokens are not identifiers."""
        assert not is_programming_pattern("Xq7Lm2Pz9Rt4Vw8Ny3Kb6Hd1Jf5Gs0Ca")
