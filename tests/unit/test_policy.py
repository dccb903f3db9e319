"""Tests for tag policies."""

from __future__ import annotations

import pytest

from taggable.markers import TAG_START
from taggable.policy import (
    DEFAULT_PATTERN,
    TagPolicy,
    as_policies,
    policy_by_prefix,
    policy_for_prefix,
)


class TestTagPolicy:
    """Tests for TagPolicy construction and validation."""

    def test_defaults(self) -> None:
        """Default policy is '@' with an alphanumeric identifier pattern."""
        policy = TagPolicy()
        assert policy.prefix == "@"
        assert policy.pattern == DEFAULT_PATTERN
        assert policy.style is None

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            TagPolicy(prefix="")

    @pytest.mark.parametrize("prefix", ["@ ", " #", TAG_START, f"@{TAG_START}"])
    def test_whitespace_or_marker_prefix_rejected(self, prefix: str) -> None:
        with pytest.raises(ValueError, match="whitespace or markers"):
            TagPolicy(prefix=prefix)

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid pattern"):
            TagPolicy(prefix="@", pattern="[a-z")

    def test_regex_includes_escaped_prefix(self) -> None:
        """Regex metacharacters in the prefix are matched literally."""
        policy = TagPolicy(prefix="$.")
        assert policy.regex.fullmatch("$.abc")
        assert policy.regex.fullmatch("$xabc") is None

    def test_matches_identifier(self) -> None:
        policy = TagPolicy(prefix="#", pattern=r"[a-z]{3}")
        assert policy.matches_identifier("abc")
        assert not policy.matches_identifier("abcd")
        assert not policy.matches_identifier("AB1")


class TestPolicyLookup:
    """Tests for resolving policies by prefix."""

    def test_first_listed_prefix_wins(self) -> None:
        """With overlapping prefixes the first listed policy is chosen."""
        at, double = TagPolicy(prefix="@"), TagPolicy(prefix="@@")
        assert policy_for_prefix("@@bob", (at, double)) is at
        assert policy_for_prefix("@@bob", (double, at)) is double

    def test_no_policy(self) -> None:
        assert policy_for_prefix("bob", (TagPolicy(),)) is None

    def test_policy_by_exact_prefix(self) -> None:
        at, hashtag = TagPolicy(prefix="@"), TagPolicy(prefix="#")
        assert policy_by_prefix("#", (at, hashtag)) is hashtag
        assert policy_by_prefix("all:", (at, hashtag)) is None

    def test_as_policies_freezes(self) -> None:
        policies = as_policies([TagPolicy(prefix="@"), TagPolicy(prefix="#")])
        assert isinstance(policies, tuple)
        assert [p.prefix for p in policies] == ["@", "#"]

    def test_as_policies_rejects_duplicates(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            as_policies([TagPolicy(prefix="@"), TagPolicy(prefix="@", style="x")])

    def test_as_policies_rejects_empty(self) -> None:
        with pytest.raises(ValueError, match="At least one"):
            as_policies([])
