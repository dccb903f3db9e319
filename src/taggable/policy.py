"""Tag policies: which prefix introduces which kind of tag.

A policy couples a literal prefix (``@``, ``#``, ``all:``) with the regular
expression body that the canonical identifier must satisfy and an opaque style
token the host uses for rendering.  Policies are passed around as an ordered
tuple; list order breaks ties when several prefixes match at one offset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from taggable.markers import contains_markers

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_PATTERN = r"[a-zA-Z0-9]+"


@dataclass(frozen=True, slots=True)
class TagPolicy:
    """A distinct way of recognising and styling tags.

    Attributes:
        prefix: Literal trigger string, e.g. ``"@"`` in ``"@alice"``.
        pattern: Regex body the canonical identifier must match.  Excludes
            the prefix.  If identifiers have a fixed length, encoding it here
            lets users type alphanumerics directly after a tag.
        style: Opaque style token handed back to the host unchanged.
    """

    prefix: str = "@"
    pattern: str = DEFAULT_PATTERN
    style: Any = None
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.prefix:
            msg = "Tag policy prefix must be non-empty"
            raise ValueError(msg)
        if contains_markers(self.prefix) or any(c.isspace() for c in self.prefix):
            msg = f"Tag policy prefix {self.prefix!r} contains whitespace or markers"
            raise ValueError(msg)
        try:
            compiled = re.compile(f"{re.escape(self.prefix)}(?:{self.pattern})")
        except re.error as exc:
            msg = f"Invalid pattern {self.pattern!r} for prefix {self.prefix!r}"
            raise ValueError(msg) from exc
        # frozen dataclass: bypass __setattr__ for the derived field
        object.__setattr__(self, "_compiled", compiled)

    @property
    def regex(self) -> re.Pattern[str]:
        """Compiled ``prefix + pattern`` matcher."""
        return self._compiled

    def matches_identifier(self, identifier: str) -> bool:
        """Return True if *identifier* (without prefix) satisfies the pattern."""
        return self._compiled.fullmatch(self.prefix + identifier) is not None


def as_policies(policies: Iterable[TagPolicy]) -> tuple[TagPolicy, ...]:
    """Freeze *policies* into a tuple, rejecting empty or duplicate prefixes."""
    frozen = tuple(policies)
    if not frozen:
        msg = "At least one tag policy is required"
        raise ValueError(msg)
    prefixes = [p.prefix for p in frozen]
    if len(set(prefixes)) != len(prefixes):
        msg = f"Duplicate tag policy prefixes: {prefixes}"
        raise ValueError(msg)
    return frozen


def policy_for_prefix(
    text: str, policies: Iterable[TagPolicy]
) -> TagPolicy | None:
    """Return the first-listed policy whose prefix starts *text*."""
    for policy in policies:
        if text.startswith(policy.prefix):
            return policy
    return None


def policy_by_prefix(prefix: str, policies: Iterable[TagPolicy]) -> TagPolicy | None:
    """Return the policy with exactly this *prefix*, if any."""
    for policy in policies:
        if policy.prefix == prefix:
            return policy
    return None


DEFAULT_POLICIES: tuple[TagPolicy, ...] = (TagPolicy(prefix="@", style="mention"),)
