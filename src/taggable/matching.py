"""Span matching over buffer text and canonical text.

Two matchers live here:

* The buffer matcher pairs ``TAG_START``/``TAG_END`` markers.  Display names
  need not satisfy any identifier pattern, so in the buffer the markers (not
  the pattern) delimit a tag.  Dangling markers are reported as broken pairs so
  the normaliser can repair them.
* The canonical matcher scans marker-free text for ``prefix + pattern``.  Each
  policy is scanned separately and the results merged: the earliest start
  wins, ties go to the first-listed policy.  This keeps the semantics
  independent of how a regex engine orders alternations.

Both matchers are stateless; scanning unchanged text twice yields identical
spans.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from taggable.markers import FILLER, TAG_END, TAG_START
from taggable.policy import policy_for_prefix

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taggable.policy import TagPolicy


@dataclass(frozen=True, slots=True)
class MatchSpan:
    """A half-open ``[start, end)`` range over a text, ``start < end``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            msg = f"Empty or inverted span [{self.start}, {self.end})"
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.start

    def strictly_contains(self, offset: int) -> bool:
        """True if *offset* lies strictly between the span's boundaries."""
        return self.start < offset < self.end

    def nearer_boundary(self, offset: int) -> int:
        """Boundary closest to *offset*; ties resolve to the end boundary."""
        if offset - self.start < self.end - offset:
            return self.start
        return self.end


@dataclass(frozen=True, slots=True)
class CanonicalMatch:
    """A ``prefix + pattern`` occurrence in canonical text."""

    span: MatchSpan
    policy: TagPolicy
    text: str

    @property
    def identifier(self) -> str:
        """Matched text without the prefix."""
        return self.text[len(self.policy.prefix) :]


@dataclass(frozen=True, slots=True)
class MarkerPair:
    """Positions of a start/end marker pair; a missing side means broken."""

    start: int | None
    end: int | None

    @property
    def is_broken(self) -> bool:
        return self.start is None or self.end is None

    @property
    def span(self) -> MatchSpan:
        """Span covering both markers.  Only valid for unbroken pairs."""
        if self.start is None or self.end is None:
            msg = "Broken marker pair has no span"
            raise ValueError(msg)
        return MatchSpan(self.start, self.end + 1)


# ---------------------------------------------------------------------------
# Buffer (marker-delimited) matching
# ---------------------------------------------------------------------------


def find_marker_pairs(text: str) -> list[MarkerPair]:
    """Pair tag markers left to right, reporting dangling markers.

    A start marker pairs with the next end marker provided no other start
    marker intervenes.  End markers preceding any start, or left over once
    all starts are paired, are reported as ``MarkerPair(None, end)``; start
    markers without an end as ``MarkerPair(start, None)``.  Pairs are returned
    in order of their first marker.
    """
    starts = [i for i, ch in enumerate(text) if ch == TAG_START]
    ends = [i for i, ch in enumerate(text) if ch == TAG_END]
    if not starts and not ends:
        return []

    pairs: list[MarkerPair] = []
    end_idx = 0
    for i, start in enumerate(starts):
        # End markers before this start cannot belong to it
        while end_idx < len(ends) and ends[end_idx] < start:
            pairs.append(MarkerPair(None, ends[end_idx]))
            end_idx += 1
        next_start = starts[i + 1] if i + 1 < len(starts) else len(text)
        if end_idx < len(ends) and ends[end_idx] < next_start:
            pairs.append(MarkerPair(start, ends[end_idx]))
            end_idx += 1
        else:
            pairs.append(MarkerPair(start, None))
    pairs.extend(MarkerPair(None, end) for end in ends[end_idx:])
    return pairs


def find_tag_spans(text: str) -> list[MatchSpan]:
    """Return the well-formed (marker-delimited) tag spans in buffer text."""
    return [pair.span for pair in find_marker_pairs(text) if not pair.is_broken]


def span_content(text: str, span: MatchSpan) -> str:
    """Text between the span's markers (the registry key for known tags)."""
    return text[span.start + 1 : span.end - 1]


def content_policy(content: str, policies: Sequence[TagPolicy]) -> TagPolicy | None:
    """Policy whose prefix starts *content* once leading filler is skipped."""
    return policy_for_prefix(content.lstrip(FILLER), policies)


# ---------------------------------------------------------------------------
# Canonical (pattern) matching
# ---------------------------------------------------------------------------


def find_canonical_matches(
    text: str, policies: Sequence[TagPolicy]
) -> list[CanonicalMatch]:
    """Scan *text* for ``prefix + pattern`` occurrences.

    At each step every policy searches from the current position; the
    candidate with the earliest start is taken, ties broken by policy order.
    Scanning resumes at the end of the accepted match, so matches never
    overlap.  Zero-length pattern matches are impossible because prefixes are
    non-empty.
    """
    matches: list[CanonicalMatch] = []
    pos = 0
    while pos < len(text):
        best: tuple[int, int, TagPolicy] | None = None
        for policy in policies:
            found = policy.regex.search(text, pos)
            if found is None:
                continue
            if best is None or found.start() < best[0]:
                best = (found.start(), found.end(), policy)
        if best is None:
            break
        start, end, policy = best
        matches.append(CanonicalMatch(MatchSpan(start, end), policy, text[start:end]))
        pos = end
    return matches


def find_canonical_spans(text: str, policies: Sequence[TagPolicy]) -> list[MatchSpan]:
    """Spans of :func:`find_canonical_matches`, without policy details."""
    return [match.span for match in find_canonical_matches(text, policies)]
