"""Marker alphabet for the tag-annotated text buffer.

Three zero-width code points are reserved by the editor buffer.  They are
inserted around (and inside) tags so that display text and canonical text can
both be derived from one string, and they are stripped before any text leaves
the buffer.

Used by encoding.py (padding), matching.py (span delimiting) and
conversion.py (stripping).
"""

from __future__ import annotations

import re

# Zero-width non-joiner: opens a tag span
TAG_START = "\u200c"
# Zero-width joiner: closes a tag span
TAG_END = "\u200d"
# Zero-width space: pads the shorter of display/canonical to equal length
FILLER = "\u200b"

MARKERS: frozenset[str] = frozenset((TAG_START, TAG_END, FILLER))

_MARKER_PATTERN = re.compile(f"[{TAG_START}{TAG_END}{FILLER}]")
_BOUNDARY_PATTERN = re.compile(f"[{TAG_START}{TAG_END}]")


def contains_markers(text: str) -> bool:
    """Return True if *text* holds any reserved marker code point."""
    return _MARKER_PATTERN.search(text) is not None


def strip_markers(text: str) -> str:
    """Remove every marker (boundaries and filler) from *text*."""
    return _MARKER_PATTERN.sub("", text)


def strip_boundaries(text: str) -> str:
    """Remove tag boundary markers but keep filler padding."""
    return _BOUNDARY_PATTERN.sub("", text)


def strip_filler(text: str) -> str:
    """Remove filler padding from *text*."""
    return text.replace(FILLER, "")
