"""In-memory users and topics for the sample tagging page.

Provides the host callbacks the editor needs (search, reverse lookup,
converters, styles) over a fixed directory.  Kept free of NiceGUI so the
same callbacks serve the CLI and the tests.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taggable.conversion import Segment
from taggable.policy import TagPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class Taggable:
    """Something that can be tagged.

    Attributes:
        id: Stable identifier written to canonical text.
        name: Display name shown in the editor.
        kind: ``"user"`` or ``"topic"``.
    """

    id: str
    name: str
    kind: str


USERS: tuple[Taggable, ...] = (
    Taggable(id="1ax", name="Alice", kind="user"),
    Taggable(id="2by", name="Bob", kind="user"),
    Taggable(id="3cz", name="Charlie", kind="user"),
    Taggable(id="4dw", name="Carol", kind="user"),
)

TOPICS: tuple[Taggable, ...] = (
    Taggable(id="myDartId", name="Dart", kind="topic"),
    Taggable(id="myFlutterId", name="Flutter", kind="topic"),
    Taggable(id="myPubId", name="Pub", kind="topic"),
)

# Policy styles are CSS colours, used by both the page and the CLI
POLICIES: tuple[TagPolicy, ...] = (
    TagPolicy(prefix="@", style="blue"),
    TagPolicy(prefix="#", style="green"),
    TagPolicy(prefix="all:", style="purple"),
)

INITIAL_TEXT = "Hello @1ax and welcome to #myFlutterId"


def _candidates(prefix: str) -> Sequence[Taggable]:
    if prefix == "@":
        return USERS
    if prefix == "#":
        return TOPICS
    if prefix == "all:":
        return (*USERS, *TOPICS)
    return ()


async def search_directory(prefix: str, query: str | None) -> list[Taggable]:
    """Case-insensitive name-prefix search; an empty query finds nothing."""
    if not query:
        return []
    needle = query.lower()
    return [t for t in _candidates(prefix) if t.name.lower().startswith(needle)]


def lookup_directory(prefix: str, identifier: str) -> Taggable | None:
    """Resolve a canonical identifier under *prefix*."""
    return next((t for t in _candidates(prefix) if t.id == identifier), None)


def taggable_name(taggable: Taggable) -> str:
    return taggable.name


def taggable_id(taggable: Taggable) -> str:
    return taggable.id


def to_segment(taggable: Taggable, policy: TagPolicy) -> Segment:
    """Render a resolved tag as ``prefix + name`` in the policy colour."""
    return Segment(
        f"{policy.prefix}{taggable.name}",
        style=policy.style,
        entity=taggable,
        prefix=policy.prefix,
    )


def segment_html(segments: Sequence[Segment]) -> str:
    """HTML for a comment: escaped text, tags as coloured spans."""
    parts: list[str] = []
    for segment in segments:
        escaped = html.escape(segment.text)
        if segment.is_tag:
            title = html.escape(f"{segment.entity.kind} {segment.entity.id}")
            parts.append(
                f'<span class="tag" style="color: {segment.style}" '
                f'title="{title}">{escaped}</span>'
            )
        else:
            parts.append(escaped)
    return "".join(parts)
