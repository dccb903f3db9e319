"""Conversion between buffer text, canonical text and styled segments.

Buffer text carries markers; canonical text never does.  The functions here
are stateless: the buffer session passes in its registry, and
:func:`segments_from_canonical` works on canonical text alone, so it can be
called concurrently for any number of independent texts (e.g. a comment list).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from taggable.callbacks import maybe_await
from taggable.encoding import EncodedTag, encode
from taggable.markers import (
    TAG_END,
    TAG_START,
    strip_boundaries,
    strip_filler,
    strip_markers,
)
from taggable.matching import (
    MatchSpan,
    content_policy,
    find_canonical_matches,
    find_tag_spans,
    span_content,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from taggable.callbacks import Converter, ReverseLookup, StyleFor
    from taggable.encoding import TagRegistry
    from taggable.policy import TagPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Segment:
    """A run of text for rendering outside the editor.

    Plain text has no ``prefix``; tag segments carry the entity, the prefix
    and the style token resolved for them.
    """

    text: str
    style: Any = None
    entity: Any = None
    prefix: str | None = None

    @property
    def is_tag(self) -> bool:
        return self.prefix is not None


# ---------------------------------------------------------------------------
# Buffer -> canonical / display
# ---------------------------------------------------------------------------


def to_canonical(text: str, registry: TagRegistry[Any], *, padded: bool = False) -> str:
    """Canonical form of buffer *text*.

    Recognised spans become ``prefix + canonical`` (or the padded canonical
    string when *padded*, which keeps offsets aligned with
    ``to_display(text, padded=True)``).  Unrecognised spans degrade to their
    plain content.  All boundary markers are removed.
    """
    parts: list[str] = []
    pos = 0
    for span in find_tag_spans(text):
        parts.append(text[pos : span.start])
        content = span_content(text, span)
        tag = registry.get(content)
        if tag is None:
            parts.append(content)
        elif padded:
            parts.append(tag.padded_canonical)
        else:
            parts.append(tag.plain_canonical)
        pos = span.end
    parts.append(text[pos:])
    joined = "".join(parts)
    return strip_boundaries(joined) if padded else strip_markers(joined)


def to_display(text: str, *, padded: bool = False) -> str:
    """Display form of buffer *text* (what the user reads)."""
    return strip_boundaries(text) if padded else strip_markers(text)


def wrap_tag(tag: EncodedTag[Any]) -> str:
    """Buffer representation of *tag*: padded display between markers."""
    return f"{TAG_START}{tag.padded_display}{TAG_END}"


# ---------------------------------------------------------------------------
# Canonical -> buffer
# ---------------------------------------------------------------------------


def _is_delimited(text: str, span: MatchSpan) -> bool:
    """True if whitespace (or a text edge) surrounds *span*."""
    before_ok = span.start == 0 or text[span.start - 1].isspace()
    after_ok = span.end == len(text) or text[span.end].isspace()
    return before_ok and after_ok


async def build_buffer_from_canonical(
    text: str,
    policies: Sequence[TagPolicy],
    reverse_lookup: ReverseLookup,
    to_display_fn: Converter,
    to_canonical_fn: Converter,
) -> tuple[str, list[EncodedTag[Any]]]:
    """Build buffer text from canonical *text*.

    Every whitespace-delimited ``prefix + pattern`` token is resolved through
    *reverse_lookup*; resolved tokens become encoded tags wrapped in markers,
    unresolved ones stay literal.  Text between tokens (including whitespace)
    is kept as is.  Lookups run one at a time, in text order.

    Returns:
        The buffer text and the encoded tags to register.
    """
    text = strip_markers(text)
    parts: list[str] = []
    tags: list[EncodedTag[Any]] = []
    pos = 0
    for match in find_canonical_matches(text, policies):
        if not _is_delimited(text, match.span):
            continue
        found = reverse_lookup(match.policy.prefix, match.identifier)
        entity = await maybe_await(found)
        if entity is None:
            logger.debug("Unresolved canonical token %r kept literal", match.text)
            continue
        tag = encode(entity, match.policy, to_display_fn, to_canonical_fn)
        parts.append(text[pos : match.span.start])
        parts.append(wrap_tag(tag))
        tags.append(tag)
        pos = match.span.end
    parts.append(text[pos:])
    return "".join(parts), tags


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


def _append_plain(segments: list[Segment], text: str) -> None:
    """Append plain *text*, merging with a preceding plain segment."""
    if not text:
        return
    if segments and not segments[-1].is_tag:
        segments[-1] = Segment(segments[-1].text + text, style=segments[-1].style)
    else:
        segments.append(Segment(text))


async def segments_from_canonical(
    text: str,
    policies: Sequence[TagPolicy],
    reverse_lookup: ReverseLookup,
    to_segment: Callable[[Any, TagPolicy], Segment],
) -> list[Segment]:
    """Split canonical *text* into plain and tag segments.

    Independent of any editor session.  Resolved matches are mapped through
    *to_segment*; unresolved matches pass through as plain text.
    """
    segments: list[Segment] = []
    pos = 0
    for match in find_canonical_matches(text, policies):
        _append_plain(segments, text[pos : match.span.start])
        found = reverse_lookup(match.policy.prefix, match.identifier)
        entity = await maybe_await(found)
        if entity is None:
            _append_plain(segments, match.text)
        else:
            segments.append(to_segment(entity, match.policy))
        pos = match.span.end
    _append_plain(segments, text[pos:])
    return segments


def segments_from_buffer(
    text: str,
    registry: TagRegistry[Any],
    policies: Sequence[TagPolicy],
    style_for: StyleFor | None = None,
) -> list[Segment]:
    """Split live buffer *text* into styled segments.

    Tag styles come from *style_for* when given, else from the policy's
    static style.
    """
    segments: list[Segment] = []
    pos = 0
    for span in find_tag_spans(text):
        _append_plain(segments, strip_markers(text[pos : span.start]))
        content = span_content(text, span)
        tag = registry.get(content)
        policy = tag.policy if tag is not None else content_policy(content, policies)
        if tag is None or policy is None:
            _append_plain(segments, strip_filler(content))
        else:
            style = style_for(tag.prefix, tag.entity) if style_for else policy.style
            segments.append(
                Segment(
                    tag.plain_display,
                    style=style,
                    entity=tag.entity,
                    prefix=tag.prefix,
                )
            )
        pos = span.end
    _append_plain(segments, strip_markers(text[pos:]))
    return segments
