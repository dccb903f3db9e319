"""Recognisability checks for tag spans.

A well-formed span (both markers present) is *recognisable* when its content
is a registry key.  Spans that are not recognisable were broken by an edit
and are repaired here, one span per pass:

* content without a leading prefix (the prefix was deleted) or content that
  is a truncation of a known key: the whole span is deleted;
* content that extends a known key, or that is still a syntactically valid
  ``prefix + text`` run: the markers are dropped and the plain text kept, so
  query detection can pick it up again.

A recognisable tag that is directly followed by a non-whitespace character
no longer stands on its own and is rewritten to plain ``prefix + display``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taggable.markers import FILLER, strip_filler
from taggable.matching import content_policy, find_tag_spans, span_content

if TYPE_CHECKING:
    from taggable.editor.pipeline import RepairContext
    from taggable.editor.state import EditorState
    from taggable.encoding import TagRegistry
    from taggable.matching import MatchSpan

logger = logging.getLogger(__name__)


def _is_truncated_key(plain: str, registry: TagRegistry) -> bool:
    """True if *plain* is a known key with characters cut from either end."""
    for key in registry:
        known = strip_filler(key)
        if plain != known and (known.startswith(plain) or known.endswith(plain)):
            return True
    return False


def _extends_key(plain: str, registry: TagRegistry) -> bool:
    """True if removing trailing characters from *plain* yields a known key."""
    return any(
        plain != strip_filler(key) and plain.startswith(strip_filler(key))
        for key in registry
    )


def _unwrap(state: EditorState, span: MatchSpan, plain: str) -> EditorState:
    return state.replace_range(span.start, span.end, plain)


def repair_unrecognised_tag(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Delete or unwrap the first span whose content is not a registry key."""
    text = state.text
    for span in find_tag_spans(text):
        content = span_content(text, span)
        if content in context.registry:
            continue
        plain = strip_filler(content)
        policy = content_policy(content, context.policies)
        if policy is None or not plain or _is_truncated_key(plain, context.registry):
            logger.debug("Deleting broken tag %r at %d", plain, span.start)
            return state.replace_range(span.start, span.end, "")
        if _extends_key(plain, context.registry):
            logger.debug("Unwrapping tag extended to %r at %d", plain, span.start)
        else:
            # Typing past an inserted tag; leave it to query detection
            logger.debug("Unwrapping unknown tag %r at %d", plain, span.start)
        return _unwrap(state, span, plain)
    return None


def repair_trailing_whitespace(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Rewrite a known tag to plain text when no whitespace follows it."""
    text = state.text
    for span in find_tag_spans(text):
        if span.end >= len(text) or text[span.end].isspace():
            continue
        content = span_content(text, span)
        tag = context.registry.get(content)
        if tag is None:
            continue
        logger.debug("Tag %r lost trailing whitespace at %d", content, span.start)
        return _unwrap(state, span, tag.plain_display)
    return None


def repair_stray_filler(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Remove filler characters left outside any tag span."""
    text = state.text
    if FILLER not in text:
        return None
    spans = find_tag_spans(text)
    for i, ch in enumerate(text):
        if ch == FILLER and not any(span.strictly_contains(i) for span in spans):
            return state.replace_range(i, i + 1, "")
    return None
