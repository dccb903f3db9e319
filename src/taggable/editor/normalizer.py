"""Cursor and selection normalisation against tag spans.

Each function here is one repair of the editor pipeline: it inspects a
snapshot and returns either ``None`` or a repaired snapshot.  They are
listed in priority order; the pipeline applies the first repair that fires
and re-scans, because every repair shifts offsets.

1. A dangling marker means the user deleted into a tag.  The remaining
   fragment is not a valid tag, so the text between the cursor and the
   marker is removed.
2. A collapsed cursor must never sit inside a tag.  A one-step move
   (arrow key) continues to the far boundary; any other move (click, jump)
   snaps to the nearer boundary.
3. A range selection with an endpoint inside a tag is widened so the whole
   tag is selected, keeping base/extent direction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from taggable.editor.state import Selection
from taggable.markers import TAG_END, TAG_START
from taggable.matching import find_marker_pairs, find_tag_spans

if TYPE_CHECKING:
    from taggable.editor.pipeline import RepairContext
    from taggable.editor.state import EditorState


def _previous_boundary(text: str, before: int) -> int:
    """Offset just past the last tag marker before *before*, else 0."""
    last = max(text.rfind(TAG_START, 0, before), text.rfind(TAG_END, 0, before))
    return last + 1


def _next_boundary(text: str, after: int) -> int:
    """Offset of the first tag marker after *after*, else ``len(text)``."""
    candidates = [
        i for i in (text.find(TAG_START, after + 1), text.find(TAG_END, after + 1))
        if i != -1
    ]
    return min(candidates, default=len(text))


def repair_broken_span(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Delete the fragment between the cursor and a dangling marker.

    The cursor collapses to where the fragment was.  The deletion never
    crosses another tag's marker.  If the cursor is on the far side of the
    dangling marker, only the marker itself is dropped.
    """
    if not state.selection.is_valid:
        return None
    text = state.text
    cursor = state.cursor
    for pair in find_marker_pairs(text):
        if pair.start is None and pair.end is not None:
            # Start marker gone (forward delete into the tag)
            end = pair.end
            if cursor <= end:
                lo = max(cursor, _previous_boundary(text, end))
                return state.replace_range(lo, end + 1, "", cursor=lo)
            return state.replace_range(end, end + 1, "")
        if pair.start is not None and pair.end is None:
            # End marker gone (backspace into the tag)
            start = pair.start
            if cursor > start:
                hi = min(cursor, _next_boundary(text, start))
                return state.replace_range(start, hi, "", cursor=start)
            return state.replace_range(start, start + 1, "")
    return None


def repair_cursor_inside_tag(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Move a collapsed cursor out of a tag span."""
    selection = state.selection
    if not selection.is_valid or not selection.is_collapsed:
        return None
    cursor = selection.base
    for span in find_tag_spans(state.text):
        if not span.strictly_contains(cursor):
            continue
        moved = cursor - context.previous_cursor
        if moved == 1:
            return state.with_cursor(span.end)
        if moved == -1:
            return state.with_cursor(span.start)
        return state.with_cursor(span.nearer_boundary(cursor))
    return None


def repair_selection_inside_tag(
    state: EditorState, context: RepairContext
) -> EditorState | None:
    """Widen a range selection so it covers whole tags."""
    selection = state.selection
    if not selection.is_valid or selection.is_collapsed:
        return None
    base, extent = selection.base, selection.extent
    for span in find_tag_spans(state.text):
        if span.strictly_contains(base):
            new_base = span.start if base < extent else span.end
            return state.with_selection(Selection(new_base, extent))
        if span.strictly_contains(extent):
            new_extent = span.start if extent < base else span.end
            return state.with_selection(Selection(base, new_extent))
    return None
