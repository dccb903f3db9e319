"""The editor repair pipeline.

Runs the ordered repairs from :mod:`normalizer` and :mod:`recognizer` to a
fixed point.  One repair fires per pass and the spans are re-scanned after
each, since every repair shifts offsets.  Text repairs strictly shorten the
buffer and selection repairs move endpoints onto span boundaries, so the loop
terminates; the pass limit is a guard only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from taggable.editor.normalizer import (
    repair_broken_span,
    repair_cursor_inside_tag,
    repair_selection_inside_tag,
)
from taggable.editor.recognizer import (
    repair_stray_filler,
    repair_trailing_whitespace,
    repair_unrecognised_tag,
)
from taggable.editor.state import EditorState, Selection

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from taggable.encoding import TagRegistry
    from taggable.policy import TagPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepairContext:
    """Read-only inputs shared by every repair in one validation cycle.

    Attributes:
        policies: Session tag policies, in tie-break order.
        registry: Padded display string -> encoded tag.
        previous_cursor: Cursor offset before the edit being validated.
    """

    policies: Sequence[TagPolicy]
    registry: TagRegistry[Any]
    previous_cursor: int


Repair: TypeAlias = "Callable[[EditorState, RepairContext], EditorState | None]"

REPAIRS: tuple[Repair, ...] = (
    repair_broken_span,
    repair_cursor_inside_tag,
    repair_selection_inside_tag,
    repair_unrecognised_tag,
    repair_trailing_whitespace,
    repair_stray_filler,
)


def _clamp(state: EditorState) -> EditorState:
    """Clamp selection offsets into ``[0, len(text)]`` (negatives kept)."""
    size = len(state.text)
    sel = state.selection
    if sel.base <= size and sel.extent <= size:
        return state
    return state.with_selection(Selection(min(sel.base, size), min(sel.extent, size)))


def run_repairs(
    state: EditorState,
    context: RepairContext,
    *,
    max_passes: int | None = None,
    repairs: Sequence[Repair] = REPAIRS,
) -> EditorState:
    """Apply *repairs* until none fires and return the settled state."""
    state = _clamp(state)
    limit = max_passes if max_passes is not None else 4 * (len(state.text) + 2)
    for _ in range(limit):
        for repair in repairs:
            repaired = repair(state, context)
            if repaired is not None:
                logger.debug("%s fired", repair.__name__)
                state = repaired
                break
        else:
            return state
    logger.warning("Repair pipeline did not settle after %d passes", limit)
    return state
