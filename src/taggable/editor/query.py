"""Detection of a tag the user is in the middle of typing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from taggable.markers import MARKERS
from taggable.policy import policy_for_prefix

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taggable.editor.state import EditorState
    from taggable.policy import TagPolicy


@dataclass(frozen=True, slots=True)
class ActiveQuery:
    """A prefix plus partial text ending at the cursor, not yet a tag.

    Attributes:
        prefix: The policy prefix that opened the query.
        partial: Text typed after the prefix (may be empty).
        start: Buffer offset of the prefix.
        end: Buffer offset of the cursor.
    """

    prefix: str
    partial: str
    start: int
    end: int

    @property
    def text(self) -> str:
        return f"{self.prefix}{self.partial}"

    def __len__(self) -> int:
        return len(self.prefix) + len(self.partial)


def _word_start(text: str, cursor: int) -> int:
    """Offset where the word ending at *cursor* begins.

    Words are bounded by whitespace and by tag markers, so a word never
    reaches back into a tag span.
    """
    pos = cursor
    while pos > 0:
        ch = text[pos - 1]
        if ch.isspace() or ch in MARKERS:
            break
        pos -= 1
    return pos


def detect_query(
    state: EditorState, policies: Sequence[TagPolicy]
) -> ActiveQuery | None:
    """Return the active query at the cursor, or None.

    There is no query for range selections, for an invalid selection, or
    when the word before the cursor does not begin with a policy prefix.
    """
    selection = state.selection
    if not selection.is_valid or not selection.is_collapsed:
        return None
    cursor = selection.base
    if cursor > len(state.text):
        return None
    start = _word_start(state.text, cursor)
    word = state.text[start:cursor]
    policy = policy_for_prefix(word, policies)
    if policy is None:
        return None
    return ActiveQuery(
        prefix=policy.prefix,
        partial=word[len(policy.prefix) :],
        start=start,
        end=cursor,
    )
