"""Immutable buffer snapshots.

Every repair in the editor pipeline takes an :class:`EditorState` and returns
either ``None`` (nothing to repair) or a new state.  Snapshots are never
mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Selection:
    """Cursor/selection in buffer offsets.

    ``base`` is where the selection was anchored and ``extent`` where it was
    dragged to; ``extent < base`` means a right-to-left selection.  Negative
    offsets mean the host has no selection (e.g. the field is unfocused).
    """

    base: int
    extent: int

    @classmethod
    def collapsed(cls, offset: int) -> Selection:
        return cls(offset, offset)

    @property
    def is_collapsed(self) -> bool:
        return self.base == self.extent

    @property
    def is_valid(self) -> bool:
        return self.base >= 0 and self.extent >= 0

    @property
    def start(self) -> int:
        return min(self.base, self.extent)

    @property
    def end(self) -> int:
        return max(self.base, self.extent)


@dataclass(frozen=True, slots=True)
class EditorState:
    """The buffer text together with its selection."""

    text: str = ""
    selection: Selection = Selection(0, 0)

    @property
    def cursor(self) -> int:
        """Offset of the selection base (the caret for collapsed selections)."""
        return self.selection.base

    def with_selection(self, selection: Selection) -> EditorState:
        return replace(self, selection=selection)

    def with_cursor(self, offset: int) -> EditorState:
        return replace(self, selection=Selection.collapsed(offset))

    def replace_range(
        self, start: int, end: int, replacement: str, *, cursor: int | None = None
    ) -> EditorState:
        """Replace ``text[start:end]`` and shift the selection accordingly.

        Offsets at or before *start* are unchanged, offsets at or after *end*
        move by the length delta, and offsets inside the replaced range land
        at its start.  Passing *cursor* collapses the selection there instead.
        """
        text = f"{self.text[:start]}{replacement}{self.text[end:]}"
        if cursor is not None:
            return EditorState(text, Selection.collapsed(cursor))

        def shift(offset: int) -> int:
            if offset < 0 or offset <= start:
                return offset
            if offset >= end:
                return offset + len(replacement) - (end - start)
            return start

        sel = self.selection
        return EditorState(text, Selection(shift(sel.base), shift(sel.extent)))
