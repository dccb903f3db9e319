"""Tests for cursor/selection normalisation repairs."""

from __future__ import annotations

from taggable.editor.normalizer import (
    repair_broken_span,
    repair_cursor_inside_tag,
    repair_selection_inside_tag,
)
from taggable.editor.pipeline import RepairContext, run_repairs
from taggable.editor.state import EditorState, Selection
from taggable.markers import TAG_END, TAG_START
from tests.helpers.people import BOB, POLICIES, make_registry, wrap

# "Hi " + [3 START, 4-7 "@Bob", 8 END] + " there"; span [3, 9)
TEXT = f"Hi {wrap('@Bob')} there"


def _context(previous_cursor: int = 0) -> RepairContext:
    return RepairContext(
        policies=POLICIES,
        registry=make_registry(BOB),
        previous_cursor=previous_cursor,
    )


class TestCursorInsideTag:
    """Tests for repair_cursor_inside_tag()."""

    def test_cursor_outside_is_untouched(self) -> None:
        for offset in (0, 3, 9, len(TEXT)):
            state = EditorState(TEXT, Selection.collapsed(offset))
            assert repair_cursor_inside_tag(state, _context()) is None

    def test_step_right_continues_to_end(self) -> None:
        """An arrow-key step into the tag from its start jumps past it."""
        state = EditorState(TEXT, Selection.collapsed(4))
        repaired = repair_cursor_inside_tag(state, _context(previous_cursor=3))
        assert repaired is not None
        assert repaired.selection == Selection.collapsed(9)

    def test_step_left_continues_to_start(self) -> None:
        state = EditorState(TEXT, Selection.collapsed(8))
        repaired = repair_cursor_inside_tag(state, _context(previous_cursor=9))
        assert repaired is not None
        assert repaired.selection == Selection.collapsed(3)

    def test_jump_snaps_to_nearer_boundary(self) -> None:
        """A click inside the tag snaps to the closer side."""
        expected = {4: 3, 5: 3, 6: 9, 7: 9, 8: 9}
        for offset, boundary in expected.items():
            state = EditorState(TEXT, Selection.collapsed(offset))
            repaired = repair_cursor_inside_tag(state, _context(previous_cursor=14))
            assert repaired is not None
            assert repaired.cursor == boundary, offset

    def test_text_is_unchanged(self) -> None:
        state = EditorState(TEXT, Selection.collapsed(5))
        repaired = repair_cursor_inside_tag(state, _context())
        assert repaired is not None
        assert repaired.text == TEXT

    def test_invalid_selection_ignored(self) -> None:
        state = EditorState(TEXT, Selection(-1, -1))
        assert repair_cursor_inside_tag(state, _context()) is None


class TestSelectionInsideTag:
    """Tests for repair_selection_inside_tag()."""

    def test_forward_extent_inside_extends_to_end(self) -> None:
        state = EditorState(TEXT, Selection(1, 5))
        repaired = repair_selection_inside_tag(state, _context())
        assert repaired is not None
        assert repaired.selection == Selection(1, 9)

    def test_forward_base_inside_extends_to_start(self) -> None:
        state = EditorState(TEXT, Selection(5, 12))
        repaired = repair_selection_inside_tag(state, _context())
        assert repaired is not None
        assert repaired.selection == Selection(3, 12)

    def test_backward_extent_inside_keeps_direction(self) -> None:
        state = EditorState(TEXT, Selection(12, 5))
        repaired = repair_selection_inside_tag(state, _context())
        assert repaired is not None
        assert repaired.selection == Selection(12, 3)

    def test_backward_base_inside_keeps_direction(self) -> None:
        state = EditorState(TEXT, Selection(6, 1))
        repaired = repair_selection_inside_tag(state, _context())
        assert repaired is not None
        assert repaired.selection == Selection(9, 1)

    def test_both_ends_inside_select_whole_tag(self) -> None:
        state = EditorState(TEXT, Selection(5, 7))
        settled = run_repairs(state, _context())
        assert settled.selection == Selection(3, 9)

    def test_collapsed_selection_ignored(self) -> None:
        state = EditorState(TEXT, Selection.collapsed(5))
        assert repair_selection_inside_tag(state, _context()) is None


class TestBrokenSpan:
    """Tests for repair_broken_span()."""

    def test_backspace_over_end_marker_removes_fragment(self) -> None:
        """Deleting the end marker removes the rest of the tag."""
        text = f"Hi {TAG_START}@Bob there"
        repaired = repair_broken_span(
            EditorState(text, Selection.collapsed(8)), _context(previous_cursor=9)
        )
        assert repaired is not None
        assert repaired.text == "Hi  there"
        assert repaired.selection == Selection.collapsed(3)

    def test_forward_delete_over_start_marker_removes_fragment(self) -> None:
        text = f"Hi @Bob{TAG_END} there"
        repaired = repair_broken_span(
            EditorState(text, Selection.collapsed(3)), _context(previous_cursor=3)
        )
        assert repaired is not None
        assert repaired.text == "Hi  there"
        assert repaired.selection == Selection.collapsed(3)

    def test_deletion_stops_at_other_tags(self) -> None:
        """A fragment never takes a neighbouring tag with it."""
        text = f"{wrap('@Bob')} x @Bo{TAG_END} y"
        # Cursor at 0: dangling end at 12, previous marker END at 5
        repaired = repair_broken_span(
            EditorState(text, Selection.collapsed(0)), _context()
        )
        assert repaired is not None
        assert repaired.text == f"{wrap('@Bob')} y"
        assert repaired.selection == Selection.collapsed(6)

    def test_range_selection_collapses_over_missing_end(self) -> None:
        """Deleting into a tag with a range selected leaves a caret."""
        text = f"Hi {TAG_START}@Bo there"
        repaired = repair_broken_span(
            EditorState(text, Selection(7, 1)), _context(previous_cursor=8)
        )
        assert repaired is not None
        assert repaired.text == "Hi  there"
        assert repaired.selection == Selection.collapsed(3)

    def test_range_selection_collapses_over_missing_start(self) -> None:
        text = f"Hi @Bo{TAG_END} there"
        settled = run_repairs(EditorState(text, Selection(3, 12)), _context())
        assert settled.text == "Hi  there"
        assert settled.selection.is_collapsed
        assert settled.cursor == 3

    def test_cursor_past_dangling_end_drops_marker_only(self) -> None:
        text = f"ab{TAG_END}cd"
        repaired = repair_broken_span(
            EditorState(text, Selection.collapsed(5)), _context()
        )
        assert repaired is not None
        assert repaired.text == "abcd"
        assert repaired.cursor == 4

    def test_cursor_before_dangling_start_drops_marker_only(self) -> None:
        text = f"ab{TAG_START}cd"
        repaired = repair_broken_span(
            EditorState(text, Selection.collapsed(1)), _context()
        )
        assert repaired is not None
        assert repaired.text == "abcd"
        assert repaired.cursor == 1

    def test_well_formed_text_untouched(self) -> None:
        state = EditorState(TEXT, Selection.collapsed(0))
        assert repair_broken_span(state, _context()) is None
