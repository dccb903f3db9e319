"""Editor state machine: snapshots, repairs, query detection and sessions."""

from taggable.editor.pipeline import REPAIRS, RepairContext, run_repairs
from taggable.editor.query import ActiveQuery, detect_query
from taggable.editor.session import TagTextSession
from taggable.editor.state import EditorState, Selection

__all__ = [
    "REPAIRS",
    "ActiveQuery",
    "EditorState",
    "RepairContext",
    "Selection",
    "TagTextSession",
    "detect_query",
    "run_repairs",
]
