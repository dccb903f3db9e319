"""Sample tagging page.

Demonstrates the tag editor in a NiceGUI text field: type ``@`` to tag a
user, ``#`` to tag a topic, or ``all:`` for either.  The field holds the raw
buffer (markers are zero-width, so the browser shows only display text and
cursor offsets line up with the buffer).  Sent comments are stored in
canonical form and rendered back through ``segments_from_canonical``.

Route: /
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from nicegui import ui

from taggable.conversion import segments_from_canonical
from taggable.demo.directory import (
    INITIAL_TEXT,
    POLICIES,
    lookup_directory,
    search_directory,
    segment_html,
    taggable_id,
    taggable_name,
    to_segment,
)
from taggable.editor import Selection, TagTextSession

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

    from nicegui.elements.input import Input

    from taggable.demo.directory import Taggable
    from taggable.editor import EditorState

logger = logging.getLogger(__name__)


class CandidatePicker:
    """Shows candidates as buttons and resolves with the one clicked.

    A newer :meth:`pick` call supersedes a pending one, which then resolves
    to None, so only the latest query can insert a tag.
    """

    def __init__(self) -> None:
        self._container = ui.column().classes("w-full gap-1")
        self._pending: asyncio.Future[Taggable | None] | None = None

    def _settle(self, taggable: Taggable | None) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(taggable)
        self._pending = None
        self._container.clear()

    async def pick(
        self, candidates: Awaitable[Iterable[Taggable]]
    ) -> Taggable | None:
        self._settle(None)
        available = list(await candidates)
        if not available:
            return None
        future: asyncio.Future[Taggable | None] = (
            asyncio.get_running_loop().create_future()
        )
        self._pending = future
        with self._container:
            for taggable in available:
                ui.button(
                    f"{taggable.name} ({taggable.kind})",
                    on_click=lambda t=taggable: self._settle(t),
                ).props("flat dense no-caps").classes("w-full justify-start")
        return await future


def _selection_js(field: Input) -> str:
    return (
        f"(() => {{ const el = document.querySelector('#c{field.id} input');"
        " return el ? [el.selectionStart, el.selectionEnd] : [-1, -1]; })()"
    )


def _set_selection_js(field: Input, selection: Selection) -> str:
    return (
        f"(() => {{ const el = document.querySelector('#c{field.id} input');"
        f" if (el) el.setSelectionRange({selection.start}, {selection.end},"
        f" '{'backward' if selection.extent < selection.base else 'forward'}'); }})()"
    )


@ui.page("/")
async def tagging_demo_page() -> None:
    """Demo page: tag users and topics in a comment box."""
    picker_slot: list[CandidatePicker] = []

    async def pick(candidates: Awaitable[Iterable[Taggable]]) -> Taggable | None:
        return await picker_slot[0].pick(candidates)

    session: TagTextSession[Taggable] = TagTextSession(
        search_taggables=search_directory,
        pick_taggable=pick,
        to_display=taggable_name,
        to_canonical=taggable_id,
        policies=POLICIES,
    )

    ui.label("Tagging demo").classes("text-h5")
    comments = ui.column().classes("w-96 gap-2")

    with ui.column().classes("w-96"):
        picker_slot.append(CandidatePicker())
        field = ui.input(
            placeholder="Type @ to tag a user or # to tag a topic",
        ).classes("w-full").props('data-testid="tag-input"')
        canonical_label = ui.label("Canonical form: ").classes(
            "text-caption text-grey"
        )

    client = ui.context.client

    def push_state(state: EditorState) -> None:
        """Mirror a repaired buffer back into the browser field."""
        canonical_label.set_text(f"Canonical form: {session.canonical_text}")
        if field.value != state.text:
            field.value = state.text
        if state.selection.is_valid:
            client.run_javascript(_set_selection_js(field, state.selection))

    session.set_change_callback(push_state)

    async def read_selection() -> Selection:
        start, end = await client.run_javascript(_selection_js(field))
        return Selection(int(start), int(end))

    async def on_value_change(e) -> None:
        value = e.value or ""
        if value == session.text:
            return
        selection = await read_selection()
        await session.edit(value, selection)

    async def on_caret_move() -> None:
        selection = await read_selection()
        if selection != session.selection:
            await session.edit(session.text, selection)

    field.on_value_change(on_value_change)
    field.on("keyup", on_caret_move)
    field.on("click", on_caret_move)

    async def send() -> None:
        canonical = session.canonical_text
        if not canonical.strip():
            return
        segments = await segments_from_canonical(
            canonical, POLICIES, lookup_directory, to_segment
        )
        with comments, ui.card().classes("w-full"):
            ui.html(segment_html(segments), sanitize=False)
        logger.info("Comment sent: %s", canonical)
        session.clear()

    async def set_initial_text() -> None:
        await session.initialize_from_canonical(INITIAL_TEXT, lookup_directory)

    with ui.row():
        ui.button("Send", icon="send", on_click=send)
        ui.button("Set initial text", on_click=set_initial_text).props("flat")
