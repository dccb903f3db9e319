"""Buffer session: one editable tag-annotated text field.

A :class:`TagTextSession` owns the buffer snapshot, the tag registry and the
cursor position before the last edit.  Every mutation goes through
:meth:`TagTextSession._commit`, which runs the repair pipeline to a fixed
point before the new state becomes visible.  The host UI calls
:meth:`~TagTextSession.apply_edit` on every keystroke and, when a query is
active, awaits :meth:`~TagTextSession.lookup` (or does both with
:meth:`~TagTextSession.edit`).

Lookups suspend on host callbacks.  When they resume the buffer may have
changed, so a chosen entity is only inserted if the same query is still
active at the same offsets; otherwise the result is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from taggable.callbacks import maybe_await
from taggable.config import get_settings
from taggable.conversion import (
    build_buffer_from_canonical,
    segments_from_buffer,
    to_canonical,
    to_display,
    wrap_tag,
)
from taggable.editor.pipeline import RepairContext, run_repairs
from taggable.editor.query import ActiveQuery, detect_query
from taggable.editor.state import EditorState, Selection
from taggable.encoding import EncodedTag, TagRegistry, encode
from taggable.policy import DEFAULT_POLICIES, as_policies, policy_by_prefix

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from taggable.callbacks import (
        Converter,
        PickTaggable,
        ReverseLookup,
        SearchTaggables,
        StyleFor,
    )
    from taggable.config import EditorConfig
    from taggable.conversion import Segment
    from taggable.policy import TagPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TagTextSession(Generic[T]):
    """Tagging state machine for one text field.

    Args:
        search_taggables: ``(prefix, partial) -> candidates`` (sync or async).
        pick_taggable: Awaits the user's choice among the candidates.
        to_display: Entity -> display name shown after the prefix.
        to_canonical: Entity -> identifier stored after the prefix.
        policies: Tag policies in tie-break order.
        style_for: Optional ``(prefix, entity) -> style`` for
            :meth:`segments`; defaults to the policy's static style.
        config: Editor settings; defaults to ``get_settings().editor``.
    """

    def __init__(
        self,
        *,
        search_taggables: SearchTaggables,
        pick_taggable: PickTaggable,
        to_display: Converter,
        to_canonical: Converter,
        policies: Iterable[TagPolicy] = DEFAULT_POLICIES,
        style_for: StyleFor | None = None,
        config: EditorConfig | None = None,
    ) -> None:
        self.policies: tuple[TagPolicy, ...] = as_policies(policies)
        self.registry: TagRegistry[T] = TagRegistry()
        self.previous_cursor = 0
        self._search = search_taggables
        self._pick = pick_taggable
        self._to_display = to_display
        self._to_canonical = to_canonical
        self._style_for = style_for
        self._config = config if config is not None else get_settings().editor
        self._state = EditorState()
        # Bumped by clear()/initialisation so late lookups can tell
        self._generation = 0
        self._change_callback: Callable[[EditorState], None] | None = None

    # --- State access ---

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def text(self) -> str:
        """Raw buffer text, markers included."""
        return self._state.text

    @property
    def selection(self) -> Selection:
        return self._state.selection

    @property
    def canonical_text(self) -> str:
        """The buffer in canonical (storage) form."""
        return to_canonical(self._state.text, self.registry)

    @property
    def display_text(self) -> str:
        """The buffer as the user reads it, markers removed."""
        return to_display(self._state.text)

    @property
    def active_query(self) -> ActiveQuery | None:
        return detect_query(self._state, self.policies)

    def segments(self) -> list[Segment]:
        """Styled segments of the live buffer for rendering."""
        return segments_from_buffer(
            self._state.text, self.registry, self.policies, self._style_for
        )

    def set_change_callback(
        self, callback: Callable[[EditorState], None] | None
    ) -> None:
        """Set the callback notified with each settled state.

        Args:
            callback: Receives the new :class:`EditorState` after every
                committed mutation, e.g. to push text and cursor to the UI.
        """
        self._change_callback = callback

    # --- Mutation ---

    def _commit(self, state: EditorState) -> EditorState:
        """Validate *state* through the repair pipeline and make it current."""
        context = RepairContext(
            policies=self.policies,
            registry=self.registry,
            previous_cursor=self.previous_cursor,
        )
        settled = run_repairs(
            state, context, max_passes=self._config.max_repair_passes
        )
        self._state = settled
        if self._change_callback is not None:
            self._change_callback(settled)
        return settled

    def apply_edit(
        self, text: str, selection: Selection | int | None = None
    ) -> ActiveQuery | None:
        """Apply an edit reported by the host UI.

        Args:
            text: Full new buffer text as the field now holds it.
            selection: New selection, a collapsed cursor offset, or None for
                a cursor at the end of *text*.

        Returns:
            The active query after validation, if the user is typing a tag.
        """
        if selection is None:
            selection = Selection.collapsed(len(text))
        elif isinstance(selection, int):
            selection = Selection.collapsed(selection)
        self.previous_cursor = self._state.cursor
        self._commit(EditorState(text, selection))
        return self.active_query

    def insert_taggable(
        self, prefix: str, taggable: T, chars_to_replace: int
    ) -> EncodedTag[T]:
        """Replace the text before the cursor with a tag for *taggable*.

        The ``chars_to_replace`` characters ending at the cursor (normally
        the active query) are replaced by the encoded tag followed by the
        tag separator, and the cursor lands after the separator.  If
        whitespace already follows the cursor it serves as the separator.

        Raises:
            ValueError: If *prefix* has no policy or the range to replace
                extends before the start of the buffer.
        """
        policy = policy_by_prefix(prefix, self.policies)
        if policy is None:
            msg = f"No tag policy for prefix {prefix!r}"
            raise ValueError(msg)
        state = self._state
        end = state.selection.end if state.selection.is_valid else len(state.text)
        start = end - chars_to_replace
        if chars_to_replace < 0 or start < 0:
            msg = f"Cannot replace {chars_to_replace} characters before offset {end}"
            raise ValueError(msg)

        tag = encode(taggable, policy, self._to_display, self._to_canonical)
        self.registry.register(tag)
        wrapped = wrap_tag(tag)
        following = state.text[end : end + 1]
        if following and following.isspace():
            replacement = wrapped
            cursor = start + len(wrapped) + 1
        else:
            replacement = f"{wrapped}{self._config.tag_separator}"
            cursor = start + len(replacement)

        logger.debug("Inserting tag %r at %d", tag.plain_display, start)
        self.previous_cursor = state.cursor
        self._commit(state.replace_range(start, end, replacement, cursor=cursor))
        return tag

    def clear(self) -> None:
        """Reset the buffer and forget every registered tag."""
        self._generation += 1
        self.registry.clear()
        self.previous_cursor = 0
        self._commit(EditorState())

    async def initialize_from_canonical(
        self, text: str, reverse_lookup: ReverseLookup
    ) -> bool:
        """Replace the buffer with canonical *text*, resolving its tags.

        Returns:
            False if the session was cleared or re-initialised while the
            lookups were suspended; the result is then discarded.
        """
        self.clear()
        generation = self._generation
        buffer, tags = await build_buffer_from_canonical(
            text, self.policies, reverse_lookup, self._to_display, self._to_canonical
        )
        if generation != self._generation:
            logger.debug("Discarding stale initialisation")
            return False
        for tag in tags:
            self.registry.register(tag)
        self.previous_cursor = 0
        self._commit(EditorState(buffer, Selection.collapsed(len(buffer))))
        return True

    # --- Lookup orchestration ---

    async def lookup(self, query: ActiveQuery | None = None) -> EncodedTag[T] | None:
        """Search for *query*, let the host pick, and insert the choice.

        Host callback failures propagate to the caller and leave the buffer
        untouched.

        Returns:
            The inserted tag, or None if the user declined or the buffer moved
            on while the callbacks were suspended.
        """
        if query is None:
            query = self.active_query
        if query is None:
            return None
        generation = self._generation

        results = self._search(query.prefix, query.partial)
        candidates: asyncio.Future[Any] = asyncio.ensure_future(maybe_await(results))
        try:
            chosen = await self._pick(candidates)
        finally:
            if not candidates.done():
                candidates.cancel()
        if candidates.done() and not candidates.cancelled():
            # Surface a failed search even if the picker never awaited it
            candidates.result()

        if chosen is None:
            logger.debug("No taggable chosen for %r", query.text)
            return None
        if generation != self._generation or self.active_query != query:
            logger.debug("Discarding stale lookup result for %r", query.text)
            return None
        return self.insert_taggable(query.prefix, chosen, len(query))

    async def edit(
        self, text: str, selection: Selection | int | None = None
    ) -> EncodedTag[T] | None:
        """Apply an edit, then run the lookup for any active query."""
        query = self.apply_edit(text, selection)
        if query is None:
            return None
        return await self.lookup(query)
