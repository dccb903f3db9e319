"""Shared pytest fixtures for taggable tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from taggable.config import EditorConfig, get_settings
from taggable.editor import TagTextSession
from tests.helpers.people import (
    POLICIES,
    id_of,
    name_of,
    pick_first,
    search_people,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from tests.helpers.people import Person


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer .env files and env vars out of the tests."""
    for var in ("EDITOR__TAG_SEPARATOR", "EDITOR__MAX_REPAIR_PASSES", "APP__PORT"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_session() -> Callable[..., TagTextSession[Person]]:
    """Factory for sessions over the test people directory."""

    def _make(**overrides) -> TagTextSession[Person]:
        kwargs = {
            "search_taggables": search_people,
            "pick_taggable": pick_first,
            "to_display": name_of,
            "to_canonical": id_of,
            "policies": POLICIES,
            "config": EditorConfig(),
        }
        kwargs.update(overrides)
        return TagTextSession(**kwargs)

    return _make
