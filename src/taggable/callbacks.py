"""Signatures of the host-supplied callbacks.

The engine never inspects tagged entities; it only hands them to these
callbacks.  Lookup callbacks may answer synchronously or return an awaitable,
so the engine funnels every result through :func:`maybe_await`.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")

# (prefix, partial query) -> candidates
SearchTaggables = Callable[[str, str | None], Iterable[T] | Awaitable[Iterable[T]]]
# awaitable candidates -> chosen entity, or None when the user declines
PickTaggable = Callable[[Awaitable[Iterable[T]]], Awaitable[T | None]]
# (prefix, canonical identifier) -> entity, or None when unknown
ReverseLookup = Callable[[str, str], T | None | Awaitable[T | None]]
# (prefix, entity) -> opaque style token
StyleFor = Callable[[str, T], Any]
Converter = Callable[[T], str]


async def maybe_await(value: Awaitable[R] | R) -> R:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
