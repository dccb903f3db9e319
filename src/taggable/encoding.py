"""Encoding of tagged entities into equal-length display/canonical strings.

A tag is shown to the user as ``prefix + display`` and stored as
``prefix + canonical``.  Both representations are padded with the filler
marker so they have the same length, which keeps a cursor offset in the
display buffer valid in the canonical text as well:

    padded_display = FILLER * max(0, len(canonical) - len(display)) + prefix + display
    padded_canonical = (
        prefix + FILLER * max(0, len(display) - len(canonical)) + canonical
    )

The :class:`TagRegistry` maps the exact padded display string back to the
encoded tag.  A span whose text is not a registry key is *unrecognisable*;
decoding it returns ``None`` rather than raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from taggable.markers import FILLER

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from taggable.policy import TagPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class EncodedTag(Generic[T]):
    """A tagged entity paired with the policy it was tagged under.

    Attributes:
        entity: Opaque host value.  Never inspected by the engine.
        policy: Policy that supplied the prefix.
        display: ``to_display(entity)`` captured at encoding time.
        canonical: ``to_canonical(entity)`` captured at encoding time.
    """

    entity: T
    policy: TagPolicy
    display: str
    canonical: str

    @property
    def prefix(self) -> str:
        return self.policy.prefix

    @property
    def padded_display(self) -> str:
        padding = max(0, len(self.canonical) - len(self.display))
        return f"{FILLER * padding}{self.prefix}{self.display}"

    @property
    def padded_canonical(self) -> str:
        padding = max(0, len(self.display) - len(self.canonical))
        return f"{self.prefix}{FILLER * padding}{self.canonical}"

    @property
    def plain_display(self) -> str:
        """Display form without padding, as shown to the user."""
        return f"{self.prefix}{self.display}"

    @property
    def plain_canonical(self) -> str:
        """Canonical form without padding, as stored by the host."""
        return f"{self.prefix}{self.canonical}"


def encode(
    entity: T,
    policy: TagPolicy,
    to_display: Callable[[T], str],
    to_canonical: Callable[[T], str],
) -> EncodedTag[T]:
    """Encode *entity* under *policy* using the host converters.

    Never fails: the converters are assumed total and deterministic.
    """
    return EncodedTag(
        entity=entity,
        policy=policy,
        display=to_display(entity),
        canonical=to_canonical(entity),
    )


class TagRegistry(Generic[T]):
    """Insertion-ordered mapping from padded display string to encoded tag.

    Owned by one buffer session.  Entries are added when a tag is inserted or
    loaded from canonical text and are only dropped by :meth:`clear`.
    Registering an identical key again overwrites the earlier entry.
    """

    def __init__(self) -> None:
        self._tags: dict[str, EncodedTag[T]] = {}

    def register(self, tag: EncodedTag[T]) -> str:
        """Register *tag* and return its key (the padded display string)."""
        key = tag.padded_display
        if key in self._tags and self._tags[key] != tag:
            logger.debug("Registry key %r overwritten", key)
        self._tags[key] = tag
        return key

    def get(self, key: str) -> EncodedTag[T] | None:
        """Return the encoded tag for *key*, or None if unrecognisable."""
        return self._tags.get(key)

    def keys(self) -> list[str]:
        return list(self._tags)

    def clear(self) -> None:
        self._tags.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)


def decode(padded_display: str, registry: TagRegistry[T]) -> T | None:
    """Return the entity registered under *padded_display*, or None."""
    tag = registry.get(padded_display)
    return tag.entity if tag is not None else None
