"""Test people directory and buffer helpers.

Imported by conftest.py and by test modules through ``tests.helpers.people``
so fixtures and assertions share the same objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from taggable.encoding import TagRegistry, encode
from taggable.markers import TAG_END, TAG_START
from taggable.policy import TagPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

@dataclass(frozen=True)
class Person:
    """Minimal taggable entity for tests."""

    id: str
    name: str


# Display longer than canonical: filler pads the canonical side
ALICE = Person(id="1ax", name="Alice")
# Canonical longer than display: filler pads the display side
ADA = Person(id="ada1", name="Ada")
# Equal lengths: no padding
BOB = Person(id="b0b", name="Bob")

PEOPLE = (ALICE, ADA, BOB)

AT = TagPolicy(prefix="@", style="blue")
HASH = TagPolicy(prefix="#", style="green")
POLICIES = (AT, HASH)


def name_of(person: Person) -> str:
    return person.name


def id_of(person: Person) -> str:
    return person.id


def wrap(key: str) -> str:
    """Buffer representation of a registry key."""
    return f"{TAG_START}{key}{TAG_END}"


def lookup_person(prefix: str, identifier: str) -> Person | None:
    if prefix != "@":
        return None
    return next((p for p in PEOPLE if p.id == identifier), None)


async def search_people(prefix: str, query: str | None) -> list[Person]:
    if prefix != "@" or not query:
        return []
    return [p for p in PEOPLE if p.name.lower().startswith(query.lower())]


async def pick_first(candidates: Awaitable[Iterable[Person]]) -> Person | None:
    return next(iter(await candidates), None)


def make_registry(*people: Person, policy: TagPolicy = AT) -> TagRegistry[Person]:
    registry: TagRegistry[Person] = TagRegistry()
    for person in people:
        registry.register(encode(person, policy, name_of, id_of))
    return registry
