"""Collaborator contracts the engine calls into but never implements."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class UniqueLookup(Protocol):
    """Answers whether a value is already taken in the backing store.

    Blocking and timeouts are the implementation's concern; the engine waits
    for the answer and propagates whatever the lookup raises.
    """

    def exists(self, field: str, value: Any, excluding: Any = None) -> bool:
        ...


@runtime_checkable
class Translator(Protocol):
    """Maps a rule key to a message template, or None when it has none."""

    def get(self, key: str) -> str | None:
        ...
