"""Ordered container with change notification.

Used for both the conversation history and the execution queue of a Thread.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from .debugger import Debugger

T = TypeVar("T")

Action = Literal["push", "unshift", "filter", "delete", "clear"]


@dataclass
class CollectionChange:
    action: Action
    entries: list[Any] = field(default_factory=list)


@dataclass
class CollectionEvent:
    collection: str
    action: Action
    entries: list[Any]
    changes: CollectionChange

    def to_dict(self) -> dict[str, Any]:
        return {
            "collection": self.collection,
            "action": self.action,
            "entries": self.entries,
            "changes": {"action": self.changes.action, "entries": self.changes.entries},
        }


class Collection(Generic[T]):
    def __init__(self, name: str, debugger: Debugger | None = None) -> None:
        self.name = name
        self.debugger = debugger
        # When incognito is on, push/unshift are ignored entirely.
        self.incognito = False
        self._entries: list[T] = []

    @property
    def entries(self) -> tuple[T, ...]:
        return tuple(self._entries)

    @property
    def length(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entries))

    def _dispatch(self, action: Action, changed: list[T]) -> None:
        if self.debugger is None:
            return
        event = CollectionEvent(
            collection=self.name,
            action=action,
            entries=list(self._entries),
            changes=CollectionChange(action=action, entries=list(changed)),
        )
        self.debugger.dispatch("collection", event)

    def push(self, *entries: T) -> None:
        if self.incognito:
            return
        self._entries.extend(entries)
        self._dispatch("push", list(entries))

    def unshift(self, *entries: T) -> None:
        if self.incognito:
            return
        self._entries[:0] = entries
        self._dispatch("unshift", list(entries))

    def get(self, index: int) -> T | None:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def filter(self, predicate: Callable[[T], bool]) -> Collection[T]:
        """Keep only entries matching ``predicate``, in place."""
        kept: list[T] = []
        removed: list[T] = []
        for entry in self._entries:
            (kept if predicate(entry) else removed).append(entry)
        self._entries = kept
        if removed:
            self._dispatch("filter", removed)
        return self

    def delete(self, index: int) -> list[T]:
        if not 0 <= index < len(self._entries):
            return []
        deleted = [self._entries.pop(index)]
        self._dispatch("delete", deleted)
        return deleted

    def clear(self) -> None:
        cleared = self._entries
        self._entries = []
        self._dispatch("clear", cleared)
