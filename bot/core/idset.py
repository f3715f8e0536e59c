# bot/core/idset.py
from __future__ import annotations

from typing import Generic, Hashable, Iterable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)


class IdSet(Generic[T]):
    """
    Unordered collection of ids.

    - union() mutates the receiver
    - diff() returns a new set (receiver - other), receiver untouched
    """

    def __init__(self, *elements: T):
        self._items: set[T] = set(elements)

    @classmethod
    def of(cls, elements: Iterable[T]) -> "IdSet[T]":
        return cls(*elements)

    def add(self, element: T) -> None:
        self._items.add(element)

    def union(self, other: Iterable[T]) -> None:
        self._items.update(other)

    def diff(self, other: "IdSet[T]") -> "IdSet[T]":
        return IdSet.of(e for e in self._items if e not in other)

    def __contains__(self, element: object) -> bool:
        return element in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IdSet):
            return self._items == other._items
        if isinstance(other, (set, frozenset)):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"IdSet({', '.join(repr(e) for e in sorted(self._items, key=repr))})"
