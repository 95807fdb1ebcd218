"""Ordered fallback list that remembers its last successful member."""

from collections.abc import Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class FallbackChain(Generic[T]):
    """Candidates tried in order; the last one that worked moves to the front.

    Usage:
        chain = FallbackChain([a, b, c])
        for candidate in chain.snapshot():
            if try_it(candidate):
                chain.promote(candidate)
                break
    """

    def __init__(self, items: Iterable[T]) -> None:
        self._items: list[T] = list(items)

    def snapshot(self) -> list[T]:
        """Current order; safe to iterate while another call promotes."""
        return list(self._items)

    def promote(self, item: T) -> None:
        """Move ``item`` to the front, keeping the others' relative order."""
        try:
            index = self._items.index(item)
        except ValueError:
            return
        if index:
            self._items.insert(0, self._items.pop(index))

    @property
    def first(self) -> T | None:
        return self._items[0] if self._items else None

    def __len__(self) -> int:
        return len(self._items)
