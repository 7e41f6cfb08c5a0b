"""Size-specialized sequence used for adjacency lists and heap storage."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")

# Largest fan-out kept in an immutable inline tuple before spilling into a list.
INLINE_CAPACITY = 10


class ArrayKind(str, Enum):
    EMPTY = "empty"
    ONE = "one"
    FIVE = "five"
    TEN = "ten"
    DYNAMIC = "dynamic"


class SmallArray(Generic[T]):
    """Sequence with a shared empty state, inline tuples for small sizes and a list fallback.

    Small arrays (up to ``INLINE_CAPACITY`` items) live in a tuple and are
    rebuilt on mutation, which is bounded work. Larger arrays, and arrays
    created with :meth:`dynamic`, use a list with amortized O(1) push and pop.
    Once dynamic, an array stays dynamic.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] | None = None) -> None:
        data = tuple(items) if items is not None else ()
        if not data:
            self._items: tuple[T, ...] | list[T] | None = None
        elif len(data) <= INLINE_CAPACITY:
            self._items = data
        else:
            self._items = list(data)

    @classmethod
    def dynamic(cls, items: Iterable[T] | None = None) -> "SmallArray[T]":
        array: SmallArray[T] = cls()
        array._items = list(items) if items is not None else []
        return array

    @property
    def kind(self) -> ArrayKind:
        items = self._items
        if isinstance(items, list):
            return ArrayKind.DYNAMIC
        if items is None:
            return ArrayKind.EMPTY
        if len(items) == 1:
            return ArrayKind.ONE
        if len(items) <= 5:
            return ArrayKind.FIVE
        return ArrayKind.TEN

    def is_empty(self) -> bool:
        return not self._items

    def push(self, value: T) -> None:
        items = self._items
        if isinstance(items, list):
            items.append(value)
        elif items is None:
            self._items = (value,)
        elif len(items) < INLINE_CAPACITY:
            self._items = items + (value,)
        else:
            self._items = [*items, value]

    def pop(self) -> T | None:
        items = self._items
        if not items:
            return None
        if isinstance(items, list):
            return items.pop()
        value = items[-1]
        self._items = items[:-1] or None
        return value

    def swap(self, i: int, j: int) -> None:
        if i == j:
            return
        items = self._items
        if isinstance(items, list):
            items[i], items[j] = items[j], items[i]
            return
        if items is None:
            raise IndexError("swap on empty SmallArray")
        buffer = list(items)
        buffer[i], buffer[j] = buffer[j], buffer[i]
        self._items = tuple(buffer)

    def sorted(self, *, descending: bool = False) -> "SmallArray[T]":
        """Sort in place and return ``self``."""
        items = self._items
        if not items:
            return self
        if isinstance(items, list):
            items.sort(reverse=descending)
        else:
            self._items = tuple(sorted(items, reverse=descending))
        return self

    def as_tuple(self) -> tuple[T, ...]:
        return tuple(self._items) if self._items else ()

    def __len__(self) -> int:
        return len(self._items) if self._items else 0

    def __iter__(self) -> Iterator[T]:
        return iter(self._items or ())

    def __getitem__(self, index: int) -> T:
        if not self._items:
            raise IndexError("SmallArray index out of range")
        return self._items[index]

    def __setitem__(self, index: int, value: T) -> None:
        items = self._items
        if isinstance(items, list):
            items[index] = value
            return
        if items is None:
            raise IndexError("SmallArray assignment index out of range")
        buffer = list(items)
        buffer[index] = value
        self._items = tuple(buffer)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SmallArray):
            return self.as_tuple() == other.as_tuple()
        if isinstance(other, (list, tuple)):
            return self.as_tuple() == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return f"SmallArray.{self.kind.name}({list(self)!r})"
