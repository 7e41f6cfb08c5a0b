"""Binary min-heap backed by :class:`SmallArray`."""

from __future__ import annotations

from typing import Generic, TypeVar

from .small_array import SmallArray

T = TypeVar("T")


class PriorityQueue(Generic[T]):
    """Min-heap of totally ordered values.

    Equal values may come out in any order: sifting does not preserve
    insertion order, so ties between equal-cost entries are arbitrary.
    """

    __slots__ = ("_heap",)

    def __init__(self) -> None:
        self._heap: SmallArray[T] = SmallArray.dynamic()

    def push(self, value: T) -> None:
        self._heap.push(value)
        self._sift_up(len(self._heap) - 1)

    def pop(self) -> T | None:
        if self.is_empty():
            return None
        self._heap.swap(0, len(self._heap) - 1)
        popped = self._heap.pop()
        self._sift_down(0)
        return popped

    def peek(self) -> T | None:
        if self.is_empty():
            return None
        return self._heap[0]

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = (index - 1) // 2
            if not heap[index] < heap[parent]:
                break
            heap.swap(index, parent)
            index = parent

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            left = 2 * index + 1
            right = left + 1
            smallest = index
            if left < size and heap[left] < heap[smallest]:
                smallest = left
            if right < size and heap[right] < heap[smallest]:
                smallest = right
            if smallest == index:
                return
            heap.swap(index, smallest)
            index = smallest

    def is_empty(self) -> bool:
        return self._heap.is_empty()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return not self.is_empty()
