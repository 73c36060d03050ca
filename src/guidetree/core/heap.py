"""
Array-backed binary max-heap keyed by a float score.

The heap carries an opaque payload per entry and knows nothing about what
the payload means. The clustering engine pushes candidate cluster pairs and
filters stale ones when they are popped, so no delete or decrease-key
operation is needed.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class MaxHeap(Generic[T]):
    """
    Binary max-heap of ``(score, payload)`` entries.

    Every non-root entry's score is less than or equal to its parent's.
    Entries with equal scores pop in heap order, with no further tie-break.

    Example:
        >>> heap = MaxHeap()
        >>> heap.insert(1.0, "a")
        >>> heap.insert(5.0, "b")
        >>> heap.pop_max()
        (5.0, 'b')
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: list[tuple[float, T]] = []

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def insert(self, score: float, payload: T) -> None:
        """Add an entry and restore heap order by sifting it up."""
        self._data.append((score, payload))
        self._sift_up(len(self._data) - 1)

    def peek_max(self) -> tuple[float, T] | None:
        """Return the entry with the greatest score without removing it."""
        if not self._data:
            return None
        return self._data[0]

    def pop_max(self) -> tuple[float, T] | None:
        """
        Remove and return the entry with the greatest score.

        The root is swapped with the last slot, the array shrinks by one and
        the new root is sifted down.

        Returns:
            The ``(score, payload)`` entry, or None if the heap is empty.
        """
        data = self._data
        if not data:
            return None
        last = len(data) - 1
        data[0], data[last] = data[last], data[0]
        entry = data.pop()
        if data:
            self._sift_down(0)
        return entry

    def _sift_up(self, idx: int) -> None:
        data = self._data
        while idx > 0:
            parent = (idx - 1) // 2
            if data[parent][0] < data[idx][0]:
                data[parent], data[idx] = data[idx], data[parent]
                idx = parent
            else:
                break

    def _sift_down(self, idx: int) -> None:
        data = self._data
        size = len(data)
        while True:
            left = 2 * idx + 1
            right = left + 1
            largest = idx
            if left < size and data[largest][0] < data[left][0]:
                largest = left
            if right < size and data[largest][0] < data[right][0]:
                largest = right
            if largest == idx:
                break
            data[idx], data[largest] = data[largest], data[idx]
            idx = largest
