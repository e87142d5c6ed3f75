"""
IndexSet: ordered, duplicate-free positions into the global state buffer.

Index sets are immutable. A node that changes composition gets a new
IndexSet from union(); nothing is ever removed from an existing one.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Union

import numpy as np

from rtslam_core.common.errors import InvalidRange


class IndexSet:
    """
    Sorted ascending set of non-negative integers.

    Attributes:
        _indices: (n,) int64 array, read-only
    """

    __slots__ = ("_indices",)

    def __init__(self, indices: Iterable[int] = ()):
        arr = np.unique(np.asarray(list(indices), dtype=np.int64))
        if arr.size and arr[0] < 0:
            raise InvalidRange(f"Indices must be non-negative, got {int(arr[0])}")
        arr.setflags(write=False)
        self._indices = arr

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def range(cls, start: int, count: int) -> "IndexSet":
        """`count` consecutive indices starting at `start`."""
        if count < 0:
            raise InvalidRange(f"Range count must be >= 0, got {count}")
        if start < 0:
            raise InvalidRange(f"Range start must be >= 0, got {start}")
        out = cls.__new__(cls)
        arr = np.arange(start, start + count, dtype=np.int64)
        arr.setflags(write=False)
        out._indices = arr
        return out

    @classmethod
    def empty(cls) -> "IndexSet":
        return cls.range(0, 0)

    # -------------------------------------------------------------------------
    # Set algebra
    # -------------------------------------------------------------------------

    def union(self, other: "IndexSet") -> "IndexSet":
        out = IndexSet.__new__(IndexSet)
        arr = np.union1d(self._indices, other._indices).astype(np.int64)
        arr.setflags(write=False)
        out._indices = arr
        return out

    __or__ = union

    def isdisjoint(self, other: "IndexSet") -> bool:
        return np.intersect1d(self._indices, other._indices).size == 0

    def issubset(self, other: "IndexSet") -> bool:
        return bool(np.isin(self._indices, other._indices).all())

    def positions_of(self, other: "IndexSet") -> np.ndarray:
        """
        Positions of the elements of `other` inside this set.

        Raises InvalidRange if `other` is not a subset.
        """
        pos = np.searchsorted(self._indices, other._indices)
        ok = pos < self._indices.size
        if not ok.all() or not np.array_equal(self._indices[pos], other._indices):
            raise InvalidRange(f"{other} is not a subset of {self}")
        return pos

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def is_contiguous(self) -> bool:
        n = self._indices.size
        return n == 0 or int(self._indices[-1] - self._indices[0]) == n - 1

    def as_slice(self) -> Optional[slice]:
        """Equivalent slice for a contiguous set, None otherwise."""
        if not self.is_contiguous():
            return None
        if self._indices.size == 0:
            return slice(0, 0)
        return slice(int(self._indices[0]), int(self._indices[-1]) + 1)

    def to_array(self) -> np.ndarray:
        return self._indices

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self._indices.size)

    def size(self) -> int:
        return len(self)

    def __iter__(self) -> Iterator[int]:
        return (int(i) for i in self._indices)

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, (int, np.integer)):
            return False
        pos = np.searchsorted(self._indices, item)
        return bool(pos < self._indices.size and self._indices[pos] == item)

    def __getitem__(self, key: Union[int, slice]):
        if isinstance(key, slice):
            out = IndexSet.__new__(IndexSet)
            arr = self._indices[key].copy()
            arr.setflags(write=False)
            out._indices = arr
            if arr.size > 1 and np.any(np.diff(arr) <= 0):
                # Reversed or stepped-backwards slices must still come out sorted
                return IndexSet(arr)
            return out
        return int(self._indices[key])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexSet):
            return NotImplemented
        return np.array_equal(self._indices, other._indices)

    def __hash__(self) -> int:
        return hash(self._indices.tobytes())

    def __repr__(self) -> str:
        return f"IndexSet({self._indices.tolist()})"

    def __str__(self) -> str:
        if self._indices.size == 0:
            return "[]"
        if self.is_contiguous():
            return f"[{int(self._indices[0])}..{int(self._indices[-1])}]"
        return str(self._indices.tolist())


def union(a: IndexSet, b: IndexSet) -> IndexSet:
    """Set union of two index sets, sorted ascending."""
    return a.union(b)
