"""
Gaussian random variable with LOCAL or REMOTE storage.

LOCAL:  owns its mean (k,) and covariance (k, k); uncorrelated with the map.
REMOTE: a (StateBuffer, IndexSet) handle; reads and writes go through to
        the global mean/covariance rows and columns at those indices, so
        it is correlated with every REMOTE Gaussian sharing the buffer.

The storage mode is fixed at construction. Accessors behave the same in
both modes; getters return copies.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from rtslam_core.backend.structures.index_set import IndexSet
from rtslam_core.backend.structures.state_buffer import StateBuffer
from rtslam_core.common import constants
from rtslam_core.common.errors import DimensionMismatch, NotRemote


class StorageMode(Enum):
    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


def _as_vector(x: np.ndarray) -> np.ndarray:
    """Normalize any (n,), (n,1), (1,n) into a flat (n,) float vector."""
    return np.asarray(x, dtype=float).reshape(-1)


class Gaussian:
    """Mean + covariance, owned (LOCAL) or viewed in a StateBuffer (REMOTE)."""

    def __init__(
        self,
        size: int,
        mean: Optional[np.ndarray] = None,
        covariance: Optional[np.ndarray] = None,
        cov_scale: float = constants.LOCAL_COV_SCALE_DEFAULT,
    ):
        size = int(size)
        if size < 0:
            raise DimensionMismatch(f"Gaussian size must be >= 0, got {size}")
        self._size = size
        self._storage = StorageMode.LOCAL
        self._buffer: Optional[StateBuffer] = None
        self._ia: Optional[IndexSet] = None
        self._x = np.zeros(size, dtype=float)
        self._P = float(cov_scale) * np.eye(size, dtype=float)
        if mean is not None:
            self.mean = mean
        if covariance is not None:
            self.covariance = covariance

    @classmethod
    def from_mean(cls, mean: np.ndarray, covariance: Optional[np.ndarray] = None) -> "Gaussian":
        """LOCAL Gaussian sized by `mean`."""
        mean = _as_vector(mean)
        return cls(mean.shape[0], mean=mean, covariance=covariance)

    @classmethod
    def remote(cls, buffer: StateBuffer, index_set: IndexSet) -> "Gaussian":
        """REMOTE Gaussian aliasing `buffer` at `index_set`."""
        g = cls.__new__(cls)
        g._size = len(index_set)
        g._storage = StorageMode.REMOTE
        g._buffer = buffer
        g._ia = index_set
        g._x = None
        g._P = None
        return g

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    @property
    def storage(self) -> StorageMode:
        return self._storage

    @property
    def is_remote(self) -> bool:
        return self._storage is StorageMode.REMOTE

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    @property
    def index_set(self) -> IndexSet:
        if not self.is_remote:
            raise NotRemote("LOCAL Gaussian has no index set")
        return self._ia

    @property
    def buffer(self) -> StateBuffer:
        if not self.is_remote:
            raise NotRemote("LOCAL Gaussian has no state buffer")
        return self._buffer

    # -------------------------------------------------------------------------
    # Mean / covariance
    # -------------------------------------------------------------------------

    @property
    def mean(self) -> np.ndarray:
        if self.is_remote:
            return self._buffer.read_mean(self._ia)
        return self._x.copy()

    @mean.setter
    def mean(self, value: np.ndarray) -> None:
        value = _as_vector(value)
        if value.shape[0] != self._size:
            raise DimensionMismatch(f"Expected mean of size {self._size}, got {value.shape[0]}")
        if self.is_remote:
            self._buffer.write_mean(self._ia, value)
        else:
            self._x = value.copy()

    @property
    def covariance(self) -> np.ndarray:
        if self.is_remote:
            return self._buffer.read_covariance(self._ia)
        return self._P.copy()

    @covariance.setter
    def covariance(self, value: np.ndarray) -> None:
        value = np.asarray(value, dtype=float)
        if value.shape != (self._size, self._size):
            raise DimensionMismatch(
                f"Expected covariance of shape ({self._size}, {self._size}), got {value.shape}"
            )
        if self.is_remote:
            self._buffer.write_covariance(self._ia, None, value)
        else:
            self._P = value.copy()

    def set_mean(self, value: np.ndarray) -> None:
        self.mean = value

    def set_covariance(self, value: np.ndarray) -> None:
        self.covariance = value

    def cross_covariance(self, other: "Gaussian") -> np.ndarray:
        """
        Cross-covariance block (self.size, other.size).

        Non-zero only when both are REMOTE views of the same buffer.
        """
        if self.is_remote and other.is_remote and self._buffer is other._buffer:
            return self._buffer.read_covariance(self._ia, other._ia)
        return np.zeros((self._size, other._size), dtype=float)

    def sub(self, start: int, count: int) -> "Gaussian":
        """
        Gaussian over positions [start, start + count) of this one.

        REMOTE: a view of the same buffer. LOCAL: an independent copy.
        """
        if start < 0 or count < 0 or start + count > self._size:
            raise DimensionMismatch(
                f"Sub-range [{start}, {start + count}) outside Gaussian of size {self._size}"
            )
        if self.is_remote:
            return Gaussian.remote(self._buffer, self._ia[start:start + count])
        return Gaussian(
            count,
            mean=self._x[start:start + count],
            covariance=self._P[start:start + count, start:start + count],
        )

    def __str__(self) -> str:
        head = f"Gaussian({self._storage.value}, size={self._size}"
        if self.is_remote:
            head += f", ia={self._ia}"
        with np.printoptions(precision=4, suppress=True):
            return f"{head}) x: {self.mean}"

    __repr__ = __str__
