"""
StateBuffer: fixed-capacity global mean and covariance of the EKF map.

The buffer is the single ownership authority for all REMOTE Gaussians.
Space is handed out as contiguous blocks from the front; `used` only grows.
Blocks are never released (fixed-for-lifetime allocation).

Concurrency:
    The core is single-writer. A multi-threaded caller must hold `lock`
    around any reserve/read/write sequence on a shared buffer; reserve()
    takes it internally.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np

from rtslam_core.backend.structures.index_set import IndexSet
from rtslam_core.common.errors import CapacityExceeded, DimensionMismatch, InvalidRange

logger = logging.getLogger(__name__)


class StateBuffer:
    """
    Global state vector x (N,) and covariance P (N, N).

    Attributes:
        capacity: N, fixed at construction
        used: number of reserved entries (prefix [0, used))
        lock: re-entrant lock for callers that share the buffer across threads
    """

    def __init__(self, capacity: int):
        capacity = int(capacity)
        if capacity < 0:
            raise InvalidRange(f"Capacity must be >= 0, got {capacity}")
        self._capacity = capacity
        self._used = 0
        self._x = np.zeros(capacity, dtype=float)
        self._P = np.zeros((capacity, capacity), dtype=float)
        self.lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def used(self) -> int:
        return self._used

    def free_capacity(self) -> int:
        return self._capacity - self._used

    def has_capacity(self, size: int) -> bool:
        return self.free_capacity() >= size

    def reserve(self, size: int) -> IndexSet:
        """
        Reserve `size` consecutive unused entries.

        Raises:
            InvalidRange: size < 0
            CapacityExceeded: used + size > capacity
        """
        size = int(size)
        if size < 0:
            raise InvalidRange(f"Reservation size must be >= 0, got {size}")
        with self.lock:
            if self._used + size > self._capacity:
                raise CapacityExceeded(
                    f"Cannot reserve {size} states: {self.free_capacity()} of "
                    f"{self._capacity} free"
                )
            ia = IndexSet.range(self._used, size)
            self._used += size
        logger.debug("Reserved %s (%d/%d used)", ia, self._used, self._capacity)
        return ia

    # -------------------------------------------------------------------------
    # Whole-buffer access
    # -------------------------------------------------------------------------

    @property
    def mean(self) -> np.ndarray:
        """Read-only view of the full mean vector."""
        view = self._x.view()
        view.setflags(write=False)
        return view

    @property
    def covariance(self) -> np.ndarray:
        """Read-only view of the full covariance matrix."""
        view = self._P.view()
        view.setflags(write=False)
        return view

    # -------------------------------------------------------------------------
    # Indexed access (gather / scatter on touched rows and columns only)
    # -------------------------------------------------------------------------

    def _check(self, ia: IndexSet) -> np.ndarray:
        idx = ia.to_array()
        if idx.size and int(idx[-1]) >= self._capacity:
            raise InvalidRange(f"{ia} exceeds buffer capacity {self._capacity}")
        return idx

    def read_mean(self, ia: IndexSet) -> np.ndarray:
        return self._x[self._check(ia)].copy()

    def write_mean(self, ia: IndexSet, value: np.ndarray) -> None:
        idx = self._check(ia)
        value = np.asarray(value, dtype=float).reshape(-1)
        if value.shape[0] != idx.size:
            raise DimensionMismatch(f"Mean of size {value.shape[0]} written to {len(ia)} indices")
        self._x[idx] = value

    def read_covariance(self, ia_rows: IndexSet, ia_cols: Optional[IndexSet] = None) -> np.ndarray:
        rows = self._check(ia_rows)
        cols = rows if ia_cols is None else self._check(ia_cols)
        return self._P[np.ix_(rows, cols)].copy()

    def write_covariance(
        self,
        ia_rows: IndexSet,
        ia_cols: Optional[IndexSet],
        value: np.ndarray,
    ) -> None:
        """
        Write a covariance block.

        Off-diagonal blocks (ia_cols != ia_rows) also write the transposed
        block so the global matrix stays symmetric.
        """
        rows = self._check(ia_rows)
        cols = rows if ia_cols is None else self._check(ia_cols)
        value = np.asarray(value, dtype=float)
        if value.shape != (rows.size, cols.size):
            raise DimensionMismatch(
                f"Covariance block of shape {value.shape} written to "
                f"({rows.size}, {cols.size}) indices"
            )
        self._P[np.ix_(rows, cols)] = value
        if ia_cols is not None and ia_cols != ia_rows:
            self._P[np.ix_(cols, rows)] = value.T

    # -------------------------------------------------------------------------
    # Live views (contiguous index sets only)
    # -------------------------------------------------------------------------

    def _slice(self, ia: IndexSet) -> slice:
        self._check(ia)
        s = ia.as_slice()
        if s is None:
            raise InvalidRange(f"Live view needs a contiguous index set, got {ia}")
        return s

    def mean_view(self, ia: IndexSet) -> np.ndarray:
        """Writable numpy view of x[ia]; writes go straight into the buffer."""
        return self._x[self._slice(ia)]

    def covariance_view(self, ia_rows: IndexSet, ia_cols: Optional[IndexSet] = None) -> np.ndarray:
        """Writable numpy view of P[ia_rows, ia_cols]."""
        rs = self._slice(ia_rows)
        cs = rs if ia_cols is None else self._slice(ia_cols)
        return self._P[rs, cs]

    def __repr__(self) -> str:
        return f"StateBuffer(capacity={self._capacity}, used={self._used})"
