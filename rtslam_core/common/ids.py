"""Monotonic id source owned by a SlamMap (one per node category)."""

from __future__ import annotations

from rtslam_core.common import constants


class IdGenerator:
    """Hands out strictly increasing integer ids starting at `start`."""

    def __init__(self, start: int = constants.ID_START):
        self._next = int(start)

    def get_id(self) -> int:
        nid = self._next
        self._next += 1
        return nid

    def __repr__(self) -> str:
        return f"IdGenerator(next={self._next})"
