"""
Data structures for the EKF map state.

IndexSet addresses the global state; StateBuffer owns it.
"""

from rtslam_core.backend.structures.index_set import IndexSet, union
from rtslam_core.backend.structures.state_buffer import StateBuffer

__all__ = [
    "IndexSet",
    "union",
    "StateBuffer",
]
