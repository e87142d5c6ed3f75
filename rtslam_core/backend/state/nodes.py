"""
Estimation nodes: entities whose state lives in a Gaussian.

Robot, Sensor and Landmark share identity (id, name, category, type), a
state Gaussian and an effective index set: the global-state positions that
parameterize the node's global (possibly composed) pose. How a node relates
to the global buffer is an explicit CompositionVariant, not something
inferred from which constructor was used.

Parents are referenced by id and resolved through the owning SlamMap.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from rtslam_core.backend.fusion.gaussian import Gaussian
from rtslam_core.backend.structures.index_set import IndexSet
from rtslam_core.common import constants
from rtslam_core.common.geometry import (
    assemble_global_jacobian,
    compose_frames,
    compose_frames_by_dglobal,
    compose_frames_jacobians,
)

if TYPE_CHECKING:
    from rtslam_core.backend.state.slam_map import SlamMap


class NodeCategory(Enum):
    ROBOT = "ROBOT"
    SENSOR = "SENSOR"
    LANDMARK = "LANDMARK"


class CompositionVariant(Enum):
    """
    How a node's state relates to the global buffer.

    STANDALONE:            LOCAL state, no parent; empty effective set
    BOUND:                 REMOTE state read as is; effective = own block
    BOUND_WITH_PARENT:     REMOTE state; effective = parent ∪ own block
    PARENT_RELATIVE_LOCAL: LOCAL state relative to parent; effective = parent
    """
    STANDALONE = "STANDALONE"
    BOUND = "BOUND"
    BOUND_WITH_PARENT = "BOUND_WITH_PARENT"
    PARENT_RELATIVE_LOCAL = "PARENT_RELATIVE_LOCAL"


class EstimationNode:
    """Shared identity, state and index bookkeeping."""

    category: NodeCategory

    def __init__(
        self,
        state: Gaussian,
        variant: CompositionVariant,
        slam_map: Optional["SlamMap"] = None,
        name: str = "",
        type_name: str = "",
        parent_id: Optional[int] = None,
    ):
        self.id: int = constants.ID_UNASSIGNED
        self.name = name
        self.type_name = type_name or self.category.value
        self.state = state
        self.slam_map = slam_map
        self.parent_id = parent_id
        self._variant = variant
        self._effective_ia = IndexSet.empty()
        self._recompute_effective_index_set()

    @property
    def variant(self) -> CompositionVariant:
        return self._variant

    @property
    def effective_index_set(self) -> IndexSet:
        return self._effective_ia

    def parent(self) -> Optional["FrameNode"]:
        return None

    def _own_index_set(self) -> IndexSet:
        g = self._parameterizing_gaussian()
        return g.index_set if g.is_remote else IndexSet.empty()

    def _parameterizing_gaussian(self) -> Gaussian:
        return self.state

    def _recompute_effective_index_set(self) -> None:
        """Rebuild (never mutate) the effective index set from the variant."""
        v = self._variant
        if v is CompositionVariant.STANDALONE:
            ia = IndexSet.empty()
        elif v is CompositionVariant.BOUND:
            ia = self._own_index_set()
        else:
            parent = self.parent()
            if parent is None:
                raise RuntimeError(f"{self.category.value} {self.id} has variant {v.value} but no parent")
            if v is CompositionVariant.BOUND_WITH_PARENT:
                ia = parent.effective_index_set.union(self._own_index_set())
            else:
                ia = parent.effective_index_set
        self._effective_ia = ia

    def _header(self) -> str:
        s = f"{self.category.value} {self.id}: "
        if self.name:
            s += f"{self.name}, "
        return s + f"of type {self.type_name}"

    def summary(self) -> str:
        """Human-readable block; informational only."""
        return f"{self._header()}\n.state :  {self.state}"

    def __str__(self) -> str:
        return self.summary()


class FrameNode(EstimationNode):
    """
    Node whose first 7 state entries are a rigid pose (Robot, Sensor).

    global_pose() composes with the parent's global pose for the two
    parent-relative variants and returns the Jacobian wrt the effective
    index set, columns in that set's order.
    """

    @property
    def pose(self) -> Gaussian:
        return self.state

    def _parameterizing_gaussian(self) -> Gaussian:
        return self.pose

    def global_pose(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Global pose and its Jacobian wrt the mapped states.

        Returns:
            (pose (7,), J (7, len(effective_index_set)))
            J is 7x7 for a LOCAL pose on a mapped robot and 7x14 for a
            REMOTE pose on a mapped robot. A BOUND node is not composed:
            its pose is read as is and J is the identity on its block.
        """
        own = self.pose.mean
        eff = self._effective_ia

        if self._variant in (CompositionVariant.STANDALONE, CompositionVariant.BOUND):
            J = np.zeros((constants.POSE_SIZE, len(eff)), dtype=float)
            if self.pose.is_remote:
                J[:, eff.positions_of(self.pose.index_set)] = np.eye(constants.POSE_SIZE)
            return own, J

        parent = self.parent()
        parent_pose, J_parent_global = parent.global_pose()

        if self._variant is CompositionVariant.PARENT_RELATIVE_LOCAL:
            # Own pose is not in the map: Jacobian only wrt the parent's states
            G = compose_frames(parent_pose, own)
            G_F = compose_frames_by_dglobal(parent_pose, own)
            return G, G_F @ J_parent_global

        G, G_F, G_L = compose_frames_jacobians(parent_pose, own)
        J = assemble_global_jacobian(
            G_F @ J_parent_global,
            parent.effective_index_set,
            G_L,
            self.pose.index_set,
            eff,
        )
        return G, J

    def summary(self) -> str:
        return f"{self._header()}\n.pose :  {self.pose}"
