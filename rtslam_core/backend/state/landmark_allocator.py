"""
Landmark creation under the state-buffer capacity gate.

Handles the capacity check, block reservation, id assignment and the
map/sensor linking of a newly discovered landmark.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from rtslam_core.backend.state.landmark import Landmark, Observation
from rtslam_core.common import constants

if TYPE_CHECKING:
    from rtslam_core.backend.state.sensor import Sensor
    from rtslam_core.backend.state.slam_map import SlamMap

logger = logging.getLogger(__name__)


class LandmarkAllocator:
    """Capacity-checked landmark factory for one SlamMap."""

    def __init__(self, slam_map: "SlamMap"):
        self.slam_map = slam_map
        self.discovered_count = 0
        self.no_capacity_count = 0

    def try_discover(self, sensor: "Sensor", required_size: Optional[int] = None) -> Optional[Landmark]:
        """
        Add one landmark discovered by `sensor`.

        Args:
            sensor: requesting sensor; always gains an observation of the
                new landmark, keyed by its id
            required_size: states per landmark (defaults to the map's
                landmark parameterization)

        Returns:
            The new Landmark, or None when the buffer has no room. None is
            a normal outcome: skip discovery this cycle and retry later.
        """
        slam_map = self.slam_map
        param = slam_map.landmark_parameterization
        size = param.required_state_size() if required_size is None else int(required_size)

        # Gate and reservation are one atomic step on the buffer
        with slam_map.state_buffer.lock:
            if not slam_map.unused_states(size):
                self._report_no_capacity(param.type_name, size)
                return None
            landmark = Landmark(slam_map, param, size=size)
            landmark.id = slam_map.landmark_ids.get_id()
            slam_map.link_to_landmark(landmark)
            self.discovered_count += 1
        slam_map.add_observations(landmark)
        if landmark.id not in sensor.observations:
            sensor.link_to_observation(Observation(sensor_id=sensor.id, landmark_id=landmark.id))

        logger.info(
            "Sensor %d discovered landmark %d at %s (%d states free)",
            sensor.id, landmark.id, landmark.state.index_set, slam_map.state_buffer.free_capacity(),
        )
        return landmark

    def _report_no_capacity(self, type_name: str, size: int) -> None:
        free = self.slam_map.state_buffer.free_capacity()
        self.no_capacity_count += 1
        if self.no_capacity_count <= constants.MAX_WARNING_COUNT:
            logger.warning(
                "No capacity for a new %s landmark (%d states needed, %d free)",
                type_name, size, free,
            )
        else:
            logger.debug("No capacity for a new landmark (%d needed, %d free)", size, free)
