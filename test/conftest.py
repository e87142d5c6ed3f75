import os
import pytest
from typing import Dict, Any

import numpy as np

# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def config_dir() -> str:
    """Directory holding rtslam_core_base.yaml and presets/."""
    test_dir = os.path.dirname(__file__)
    pkg_root = os.path.dirname(test_dir)
    return os.path.join(pkg_root, "config")


@pytest.fixture
def base_config_dict() -> Dict[str, Any]:
    """A minimal in-memory config: one robot, one LOCAL and one REMOTE sensor."""
    return {
        "map": {"capacity": 35, "landmark_type": "AHP"},
        "robots": [
            {
                "name": "rover",
                "position": [1.0, 2.0, 0.0],
                "euler_deg": [0.0, 0.0, 90.0],
                "sensors": [
                    {"name": "cam_fixed", "in_filter": False},
                    {"name": "cam_est", "in_filter": True, "position": [0.1, 0.0, 0.3]},
                ],
            }
        ],
    }


# =============================================================================
# Test Utility Fixtures
# =============================================================================

@pytest.fixture
def numpy_seed():
    """Set numpy random seed for reproducible tests."""
    np.random.seed(42)
    yield


@pytest.fixture
def identity_pose():
    """Identity pose [x, y, z, qw, qx, qy, qz]."""
    return np.array([0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def make_random_pose(rng: np.random.Generator, unit: bool = True) -> np.ndarray:
    t = rng.normal(size=3)
    q = rng.normal(size=4)
    if unit:
        q = q / np.linalg.norm(q)
    return np.concatenate([t, q])


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def random_poses(rng):
    """Twenty random (parent, child) unit-quaternion pose pairs."""
    return [(make_random_pose(rng), make_random_pose(rng)) for _ in range(20)]


@pytest.fixture
def slam_map():
    """Empty map with room for a robot, a REMOTE sensor and 3 AHP landmarks."""
    from rtslam_core.backend.state import SlamMap
    return SlamMap(capacity=7 + 7 + 3 * 7, landmark_parameterization="AHP")
