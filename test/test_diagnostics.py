import json

from rtslam_core.backend.diagnostics import format_map, format_node, map_status, map_status_json


def _populated(slam_map):
    robot = slam_map.add_robot(name="rover")
    sensor = slam_map.add_sensor(robot, in_filter=True, name="cam")
    for _ in range(4):
        sensor.run_cycle()
    return robot, sensor


def test_map_status_counts(slam_map):
    _populated(slam_map)
    status = map_status(slam_map)
    assert status["capacity"] == 35
    assert status["used"] == 35
    assert status["free"] == 0
    assert status["landmark_type"] == "AHP"
    assert status["n_robots"] == 1
    assert status["n_sensors"] == 1
    assert status["n_landmarks"] == 3
    assert status["landmarks_discovered"] == 3
    assert status["discovery_no_capacity"] == 1
    assert status["observations"] == {"1": 3}


def test_map_status_json_is_parseable(slam_map):
    _populated(slam_map)
    assert json.loads(map_status_json(slam_map)) == map_status(slam_map)


def test_format_map_lists_every_node(slam_map):
    robot, sensor = _populated(slam_map)
    text = format_map(slam_map)
    assert "ROBOT 1: rover" in text
    assert "SENSOR 1: cam" in text
    for lid in (1, 2, 3):
        assert f"LANDMARK {lid}: of type AHP" in text
    assert format_node(robot) in text
    assert format_node(sensor) in text


def test_empty_map(slam_map):
    assert format_map(slam_map) == ""
    assert map_status(slam_map)["used"] == 0
