"""
Configuration loading for rtslam_core.

Provides utilities for loading, merging and validating map configuration
from YAML files, and for building a populated SlamMap from it.

This module bridges:
1. YAML configuration files (config/rtslam_core_base.yaml, config/presets/)
2. Pydantic validation models (common/param_models.py)
3. The SlamMap setup-time factories

Usage:
    from rtslam_core.config import load_slam_config, build_map_from_config

    params = load_slam_config("/path/to/config.yaml")
    slam_map = build_map_from_config(params)
"""

from __future__ import annotations

import copy
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import yaml

from rtslam_core.backend.state.slam_map import SlamMap
from rtslam_core.common.geometry import pose_from_euler
from rtslam_core.common.param_models import SlamParams

logger = logging.getLogger(__name__)

_PACKAGE_NAME = "rtslam_core"
_BASE_CONFIG_NAME = "rtslam_core_base.yaml"
_SOURCE_CONFIG_DIR = Path(__file__).parent.parent / "config"


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries (later configs override earlier).

    Lists are replaced, not concatenated. The inputs are never modified.
    """
    result: Dict[str, Any] = {}
    for config in configs:
        if config:
            _deep_merge(result, config)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override dict into base dict (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def load_slam_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SlamParams:
    """
    Load and validate map configuration.

    Args:
        base_path: Base YAML (defaults to config/rtslam_core_base.yaml when present)
        preset_path: Optional preset YAML overriding the base
        overrides: Optional dictionary of parameter overrides

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid
    """
    if base_path is None:
        default_base, _ = get_default_config_paths()
        base_path = default_base if default_base.exists() else None

    base_config = load_yaml_config(base_path) if base_path else {}
    preset_config = load_yaml_config(preset_path) if preset_path else {}

    merged = merge_configs(base_config, preset_config, overrides or {})
    return SlamParams(**merged)


def get_default_config_paths() -> tuple[Path, Path]:
    """
    (base_config_path, presets_dir_path).

    Looks in the source checkout first, then in the data files installed
    under <sys.prefix>/share/rtslam_core/config. Returns the source-checkout
    paths when neither holds a base config.
    """
    config_dir = _SOURCE_CONFIG_DIR
    installed = Path(sys.prefix) / "share" / _PACKAGE_NAME / "config"
    if not (config_dir / _BASE_CONFIG_NAME).exists() and (installed / _BASE_CONFIG_NAME).exists():
        config_dir = installed
    return config_dir / _BASE_CONFIG_NAME, config_dir / "presets"


def get_preset_path(preset_name: str) -> Optional[Path]:
    """Path to a named preset, or None if not found."""
    _, presets_dir = get_default_config_paths()
    preset_path = presets_dir / f"{preset_name}.yaml"
    return preset_path if preset_path.exists() else None


def build_map_from_config(params: SlamParams) -> SlamMap:
    """Create the map, its robots and their sensors at setup time."""
    slam_map = SlamMap(
        capacity=params.map.capacity,
        landmark_parameterization=params.map.landmark_type,
    )
    for rp in params.robots:
        robot = slam_map.add_robot(
            name=rp.name,
            state_size=rp.state_size,
            pose=pose_from_euler(rp.position, rp.euler_deg, degrees=True),
            pose_std=np.asarray(rp.pose_std, dtype=float),
            type_name=rp.type_name,
        )
        for sp in rp.sensors:
            slam_map.add_sensor(
                robot,
                in_filter=sp.in_filter,
                pose=pose_from_euler(sp.position, sp.euler_deg, degrees=True),
                pose_std=np.asarray(sp.pose_std, dtype=float),
                name=sp.name,
                type_name=sp.type_name,
            )
    logger.info(
        "Built map: %d robots, %d sensors, %d/%d states used",
        len(slam_map.robots), len(slam_map.sensors),
        slam_map.state_buffer.used, slam_map.state_buffer.capacity,
    )
    return slam_map
