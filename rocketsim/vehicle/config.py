"""JSON mission files.

A mission file mirrors the builder: top-level mission fields, a list of
stage objects and an optional guidance block.

    {
        "name": "Demo",
        "payload_mass": 1.0,
        "reference_area": 0.01,
        "stages": [
            {"name": "S1", "dry_mass": 20.0, "propellant_mass": 10.0,
             "thrust": 2000.0, "isp": 220.0, "inertia": [5.0, 5.0, 0.5]}
        ],
        "guidance": {"vertical_time": 2.0, "pitchover_pitch": 80.0}
    }

Example:
    >>> from rocketsim.vehicle.config import load_mission
    >>>
    >>> mission = load_mission("missions/demo.json")
"""

import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

from beartype import beartype

from rocketsim.vehicle.mission import (
    GuidanceConfig,
    Mission,
    MissionBuilder,
    MissionConfigError,
)
from rocketsim.vehicle.stage import Stage, StageBuilder

logger = logging.getLogger(__name__)

_STAGE_KEYS = {f.name for f in fields(Stage)}
_GUIDANCE_KEYS = {f.name for f in fields(GuidanceConfig)}
_MISSION_KEYS = {
    "name",
    "stages",
    "payload_mass",
    "reference_area",
    "drag_coefficient",
    "static_margin",
    "normal_force_slope",
    "damping_coefficient",
    "target_apogee",
    "guidance",
}


# =============================================================================
# Serialization Helpers
# =============================================================================


def _number(value: Any, where: str) -> float:
    """Coerce a JSON number, rejecting bools and strings."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MissionConfigError([f"{where} must be a number, got {value!r}"])
    return float(value)


def _optional_number(value: Any, where: str) -> float | None:
    return None if value is None else _number(value, where)


def _check_keys(data: dict, allowed: set[str], where: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise MissionConfigError([f"{where}: unknown keys {unknown}"])


def _stage_from_dict(data: Any, index: int) -> Stage:
    where = f"stages[{index}]"
    if not isinstance(data, dict):
        raise MissionConfigError([f"{where} must be an object"])
    _check_keys(data, _STAGE_KEYS, where)

    builder = StageBuilder(str(data.get("name", f"Stage {index + 1}")))
    for key in ("dry_mass", "propellant_mass", "thrust", "isp", "gimbal_limit", "nozzle_offset"):
        if key in data:
            getattr(builder, key)(_number(data[key], f"{where}.{key}"))
    for key in ("burn_time_limit", "reference_area", "drag_coefficient", "static_margin"):
        if key in data:
            getattr(builder, key)(_optional_number(data[key], f"{where}.{key}"))

    if "inertia" in data:
        inertia = data["inertia"]
        if not isinstance(inertia, list) or len(inertia) != 3:
            raise MissionConfigError([f"{where}.inertia must be a list of 3 numbers"])
        builder.inertia(*(_number(v, f"{where}.inertia") for v in inertia))

    return builder.build()


def _guidance_from_dict(data: Any) -> GuidanceConfig:
    if not isinstance(data, dict):
        raise MissionConfigError(["guidance must be an object"])
    _check_keys(data, _GUIDANCE_KEYS, "guidance")
    values = {
        key: _optional_number(value, f"guidance.{key}")
        for key, value in data.items()
    }
    if any(v is None for k, v in values.items() if k != "vertical_altitude"):
        raise MissionConfigError(["guidance values must be numbers"])
    return GuidanceConfig(**values)


# =============================================================================
# Public API
# =============================================================================


@beartype
def mission_from_dict(data: dict[str, Any]) -> Mission:
    """Build and validate a mission from its JSON form.

    Raises:
        MissionConfigError: If the data is malformed or the mission invalid
    """
    _check_keys(data, _MISSION_KEYS, "mission")

    stages = data.get("stages")
    if not isinstance(stages, list):
        raise MissionConfigError(["mission must have a 'stages' list"])

    builder = MissionBuilder(str(data.get("name", "Unnamed")))
    for i, stage in enumerate(stages):
        builder.stage(_stage_from_dict(stage, i))

    for key in (
        "payload_mass",
        "reference_area",
        "drag_coefficient",
        "static_margin",
        "normal_force_slope",
        "damping_coefficient",
    ):
        if key in data:
            getattr(builder, key)(_number(data[key], key))
    if "target_apogee" in data:
        builder.target_apogee(_optional_number(data["target_apogee"], "target_apogee"))
    if "guidance" in data:
        builder.guidance(_guidance_from_dict(data["guidance"]))

    return builder.build()


@beartype
def mission_to_dict(mission: Mission) -> dict[str, Any]:
    """JSON-compatible form of a mission, readable by `mission_from_dict`."""
    stages = []
    for stage in mission.stages:
        entry = {f.name: getattr(stage, f.name) for f in fields(Stage)}
        entry["inertia"] = list(stage.inertia)
        stages.append(entry)

    return {
        "name": mission.name,
        "stages": stages,
        "payload_mass": mission.payload_mass,
        "reference_area": mission.reference_area,
        "drag_coefficient": mission.drag_coefficient,
        "static_margin": mission.static_margin,
        "normal_force_slope": mission.normal_force_slope,
        "damping_coefficient": mission.damping_coefficient,
        "target_apogee": mission.target_apogee,
        "guidance": {f.name: getattr(mission.guidance, f.name) for f in fields(GuidanceConfig)},
    }


@beartype
def load_mission(path: str | Path) -> Mission:
    """Load and validate a mission file.

    Args:
        path: Path to a JSON mission file

    Returns:
        Validated mission

    Raises:
        MissionConfigError: If the file is not UTF-8 JSON or describes an
            invalid mission
    """
    path = Path(path)
    logger.debug("Loading mission from %s", path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as err:
        raise MissionConfigError([f"{path}: invalid JSON ({err})"]) from err
    except UnicodeDecodeError as err:
        raise MissionConfigError([f"{path}: not UTF-8 text ({err.reason})"]) from err

    if not isinstance(data, dict):
        raise MissionConfigError([f"{path}: top level must be an object"])

    mission = mission_from_dict(data)
    logger.debug("Loaded mission %r with %d stage(s)", mission.name, len(mission.stages))
    return mission


@beartype
def save_mission(mission: Mission, path: str | Path) -> Path:
    """Write a mission file, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(mission_to_dict(mission), indent=2), encoding="utf-8")
    logger.debug("Saved mission %r to %s", mission.name, path)
    return path
