"""Data export utilities for flight results.

Writes the per-tick trajectory as CSV (via Polars) and the flight summary,
events and mission definition as JSON.

Example:
    >>> from rocketsim.export import export_flight
    >>>
    >>> paths = export_flight(result, "outputs/pathfinder")
    >>> paths["trajectory"]
    PosixPath('outputs/pathfinder/trajectory.csv')
"""

import json
import logging
from pathlib import Path

import numpy as np
import polars as pl
from beartype import beartype

from rocketsim.simulation.simulator import FlightResult
from rocketsim.simulation.summary import FlightSummary
from rocketsim.vehicle.config import mission_to_dict

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder for NumPy scalars and arrays."""
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@beartype
def trajectory_frame(result: FlightResult) -> pl.DataFrame:
    """Per-tick trajectory table with angles in degrees."""
    states = result.states
    position = result.position
    velocity = result.velocity
    quaternion = np.array([s.quaternion for s in states])
    omega = np.array([s.angular_velocity for s in states])

    return pl.DataFrame({
        "time": result.time,
        "pos_x": position[:, 0],
        "pos_y": position[:, 1],
        "pos_z": position[:, 2],
        "vel_x": velocity[:, 0],
        "vel_y": velocity[:, 1],
        "vel_z": velocity[:, 2],
        "quat_w": quaternion[:, 0],
        "quat_x": quaternion[:, 1],
        "quat_y": quaternion[:, 2],
        "quat_z": quaternion[:, 3],
        "omega_x": omega[:, 0],
        "omega_y": omega[:, 1],
        "omega_z": omega[:, 2],
        "mass": result.mass,
        "stage_idx": result.stage_index,
        "altitude": result.altitude,
        "speed": result.speed,
        "mach": result.mach,
        "acceleration": result.acceleration,
        "pitch_deg": np.degrees(result.pitch),
        "alpha_deg": np.degrees(result.angle_of_attack),
        "gimbal_pitch_deg": np.degrees(result.gimbal_pitch),
        "gimbal_yaw_deg": np.degrees(result.gimbal_yaw),
    })


@beartype
def export_trajectory_csv(result: FlightResult, filepath: str | Path) -> Path:
    """Export the trajectory to a CSV file.

    Args:
        result: Flight result
        filepath: Output path (parent directories are created)

    Returns:
        Path written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    trajectory_frame(result).write_csv(path)

    logger.info("Exported trajectory (%d samples) to %s", len(result.states), path)
    return path


def _event_to_dict(event) -> dict:
    return {
        "kind": event.kind.value,
        "label": event.describe(),
        "time": event.time,
        "altitude": event.altitude,
        "speed": event.speed,
        "stage_from": event.stage_from,
        "stage_to": event.stage_to,
        "jettisoned_mass": event.jettisoned_mass,
    }


@beartype
def summary_dict(result: FlightResult) -> dict:
    """JSON-ready description of a flight."""
    return {
        "mission": mission_to_dict(result.mission),
        "controller": result.controller_name,
        "config": {
            "dt": result.config.dt,
            "max_time": result.config.max_time,
            "use_j2": result.config.use_j2,
        },
        "outcome": result.outcome.value,
        "abort_reason": result.abort_reason,
        "performance": FlightSummary.from_result(result).to_dict(),
        "events": [_event_to_dict(e) for e in result.events],
        "faults": list(result.faults),
    }


@beartype
def export_summary_json(result: FlightResult, filepath: str | Path) -> Path:
    """Export the flight summary to a JSON file.

    Args:
        result: Flight result
        filepath: Output path (parent directories are created)

    Returns:
        Path written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(summary_dict(result), f, indent=2, cls=NumpyEncoder)

    logger.info("Exported flight summary to %s", path)
    return path


@beartype
def export_flight(result: FlightResult, directory: str | Path) -> dict[str, Path]:
    """Write trajectory.csv and summary.json into a directory."""
    out = Path(directory)
    return {
        "trajectory": export_trajectory_csv(result, out / "trajectory.csv"),
        "summary": export_summary_json(result, out / "summary.json"),
    }
