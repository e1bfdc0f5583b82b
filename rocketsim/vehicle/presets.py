"""Reference missions.

- pathfinder: two-stage sounding rocket
- single_stage: single-stage sounding rocket

Example:
    >>> from rocketsim.vehicle.presets import pathfinder
    >>>
    >>> mission = pathfinder()
    >>> len(mission.stages)
    2
"""

from collections.abc import Callable

from rocketsim.vehicle.mission import Mission, MissionBuilder
from rocketsim.vehicle.stage import StageBuilder


def pathfinder() -> Mission:
    """Two-stage sounding rocket ("Pathfinder")."""
    booster = (
        StageBuilder("S1-Booster")
        .dry_mass(40.0)
        .propellant_mass(25.0)
        .thrust(5000.0)
        .isp(220.0)
        .drag_coefficient(0.35)
        .reference_area(0.02)
        .inertia(20.0, 20.0, 2.0)
        .nozzle_offset(1.5)
        .static_margin(0.4)
        .gimbal_limit(0.1)
        .build()
    )
    sustainer = (
        StageBuilder("S2-Sustainer")
        .dry_mass(8.0)
        .propellant_mass(6.0)
        .thrust(1200.0)
        .isp(250.0)
        .drag_coefficient(0.28)
        .reference_area(0.008)
        .inertia(2.0, 2.0, 0.2)
        .nozzle_offset(0.6)
        .static_margin(0.25)
        .gimbal_limit(0.08)
        .build()
    )
    return (
        MissionBuilder("Pathfinder")
        .stage(booster)
        .stage(sustainer)
        .reference_area(0.02)
        .drag_coefficient(0.35)
        .build()
    )


def single_stage() -> Mission:
    """Single-stage sounding rocket."""
    stage = (
        StageBuilder("Sounder")
        .dry_mass(20.0)
        .propellant_mass(10.0)
        .thrust(2000.0)
        .isp(220.0)
        .drag_coefficient(0.3)
        .reference_area(0.008)
        .inertia(5.0, 5.0, 0.5)
        .nozzle_offset(1.0)
        .gimbal_limit(0.1)
        .build()
    )
    return (
        MissionBuilder("Single-Stage Sounder")
        .stage(stage)
        .reference_area(0.008)
        .drag_coefficient(0.3)
        .build()
    )


PRESETS: dict[str, Callable[[], Mission]] = {
    "pathfinder": pathfinder,
    "single-stage": single_stage,
}
