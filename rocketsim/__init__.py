"""rocketsim - Multi-stage rocket 6DOF flight simulation.

This package simulates staged vehicles under rigid-body dynamics with
closed-loop gravity-turn guidance and thrust vector control, and ships an
orbital mechanics toolkit (Keplerian elements, Hohmann transfers, orbit
propagation).

Example:
    >>> from rocketsim import SimConfig, format_flight_summary, simulate
    >>> from rocketsim.vehicle import pathfinder
    >>>
    >>> result = simulate(pathfinder(), SimConfig(dt=0.005, max_time=300.0))
    >>> print(format_flight_summary(result))
    >>> print(f"Apogee: {result.altitude.max():.0f} m")
"""

__version__ = "0.1.0"

from rocketsim.dynamics import (
    GncCommand,
    SixDofModel,
    State,
    StateDerivative,
    rk4_step,
)
from rocketsim.gnc import (
    Controller,
    TVCController,
    ZeroGimbalController,
)
from rocketsim.orbital import (
    HohmannTransfer,
    KeplerianElements,
    OrbitalState,
    hohmann_transfer,
    propagate_orbit,
)
from rocketsim.simulation import (
    EventKind,
    FlightOutcome,
    FlightResult,
    FlightSummary,
    InitialConditions,
    SimConfig,
    SimEvent,
    Simulator,
    format_flight_summary,
    simulate,
)
from rocketsim.vehicle import (
    GuidanceConfig,
    Mission,
    MissionBuilder,
    MissionConfigError,
    Stage,
    StageBuilder,
    load_mission,
)

__all__ = [
    "__version__",
    # Dynamics
    "GncCommand",
    "SixDofModel",
    "State",
    "StateDerivative",
    "rk4_step",
    # GNC
    "Controller",
    "TVCController",
    "ZeroGimbalController",
    # Orbital
    "HohmannTransfer",
    "KeplerianElements",
    "OrbitalState",
    "hohmann_transfer",
    "propagate_orbit",
    # Simulation
    "EventKind",
    "FlightOutcome",
    "FlightResult",
    "FlightSummary",
    "InitialConditions",
    "SimConfig",
    "SimEvent",
    "Simulator",
    "format_flight_summary",
    "simulate",
    # Vehicle
    "GuidanceConfig",
    "Mission",
    "MissionBuilder",
    "MissionConfigError",
    "Stage",
    "StageBuilder",
    "load_mission",
]
