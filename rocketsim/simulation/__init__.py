"""Simulation module for rocket flight.

Provides the closed-loop flight simulator, event detection and flight
summaries.

Example:
    >>> from rocketsim.simulation import SimConfig, simulate, format_flight_summary
    >>> from rocketsim.vehicle.presets import pathfinder
    >>>
    >>> result = simulate(pathfinder(), SimConfig(max_time=300.0))
    >>> print(format_flight_summary(result))
"""

from rocketsim.simulation.events import (
    EventKind,
    EventMonitor,
    SimEvent,
)
from rocketsim.simulation.simulator import (
    FlightOutcome,
    FlightResult,
    InitialConditions,
    SimConfig,
    Simulator,
    TrajectorySample,
    simulate,
)
from rocketsim.simulation.summary import (
    FlightSummary,
    format_flight_summary,
)

__all__ = [
    # Events
    "EventKind",
    "EventMonitor",
    "SimEvent",
    # Simulator
    "FlightOutcome",
    "FlightResult",
    "InitialConditions",
    "SimConfig",
    "Simulator",
    "TrajectorySample",
    "simulate",
    # Summary
    "FlightSummary",
    "format_flight_summary",
]
