"""Shared fixtures for rocketsim tests."""

import pytest

from rocketsim.gnc import ZeroGimbalController
from rocketsim.simulation import SimConfig, simulate
from rocketsim.vehicle import MissionBuilder, StageBuilder, pathfinder, single_stage

# Coarser than the 5 ms default to keep the suite fast
TEST_DT = 0.01


@pytest.fixture
def sounder():
    """Single-stage reference mission."""
    return single_stage()


@pytest.fixture
def two_stage():
    """Two-stage reference mission."""
    return pathfinder()


@pytest.fixture
def ballistic():
    """Unpowered point mass with no aerodynamic loads."""
    stage = (
        StageBuilder("Ballast")
        .dry_mass(10.0)
        .propellant_mass(0.0)
        .thrust(0.0)
        .isp(200.0)
        .build()
    )
    return (
        MissionBuilder("Ballistic")
        .stage(stage)
        .reference_area(0.0)
        .build()
    )


@pytest.fixture(scope="session")
def sounder_flight():
    """Closed-loop flight of the single-stage mission."""
    return simulate(single_stage(), SimConfig(dt=TEST_DT, max_time=600.0))


@pytest.fixture(scope="session")
def two_stage_flight():
    """Closed-loop flight of the two-stage mission with altitude marks."""
    config = SimConfig(dt=TEST_DT, max_time=600.0, altitude_marks=(1000.0, 5000.0))
    return simulate(pathfinder(), config)


@pytest.fixture(scope="session")
def sounder_open_loop_flight():
    """Single-stage mission flown without gimbal commands."""
    return simulate(
        single_stage(),
        SimConfig(dt=TEST_DT, max_time=600.0),
        ZeroGimbalController(),
    )
