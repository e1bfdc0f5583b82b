"""Unit tests for the flight simulator, events and flight summary.

Tests the simulation infrastructure for accuracy and physical correctness.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from rocketsim.dynamics import GncCommand, SixDofModel, State, rk4_step
from rocketsim.environment import MU_EARTH, R_EARTH_MEAN
from rocketsim.gnc import Controller, ZeroGimbalController, reset_controller
from rocketsim.simulation import (
    EventKind,
    EventMonitor,
    FlightOutcome,
    FlightSummary,
    InitialConditions,
    SimConfig,
    Simulator,
    format_flight_summary,
    simulate,
)
from rocketsim.vehicle import Mission, MissionConfigError

# =============================================================================
# Configuration Tests
# =============================================================================


class TestSimConfig:
    """Test configuration validation."""

    def test_defaults(self):
        """Defaults match the documented values."""
        config = SimConfig()
        assert config.dt == 0.005
        assert config.max_time == 600.0
        assert config.steps == 120000
        assert config.use_j2 is False

    @pytest.mark.parametrize("kwargs", [
        {"dt": 0.0},
        {"dt": -0.01},
        {"max_time": 0.0},
        {"dt": 2.0, "max_time": 1.0},
        {"liftoff_altitude": -1.0},
        {"initial": InitialConditions(pitch_deg=0.0)},
        {"initial": InitialConditions(velocity=(0.0, float("nan"), 0.0))},
    ])
    def test_invalid(self, kwargs):
        """Invalid settings raise ValueError."""
        with pytest.raises(ValueError):
            SimConfig(**kwargs)

    def test_invalid_mission_fails_fast(self):
        """The simulator refuses a mission that cannot be flown."""
        with pytest.raises(MissionConfigError):
            Simulator(Mission(name="Empty", stages=()))


# =============================================================================
# Event Monitor Tests
# =============================================================================


def _at(altitude: float, vz: float, time: float) -> State:
    return State.at_rest(
        mass=1.0,
        position=np.array([0.0, 0.0, altitude]),
        velocity=np.array([0.0, 0.0, vz]),
    ).replace(time=time)


class TestEventMonitor:
    """Test event detection on hand-made state pairs."""

    def test_liftoff(self):
        """Liftoff fires once when the threshold is exceeded."""
        monitor = EventMonitor(liftoff_altitude=1.0)
        monitor.start(_at(0.0, 0.0, 0.0))
        assert monitor.update(_at(0.0, 1.0, 0.0), _at(0.5, 1.0, 0.1)) == []
        events = monitor.update(_at(0.5, 1.0, 0.1), _at(1.5, 1.0, 0.2))
        assert [e.kind for e in events] == [EventKind.LIFTOFF]
        assert monitor.airborne
        assert monitor.update(_at(1.5, 1.0, 0.2), _at(2.5, 1.0, 0.3)) == []

    def test_start_airborne(self):
        """A start above the threshold counts as already airborne."""
        monitor = EventMonitor()
        monitor.start(_at(100.0, 10.0, 0.0))
        assert monitor.airborne
        assert monitor.update(_at(100.0, 10.0, 0.0), _at(101.0, 10.0, 0.1)) == []

    def test_altitude_marks(self):
        """Each mark fires on its first upward crossing only."""
        monitor = EventMonitor(altitude_marks=(1000.0,))
        monitor.start(_at(900.0, 50.0, 0.0))
        events = monitor.update(_at(990.0, 50.0, 1.0), _at(1010.0, 50.0, 1.1))
        assert [e.kind for e in events] == [EventKind.ALTITUDE]
        assert "1000" in events[0].label
        assert monitor.update(_at(1010.0, -50.0, 5.0), _at(990.0, -50.0, 5.1)) == []
        assert monitor.update(_at(990.0, 50.0, 6.0), _at(1010.0, 50.0, 6.1)) == []

    def test_apogee_once(self):
        """Apogee fires when vz turns non-positive, once."""
        monitor = EventMonitor()
        monitor.start(_at(500.0, 10.0, 0.0))
        events = monitor.update(_at(510.0, 0.5, 1.0), _at(510.0, -0.5, 1.1))
        assert [e.kind for e in events] == [EventKind.APOGEE]
        assert monitor.update(_at(505.0, 0.5, 2.0), _at(505.0, -0.5, 2.1)) == []

    def test_no_apogee_on_pad(self):
        """Apogee is not reported before liftoff."""
        monitor = EventMonitor()
        monitor.start(_at(0.0, 0.0, 0.0))
        assert monitor.update(_at(0.5, 0.1, 0.0), _at(0.5, 0.0, 0.1)) == []

    def test_landing_clamped_to_ground(self):
        """Landing reports a state on the ground and stops detection."""
        monitor = EventMonitor()
        monitor.start(_at(10.0, -10.0, 0.0))
        events = monitor.update(_at(0.5, -10.0, 1.0), _at(-0.5, -10.0, 1.1))
        assert [e.kind for e in events] == [EventKind.LANDING]
        assert events[0].state.altitude == 0.0
        assert monitor.landed
        assert monitor.update(_at(-0.5, -10.0, 1.1), _at(-1.5, -10.0, 1.2)) == []


# =============================================================================
# Ballistic Flight Tests
# =============================================================================


class TestBallisticFlight:
    """Unpowered flight should reproduce a parabola."""

    def test_parabola(self, ballistic):
        """Position follows x0 + v0 t - g t^2 / 2."""
        config = SimConfig(
            dt=0.01,
            max_time=5.0,
            initial=InitialConditions(velocity=(0.0, 30.0, 40.0)),
        )
        result = simulate(ballistic, config, ZeroGimbalController())

        g = MU_EARTH / R_EARTH_MEAN**2
        t = result.time
        assert_allclose(result.position[:, 1], 30.0 * t, rtol=1e-4, atol=1e-6)
        assert_allclose(result.position[:, 2], 40.0 * t - 0.5 * g * t**2, rtol=1e-3, atol=1e-2)

    def test_lands_at_analytic_time(self, ballistic):
        """Landing happens within one step of 2 v0 / g."""
        config = SimConfig(
            dt=0.01,
            max_time=30.0,
            initial=InitialConditions(velocity=(0.0, 0.0, 40.0)),
        )
        result = simulate(ballistic, config, ZeroGimbalController())
        g = MU_EARTH / R_EARTH_MEAN**2

        assert result.outcome is FlightOutcome.LANDED
        assert result.completed
        assert abs(result.final_state.time - 2.0 * 40.0 / g) <= 0.011
        assert result.final_state.altitude == 0.0

        apogee = result.events_of(EventKind.APOGEE)[0]
        assert_allclose(apogee.altitude, 40.0**2 / (2.0 * g), rtol=1e-3)

    def test_unpowered_stage_burns_out_immediately(self, ballistic):
        """A stage without propellant reports burnout on the first tick."""
        result = simulate(ballistic, SimConfig(dt=0.01, max_time=0.1), ZeroGimbalController())
        burnouts = result.events_of(EventKind.BURNOUT)
        assert len(burnouts) == 1
        assert burnouts[0].time == pytest.approx(0.01)
        assert not result.events_of(EventKind.STAGING)

    def test_pad_hold(self, ballistic):
        """A vehicle that cannot lift off stays on the pad."""
        result = simulate(ballistic, SimConfig(dt=0.01, max_time=1.0), ZeroGimbalController())
        assert result.incomplete
        assert_allclose(result.altitude, 0.0)
        assert not result.events_of(EventKind.LIFTOFF)


# =============================================================================
# Powered Flight Tests
# =============================================================================


class TestPoweredFlight:
    """Closed-loop flight of the reference missions."""

    def test_single_stage_lands(self, sounder_flight):
        """The sounder completes its flight."""
        assert sounder_flight.outcome is FlightOutcome.LANDED
        assert sounder_flight.controller_name == "gravity-turn-tvc"
        assert sounder_flight.altitude.max() > 1000.0

    def test_event_order(self, sounder_flight):
        """Events occur in physical order."""
        kinds = [e.kind for e in sounder_flight.events]
        assert kinds[0] is EventKind.LIFTOFF
        assert kinds[-1] is EventKind.LANDING
        assert kinds.index(EventKind.BURNOUT) < kinds.index(EventKind.APOGEE)
        assert kinds.count(EventKind.APOGEE) == 1

    def test_event_times_non_decreasing(self, sounder_flight):
        """Event times never go backwards."""
        times = [e.time for e in sounder_flight.events]
        assert all(b >= a for a, b in zip(times, times[1:]))

    def test_apogee_on_sign_change(self, sounder_flight):
        """Apogee is reported on the tick where vz becomes non-positive."""
        vz = sounder_flight.velocity[:, 2]
        t = sounder_flight.time
        idx = next(i for i in range(1, len(vz)) if vz[i - 1] > 0 and vz[i] <= 0)
        apogee = sounder_flight.events_of(EventKind.APOGEE)[0]
        assert apogee.time == t[idx]

        liftoff = sounder_flight.events_of(EventKind.LIFTOFF)[0]
        landing = sounder_flight.events_of(EventKind.LANDING)[0]
        assert liftoff.time < apogee.time < landing.time

    def test_mass_monotonic(self, sounder_flight, two_stage_flight):
        """Mass never increases."""
        for result in (sounder_flight, two_stage_flight):
            assert np.all(np.diff(result.mass) <= 1e-12)

    def test_final_mass_is_dry(self, sounder_flight):
        """After burnout the sounder weighs its dry mass (within one step of flow)."""
        stage = sounder_flight.mission.stages[0]
        assert_allclose(sounder_flight.final_state.mass, stage.dry_mass, atol=stage.mass_flow_rate * 0.01)

    def test_quaternion_unit_norm(self, two_stage_flight):
        """Every attitude is a unit quaternion."""
        norms = np.array([np.linalg.norm(s.quaternion) for s in two_stage_flight.states])
        assert np.all(np.abs(norms - 1.0) < 1e-9)

    def test_staging(self, two_stage_flight):
        """The booster separates once and drops its dry mass."""
        staging = two_stage_flight.events_of(EventKind.STAGING)
        assert len(staging) == 1
        event = staging[0]
        booster = two_stage_flight.mission.stages[0]
        assert event.stage_from == 0
        assert event.stage_to == 1
        assert_allclose(event.jettisoned_mass, booster.dry_mass)
        assert event.state.stage_index == 1
        assert event.state.stage_ignition_time == event.time

    def test_stage_index_monotonic(self, two_stage_flight):
        """Stage indices only increase, by one at a time."""
        steps = np.diff(two_stage_flight.stage_index)
        assert np.all(steps >= 0)
        assert np.all(steps <= 1)
        assert two_stage_flight.stage_index[-1] == 1

    def test_mass_drop_at_separation(self, two_stage_flight):
        """The mass falls by the booster dry mass plus one step of flow."""
        idx = np.flatnonzero(np.diff(two_stage_flight.stage_index))[0] + 1
        booster = two_stage_flight.mission.stages[0]
        drop = two_stage_flight.mass[idx - 1] - two_stage_flight.mass[idx]
        assert booster.dry_mass <= drop <= booster.dry_mass + booster.mass_flow_rate * 0.01 + 1e-9

    def test_final_stage_stays_attached(self, two_stage_flight):
        """The last stage burns out without a separation."""
        burnouts = two_stage_flight.events_of(EventKind.BURNOUT)
        assert [e.stage_from for e in burnouts] == [0, 1]

    def test_altitude_marks(self, two_stage_flight):
        """Configured altitude marks are reported in order."""
        marks = two_stage_flight.events_of(EventKind.ALTITUDE)
        assert [e.label for e in marks] == ["Altitude 1000 m", "Altitude 5000 m"]

    def test_gimbal_within_limits(self, two_stage_flight):
        """Commands never exceed the largest stage gimbal limit."""
        limit = max(s.gimbal_limit for s in two_stage_flight.mission.stages)
        assert np.all(np.abs(two_stage_flight.gimbal_pitch) <= limit + 1e-12)
        assert np.all(np.abs(two_stage_flight.gimbal_yaw) <= limit + 1e-12)

    def test_not_aborted(self, two_stage_flight):
        """The closed loop stays finite."""
        assert not two_stage_flight.aborted
        assert two_stage_flight.abort_reason is None
        assert two_stage_flight.faults == ()

    def test_gravity_turn_goes_downrange(self, two_stage_flight):
        """The pitch program carries the vehicle toward +y."""
        assert two_stage_flight.final_state.position[1] > 0
        assert abs(two_stage_flight.final_state.position[0]) < two_stage_flight.final_state.position[1]

    def test_arrays_parallel(self, two_stage_flight):
        """Per-tick arrays all have one entry per state."""
        n = len(two_stage_flight.states)
        assert len(two_stage_flight.commands) == n
        for arr in (
            two_stage_flight.time,
            two_stage_flight.mach,
            two_stage_flight.acceleration,
            two_stage_flight.gimbal_pitch,
        ):
            assert len(arr) == n

    def test_samples(self, sounder_flight):
        """samples() yields one record per tick."""
        samples = list(sounder_flight.samples())
        assert len(samples) == len(sounder_flight.states)
        assert samples[0].time == 0.0
        assert samples[0].command == GncCommand()

    def test_dataframe(self, sounder_flight):
        """to_dataframe() has one row per tick."""
        df = sounder_flight.to_dataframe()
        assert df.height == len(sounder_flight.states)
        assert "altitude" in df.columns


# =============================================================================
# Controller Equivalence Tests
# =============================================================================


class TestZeroGimbalEquivalence:
    """The zero-gimbal controller reproduces plain EOM integration."""

    def test_matches_direct_integration(self, sounder, sounder_open_loop_flight):
        """Before burnout the runner adds nothing to the RK4 integration."""
        model = SixDofModel(sounder)
        state = Simulator(sounder).initial_state()
        states = [state]
        for _ in range(300):
            state = rk4_step(state, lambda s: model.derivative(s, GncCommand()), 0.01)
            states.append(state)

        flown = sounder_open_loop_flight.states[:301]
        assert_allclose([s.position for s in flown], [s.position for s in states], rtol=1e-12, atol=1e-12)
        assert_allclose([s.mass for s in flown], [s.mass for s in states], rtol=1e-12)

    def test_open_loop_stays_vertical(self, sounder_open_loop_flight):
        """Without commands a vertical launch stays in the vertical line."""
        apogee = sounder_open_loop_flight.events_of(EventKind.APOGEE)[0]
        assert_allclose(apogee.state.position[:2], [0.0, 0.0], atol=1e-6)


# =============================================================================
# Abort Tests
# =============================================================================


class _NaNController:
    def control(self, state, mission, dt):
        if state.time > 0.5:
            return GncCommand(gimbal_pitch=float("nan"))
        return GncCommand()

    def name(self):
        return "nan"

    def reset(self):
        pass


class TestAbort:
    """Invalid commands stop the run."""

    def test_non_finite_command_aborts(self, sounder):
        """A NaN command aborts and keeps the last valid state."""
        result = simulate(sounder, SimConfig(dt=0.01, max_time=10.0), _NaNController())
        assert result.outcome is FlightOutcome.ABORTED
        assert result.aborted
        assert "nan" in result.abort_reason
        assert result.final_state.is_finite()
        assert result.final_state.time < 0.6

    def test_repeat_runs_identical(self, sounder):
        """Runs are deterministic."""
        sim = Simulator(sounder, SimConfig(dt=0.01, max_time=2.0))
        first = sim.run()
        second = sim.run()
        assert_allclose(first.position, second.position, rtol=0, atol=0)


# =============================================================================
# Custom Controller Tests
# =============================================================================


class _StatelessController:
    """Controller with only the required methods."""

    def control(self, state, mission, dt):
        return GncCommand()

    def name(self):
        return "stateless"


class _CountingController(_StatelessController):
    def __init__(self):
        self.resets = 0

    def reset(self):
        self.resets += 1


class TestCustomController:
    """Controllers only need control() and name()."""

    def test_satisfies_protocol(self):
        """reset() is not part of the required capability."""
        assert isinstance(_StatelessController(), Controller)

    def test_flies_without_reset(self, sounder):
        """A controller without reset() flies the mission."""
        result = simulate(sounder, SimConfig(dt=0.01, max_time=1.0), _StatelessController())
        assert result.controller_name == "stateless"
        assert result.outcome is FlightOutcome.MAX_TIME
        assert result.final_state.altitude > 0

    def test_reset_called_when_defined(self, sounder):
        """An optional reset() runs once per run."""
        ctrl = _CountingController()
        sim = Simulator(sounder, SimConfig(dt=0.01, max_time=0.5), ctrl)
        sim.run()
        sim.run()
        assert ctrl.resets == 2

    def test_reset_controller_skips_missing(self):
        """reset_controller is a no-op without reset()."""
        reset_controller(_StatelessController())
        ctrl = _CountingController()
        reset_controller(ctrl)
        assert ctrl.resets == 1


# =============================================================================
# Summary Tests
# =============================================================================


class TestFlightSummary:
    """Test the performance summary and report."""

    def test_summary_values(self, sounder_flight):
        """Headline numbers agree with the trajectory arrays."""
        summary = FlightSummary.from_result(sounder_flight)
        assert summary.apogee == sounder_flight.altitude.max()
        assert summary.max_speed == sounder_flight.speed.max()
        assert summary.outcome is FlightOutcome.LANDED
        assert summary.impact_speed is not None
        assert summary.flight_time == sounder_flight.final_state.time
        assert summary.apogee_error is None

    def test_to_dict(self, sounder_flight):
        """to_dict() uses plain values."""
        data = FlightSummary.from_result(sounder_flight).to_dict()
        assert data["outcome"] == "landed"
        assert isinstance(data["apogee"], float)

    def test_report_sections(self, two_stage_flight):
        """The text report lists vehicle, events, performance and trajectory."""
        report = format_flight_summary(two_stage_flight)
        for heading in ("VEHICLE:", "EVENTS:", "PERFORMANCE:", "TRAJECTORY:"):
            assert heading in report
        assert "S1-Booster" in report
        assert "Staging S1-Booster -> S2-Sustainer" in report
        assert "FAULTS:" not in report
