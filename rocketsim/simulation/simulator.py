"""Fixed-step flight simulation for multi-stage vehicles.

The simulator owns the loop. Every tick it:
1. asks the controller for a gimbal command
2. integrates the 6DOF equations of motion one RK4 step
3. holds the vehicle on the pad until it lifts off
4. checks the active stage for burnout and separates spent stages
5. runs the event monitor (liftoff, altitude marks, apogee, landing)

The run ends at landing, at the configured maximum time (an incomplete
flight, not an error), or when the controller issues a non-finite command
(an abort; the last valid state is kept).

Example:
    >>> from rocketsim.simulation import SimConfig, simulate
    >>> from rocketsim.vehicle.presets import pathfinder
    >>>
    >>> result = simulate(pathfinder(), SimConfig(dt=0.005, max_time=300.0))
    >>> result.outcome
    <FlightOutcome.LANDED: 'landed'>
    >>> result.altitude.max()  # apogee [m]
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from rocketsim.dynamics.integrator import rk4_step
from rocketsim.dynamics.sixdof import SixDofModel
from rocketsim.dynamics.state import GncCommand, State
from rocketsim.environment.atmosphere import atmosphere
from rocketsim.gnc.control.tvc import TVCController
from rocketsim.gnc.controller import Controller, reset_controller
from rocketsim.simulation.events import EventKind, EventMonitor, SimEvent
from rocketsim.vehicle.mission import Mission

# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class InitialConditions:
    """Initial vehicle state in the launch-site frame.

    Attributes:
        position: Initial position [m]
        velocity: Initial velocity [m/s]
        pitch_deg: Body-axis elevation [deg]; below 90 the nose leans
            downrange (+y)
        angular_velocity: Initial body rates [rad/s]
    """
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)
    pitch_deg: float = 90.0
    angular_velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)


@beartype
@dataclass(frozen=True)
class SimConfig:
    """Simulation configuration.

    Attributes:
        dt: Integration step [s]
        max_time: Simulation time bound [s]
        initial: Initial conditions
        use_j2: Include J2 in the launch-site gravity field
        liftoff_altitude: Altitude that counts as leaving the pad [m]
        altitude_marks: Altitudes reported as ALTITUDE events [m]
    """
    dt: float = 0.005
    max_time: float = 600.0
    initial: InitialConditions = field(default_factory=InitialConditions)
    use_j2: bool = False
    liftoff_altitude: float = 1.0
    altitude_marks: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not np.isfinite(self.dt) or self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if not np.isfinite(self.max_time) or self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")
        if self.dt > self.max_time:
            raise ValueError(f"dt ({self.dt}) must not exceed max_time ({self.max_time})")
        if self.liftoff_altitude < 0:
            raise ValueError(f"liftoff_altitude must be >= 0, got {self.liftoff_altitude}")
        if not 0.0 < self.initial.pitch_deg < 180.0:
            raise ValueError(f"initial pitch must be in (0, 180) deg, got {self.initial.pitch_deg}")
        values = (*self.initial.position, *self.initial.velocity, *self.initial.angular_velocity)
        if not all(np.isfinite(v) for v in values):
            raise ValueError("initial conditions must be finite")

    @property
    def steps(self) -> int:
        """Number of ticks needed to reach max_time."""
        return int(round(self.max_time / self.dt))


class FlightOutcome(Enum):
    """How a simulation run ended."""
    LANDED = "landed"
    MAX_TIME = "max_time"
    ABORTED = "aborted"


# =============================================================================
# Results
# =============================================================================


class TrajectorySample(NamedTuple):
    """One tick of a completed trajectory with derived quantities."""
    time: float                      # [s]
    position: NDArray[np.float64]    # [m]
    velocity: NDArray[np.float64]    # [m/s]
    altitude: float                  # [m]
    speed: float                     # [m/s]
    mach: float                      # [-]
    mass: float                      # [kg]
    stage_index: int
    pitch: float                     # [rad]
    angle_of_attack: float           # [rad]
    command: GncCommand


@beartype
@dataclass(frozen=True)
class FlightResult:
    """Results from a completed simulation.

    `states` and `commands` are parallel: commands[i] is the command that
    produced states[i] (commands[0] is a zero command for the initial state).

    Attributes:
        mission: Mission that was flown
        config: Simulation configuration
        controller_name: Name reported by the controller
        states: State at every tick
        commands: Command issued for every tick
        events: Detected events, in order
        outcome: How the run ended
        abort_reason: Why the run was aborted, if it was
        faults: Guarded physics conditions hit during the run
    """
    mission: Mission
    config: SimConfig
    controller_name: str
    states: tuple[State, ...]
    commands: tuple[GncCommand, ...]
    events: tuple[SimEvent, ...]
    outcome: FlightOutcome
    abort_reason: str | None = None
    faults: tuple[str, ...] = ()

    @property
    def completed(self) -> bool:
        """True if the flight ended with a landing."""
        return self.outcome is FlightOutcome.LANDED

    @property
    def incomplete(self) -> bool:
        """True if the time bound was hit before landing."""
        return self.outcome is FlightOutcome.MAX_TIME

    @property
    def aborted(self) -> bool:
        """True if the run was stopped by an invalid command or state."""
        return self.outcome is FlightOutcome.ABORTED

    @property
    def final_state(self) -> State:
        """Last valid state."""
        return self.states[-1]

    def events_of(self, kind: EventKind) -> list[SimEvent]:
        """Events of one kind, in order."""
        return [e for e in self.events if e.kind is kind]

    @property
    def time(self) -> NDArray[np.float64]:
        """Time array [s]."""
        return np.array([s.time for s in self.states])

    @property
    def position(self) -> NDArray[np.float64]:
        """Position history [m], shape (N, 3)."""
        return np.array([s.position for s in self.states])

    @property
    def velocity(self) -> NDArray[np.float64]:
        """Velocity history [m/s], shape (N, 3)."""
        return np.array([s.velocity for s in self.states])

    @property
    def altitude(self) -> NDArray[np.float64]:
        """Altitude history [m]."""
        return np.array([s.altitude for s in self.states])

    @property
    def speed(self) -> NDArray[np.float64]:
        """Speed history [m/s]."""
        return np.array([s.speed for s in self.states])

    @property
    def mass(self) -> NDArray[np.float64]:
        """Mass history [kg]."""
        return np.array([s.mass for s in self.states])

    @property
    def stage_index(self) -> NDArray[np.int64]:
        """Active stage index history."""
        return np.array([s.stage_index for s in self.states], dtype=np.int64)

    @property
    def pitch(self) -> NDArray[np.float64]:
        """Body pitch history [rad]."""
        return np.array([s.pitch for s in self.states])

    @property
    def angle_of_attack(self) -> NDArray[np.float64]:
        """Angle of attack history [rad]."""
        return np.array([s.angle_of_attack for s in self.states])

    @property
    def mach(self) -> NDArray[np.float64]:
        """Mach number history."""
        return np.array([_mach(s) for s in self.states])

    @property
    def acceleration(self) -> NDArray[np.float64]:
        """Acceleration magnitude history [m/s^2] (backward difference)."""
        t = self.time
        v = self.velocity
        acc = np.zeros(len(t))
        if len(t) > 1:
            dt = np.diff(t)
            dv = np.linalg.norm(np.diff(v, axis=0), axis=1)
            acc[1:] = np.where(dt > 0, dv / np.where(dt > 0, dt, 1.0), 0.0)
        return acc

    @property
    def gimbal_pitch(self) -> NDArray[np.float64]:
        """Commanded pitch gimbal history [rad]."""
        return np.array([c.gimbal_pitch for c in self.commands])

    @property
    def gimbal_yaw(self) -> NDArray[np.float64]:
        """Commanded yaw gimbal history [rad]."""
        return np.array([c.gimbal_yaw for c in self.commands])

    def samples(self) -> Iterator[TrajectorySample]:
        """Iterate over ticks with derived quantities."""
        for state, command in zip(self.states, self.commands):
            yield TrajectorySample(
                time=state.time,
                position=state.position,
                velocity=state.velocity,
                altitude=state.altitude,
                speed=state.speed,
                mach=_mach(state),
                mass=state.mass,
                stage_index=state.stage_index,
                pitch=state.pitch,
                angle_of_attack=state.angle_of_attack,
                command=command,
            )

    def to_dataframe(self):
        """Convert to Polars DataFrame."""
        import polars as pl

        position = self.position
        velocity = self.velocity
        return pl.DataFrame({
            "time": self.time,
            "x": position[:, 0],
            "y": position[:, 1],
            "z": position[:, 2],
            "vx": velocity[:, 0],
            "vy": velocity[:, 1],
            "vz": velocity[:, 2],
            "altitude": self.altitude,
            "speed": self.speed,
            "mach": self.mach,
            "acceleration": self.acceleration,
            "mass": self.mass,
            "stage_index": self.stage_index,
            "pitch": self.pitch,
            "gimbal_pitch": self.gimbal_pitch,
            "gimbal_yaw": self.gimbal_yaw,
        })


def _mach(state: State) -> float:
    return state.speed / atmosphere(state.altitude).speed_of_sound


# =============================================================================
# Simulator
# =============================================================================


@beartype
class Simulator:
    """Closed-loop flight simulator.

    The mission is validated on construction. A controller that defines
    `reset()` is reset at the start of every run, so repeated runs are
    identical.

    Example:
        >>> sim = Simulator(mission, SimConfig(max_time=120.0), ZeroGimbalController())
        >>> result = sim.run()
        >>> result.events_of(EventKind.APOGEE)[0].altitude
    """

    def __init__(
        self,
        mission: Mission,
        config: SimConfig | None = None,
        controller: Controller | None = None,
    ) -> None:
        """Initialize simulator.

        Args:
            mission: Mission to fly
            config: Simulation configuration (defaults to SimConfig())
            controller: Flight controller (defaults to TVCController())

        Raises:
            MissionConfigError: If the mission cannot be flown
        """
        self.mission = mission.validate()
        self.config = config or SimConfig()
        self.controller = controller if controller is not None else TVCController()

    def initial_state(self) -> State:
        """Vehicle state at mission time zero, fully fuelled."""
        initial = self.config.initial
        return State.at_rest(
            mass=self.mission.total_mass,
            position=np.array(initial.position, dtype=np.float64),
            velocity=np.array(initial.velocity, dtype=np.float64),
            pitch_deg=initial.pitch_deg,
            angular_velocity=np.array(initial.angular_velocity, dtype=np.float64),
        )

    def _check_staging(self, state: State, spent: set[int]) -> tuple[State, list[SimEvent]]:
        """Handle burnout and separation of the active stage."""
        idx = state.stage_index
        if idx in spent:
            return state, []

        stage = self.mission.stages[idx]
        remaining = self.mission.remaining_propellant(state.mass, idx)
        limit_reached = (
            stage.burn_time_limit is not None
            and state.time - state.stage_ignition_time >= stage.burn_time_limit
        )
        if remaining > 0 and not limit_reached:
            return state, []

        spent.add(idx)
        events = [SimEvent(
            EventKind.BURNOUT, state.time, state,
            stage_from=idx,
            label=f"Burnout {stage.name}",
        )]

        if idx + 1 < len(self.mission.stages):
            jettisoned = stage.dry_mass + max(remaining, 0.0)
            state = state.replace(
                mass=max(state.mass - jettisoned, 0.0),
                stage_index=idx + 1,
                stage_ignition_time=state.time,
            )
            events.append(SimEvent(
                EventKind.STAGING, state.time, state,
                stage_from=idx,
                stage_to=idx + 1,
                jettisoned_mass=jettisoned,
                label=f"Staging {stage.name} -> {self.mission.stages[idx + 1].name}",
            ))

        return state, events

    def run(self) -> FlightResult:
        """Fly the mission.

        Returns:
            FlightResult with the full trajectory and events
        """
        mission = self.mission
        config = self.config
        controller = self.controller
        dt = config.dt

        reset_controller(controller)
        model = SixDofModel(mission, use_j2=config.use_j2)
        monitor = EventMonitor(
            liftoff_altitude=config.liftoff_altitude,
            altitude_marks=config.altitude_marks,
        )

        state = self.initial_state()
        monitor.start(state)

        states = [state]
        commands = [GncCommand()]
        events: list[SimEvent] = []
        spent: set[int] = set()
        outcome = FlightOutcome.MAX_TIME
        abort_reason = None

        for _ in range(config.steps):
            command = controller.control(state, mission, dt)
            if not command.is_finite():
                outcome = FlightOutcome.ABORTED
                abort_reason = (
                    f"{controller.name()} issued a non-finite command at t={state.time:.3f} s"
                )
                break

            nxt = rk4_step(state, lambda s: model.derivative(s, command), dt)
            if not nxt.is_finite():
                outcome = FlightOutcome.ABORTED
                abort_reason = f"non-finite state after t={state.time:.3f} s"
                break

            # Pad hold: the vehicle cannot sink into the ground before liftoff
            if not monitor.airborne and nxt.altitude < 0:
                nxt = nxt.replace(
                    position=np.array([nxt.position[0], nxt.position[1], 0.0]),
                    velocity=np.zeros(3),
                )

            nxt, stage_events = self._check_staging(nxt, spent)
            events.extend(stage_events)

            for event in monitor.update(state, nxt):
                if event.kind is EventKind.LANDING:
                    nxt = event.state
                events.append(event)

            states.append(nxt)
            commands.append(command)
            state = nxt

            if monitor.landed:
                outcome = FlightOutcome.LANDED
                break

        return FlightResult(
            mission=mission,
            config=config,
            controller_name=controller.name(),
            states=tuple(states),
            commands=tuple(commands),
            events=tuple(events),
            outcome=outcome,
            abort_reason=abort_reason,
            faults=tuple(model.faults),
        )


@beartype
def simulate(
    mission: Mission,
    config: SimConfig | None = None,
    controller: Controller | None = None,
) -> FlightResult:
    """Fly a mission with the given (or default) configuration and controller."""
    return Simulator(mission, config, controller).run()
