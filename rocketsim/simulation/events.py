"""Discrete flight events detected over the continuous trajectory.

The monitor compares consecutive states after every integration step:
- LIFTOFF: altitude first exceeds the liftoff threshold
- ALTITUDE: first upward crossing of each configured altitude mark
- APOGEE: vertical velocity changes from positive to non-positive in flight
- LANDING: altitude at or below the ground while descending in flight; the
  recorded state is clamped to the ground

BURNOUT and STAGING are produced by the runner's staging logic and share
the same record type.

Example:
    >>> from rocketsim.simulation.events import EventMonitor
    >>>
    >>> monitor = EventMonitor(liftoff_altitude=1.0, altitude_marks=(1000.0,))
    >>> events = monitor.update(prev_state, state)
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from beartype import beartype

from rocketsim.dynamics.state import State


class EventKind(Enum):
    """Kinds of simulation events."""
    LIFTOFF = "liftoff"
    BURNOUT = "burnout"
    STAGING = "staging"
    ALTITUDE = "altitude"
    APOGEE = "apogee"
    LANDING = "landing"


@beartype
@dataclass(frozen=True)
class SimEvent:
    """A discrete event that occurred during simulation.

    Attributes:
        kind: Event kind
        time: Mission time [s]
        state: Vehicle state when the event was detected
        stage_from: Spent stage index (BURNOUT, STAGING)
        stage_to: Newly active stage index (STAGING)
        jettisoned_mass: Mass dropped at separation [kg] (STAGING)
        label: Human-readable description
    """
    kind: EventKind
    time: float
    state: State
    stage_from: int | None = None
    stage_to: int | None = None
    jettisoned_mass: float | None = None
    label: str = ""

    @property
    def altitude(self) -> float:
        """Altitude at the event [m]."""
        return self.state.altitude

    @property
    def speed(self) -> float:
        """Speed at the event [m/s]."""
        return self.state.speed

    def describe(self) -> str:
        """One-line description for summaries."""
        if self.label:
            return self.label
        return self.kind.value.capitalize()


@beartype
@dataclass
class EventMonitor:
    """Passive detector for trajectory events.

    Attributes:
        liftoff_altitude: Altitude that counts as leaving the pad [m]
        altitude_marks: Altitudes to report on first upward crossing [m]
    """
    liftoff_altitude: float = 1.0
    altitude_marks: tuple[float, ...] = ()

    _airborne: bool = field(default=False, init=False, repr=False)
    _apogee_seen: bool = field(default=False, init=False, repr=False)
    _landed: bool = field(default=False, init=False, repr=False)
    _marks_fired: set = field(default_factory=set, init=False, repr=False)

    @property
    def airborne(self) -> bool:
        """True once liftoff has happened."""
        return self._airborne

    @property
    def landed(self) -> bool:
        """True once landing has been detected."""
        return self._landed

    def start(self, state: State) -> None:
        """Arm the monitor at the initial state.

        A vehicle starting above the liftoff altitude is already airborne,
        and marks it is already above count as passed.
        """
        self._airborne = state.altitude > self.liftoff_altitude
        self._apogee_seen = False
        self._landed = False
        self._marks_fired = {m for m in self.altitude_marks if state.altitude >= m}

    def update(self, prev: State, current: State) -> list[SimEvent]:
        """Check one step for events.

        Args:
            prev: State before the step
            current: State after the step

        Returns:
            Events detected on this step, in occurrence order
        """
        if self._landed:
            return []

        events = []

        if not self._airborne and current.altitude > self.liftoff_altitude:
            self._airborne = True
            events.append(SimEvent(EventKind.LIFTOFF, current.time, current, label="Liftoff"))

        for mark in self.altitude_marks:
            if mark not in self._marks_fired and prev.altitude < mark <= current.altitude:
                self._marks_fired.add(mark)
                events.append(SimEvent(
                    EventKind.ALTITUDE, current.time, current,
                    label=f"Altitude {mark:.0f} m",
                ))

        if (
            self._airborne
            and not self._apogee_seen
            and prev.velocity[2] > 0
            and current.velocity[2] <= 0
        ):
            self._apogee_seen = True
            events.append(SimEvent(EventKind.APOGEE, current.time, current, label="Apogee"))

        if self._airborne and current.altitude <= 0 and current.velocity[2] < 0:
            self._landed = True
            ground = current.replace(
                position=np.array([current.position[0], current.position[1], 0.0])
            )
            events.append(SimEvent(EventKind.LANDING, current.time, ground, label="Landing"))

        return events
