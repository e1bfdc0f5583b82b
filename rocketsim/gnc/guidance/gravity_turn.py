"""Gravity turn guidance for rocket ascent.

Implements a three-phase ascent profile. The gravity turn is an efficient
trajectory that minimizes steering losses by allowing gravity to naturally
pitch the vehicle over.

Phases:
1. Vertical ascent: hold 90 degrees until the vertical time (or the
   optional vertical altitude) is reached
2. Pitchover: ramp the pitch command linearly down to the pitchover pitch
3. Gravity turn: follow the flight path angle (zero angle of attack),
   clamped between the minimum pitch and vertical

The phase only moves forward. Zero-length phases are passed through in a
single call, so a vehicle can go from vertical ascent straight into the
gravity turn on one tick.

Example:
    >>> from rocketsim.gnc.guidance import GravityTurnGuidance
    >>>
    >>> guidance = GravityTurnGuidance(mission.guidance)
    >>> pitch_cmd = guidance.pitch_command(state)  # [rad]
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from beartype import beartype

from rocketsim.dynamics.state import State
from rocketsim.vehicle.mission import GuidanceConfig

# Below this speed the flight path angle is too noisy to follow [m/s]
MIN_TURN_SPEED = 5.0

VERTICAL = float(np.pi / 2)


class GuidancePhase(Enum):
    """Ascent guidance phase."""
    VERTICAL_ASCENT = "vertical_ascent"
    PITCHOVER = "pitchover"
    GRAVITY_TURN = "gravity_turn"


# =============================================================================
# Gravity Turn Guidance
# =============================================================================


@beartype
@dataclass
class GravityTurnGuidance:
    """Gravity turn ascent guidance.

    The guidance outputs a commanded pitch for the control system; yaw is
    always commanded to zero (in-plane ascent).

    Attributes:
        config: Phase schedule
    """
    config: GuidanceConfig = field(default_factory=GuidanceConfig)

    _phase: GuidancePhase = field(default=GuidancePhase.VERTICAL_ASCENT, init=False, repr=False)
    _pitchover_start: float = field(default=0.0, init=False, repr=False)

    @property
    def phase(self) -> GuidancePhase:
        """Current guidance phase."""
        return self._phase

    def reset(self) -> None:
        """Return to vertical ascent."""
        self._phase = GuidancePhase.VERTICAL_ASCENT
        self._pitchover_start = 0.0

    def _update_phase(self, state: State) -> None:
        cfg = self.config

        if self._phase is GuidancePhase.VERTICAL_ASCENT:
            time_up = state.time >= cfg.vertical_time
            high_enough = (
                cfg.vertical_altitude is not None and state.altitude >= cfg.vertical_altitude
            )
            if time_up or high_enough:
                self._phase = GuidancePhase.PITCHOVER
                self._pitchover_start = state.time

        if self._phase is GuidancePhase.PITCHOVER:
            if state.time - self._pitchover_start >= cfg.pitchover_duration:
                self._phase = GuidancePhase.GRAVITY_TURN

    def pitch_command(self, state: State) -> float:
        """Get commanded pitch angle, advancing the phase first.

        Args:
            state: Current vehicle state

        Returns:
            Commanded pitch angle [rad] (0 = horizontal, pi/2 = vertical)
        """
        self._update_phase(state)
        cfg = self.config
        entry_pitch = float(np.radians(cfg.pitchover_pitch))

        if self._phase is GuidancePhase.VERTICAL_ASCENT:
            return VERTICAL

        if self._phase is GuidancePhase.PITCHOVER:
            frac = (state.time - self._pitchover_start) / cfg.pitchover_duration
            frac = min(max(frac, 0.0), 1.0)
            return VERTICAL + frac * (entry_pitch - VERTICAL)

        if state.speed < MIN_TURN_SPEED:
            return entry_pitch

        min_pitch = float(np.radians(cfg.min_pitch))
        return min(max(state.flight_path_angle, min_pitch), VERTICAL)

    @staticmethod
    def yaw_command(state: State) -> float:
        """Commanded yaw angle [rad]; the ascent stays in the y-z plane."""
        return 0.0
