"""Mission definition: an ordered stack of stages plus flight configuration.

Stages are listed bottom-up: stage 0 lights on the pad, and each later
stage rides on top of the ones before it. The payload sits above the last
stage and is never jettisoned.

Example:
    >>> from rocketsim.vehicle import MissionBuilder, StageBuilder
    >>>
    >>> mission = (
    ...     MissionBuilder("Demo")
    ...     .stage(StageBuilder("S1").thrust(2000.0).build())
    ...     .payload_mass(1.0)
    ...     .build()
    ... )
    >>> mission.total_delta_v
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

from rocketsim.environment.aerodynamics import (
    DEFAULT_DAMPING_COEFFICIENT,
    DEFAULT_DRAG_COEFFICIENT,
    DEFAULT_NORMAL_FORCE_SLOPE,
    DEFAULT_STATIC_MARGIN,
)
from rocketsim.vehicle.stage import Stage


def _positive(value: float) -> bool:
    return bool(np.isfinite(value)) and value > 0


def _non_negative(value: float) -> bool:
    return bool(np.isfinite(value)) and value >= 0


class MissionConfigError(ValueError):
    """Raised when a mission definition cannot be flown.

    Attributes:
        problems: Every problem found, one message per entry
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid mission: " + "; ".join(self.problems))


# =============================================================================
# Guidance Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class GuidanceConfig:
    """Ascent guidance schedule.

    Attributes:
        vertical_time: Mission time to leave vertical ascent [s]
        vertical_altitude: Optional altitude to leave vertical ascent [m]
        pitchover_duration: Time to ramp from vertical to pitchover_pitch [s]
        pitchover_pitch: Pitch at the start of the gravity turn [deg]
        min_pitch: Lowest pitch the gravity turn may command [deg]
    """
    vertical_time: float = 2.0
    vertical_altitude: float | None = None
    pitchover_duration: float = 3.0
    pitchover_pitch: float = 80.0
    min_pitch: float = 0.0

    def problems(self) -> list[str]:
        """List configuration problems (empty if valid)."""
        problems = []
        if not _non_negative(self.vertical_time):
            problems.append(f"guidance vertical_time must be >= 0, got {self.vertical_time}")
        if self.vertical_altitude is not None and not _non_negative(self.vertical_altitude):
            problems.append(
                f"guidance vertical_altitude must be >= 0, got {self.vertical_altitude}"
            )
        if not _non_negative(self.pitchover_duration):
            problems.append(
                f"guidance pitchover_duration must be >= 0, got {self.pitchover_duration}"
            )
        if not 0.0 <= self.pitchover_pitch <= 90.0:
            problems.append(
                f"guidance pitchover_pitch must be in [0, 90] deg, got {self.pitchover_pitch}"
            )
        if not 0.0 <= self.min_pitch <= 90.0:
            problems.append(f"guidance min_pitch must be in [0, 90] deg, got {self.min_pitch}")
        return problems


# =============================================================================
# Mission
# =============================================================================


@beartype
@dataclass(frozen=True)
class Mission:
    """Complete vehicle and flight configuration.

    Attributes:
        name: Mission name
        stages: Stages, bottom-up
        payload_mass: Mass above the last stage [kg]
        reference_area: Aerodynamic reference area [m^2]
        drag_coefficient: Axial drag coefficient
        static_margin: Centre of pressure aft of the centre of mass [m]
        normal_force_slope: CN_alpha [1/rad]
        damping_coefficient: Rate damping constant [m*s]
        target_apogee: Optional apogee the mission is sized for [m]
        guidance: Ascent guidance schedule
    """
    name: str
    stages: tuple[Stage, ...]
    payload_mass: float = 0.0
    reference_area: float = 0.01
    drag_coefficient: float = DEFAULT_DRAG_COEFFICIENT
    static_margin: float = DEFAULT_STATIC_MARGIN
    normal_force_slope: float = DEFAULT_NORMAL_FORCE_SLOPE
    damping_coefficient: float = DEFAULT_DAMPING_COEFFICIENT
    target_apogee: float | None = None
    guidance: GuidanceConfig = field(default_factory=GuidanceConfig)

    @property
    def total_mass(self) -> float:
        """Lift-off mass: every stage wet plus payload [kg]."""
        return float(sum(s.wet_mass for s in self.stages) + self.payload_mass)

    @beartype
    def mass_above(self, stage_index: int) -> float:
        """Mass carried on top of a stage: later stages wet plus payload [kg]."""
        upper = sum(s.wet_mass for s in self.stages[stage_index + 1:])
        return float(upper + self.payload_mass)

    @beartype
    def active_stage(self, stage_index: int) -> Stage:
        """Stage at an index, clamped to the last stage.

        The last stage stays attached after burnout, so any index past the
        end refers to it.
        """
        if not self.stages:
            raise MissionConfigError(["mission has no stages"])
        return self.stages[min(max(stage_index, 0), len(self.stages) - 1)]

    @beartype
    def remaining_propellant(self, mass: float, stage_index: int) -> float:
        """Propellant left in the active stage for a vehicle state.

        Args:
            mass: Current vehicle mass [kg]
            stage_index: Active stage index

        Returns:
            Remaining propellant [kg]; negative values mean the mass has
            fallen below the stage's dry stack
        """
        stage = self.active_stage(stage_index)
        return float(mass - stage.dry_mass - self.mass_above(stage_index))

    @property
    def total_delta_v(self) -> float:
        """Ideal delta-v of the full stack, upper stages counted as payload [m/s]."""
        return float(sum(
            stage.delta_v(self.mass_above(i)) for i, stage in enumerate(self.stages)
        ))

    def problems(self) -> list[str]:
        """List configuration problems (empty if valid)."""
        problems = []
        if not self.stages:
            problems.append("mission has no stages")

        for i, s in enumerate(self.stages):
            label = f"stage {i} ({s.name})"
            if not _positive(s.dry_mass):
                problems.append(f"{label}: dry_mass must be > 0, got {s.dry_mass}")
            if not _non_negative(s.propellant_mass):
                problems.append(f"{label}: propellant_mass must be >= 0, got {s.propellant_mass}")
            if not _non_negative(s.thrust):
                problems.append(f"{label}: thrust must be >= 0, got {s.thrust}")
            if not _positive(s.isp):
                problems.append(f"{label}: isp must be > 0, got {s.isp}")
            if not _positive(s.gimbal_limit):
                problems.append(f"{label}: gimbal_limit must be > 0, got {s.gimbal_limit}")
            if not _non_negative(s.nozzle_offset):
                problems.append(f"{label}: nozzle_offset must be >= 0, got {s.nozzle_offset}")
            if not all(_positive(v) for v in s.inertia):
                problems.append(f"{label}: inertia must be positive, got {s.inertia}")
            if s.burn_time_limit is not None and not _positive(s.burn_time_limit):
                problems.append(f"{label}: burn_time_limit must be > 0, got {s.burn_time_limit}")
            for key in ("reference_area", "drag_coefficient", "static_margin"):
                value = getattr(s, key)
                if value is not None and not _non_negative(value):
                    problems.append(f"{label}: {key} must be >= 0, got {value}")

        for key in (
            "payload_mass",
            "reference_area",
            "drag_coefficient",
            "static_margin",
            "normal_force_slope",
            "damping_coefficient",
        ):
            value = getattr(self, key)
            if not _non_negative(value):
                problems.append(f"{key} must be >= 0, got {value}")

        if self.target_apogee is not None and not _positive(self.target_apogee):
            problems.append(f"target_apogee must be > 0, got {self.target_apogee}")

        problems.extend(self.guidance.problems())
        return problems

    def validate(self) -> "Mission":
        """Raise MissionConfigError if the mission cannot be flown.

        Returns:
            self, so calls can be chained
        """
        problems = self.problems()
        if problems:
            raise MissionConfigError(problems)
        return self


# =============================================================================
# Mission Builder
# =============================================================================


class MissionBuilder:
    """Fluent builder for `Mission`. `build()` validates the result."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._stages: list[Stage] = []
        self._fields: dict = {}

    def stage(self, stage: Stage) -> "MissionBuilder":
        self._stages.append(stage)
        return self

    def payload_mass(self, value: float) -> "MissionBuilder":
        self._fields["payload_mass"] = float(value)
        return self

    def reference_area(self, value: float) -> "MissionBuilder":
        self._fields["reference_area"] = float(value)
        return self

    def drag_coefficient(self, value: float) -> "MissionBuilder":
        self._fields["drag_coefficient"] = float(value)
        return self

    def static_margin(self, value: float) -> "MissionBuilder":
        self._fields["static_margin"] = float(value)
        return self

    def normal_force_slope(self, value: float) -> "MissionBuilder":
        self._fields["normal_force_slope"] = float(value)
        return self

    def damping_coefficient(self, value: float) -> "MissionBuilder":
        self._fields["damping_coefficient"] = float(value)
        return self

    def target_apogee(self, value: float | None) -> "MissionBuilder":
        self._fields["target_apogee"] = None if value is None else float(value)
        return self

    def guidance(self, config: GuidanceConfig) -> "MissionBuilder":
        self._fields["guidance"] = config
        return self

    def build(self) -> Mission:
        """Create and validate the mission.

        Raises:
            MissionConfigError: If the mission cannot be flown
        """
        mission = Mission(name=self._name, stages=tuple(self._stages), **self._fields)
        return mission.validate()
