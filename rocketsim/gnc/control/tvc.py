"""Thrust Vector Control (TVC) controller.

Combines gravity turn guidance with two PID loops (pitch and yaw) and maps
their normalized outputs onto engine gimbal angles.

Sign conventions:
- A positive pitch gimbal raises the body pitch, so the pitch channel maps
  directly: gimbal_pitch = u_pitch * limit.
- A positive yaw gimbal swings the nose toward -x (decreasing yaw), so the
  yaw channel is flipped: gimbal_yaw = -u_yaw * limit.

Example:
    >>> from rocketsim.gnc.control import TVCController
    >>>
    >>> tvc = TVCController()
    >>> command = tvc.control(state, mission, dt=0.005)
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

from rocketsim.dynamics.state import GncCommand, State
from rocketsim.gnc.control.pid import PIDController, PIDGains
from rocketsim.gnc.guidance.gravity_turn import GravityTurnGuidance
from rocketsim.vehicle.mission import GuidanceConfig, Mission

# =============================================================================
# TVC Controller
# =============================================================================


@beartype
@dataclass
class TVCController:
    """Guidance + PID + TVC attitude controller.

    PID outputs are normalized to [-1, 1] and scaled by the active stage's
    gimbal limit, so the same gains serve every stage.

    Attributes:
        pitch_gains: PID gains for the pitch channel (per radian of error)
        yaw_gains: PID gains for the yaw channel (per radian of error)
        integral_limit: Anti-windup band for both integrators
        derivative_filter: Derivative low-pass weight for both channels
        gimbal_rate_limit: Maximum gimbal slew [rad/s], unlimited if None
        guidance_config: Schedule override; the mission's schedule is used
            if None
    """
    # Stable for the reference missions (Ixx 2-20 kg*m^2, nozzle 0.6-1.5 m)
    pitch_gains: PIDGains = field(default_factory=lambda: PIDGains(kp=0.6, ki=0.05, kd=0.25))
    yaw_gains: PIDGains = field(default_factory=lambda: PIDGains(kp=0.6, ki=0.05, kd=0.25))
    integral_limit: float = 1.0
    derivative_filter: float = 0.2
    gimbal_rate_limit: float | None = None
    guidance_config: GuidanceConfig | None = None

    # Internal controllers
    _pitch_ctrl: PIDController = field(init=False, repr=False)
    _yaw_ctrl: PIDController = field(init=False, repr=False)
    _guidance: GravityTurnGuidance | None = field(default=None, init=False, repr=False)

    # State
    _prev_gimbal: tuple[float, float] = field(default=(0.0, 0.0), init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize internal controllers."""
        if self.integral_limit < 0:
            raise ValueError(f"integral_limit must be >= 0, got {self.integral_limit}")
        if self.gimbal_rate_limit is not None and self.gimbal_rate_limit <= 0:
            raise ValueError(f"gimbal_rate_limit must be > 0, got {self.gimbal_rate_limit}")

        band = (-self.integral_limit, self.integral_limit)
        self._pitch_ctrl = PIDController.from_gains(
            self.pitch_gains,
            output_limits=(-1.0, 1.0),
            integral_limits=band,
            derivative_filter=self.derivative_filter,
        )
        self._yaw_ctrl = PIDController.from_gains(
            self.yaw_gains,
            output_limits=(-1.0, 1.0),
            integral_limits=band,
            derivative_filter=self.derivative_filter,
        )

    def name(self) -> str:
        return "gravity-turn-tvc"

    def reset(self) -> None:
        """Reset controller state."""
        self._pitch_ctrl.reset()
        self._yaw_ctrl.reset()
        self._guidance = None
        self._prev_gimbal = (0.0, 0.0)

    @property
    def guidance(self) -> GravityTurnGuidance | None:
        """Guidance state machine, created on the first control call."""
        return self._guidance

    def control(self, state: State, mission: Mission, dt: float) -> GncCommand:
        """Compute gimbal commands to follow the guidance pitch program.

        Args:
            state: Current vehicle state
            mission: Mission being flown
            dt: Time step [s]

        Returns:
            Gimbal command for the next step
        """
        if self._guidance is None:
            self._guidance = GravityTurnGuidance(self.guidance_config or mission.guidance)

        pitch_cmd = self._guidance.pitch_command(state)
        yaw_cmd = self._guidance.yaw_command(state)

        pitch_error = _wrap(pitch_cmd - state.pitch)
        yaw_error = _wrap(yaw_cmd - state.yaw)

        u_pitch = self._pitch_ctrl.update(pitch_error, dt)
        u_yaw = self._yaw_ctrl.update(yaw_error, dt)

        limit = mission.active_stage(state.stage_index).gimbal_limit
        gimbal_pitch = u_pitch * limit
        gimbal_yaw = -u_yaw * limit

        if self.gimbal_rate_limit is not None and dt > 0:
            max_step = self.gimbal_rate_limit * dt
            prev_pitch, prev_yaw = self._prev_gimbal
            gimbal_pitch = prev_pitch + float(np.clip(gimbal_pitch - prev_pitch, -max_step, max_step))
            gimbal_yaw = prev_yaw + float(np.clip(gimbal_yaw - prev_yaw, -max_step, max_step))

        self._prev_gimbal = (gimbal_pitch, gimbal_yaw)
        return GncCommand(gimbal_pitch=gimbal_pitch, gimbal_yaw=gimbal_yaw)


def _wrap(angle: float) -> float:
    """Wrap an angle to [-pi, pi]."""
    return float(np.arctan2(np.sin(angle), np.cos(angle)))
