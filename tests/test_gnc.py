"""Unit tests for GNC module - PID, gravity turn guidance, TVC controller."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from rocketsim.dynamics import GncCommand, State
from rocketsim.gnc import (
    Controller,
    GravityTurnGuidance,
    GuidancePhase,
    PIDController,
    PIDGains,
    TVCController,
    ZeroGimbalController,
)
from rocketsim.vehicle import GuidanceConfig

# =============================================================================
# PID Tests
# =============================================================================


class TestPIDController:
    """Test the PID controller."""

    def test_proportional_only(self):
        """Pure P control is kp * error."""
        pid = PIDController(kp=2.0)
        assert_allclose(pid.update(0.5, 0.1), 1.0)

    def test_integral_accumulates(self):
        """The integral term sums error * dt."""
        pid = PIDController(kp=0.0, ki=1.0)
        for _ in range(10):
            out = pid.update(1.0, 0.1)
        assert_allclose(pid.integral, 1.0)
        assert_allclose(out, 1.0)

    def test_anti_windup(self):
        """Integral is clamped to its limits."""
        pid = PIDController(kp=0.0, ki=1.0, integral_limits=(-0.5, 0.5))
        for _ in range(100):
            pid.update(1.0, 0.1)
        assert_allclose(pid.integral, 0.5)

    def test_output_saturation(self):
        """Output is clamped to its limits."""
        pid = PIDController(kp=100.0, output_limits=(-1.0, 1.0))
        assert pid.update(5.0, 0.1) == 1.0
        assert pid.update(-5.0, 0.1) == -1.0

    def test_no_derivative_kick_on_first_update(self):
        """The derivative is zero on the first sample after reset."""
        pid = PIDController(kp=0.0, kd=1.0)
        assert pid.update(10.0, 0.1) == 0.0
        assert_allclose(pid.update(11.0, 0.1), 10.0)

    def test_derivative_filter(self):
        """A filter weight below one smooths the derivative."""
        pid = PIDController(kp=0.0, kd=1.0, derivative_filter=0.5)
        pid.update(0.0, 0.1)
        assert_allclose(pid.update(1.0, 0.1), 5.0)

    def test_reset(self):
        """Reset clears integral and history."""
        pid = PIDController(kp=0.0, ki=1.0, kd=1.0)
        pid.update(1.0, 0.1)
        pid.update(2.0, 0.1)
        pid.reset()
        assert pid.integral == 0.0
        assert_allclose(pid.update(1.0, 0.1), 0.1)

    def test_non_positive_dt(self):
        """A non-positive dt produces no output."""
        assert PIDController(kp=1.0).update(1.0, 0.0) == 0.0

    def test_invalid_filter(self):
        """Filter weight must be in (0, 1]."""
        with pytest.raises(ValueError):
            PIDController(derivative_filter=0.0)

    def test_invalid_limits(self):
        """Limits must be ordered."""
        with pytest.raises(ValueError):
            PIDController(output_limits=(1.0, -1.0))

    def test_from_gains(self):
        """Gains round-trip through PIDGains."""
        gains = PIDGains(kp=1.0, ki=0.2, kd=0.3)
        pid = PIDController.from_gains(gains, output_limits=(-1.0, 1.0))
        assert pid.gains == gains


# =============================================================================
# Guidance Tests
# =============================================================================


def _state(time: float, pitch_deg: float = 90.0, velocity=(0.0, 0.0, 0.0), altitude: float = 10.0) -> State:
    return State.at_rest(
        mass=30.0,
        position=np.array([0.0, 0.0, altitude]),
        velocity=np.array(velocity, dtype=np.float64),
        pitch_deg=pitch_deg,
    ).replace(time=time)


class TestGravityTurnGuidance:
    """Test the three-phase ascent schedule."""

    def test_vertical_ascent(self):
        """Before the vertical time the command is 90 degrees."""
        guidance = GravityTurnGuidance(GuidanceConfig(vertical_time=2.0))
        assert_allclose(guidance.pitch_command(_state(1.0)), np.pi / 2)
        assert guidance.phase is GuidancePhase.VERTICAL_ASCENT

    def test_pitchover_ramp(self):
        """Pitchover ramps linearly to the entry pitch."""
        guidance = GravityTurnGuidance(
            GuidanceConfig(vertical_time=2.0, pitchover_duration=4.0, pitchover_pitch=80.0)
        )
        guidance.pitch_command(_state(2.0))
        assert guidance.phase is GuidancePhase.PITCHOVER
        assert_allclose(np.degrees(guidance.pitch_command(_state(4.0))), 85.0)

    def test_gravity_turn_follows_flight_path(self):
        """In the turn the command tracks the flight path angle."""
        guidance = GravityTurnGuidance(
            GuidanceConfig(vertical_time=0.0, pitchover_duration=0.0, pitchover_pitch=80.0)
        )
        cmd = guidance.pitch_command(_state(1.0, velocity=(0.0, 100.0, 200.0)))
        assert guidance.phase is GuidancePhase.GRAVITY_TURN
        assert_allclose(cmd, np.arctan2(200.0, 100.0))

    def test_gravity_turn_clamped(self):
        """Commands stay between the minimum pitch and vertical."""
        guidance = GravityTurnGuidance(
            GuidanceConfig(vertical_time=0.0, pitchover_duration=0.0, min_pitch=20.0)
        )
        descending = guidance.pitch_command(_state(1.0, velocity=(0.0, 100.0, -100.0)))
        assert_allclose(np.degrees(descending), 20.0)
        uprange = guidance.pitch_command(_state(1.1, velocity=(0.0, -100.0, 100.0)))
        assert_allclose(uprange, np.pi / 2)

    def test_slow_turn_holds_entry_pitch(self):
        """Below the minimum turn speed the entry pitch is held."""
        guidance = GravityTurnGuidance(
            GuidanceConfig(vertical_time=0.0, pitchover_duration=0.0, pitchover_pitch=75.0)
        )
        cmd = guidance.pitch_command(_state(1.0, velocity=(0.0, 1.0, 1.0)))
        assert_allclose(np.degrees(cmd), 75.0)

    def test_vertical_altitude_trigger(self):
        """Reaching the vertical altitude starts the pitchover early."""
        guidance = GravityTurnGuidance(GuidanceConfig(vertical_time=100.0, vertical_altitude=500.0))
        guidance.pitch_command(_state(1.0, altitude=600.0))
        assert guidance.phase is GuidancePhase.PITCHOVER

    def test_phase_only_moves_forward(self):
        """Earlier times do not return the guidance to vertical."""
        guidance = GravityTurnGuidance(GuidanceConfig(vertical_time=1.0))
        guidance.pitch_command(_state(1.5))
        guidance.pitch_command(_state(0.5))
        assert guidance.phase is GuidancePhase.PITCHOVER

    def test_reset(self):
        """Reset returns to vertical ascent."""
        guidance = GravityTurnGuidance(GuidanceConfig(vertical_time=0.0))
        guidance.pitch_command(_state(1.0))
        guidance.reset()
        assert guidance.phase is GuidancePhase.VERTICAL_ASCENT

    def test_yaw_command_zero(self):
        """Ascent stays in plane."""
        assert GravityTurnGuidance.yaw_command(_state(1.0)) == 0.0


# =============================================================================
# Controller Tests
# =============================================================================


class TestControllers:
    """Test the controller capability and its implementations."""

    def test_protocol(self):
        """Both controllers satisfy the Controller protocol."""
        assert isinstance(ZeroGimbalController(), Controller)
        assert isinstance(TVCController(), Controller)

    def test_zero_gimbal(self, sounder):
        """The open-loop controller never deflects."""
        ctrl = ZeroGimbalController()
        assert ctrl.control(_state(5.0, pitch_deg=60.0), sounder, 0.01) == GncCommand()
        assert ctrl.name() == "zero-gimbal"

    def test_tvc_on_profile_no_command(self, sounder):
        """On the vertical profile with no error there is no deflection."""
        tvc = TVCController()
        cmd = tvc.control(_state(0.0), sounder, 0.01)
        assert_allclose(cmd.gimbal_pitch, 0.0, atol=1e-12)
        assert_allclose(cmd.gimbal_yaw, 0.0, atol=1e-12)

    def test_tvc_raises_low_pitch(self, sounder):
        """A nose below the command gets a positive pitch gimbal."""
        tvc = TVCController()
        cmd = tvc.control(_state(0.0, pitch_deg=80.0), sounder, 0.01)
        assert cmd.gimbal_pitch > 0

    def test_tvc_within_gimbal_limit(self, sounder):
        """Commands never exceed the stage gimbal limit."""
        tvc = TVCController()
        limit = sounder.stages[0].gimbal_limit
        cmd = tvc.control(_state(0.0, pitch_deg=10.0), sounder, 0.01)
        assert abs(cmd.gimbal_pitch) <= limit + 1e-12
        assert abs(cmd.gimbal_yaw) <= limit + 1e-12

    def test_tvc_rate_limit(self, sounder):
        """The gimbal rate limit bounds the change per step."""
        tvc = TVCController(gimbal_rate_limit=1.0)
        cmd = tvc.control(_state(0.0, pitch_deg=10.0), sounder, 0.01)
        assert abs(cmd.gimbal_pitch) <= 0.01 + 1e-12

    def test_tvc_uses_mission_guidance(self, sounder):
        """Guidance is created lazily from the mission schedule."""
        tvc = TVCController()
        assert tvc.guidance is None
        tvc.control(_state(0.0), sounder, 0.01)
        assert tvc.guidance.config == sounder.guidance

    def test_tvc_guidance_override(self, sounder):
        """An explicit schedule takes precedence over the mission's."""
        config = GuidanceConfig(vertical_time=0.5)
        tvc = TVCController(guidance_config=config)
        tvc.control(_state(0.0), sounder, 0.01)
        assert tvc.guidance.config is config

    def test_tvc_reset(self, sounder):
        """Reset discards guidance and controller history."""
        tvc = TVCController()
        tvc.control(_state(0.0, pitch_deg=80.0), sounder, 0.01)
        tvc.reset()
        assert tvc.guidance is None
        assert tvc.name() == "gravity-turn-tvc"

    def test_tvc_invalid_settings(self):
        """Negative limits are rejected."""
        with pytest.raises(ValueError):
            TVCController(integral_limit=-1.0)
        with pytest.raises(ValueError):
            TVCController(gimbal_rate_limit=0.0)
