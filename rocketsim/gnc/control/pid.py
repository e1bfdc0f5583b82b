"""PID controller implementation.

Provides a general-purpose PID controller with:
- Anti-windup for integral term
- Derivative filtering
- Output saturation

Example:
    >>> from rocketsim.gnc.control import PIDController
    >>>
    >>> # Normalized pitch channel
    >>> ctrl = PIDController(kp=0.6, ki=0.05, kd=0.25, output_limits=(-1.0, 1.0))
    >>>
    >>> error = target_pitch - actual_pitch
    >>> u = ctrl.update(error, dt=0.005)
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

# =============================================================================
# PID Gains
# =============================================================================


@beartype
@dataclass(frozen=True)
class PIDGains:
    """PID controller gains.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0


# =============================================================================
# PID Controller
# =============================================================================


@beartype
@dataclass
class PIDController:
    """General-purpose PID controller.

    Implements the parallel PID form:
        u = kp * e + ki * integral(e) + kd * de/dt

    Features:
    - Anti-windup with integral clamping
    - First-order derivative filter
    - Output saturation

    The derivative is zero on the first update after a reset, so a
    step in the setpoint does not kick the output.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        output_limits: (min, max) output limits
        integral_limits: (min, max) integral term limits (anti-windup)
        derivative_filter: Weight of the newest raw derivative sample
            (1 = unfiltered, smaller = heavier filtering)
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    output_limits: tuple[float, float] | None = None
    integral_limits: tuple[float, float] | None = None
    derivative_filter: float = 1.0

    # Internal state
    _integral: float = field(default=0.0, init=False, repr=False)
    _prev_error: float | None = field(default=None, init=False, repr=False)
    _prev_derivative: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate limits and filter coefficient."""
        if not 0.0 < self.derivative_filter <= 1.0:
            raise ValueError(
                f"derivative_filter must be in (0, 1], got {self.derivative_filter}"
            )
        for label, limits in (("output", self.output_limits), ("integral", self.integral_limits)):
            if limits is not None and limits[0] > limits[1]:
                raise ValueError(f"{label}_limits must be (min, max), got {limits}")

    @classmethod
    def from_gains(
        cls,
        gains: PIDGains,
        output_limits: tuple[float, float] | None = None,
        integral_limits: tuple[float, float] | None = None,
        derivative_filter: float = 1.0,
    ) -> "PIDController":
        """Create controller from PIDGains object."""
        return cls(
            kp=gains.kp,
            ki=gains.ki,
            kd=gains.kd,
            output_limits=output_limits,
            integral_limits=integral_limits,
            derivative_filter=derivative_filter,
        )

    def reset(self) -> None:
        """Clear the integral and the derivative history."""
        self._integral = 0.0
        self._prev_error = None
        self._prev_derivative = 0.0

    def _derivative(self, error: float, dt: float) -> float:
        """Filtered error rate; zero until a previous sample exists."""
        if self._prev_error is None:
            return 0.0
        raw = (error - self._prev_error) / dt
        w = self.derivative_filter
        return w * raw + (1.0 - w) * self._prev_derivative

    @beartype
    def update(self, error: float, dt: float) -> float:
        """Advance the controller by one sample.

        Args:
            error: Setpoint minus measurement
            dt: Sample interval [s]; non-positive values yield 0

        Returns:
            Saturated control output
        """
        if dt <= 0:
            return 0.0

        self._integral = _limit(self._integral + error * dt, self.integral_limits)
        self._prev_derivative = self._derivative(error, dt)
        self._prev_error = error

        u = self.kp * error + self.ki * self._integral + self.kd * self._prev_derivative
        return _limit(u, self.output_limits)

    @property
    def integral(self) -> float:
        """Accumulated integral of the error."""
        return self._integral

    @property
    def gains(self) -> PIDGains:
        """Current gains."""
        return PIDGains(kp=self.kp, ki=self.ki, kd=self.kd)


def _limit(value: float, limits: tuple[float, float] | None) -> float:
    if limits is None:
        return float(value)
    return float(np.clip(value, limits[0], limits[1]))
