"""6DOF state representation for rocket flight simulation.

The state vector contains:
- Position (3): [x, y, z] in the launch-site frame (ENU-like, z up)
- Velocity (3): [vx, vy, vz] in the launch-site frame
- Quaternion (4): [q0, q1, q2, q3] attitude (scalar-first)
- Angular velocity (3): [p, q, r] body rates in body frame
- Mass (1): current vehicle mass
plus bookkeeping: mission time, active stage index, and the time the
active stage was ignited.

Coordinate frames:
- Launch site: origin on the pad, x east, y north (downrange), z up
- Body: +Z along the thrust axis (nose), X and Y lateral

Quaternion convention:
- Scalar-first: q = [q0, q1, q2, q3] where q0 is the scalar part
- Represents rotation from body to inertial frame; the identity quaternion
  points the nose straight up

States are immutable: every array is copied on construction and marked
read-only, and the quaternion is renormalized every time a state is built.
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from rocketsim.environment.aerodynamics import angle_of_attack
from rocketsim.rotations import (
    axis_angle_quaternion,
    normalize_quaternion,
    quaternion_to_dcm,
)

BODY_AXIS = np.array([0.0, 0.0, 1.0])


def _frozen(values, shape: tuple[int, ...], label: str) -> NDArray[np.float64]:
    """Copy into a read-only float64 array of the given shape."""
    arr = np.array(values, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"{label} must be shape {shape}, got {arr.shape}")
    arr.flags.writeable = False
    return arr


# =============================================================================
# GNC Command
# =============================================================================


@beartype
@dataclass(frozen=True)
class GncCommand:
    """Gimbal deflection command for one tick.

    Attributes:
        gimbal_pitch: Thrust deflection about body X [rad]; positive raises pitch
        gimbal_yaw: Thrust deflection about body Y [rad]; positive pushes the
            thrust toward body +X
    """
    gimbal_pitch: float = 0.0
    gimbal_yaw: float = 0.0

    def is_finite(self) -> bool:
        """True if both deflections are finite numbers."""
        return bool(np.isfinite(self.gimbal_pitch) and np.isfinite(self.gimbal_yaw))


# =============================================================================
# State Classes
# =============================================================================


@beartype
@dataclass(frozen=True)
class StateDerivative:
    """Time derivative of the state vector.

    Supports addition and scalar multiplication so the integrator can form
    weighted sums of derivative samples.

    Attributes:
        position_dot: d(position)/dt = velocity [m/s]
        velocity_dot: d(velocity)/dt = acceleration [m/s^2]
        quaternion_dot: d(quaternion)/dt
        angular_velocity_dot: d(omega)/dt = angular acceleration [rad/s^2]
        mass_dot: d(mass)/dt (negative for propellant consumption) [kg/s]
        time_dot: d(time)/dt, 1 for a physical derivative
    """
    position_dot: NDArray[np.float64]
    velocity_dot: NDArray[np.float64]
    quaternion_dot: NDArray[np.float64]
    angular_velocity_dot: NDArray[np.float64]
    mass_dot: float
    time_dot: float = 1.0

    def __add__(self, other: "StateDerivative") -> "StateDerivative":
        return StateDerivative(
            position_dot=self.position_dot + other.position_dot,
            velocity_dot=self.velocity_dot + other.velocity_dot,
            quaternion_dot=self.quaternion_dot + other.quaternion_dot,
            angular_velocity_dot=self.angular_velocity_dot + other.angular_velocity_dot,
            mass_dot=self.mass_dot + other.mass_dot,
            time_dot=self.time_dot + other.time_dot,
        )

    def __mul__(self, scalar: float) -> "StateDerivative":
        return StateDerivative(
            position_dot=self.position_dot * scalar,
            velocity_dot=self.velocity_dot * scalar,
            quaternion_dot=self.quaternion_dot * scalar,
            angular_velocity_dot=self.angular_velocity_dot * scalar,
            mass_dot=self.mass_dot * scalar,
            time_dot=self.time_dot * scalar,
        )

    __rmul__ = __mul__


@beartype
@dataclass(frozen=True)
class State:
    """6DOF state vector for rigid body dynamics.

    Attributes:
        position: [x, y, z] position in launch-site frame [m]
        velocity: [vx, vy, vz] velocity in launch-site frame [m/s]
        quaternion: [q0, q1, q2, q3] body-to-inertial attitude (scalar-first)
        angular_velocity: [p, q, r] body angular rates [rad/s]
        mass: current vehicle mass [kg]
        time: mission elapsed time [s]
        stage_index: index of the active stage
        stage_ignition_time: mission time the active stage lit [s]
    """
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    quaternion: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]
    mass: float
    time: float = 0.0
    stage_index: int = 0
    stage_ignition_time: float = 0.0

    def __post_init__(self) -> None:
        """Copy arrays read-only and normalize the attitude."""
        object.__setattr__(self, "position", _frozen(self.position, (3,), "Position"))
        object.__setattr__(self, "velocity", _frozen(self.velocity, (3,), "Velocity"))
        quaternion = _frozen(self.quaternion, (4,), "Quaternion")
        object.__setattr__(self, "quaternion", _frozen(normalize_quaternion(quaternion), (4,), "Quaternion"))
        object.__setattr__(
            self, "angular_velocity", _frozen(self.angular_velocity, (3,), "Angular velocity")
        )

    @classmethod
    def at_rest(
        cls,
        mass: float,
        position: NDArray[np.float64] | None = None,
        velocity: NDArray[np.float64] | None = None,
        pitch_deg: float = 90.0,
        angular_velocity: NDArray[np.float64] | None = None,
    ) -> "State":
        """Create an initial state.

        Args:
            mass: Initial vehicle mass [kg]
            position: Initial position [m], defaults to the pad origin
            velocity: Initial velocity [m/s], defaults to zero
            pitch_deg: Body-axis elevation [degrees]; below 90 the nose
                leans downrange (+y)
            angular_velocity: Initial body rates [rad/s], defaults to zero

        Returns:
            State at mission time zero on stage 0
        """
        tilt = np.radians(90.0 - pitch_deg)
        quaternion = axis_angle_quaternion(np.array([1.0, 0.0, 0.0]), float(-tilt))

        return cls(
            position=np.zeros(3) if position is None else position,
            velocity=np.zeros(3) if velocity is None else velocity,
            quaternion=quaternion,
            angular_velocity=np.zeros(3) if angular_velocity is None else angular_velocity,
            mass=mass,
        )

    def advance(self, derivative: StateDerivative, dt: float) -> "State":
        """Return this state moved along `derivative` for `dt` seconds.

        The quaternion is renormalized by the constructor and mass is
        clamped at zero.
        """
        return State(
            position=self.position + derivative.position_dot * dt,
            velocity=self.velocity + derivative.velocity_dot * dt,
            quaternion=self.quaternion + derivative.quaternion_dot * dt,
            angular_velocity=self.angular_velocity + derivative.angular_velocity_dot * dt,
            mass=max(0.0, self.mass + derivative.mass_dot * dt),
            time=self.time + derivative.time_dot * dt,
            stage_index=self.stage_index,
            stage_ignition_time=self.stage_ignition_time,
        )

    def replace(self, **changes) -> "State":
        """Copy of this state with some fields changed."""
        fields = {
            "position": self.position,
            "velocity": self.velocity,
            "quaternion": self.quaternion,
            "angular_velocity": self.angular_velocity,
            "mass": self.mass,
            "time": self.time,
            "stage_index": self.stage_index,
            "stage_ignition_time": self.stage_ignition_time,
        }
        fields.update(changes)
        return State(**fields)

    def is_finite(self) -> bool:
        """True if every component is a finite number."""
        return bool(
            np.all(np.isfinite(self.position))
            and np.all(np.isfinite(self.velocity))
            and np.all(np.isfinite(self.quaternion))
            and np.all(np.isfinite(self.angular_velocity))
            and np.isfinite(self.mass)
        )

    @property
    def dcm_body_to_inertial(self) -> NDArray[np.float64]:
        """Get DCM that transforms vectors from body to inertial frame."""
        return quaternion_to_dcm(self.quaternion)

    @property
    def dcm_inertial_to_body(self) -> NDArray[np.float64]:
        """Get DCM that transforms vectors from inertial to body frame."""
        return self.dcm_body_to_inertial.T

    @property
    def body_axis(self) -> NDArray[np.float64]:
        """Body +Z (thrust axis) expressed in the inertial frame."""
        return self.dcm_body_to_inertial @ BODY_AXIS

    @property
    def altitude(self) -> float:
        """Altitude above the pad [m]."""
        return float(self.position[2])

    @property
    def speed(self) -> float:
        """Get speed magnitude [m/s]."""
        return float(np.linalg.norm(self.velocity))

    @property
    def pitch(self) -> float:
        """Body-axis elevation in the downrange (y-z) plane [rad].

        pi/2 is vertical; values above pi/2 mean the nose leans uprange.
        """
        bx, by, bz = self.body_axis
        return float(np.arctan2(bz, by))

    @property
    def yaw(self) -> float:
        """Cross-range deflection of the body axis toward +x [rad]."""
        bx, by, bz = self.body_axis
        return float(np.arctan2(bx, np.hypot(by, bz)))

    @property
    def flight_path_angle(self) -> float:
        """Velocity elevation in the downrange (y-z) plane [rad]."""
        return float(np.arctan2(self.velocity[2], self.velocity[1]))

    @property
    def angle_of_attack(self) -> float:
        """Angle between the body axis and the velocity vector [rad]."""
        return angle_of_attack(self.velocity_body())

    def velocity_body(self) -> NDArray[np.float64]:
        """Get velocity in body frame [m/s]."""
        return self.dcm_inertial_to_body @ self.velocity
