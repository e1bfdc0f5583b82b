"""6DOF rigid body equations of motion for a staged vehicle.

Assembles thrust, aerodynamic and gravitational loads for the active stage
and converts them into a state derivative.

The equations use:
- Newton's second law for translational motion: F = m * a
- Euler's equations for rotational motion: M = I * alpha + omega x (I * omega)
- Quaternion kinematics for attitude propagation: q_dot = 0.5 * q (x) (0, omega)

Thrust acts along body +Z, deflected by the gimbal angles. The nozzle sits
`nozzle_offset` metres aft of the centre of mass, so a deflected thrust
produces a pitch/yaw torque r x F with r = (0, 0, -nozzle_offset).

Inertia is the active stage's diagonal principal inertia, held constant
while that stage burns.

Example:
    >>> from rocketsim.dynamics import SixDofModel, State, rk4_step
    >>> from rocketsim.vehicle.presets import single_stage
    >>>
    >>> mission = single_stage()
    >>> model = SixDofModel(mission)
    >>> state = State.at_rest(mission.total_mass)
    >>> state = rk4_step(state, model.derivative, 0.01)
"""

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from rocketsim.dynamics.state import GncCommand, State, StateDerivative
from rocketsim.environment.aerodynamics import aerodynamics
from rocketsim.environment.atmosphere import atmosphere
from rocketsim.environment.gravity import G0, local_gravity
from rocketsim.rotations import quaternion_multiply, rotate_vector
from rocketsim.vehicle.mission import Mission
from rocketsim.vehicle.stage import Stage

ZERO_COMMAND = GncCommand()

# =============================================================================
# Numba-Optimized Core Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _euler_diagonal(
    p: float, q: float, r: float,
    ixx: float, iyy: float, izz: float,
    mx: float, my: float, mz: float,
) -> tuple[float, float, float]:
    """Euler's equations for a diagonal inertia tensor.

    I * omega_dot = M - omega x (I * omega)
    """
    p_dot = (mx - (izz - iyy) * q * r) / ixx
    q_dot = (my - (ixx - izz) * r * p) / iyy
    r_dot = (mz - (iyy - ixx) * p * q) / izz
    return (p_dot, q_dot, r_dot)


# =============================================================================
# Rigid Body Kinematics
# =============================================================================


@beartype
def quaternion_derivative(
    q: NDArray[np.float64],
    omega: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Compute quaternion time derivative from angular velocity.

    Args:
        q: Current quaternion [q0, q1, q2, q3]
        omega: Angular velocity in body frame [p, q, r] [rad/s]

    Returns:
        Quaternion derivative dq/dt
    """
    omega_quat = np.array([0.0, omega[0], omega[1], omega[2]])
    return 0.5 * quaternion_multiply(q, omega_quat)


@beartype
def euler_rotational_dynamics(
    omega: NDArray[np.float64],
    moment: NDArray[np.float64],
    inertia: tuple[float, float, float],
) -> NDArray[np.float64]:
    """Compute angular acceleration from Euler's equations.

    Args:
        omega: Angular velocity in body frame [p, q, r] [rad/s]
        moment: Applied moment in body frame [Mx, My, Mz] [N*m]
        inertia: Principal moments (Ixx, Iyy, Izz) [kg*m^2]

    Returns:
        Angular acceleration [p_dot, q_dot, r_dot] [rad/s^2]
    """
    ixx, iyy, izz = inertia
    return np.array(_euler_diagonal(
        float(omega[0]), float(omega[1]), float(omega[2]),
        ixx, iyy, izz,
        float(moment[0]), float(moment[1]), float(moment[2]),
    ))


@beartype
def thrust_direction(gimbal_pitch: float, gimbal_yaw: float) -> NDArray[np.float64]:
    """Unit thrust direction in the body frame for given gimbal angles [rad]."""
    cp, sp = np.cos(gimbal_pitch), np.sin(gimbal_pitch)
    cy, sy = np.cos(gimbal_yaw), np.sin(gimbal_yaw)
    return np.array([sy * cp, sp, cp * cy])


# =============================================================================
# Six-DOF Model
# =============================================================================


@beartype
class SixDofModel:
    """Equations of motion for a staged, thrust-vectored vehicle.

    The model is a pure function of (state, command) apart from `faults`,
    which records the first occurrence of each guarded condition
    (non-positive mass, non-positive Isp) so callers can report them.

    Example:
        >>> model = SixDofModel(mission, use_j2=False)
        >>> d = model.derivative(state, GncCommand(gimbal_pitch=0.01))
    """

    def __init__(self, mission: Mission, use_j2: bool = False) -> None:
        """Initialize dynamics model.

        Args:
            mission: Mission providing stages and aerodynamic configuration
            use_j2: Include J2 in the launch-site gravity field
        """
        self.mission = mission
        self.use_j2 = use_j2
        self.faults: list[str] = []

    def _fault(self, message: str) -> None:
        if message not in self.faults:
            self.faults.append(message)

    def is_burning(self, state: State, stage: Stage | None = None) -> bool:
        """True if the active stage produces thrust at this state."""
        stage = stage or self.mission.active_stage(state.stage_index)
        if stage.thrust <= 0 or stage.isp <= 0:
            return False
        if self.mission.remaining_propellant(state.mass, state.stage_index) <= 0:
            return False
        if stage.burn_time_limit is not None:
            return state.time - state.stage_ignition_time < stage.burn_time_limit
        return True

    def derivative(self, state: State, command: GncCommand = ZERO_COMMAND) -> StateDerivative:
        """Compute state derivatives.

        Args:
            state: Current vehicle state
            command: Gimbal command, held for the whole step

        Returns:
            State derivatives
        """
        g = local_gravity(state.position, use_j2=self.use_j2)
        quaternion_dot = quaternion_derivative(state.quaternion, state.angular_velocity)

        if state.mass <= 0:
            self._fault(f"non-positive mass at t={state.time:.3f} s")
            return StateDerivative(
                position_dot=state.velocity.copy(),
                velocity_dot=g,
                quaternion_dot=quaternion_dot,
                angular_velocity_dot=np.zeros(3),
                mass_dot=0.0,
            )

        stage = self.mission.active_stage(state.stage_index)
        if stage.isp <= 0:
            self._fault(f"stage {state.stage_index} ({stage.name}) has non-positive Isp")

        # Thrust
        thrust_body = np.zeros(3)
        mass_dot = 0.0
        if self.is_burning(state, stage):
            limit = stage.gimbal_limit
            gp = float(np.clip(command.gimbal_pitch, -limit, limit))
            gy = float(np.clip(command.gimbal_yaw, -limit, limit))
            thrust_body = stage.thrust * thrust_direction(gp, gy)
            mass_dot = -stage.thrust / (stage.isp * G0)

        # Aerodynamics (no wind: air-relative velocity is the inertial velocity)
        atm = atmosphere(state.altitude)
        aero = aerodynamics(
            velocity_relative_to_air=state.velocity,
            attitude=state.quaternion,
            reference_area=_override(stage.reference_area, self.mission.reference_area),
            density=atm.density,
            drag_coefficient=_override(stage.drag_coefficient, self.mission.drag_coefficient),
            angular_velocity=state.angular_velocity,
            static_margin=_override(stage.static_margin, self.mission.static_margin),
            normal_force_slope=self.mission.normal_force_slope,
            damping_coefficient=self.mission.damping_coefficient,
        )

        force_inertial = rotate_vector(state.quaternion, thrust_body) + aero.drag_force
        velocity_dot = g + force_inertial / state.mass

        # TVC torque: nozzle at (0, 0, -L) in body frame
        nozzle = np.array([0.0, 0.0, -stage.nozzle_offset])
        moment = np.cross(nozzle, thrust_body) + aero.restoring_moment + aero.damping_moment

        angular_velocity_dot = euler_rotational_dynamics(
            state.angular_velocity, moment, stage.inertia
        )

        return StateDerivative(
            position_dot=state.velocity.copy(),
            velocity_dot=velocity_dot,
            quaternion_dot=quaternion_dot,
            angular_velocity_dot=angular_velocity_dot,
            mass_dot=float(mass_dot),
        )


def _override(value: float | None, default: float) -> float:
    return default if value is None else value
