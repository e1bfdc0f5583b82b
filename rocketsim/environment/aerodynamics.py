"""Aerodynamic force and moment model.

A deliberately small model that gives a finned vehicle its two essential
behaviours: drag, and weathercock stability with damping.

- Drag: D = q * A * Cd, opposing the air-relative velocity
- Restoring moment: M = q * A * CN_alpha * static_margin * alpha, about the
  axis (body +Z) x v_hat, which turns the body axis back toward the
  velocity vector
- Damping moment: M = -q * A * c_damp * omega, opposing rotation

The coefficient values are modelling choices, not fitted data:
CN_alpha = 2.0 /rad is the slender-body normal-force slope, and the damping
coefficient lumps fin and structural damping into one length-time constant.

Example:
    >>> from rocketsim.environment import aerodynamics, atmosphere
    >>>
    >>> atm = atmosphere(1000.0)
    >>> aero = aerodynamics(
    ...     velocity_relative_to_air=np.array([0.0, 10.0, 200.0]),
    ...     attitude=np.array([1.0, 0.0, 0.0, 0.0]),
    ...     reference_area=0.01,
    ...     density=atm.density,
    ... )
    >>> aero.drag_force  # inertial frame [N]
"""

from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from rocketsim.rotations import quaternion_conjugate, rotate_vector

# =============================================================================
# Constants
# =============================================================================

DEFAULT_DRAG_COEFFICIENT = 0.3
DEFAULT_NORMAL_FORCE_SLOPE = 2.0  # CN_alpha [1/rad]
DEFAULT_STATIC_MARGIN = 0.3  # CP aft of CG [m]
DEFAULT_DAMPING_COEFFICIENT = 0.05  # [m*s]

# Below these airspeeds the force/moment directions are undefined
MIN_DRAG_SPEED = 1e-6  # [m/s]
MIN_MOMENT_SPEED = 1.0  # [m/s]


class AeroResult(NamedTuple):
    """Aerodynamic loads on the vehicle.

    drag_force is in the inertial frame, the moments in the body frame.
    """
    drag_force: NDArray[np.float64]       # [N]
    restoring_moment: NDArray[np.float64]  # [N*m]
    damping_moment: NDArray[np.float64]    # [N*m]
    angle_of_attack: float                 # [rad]
    dynamic_pressure: float                # [Pa]


@beartype
def angle_of_attack(velocity_body: NDArray[np.float64]) -> float:
    """Total angle between body +Z and the body-frame velocity [rad]."""
    speed = np.linalg.norm(velocity_body)
    if speed < MIN_MOMENT_SPEED:
        return 0.0
    lateral = np.hypot(velocity_body[0], velocity_body[1])
    return float(np.arctan2(lateral, velocity_body[2]))


@beartype
def aerodynamics(
    velocity_relative_to_air: NDArray[np.float64],
    attitude: NDArray[np.float64],
    reference_area: float,
    density: float,
    drag_coefficient: float = DEFAULT_DRAG_COEFFICIENT,
    angular_velocity: NDArray[np.float64] | None = None,
    static_margin: float = DEFAULT_STATIC_MARGIN,
    normal_force_slope: float = DEFAULT_NORMAL_FORCE_SLOPE,
    damping_coefficient: float = DEFAULT_DAMPING_COEFFICIENT,
) -> AeroResult:
    """Compute drag, restoring and damping loads.

    Args:
        velocity_relative_to_air: Air-relative velocity, inertial frame [m/s]
        attitude: Body-to-inertial quaternion [q0, q1, q2, q3]
        reference_area: Aerodynamic reference area [m^2]
        density: Air density [kg/m^3]
        drag_coefficient: Axial drag coefficient Cd
        angular_velocity: Body rates [p, q, r] [rad/s], zero if omitted
        static_margin: Distance the centre of pressure sits aft of the CG [m]
        normal_force_slope: CN_alpha [1/rad]
        damping_coefficient: Rate damping constant [m*s]

    Returns:
        AeroResult with inertial drag and body-frame moments
    """
    zero = np.zeros(3)
    speed = float(np.linalg.norm(velocity_relative_to_air))
    q_dyn = 0.5 * density * speed * speed

    if speed < MIN_DRAG_SPEED:
        return AeroResult(zero, zero, zero, 0.0, 0.0)

    drag = -(q_dyn * reference_area * drag_coefficient / speed) * velocity_relative_to_air

    if speed < MIN_MOMENT_SPEED:
        return AeroResult(drag, zero, zero, 0.0, q_dyn)

    # Inertial -> body is the transpose of the attitude rotation
    v_body = rotate_vector(quaternion_conjugate(attitude), velocity_relative_to_air)
    v_hat = v_body / speed

    # (0, 0, 1) x v_hat
    axis = np.array([-v_hat[1], v_hat[0], 0.0])
    sin_alpha = float(np.linalg.norm(axis))
    alpha = float(np.arctan2(sin_alpha, v_hat[2]))

    if sin_alpha > 1e-12:
        stiffness = q_dyn * reference_area * normal_force_slope * static_margin
        restoring = (stiffness * alpha / sin_alpha) * axis
    else:
        restoring = zero

    if angular_velocity is None:
        damping = zero
    else:
        damping = -q_dyn * reference_area * damping_coefficient * angular_velocity

    return AeroResult(drag, restoring, damping, alpha, q_dyn)
