"""Dynamics module for 6DOF rocket simulation.

Provides state representation, the staged-vehicle equations of motion and
the fixed-step RK4 integrator shared with the orbital propagator.

Example:
    >>> from rocketsim.dynamics import SixDofModel, State, rk4_step
    >>>
    >>> state = State.at_rest(mass=30.0)
    >>> model = SixDofModel(mission)
    >>> state = rk4_step(state, model.derivative, 0.005)
"""

from rocketsim.dynamics.state import (
    GncCommand,
    State,
    StateDerivative,
)
from rocketsim.dynamics.integrator import (
    Derivative,
    Integrable,
    integrate,
    rk4_step,
)
from rocketsim.dynamics.sixdof import (
    SixDofModel,
    euler_rotational_dynamics,
    quaternion_derivative,
    thrust_direction,
)
from rocketsim.rotations import (
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_dcm,
)

__all__ = [
    # State
    "GncCommand",
    "State",
    "StateDerivative",
    # Quaternion utilities
    "normalize_quaternion",
    "quaternion_conjugate",
    "quaternion_multiply",
    "quaternion_to_dcm",
    # Integration
    "Derivative",
    "Integrable",
    "integrate",
    "rk4_step",
    # Equations of motion
    "SixDofModel",
    "euler_rotational_dynamics",
    "quaternion_derivative",
    "thrust_direction",
]
