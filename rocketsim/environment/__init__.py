"""Environment models for rocket vehicle simulation.

Provides atmospheric, gravitational, and aerodynamic models for flight
simulation. All models are pure functions of their inputs.

Example:
    >>> from rocketsim.environment import atmosphere, gravity
    >>>
    >>> rho = atmosphere(10000.0).density  # kg/m^3
    >>> g = gravity(position, use_j2=True)  # m/s^2
"""

from rocketsim.environment.aerodynamics import (
    AeroResult,
    aerodynamics,
    angle_of_attack,
)
from rocketsim.environment.atmosphere import (
    Atmosphere,
    AtmosphereResult,
    atmosphere,
)
from rocketsim.environment.gravity import (
    G0,
    J2,
    MU_EARTH,
    R_EARTH_EQ,
    R_EARTH_MEAN,
    gravity,
    gravity_at_altitude,
    local_gravity,
)

__all__ = [
    # Atmosphere
    "Atmosphere",
    "AtmosphereResult",
    "atmosphere",
    # Gravity
    "G0",
    "J2",
    "MU_EARTH",
    "R_EARTH_EQ",
    "R_EARTH_MEAN",
    "gravity",
    "gravity_at_altitude",
    "local_gravity",
    # Aerodynamics
    "AeroResult",
    "aerodynamics",
    "angle_of_attack",
]
