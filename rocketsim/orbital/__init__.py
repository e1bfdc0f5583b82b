"""Orbital mechanics toolkit.

Keplerian elements, Hohmann transfers and RK4 orbit propagation with
optional J2.

Example:
    >>> from rocketsim.orbital import KeplerianElements, hohmann_from_altitudes, propagate_orbit
    >>>
    >>> transfer = hohmann_from_altitudes(200e3, 35786e3)
    >>> orbit = KeplerianElements.circular(200e3)
    >>> final = propagate_orbit(orbit.to_orbital_state(), 600.0, dt=1.0).final()
"""

from rocketsim.orbital.elements import (
    KeplerianElements,
    OrbitalDerivative,
    OrbitalState,
)
from rocketsim.orbital.propagator import (
    OrbitTrajectory,
    orbital_derivative,
    propagate_orbit,
)
from rocketsim.orbital.transfers import (
    HohmannTransfer,
    circular_velocity,
    escape_velocity,
    hohmann_from_altitudes,
    hohmann_transfer,
)

__all__ = [
    # Elements
    "KeplerianElements",
    "OrbitalDerivative",
    "OrbitalState",
    # Propagation
    "OrbitTrajectory",
    "orbital_derivative",
    "propagate_orbit",
    # Transfers
    "HohmannTransfer",
    "circular_velocity",
    "escape_velocity",
    "hohmann_from_altitudes",
    "hohmann_transfer",
]
