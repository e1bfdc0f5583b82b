"""Impulsive orbit transfers.

Hohmann transfers between coplanar circular orbits, plus the circular and
escape velocity helpers they are built from.

Example:
    >>> from rocketsim.orbital import hohmann_from_altitudes
    >>>
    >>> leo_to_geo = hohmann_from_altitudes(200e3, 35786e3)
    >>> print(f"Total dv: {leo_to_geo.total_dv:.0f} m/s")
    Total dv: 3932 m/s
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numba import njit

from rocketsim.environment.gravity import MU_EARTH, R_EARTH_EQ


@njit(cache=True, fastmath=True)
def _vis_viva(r: float, a: float, mu: float) -> float:
    """Orbital speed at radius r on an orbit of semi-major axis a."""
    return np.sqrt(mu * (2.0 / r - 1.0 / a))


@beartype
def circular_velocity(radius: float, mu: float = MU_EARTH) -> float:
    """Circular orbital velocity at a radius.

    Args:
        radius: Orbit radius [m]
        mu: Gravitational parameter [m^3/s^2]

    Returns:
        Circular orbital velocity [m/s]
    """
    if radius <= 0:
        raise ValueError(f"Radius must be positive, got {radius}")
    return float(np.sqrt(mu / radius))


@beartype
def escape_velocity(radius: float, mu: float = MU_EARTH) -> float:
    """Escape velocity at a radius [m/s]."""
    if radius <= 0:
        raise ValueError(f"Radius must be positive, got {radius}")
    return float(np.sqrt(2.0 * mu / radius))


@beartype
@dataclass(frozen=True)
class HohmannTransfer:
    """Two-impulse transfer between circular orbits.

    Attributes:
        r1: Departure orbit radius [m]
        r2: Arrival orbit radius [m]
        dv1: Departure burn magnitude [m/s]
        dv2: Arrival burn magnitude [m/s]
        transfer_sma: Semi-major axis of the transfer ellipse [m]
        transfer_time: Half-period of the transfer ellipse [s]
    """
    r1: float
    r2: float
    dv1: float
    dv2: float
    transfer_sma: float
    transfer_time: float

    @property
    def total_dv(self) -> float:
        """Sum of both burn magnitudes [m/s]."""
        return self.dv1 + self.dv2

    @property
    def transfer_eccentricity(self) -> float:
        """Eccentricity of the transfer ellipse."""
        return abs(self.r2 - self.r1) / (self.r1 + self.r2)


@beartype
def hohmann_transfer(r1: float, r2: float, mu: float = MU_EARTH) -> HohmannTransfer:
    """Compute a Hohmann transfer between two circular orbit radii.

    Burns are reported as magnitudes, so transfers to a lower orbit give
    positive delta-v values as well.

    Args:
        r1: Departure radius [m]
        r2: Arrival radius [m]
        mu: Gravitational parameter [m^3/s^2]

    Returns:
        HohmannTransfer

    Raises:
        ValueError: If either radius is not positive
    """
    if r1 <= 0 or r2 <= 0:
        raise ValueError(f"Orbit radii must be positive, got r1={r1}, r2={r2}")

    a_t = 0.5 * (r1 + r2)

    dv1 = abs(_vis_viva(r1, a_t, mu) - _vis_viva(r1, r1, mu))
    dv2 = abs(_vis_viva(r2, r2, mu) - _vis_viva(r2, a_t, mu))
    transfer_time = np.pi * np.sqrt(a_t ** 3 / mu)

    return HohmannTransfer(
        r1=r1,
        r2=r2,
        dv1=float(dv1),
        dv2=float(dv2),
        transfer_sma=float(a_t),
        transfer_time=float(transfer_time),
    )


@beartype
def hohmann_from_altitudes(
    alt1: float,
    alt2: float,
    mu: float = MU_EARTH,
    body_radius: float = R_EARTH_EQ,
) -> HohmannTransfer:
    """Hohmann transfer between circular orbits given as altitudes [m]."""
    return hohmann_transfer(body_radius + alt1, body_radius + alt2, mu)
