"""Gravity models for flight and orbit simulation.

Provides an inverse-square central field with an optional J2 (oblateness)
correction. Core functions are numba-compiled for performance.

Two frames use the same field:
- ECI: origin at Earth's centre, Z toward the north pole. Used by the
  orbital propagator, where J2 is meaningful.
- Launch-site frame: ENU-like, origin on the surface at the pad with Z up.
  Used by the flight simulator. Earth's centre sits at (0, 0, -R_EARTH_MEAN),
  so the field points down and weakens with altitude. J2 is normally left
  off here because the local Z axis is not the polar axis.

Reference:
- WGS84 ellipsoid parameters
- EGM96 geopotential model (J2 term only)

Example:
    >>> from rocketsim.environment import gravity, local_gravity
    >>>
    >>> g_eci = gravity(np.array([7.0e6, 0.0, 0.0]), use_j2=True)
    >>> g_pad = local_gravity(np.array([0.0, 0.0, 1000.0]))  # 1 km above pad
"""

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

# =============================================================================
# Constants
# =============================================================================

# WGS84 Earth parameters
MU_EARTH: float = 3.986004418e14  # Gravitational parameter [m^3/s^2]
R_EARTH_EQ: float = 6378137.0  # Equatorial radius [m]
J2: float = 1.08262668e-3  # Second zonal harmonic (oblateness)

# Mean radius, used to place the launch-site frame on the surface [m]
R_EARTH_MEAN: float = 6371000.0

# Standard gravity at sea level
G0: float = 9.80665  # [m/s^2]


# =============================================================================
# Numba-Optimized Core Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _spherical_gravity(
    x: float, y: float, z: float,
    mu: float = MU_EARTH,
) -> tuple[float, float, float]:
    """Numba-optimized spherical gravity.

    g = -mu/r^2 * r_hat
    """
    r_sq = x*x + y*y + z*z
    r = np.sqrt(r_sq)

    if r < 1e3:  # Avoid singularity near center
        r = 1e3
        r_sq = r * r

    g_over_r = mu / (r_sq * r)

    return (-g_over_r * x, -g_over_r * y, -g_over_r * z)


@njit(cache=True, fastmath=True)
def _j2_gravity(
    x: float, y: float, z: float,
    mu: float = MU_EARTH,
    r_eq: float = R_EARTH_EQ,
    j2: float = J2,
) -> tuple[float, float, float]:
    """Numba-optimized spherical + J2 gravity.

    a = -mu/r^3 * [x (1 + f (1 - 5 z^2/r^2)),
                   y (1 + f (1 - 5 z^2/r^2)),
                   z (1 + f (3 - 5 z^2/r^2))]
    with f = 1.5 J2 (Re/r)^2.
    """
    r_sq = x*x + y*y + z*z
    r = np.sqrt(r_sq)

    if r < 1e3:
        r = 1e3
        r_sq = r * r

    common = mu / (r * r_sq)
    factor = 1.5 * j2 * r_eq * r_eq / r_sq
    z_r_sq = z * z / r_sq

    xy_scale = common * (1.0 + factor * (1.0 - 5.0 * z_r_sq))
    z_scale = common * (1.0 + factor * (3.0 - 5.0 * z_r_sq))

    return (-xy_scale * x, -xy_scale * y, -z_scale * z)


# =============================================================================
# Python API
# =============================================================================


@beartype
def gravity(
    position: NDArray[np.float64],
    use_j2: bool = False,
    mu: float = MU_EARTH,
    r_eq: float = R_EARTH_EQ,
) -> NDArray[np.float64]:
    """Gravitational acceleration at an ECI position.

    Args:
        position: Position relative to Earth's centre [x, y, z] [m]
        use_j2: Include the J2 oblateness correction
        mu: Gravitational parameter [m^3/s^2]
        r_eq: Equatorial radius used by the J2 term [m]

    Returns:
        Acceleration vector [ax, ay, az] [m/s^2]
    """
    x, y, z = float(position[0]), float(position[1]), float(position[2])

    if use_j2:
        gx, gy, gz = _j2_gravity(x, y, z, mu, r_eq, J2)
    else:
        gx, gy, gz = _spherical_gravity(x, y, z, mu)

    return np.array([gx, gy, gz])


@beartype
def local_gravity(
    position: NDArray[np.float64],
    use_j2: bool = False,
) -> NDArray[np.float64]:
    """Gravitational acceleration in the launch-site frame.

    Args:
        position: Position relative to the pad, Z up [m]
        use_j2: Include the J2 term (local Z treated as the polar axis)

    Returns:
        Acceleration vector in the launch-site frame [m/s^2]
    """
    centred = np.array([position[0], position[1], position[2] + R_EARTH_MEAN])
    return gravity(centred, use_j2=use_j2)


@beartype
def gravity_at_altitude(altitude: float, mu: float = MU_EARTH) -> float:
    """Gravity magnitude at altitude above the mean surface [m/s^2]."""
    r = R_EARTH_MEAN + altitude
    return mu / (r * r)
