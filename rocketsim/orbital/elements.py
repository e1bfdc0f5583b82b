"""Keplerian elements and orbital state vectors.

Conversions between classical orbital elements and ECI position/velocity.
The state-to-elements core is numba-compiled.

Degenerate orbits have no unique RAAN or argument of periapsis, so fixed
conventions are substituted instead of undefined angles:

- Circular, inclined (e < 1e-10): argument of periapsis = 0, true anomaly
  = argument of latitude (angle from the ascending node)
- Equatorial, eccentric (sin i < 1e-11): RAAN = 0, argument of periapsis =
  longitude of periapsis (measured the other way for retrograde orbits)
- Circular and equatorial: RAAN = 0, argument of periapsis = 0, true
  anomaly = true longitude (measured the other way for retrograde orbits)

Example:
    >>> from rocketsim.orbital import KeplerianElements
    >>>
    >>> iss = KeplerianElements.circular(400e3, inclination=np.radians(51.6))
    >>> position, velocity = iss.to_state_vector()
    >>> print(f"Period: {iss.period / 60:.1f} min")
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from rocketsim.environment.gravity import MU_EARTH, R_EARTH_EQ

TWO_PI = 2.0 * np.pi

# Degenerate-orbit thresholds
CIRCULAR_TOLERANCE = 1e-10  # eccentricity
EQUATORIAL_TOLERANCE = 1e-11  # |n| / |h| = sin(inclination)
PARABOLIC_TOLERANCE = 1e-10  # |e - 1|


# =============================================================================
# Core Numba Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _clamp(x: float, lo: float, hi: float) -> float:
    """Clamp scalar to range [lo, hi]."""
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


@njit(cache=True, fastmath=True)
def _wrap_angle(x: float) -> float:
    """Wrap an angle to [0, 2*pi)."""
    two_pi = 2.0 * np.pi
    x = x % two_pi
    if x < 0.0:
        x += two_pi
    if x >= two_pi:
        x -= two_pi
    return x


@njit(cache=True, fastmath=True)
def _compute_elements_core(
    rx: float, ry: float, rz: float,
    vx: float, vy: float, vz: float,
    mu: float,
) -> tuple[float, float, float, float, float, float]:
    """Numba-optimized orbital elements computation.

    Returns tuple of:
        (energy, ecc, inc, raan, arg_pe, true_anom)
    """
    two_pi = 2.0 * np.pi

    r = np.sqrt(rx*rx + ry*ry + rz*rz)
    v = np.sqrt(vx*vx + vy*vy + vz*vz)

    # Specific orbital energy
    energy = v*v / 2.0 - mu / r

    # Angular momentum vector h = r x v
    hx = ry * vz - rz * vy
    hy = rz * vx - rx * vz
    hz = rx * vy - ry * vx
    h = np.sqrt(hx*hx + hy*hy + hz*hz)

    # Inclination
    if h > 0.0:
        inc = np.arccos(_clamp(hz / h, -1.0, 1.0))
    else:
        inc = 0.0

    # Node vector n = k x h (k = [0, 0, 1])
    nx = -hy
    ny = hx
    n = np.sqrt(nx*nx + ny*ny)

    # Eccentricity vector e = (v x h) / mu - r / |r|
    vxh_x = vy * hz - vz * hy
    vxh_y = vz * hx - vx * hz
    vxh_z = vx * hy - vy * hx

    ex = vxh_x / mu - rx / r
    ey = vxh_y / mu - ry / r
    ez = vxh_z / mu - rz / r
    ecc = np.sqrt(ex*ex + ey*ey + ez*ez)

    circular = ecc < 1e-10
    equatorial = h <= 0.0 or n / h < 1e-11

    # Right ascension of ascending node
    if equatorial:
        raan = 0.0
    else:
        raan = _wrap_angle(np.arctan2(ny, nx))

    if not circular:
        # Argument of periapsis
        if equatorial:
            arg_pe = _wrap_angle(np.arctan2(ey, ex))
            if hz < 0.0:
                arg_pe = _wrap_angle(two_pi - arg_pe)
        else:
            cos_omega = (nx * ex + ny * ey) / (n * ecc)
            arg_pe = np.arccos(_clamp(cos_omega, -1.0, 1.0))
            if ez < 0.0:
                arg_pe = two_pi - arg_pe

        # True anomaly
        cos_nu = (ex * rx + ey * ry + ez * rz) / (ecc * r)
        true_anom = np.arccos(_clamp(cos_nu, -1.0, 1.0))
        rdotv = rx * vx + ry * vy + rz * vz
        if rdotv < 0.0:
            true_anom = two_pi - true_anom
    else:
        arg_pe = 0.0
        if equatorial:
            # True longitude
            true_anom = _wrap_angle(np.arctan2(ry, rx))
            if hz < 0.0:
                true_anom = _wrap_angle(two_pi - true_anom)
        else:
            # Argument of latitude
            cos_u = (nx * rx + ny * ry) / (n * r)
            true_anom = np.arccos(_clamp(cos_u, -1.0, 1.0))
            if rz < 0.0:
                true_anom = two_pi - true_anom

    return (energy, ecc, inc, raan, _wrap_angle(arg_pe), _wrap_angle(true_anom))


# =============================================================================
# Keplerian Elements
# =============================================================================


@beartype
@dataclass(frozen=True)
class KeplerianElements:
    """Classical orbital elements.

    Attributes:
        semi_major_axis: Semi-major axis [m] (negative for hyperbolic orbits)
        eccentricity: Orbital eccentricity [-]
        inclination: Inclination [rad]
        raan: Right ascension of ascending node [rad]
        arg_periapsis: Argument of periapsis [rad]
        true_anomaly: True anomaly [rad]
        mu: Gravitational parameter [m^3/s^2]
    """
    semi_major_axis: float
    eccentricity: float
    inclination: float
    raan: float = 0.0
    arg_periapsis: float = 0.0
    true_anomaly: float = 0.0
    mu: float = MU_EARTH

    def __post_init__(self) -> None:
        """Validate elements."""
        if self.eccentricity < 0:
            raise ValueError(f"Eccentricity must be >= 0, got {self.eccentricity}")
        if self.semi_major_axis == 0:
            raise ValueError("Semi-major axis must be non-zero")
        if self.mu <= 0:
            raise ValueError(f"mu must be positive, got {self.mu}")

    @classmethod
    def circular(
        cls,
        altitude: float,
        inclination: float = 0.0,
        raan: float = 0.0,
        true_anomaly: float = 0.0,
        mu: float = MU_EARTH,
    ) -> "KeplerianElements":
        """Circular orbit at an altitude above the equatorial radius.

        Args:
            altitude: Orbit altitude [m]
            inclination: Inclination [rad]
            raan: Right ascension of ascending node [rad]
            true_anomaly: Argument of latitude [rad]
            mu: Gravitational parameter [m^3/s^2]
        """
        return cls(
            semi_major_axis=R_EARTH_EQ + altitude,
            eccentricity=0.0,
            inclination=inclination,
            raan=raan,
            arg_periapsis=0.0,
            true_anomaly=true_anomaly,
            mu=mu,
        )

    @classmethod
    def from_state_vector(
        cls,
        position: NDArray[np.float64],
        velocity: NDArray[np.float64],
        mu: float = MU_EARTH,
    ) -> "KeplerianElements":
        """Compute classical orbital elements from state vectors.

        Args:
            position: Position vector in ECI frame [x, y, z] [m]
            velocity: Velocity vector in ECI frame [vx, vy, vz] [m/s]
            mu: Gravitational parameter [m^3/s^2]

        Returns:
            Elements, with the degenerate-orbit conventions applied

        Raises:
            ValueError: For a zero position vector or a parabolic orbit
        """
        if np.linalg.norm(position) <= 0:
            raise ValueError("Position vector must be non-zero")

        energy, ecc, inc, raan, arg_pe, nu = _compute_elements_core(
            float(position[0]), float(position[1]), float(position[2]),
            float(velocity[0]), float(velocity[1]), float(velocity[2]),
            mu,
        )
        if abs(ecc - 1.0) < PARABOLIC_TOLERANCE or energy == 0.0:
            raise ValueError("Parabolic orbits have no finite semi-major axis")

        return cls(
            semi_major_axis=float(-mu / (2.0 * energy)),
            eccentricity=float(ecc),
            inclination=float(inc),
            raan=float(raan),
            arg_periapsis=float(arg_pe),
            true_anomaly=float(nu),
            mu=mu,
        )

    @property
    def semi_latus_rectum(self) -> float:
        """p = a (1 - e^2) [m]."""
        return self.semi_major_axis * (1.0 - self.eccentricity ** 2)

    @property
    def is_circular(self) -> bool:
        return self.eccentricity < CIRCULAR_TOLERANCE

    @property
    def is_equatorial(self) -> bool:
        return abs(np.sin(self.inclination)) < EQUATORIAL_TOLERANCE

    @property
    def perifocal_to_eci(self) -> NDArray[np.float64]:
        """Rotation from the perifocal (PQW) frame to ECI, R3(-raan) R1(-i) R3(-argp)."""
        cO, sO = np.cos(self.raan), np.sin(self.raan)
        cw, sw = np.cos(self.arg_periapsis), np.sin(self.arg_periapsis)
        ci, si = np.cos(self.inclination), np.sin(self.inclination)

        return np.array([
            [cO*cw - sO*sw*ci, -cO*sw - sO*cw*ci, sO*si],
            [sO*cw + cO*sw*ci, -sO*sw + cO*cw*ci, -cO*si],
            [sw*si, cw*si, ci],
        ])

    def to_state_vector(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Convert to ECI position [m] and velocity [m/s].

        Raises:
            ValueError: For parabolic orbits, a non-positive semi-latus
                rectum, or a true anomaly beyond a hyperbola's asymptote
        """
        e = self.eccentricity
        if abs(e - 1.0) < PARABOLIC_TOLERANCE:
            raise ValueError("Parabolic orbits are not supported")

        p = self.semi_latus_rectum
        if p <= 0:
            raise ValueError(
                f"Semi-latus rectum must be positive, got {p:.3e} m "
                "(check the sign of the semi-major axis)"
            )

        nu = self.true_anomaly
        denom = 1.0 + e * np.cos(nu)
        if denom <= 0:
            raise ValueError("True anomaly lies beyond the hyperbolic asymptote")

        r = p / denom
        r_pqw = np.array([r * np.cos(nu), r * np.sin(nu), 0.0])

        sqrt_mu_p = np.sqrt(self.mu / p)
        v_pqw = np.array([-sqrt_mu_p * np.sin(nu), sqrt_mu_p * (e + np.cos(nu)), 0.0])

        rot = self.perifocal_to_eci
        return rot @ r_pqw, rot @ v_pqw

    def to_orbital_state(self, time: float = 0.0) -> "OrbitalState":
        """Convert to an OrbitalState at the given time."""
        position, velocity = self.to_state_vector()
        return OrbitalState(time=time, position=position, velocity=velocity)

    @property
    def period(self) -> float:
        """Orbital period [s] (infinite for open orbits)."""
        if self.eccentricity >= 1.0:
            return float("inf")
        return float(TWO_PI * np.sqrt(self.semi_major_axis ** 3 / self.mu))

    @property
    def mean_motion(self) -> float:
        """Mean motion [rad/s]."""
        return float(np.sqrt(self.mu / abs(self.semi_major_axis) ** 3))

    @property
    def specific_energy(self) -> float:
        """Specific orbital energy [J/kg]."""
        return -self.mu / (2.0 * self.semi_major_axis)

    @property
    def periapsis_radius(self) -> float:
        """Periapsis radius [m]."""
        return abs(self.semi_major_axis * (1.0 - self.eccentricity))

    @property
    def apoapsis_radius(self) -> float:
        """Apoapsis radius [m] (infinite for open orbits)."""
        if self.eccentricity >= 1.0:
            return float("inf")
        return self.semi_major_axis * (1.0 + self.eccentricity)

    @property
    def periapsis_altitude(self) -> float:
        """Periapsis altitude above the equatorial radius [m]."""
        return self.periapsis_radius - R_EARTH_EQ

    @property
    def apoapsis_altitude(self) -> float:
        """Apoapsis altitude above the equatorial radius [m]."""
        return self.apoapsis_radius - R_EARTH_EQ


# =============================================================================
# Orbital State
# =============================================================================


@beartype
@dataclass(frozen=True)
class OrbitalDerivative:
    """Time derivative of an orbital state."""
    velocity: NDArray[np.float64]
    acceleration: NDArray[np.float64]
    time_dot: float = 1.0

    def __add__(self, other: "OrbitalDerivative") -> "OrbitalDerivative":
        return OrbitalDerivative(
            velocity=self.velocity + other.velocity,
            acceleration=self.acceleration + other.acceleration,
            time_dot=self.time_dot + other.time_dot,
        )

    def __mul__(self, scalar: float) -> "OrbitalDerivative":
        return OrbitalDerivative(
            velocity=self.velocity * scalar,
            acceleration=self.acceleration * scalar,
            time_dot=self.time_dot * scalar,
        )

    __rmul__ = __mul__


@beartype
@dataclass(frozen=True)
class OrbitalState:
    """Translational state of an orbiting body (no attitude).

    Attributes:
        time: Time since epoch [s]
        position: ECI position [m]
        velocity: ECI velocity [m/s]
    """
    time: float
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]

    def __post_init__(self) -> None:
        """Copy arrays read-only and check shapes."""
        for name in ("position", "velocity"):
            arr = np.array(getattr(self, name), dtype=np.float64)
            if arr.shape != (3,):
                raise ValueError(f"{name.capitalize()} must be shape (3,), got {arr.shape}")
            arr.flags.writeable = False
            object.__setattr__(self, name, arr)

    def advance(self, derivative: OrbitalDerivative, dt: float) -> "OrbitalState":
        """Return this state moved along `derivative` for `dt` seconds."""
        return OrbitalState(
            time=self.time + derivative.time_dot * dt,
            position=self.position + derivative.velocity * dt,
            velocity=self.velocity + derivative.acceleration * dt,
        )

    @property
    def radius(self) -> float:
        """Distance from Earth's centre [m]."""
        return float(np.linalg.norm(self.position))

    @property
    def altitude(self) -> float:
        """Altitude above the equatorial radius [m]."""
        return self.radius - R_EARTH_EQ

    @property
    def speed(self) -> float:
        """Speed [m/s]."""
        return float(np.linalg.norm(self.velocity))

    def to_elements(self, mu: float = MU_EARTH) -> KeplerianElements:
        """Osculating Keplerian elements of this state."""
        return KeplerianElements.from_state_vector(self.position, self.velocity, mu)
