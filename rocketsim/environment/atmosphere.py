"""US Standard Atmosphere 1976 model.

Provides temperature, pressure, density and speed of sound as functions of
geometric altitude for Earth's atmosphere from sea level to 86 km.

The model divides the atmosphere into seven layers (geopotential bases):
- Troposphere (0-11 km): -6.5 K/km lapse rate
- Tropopause (11-20 km): isothermal at 216.65 K
- Stratosphere (20-32 km): +1.0 K/km
- Stratosphere (32-47 km): +2.8 K/km
- Stratopause (47-51 km): isothermal at 270.65 K
- Mesosphere (51-71 km): -2.8 K/km
- Mesosphere (71-84.852 km): -2.0 K/km

Outside the 0-86 km band the model returns the boundary values instead of
extrapolating, so density never goes negative or undefined.

Reference: U.S. Standard Atmosphere, 1976 (NASA-TM-X-74335)

Example:
    >>> from rocketsim.environment import atmosphere
    >>>
    >>> result = atmosphere(10000.0)  # 10 km
    >>> print(f"Density: {result.density:.4f} kg/m^3")
    >>> print(f"Speed of sound: {result.speed_of_sound:.1f} m/s")
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype

# =============================================================================
# Constants
# =============================================================================

# Sea level conditions
T0 = 288.15  # Temperature [K]
P0 = 101325.0  # Pressure [Pa]

# Physical constants
R_AIR = 287.05287  # Specific gas constant for dry air [J/(kg·K)]
GAMMA_AIR = 1.4  # Ratio of specific heats for air
G0 = 9.80665  # Standard gravity [m/s^2]

# Earth radius used for the geopotential conversion [m]
R_EARTH_GEOPOTENTIAL = 6356766.0

# Validity band of the layer model (geometric) [m]
MIN_ALTITUDE = 0.0
MAX_ALTITUDE = 86000.0

# Layer definitions: (base_altitude_km, base_temp_K, lapse_rate_K_per_km)
LAYERS = [
    (0.0, 288.15, -6.5),      # Troposphere
    (11.0, 216.65, 0.0),      # Tropopause
    (20.0, 216.65, 1.0),      # Stratosphere 1
    (32.0, 228.65, 2.8),      # Stratosphere 2
    (47.0, 270.65, 0.0),      # Stratopause
    (51.0, 270.65, -2.8),     # Mesosphere 1
    (71.0, 214.65, -2.0),     # Mesosphere 2
]


# =============================================================================
# Result Classes
# =============================================================================


@beartype
@dataclass(frozen=True)
class AtmosphereResult:
    """Atmospheric conditions at a given altitude.

    Attributes:
        altitude: Geometric altitude that was requested [m]
        temperature: Static temperature [K]
        pressure: Static pressure [Pa]
        density: Air density [kg/m^3]
        speed_of_sound: Speed of sound [m/s]
    """
    altitude: float
    temperature: float
    pressure: float
    density: float
    speed_of_sound: float

    def mach(self, speed: float) -> float:
        """Mach number for a given airspeed [m/s]."""
        return speed / self.speed_of_sound

    def dynamic_pressure(self, speed: float) -> float:
        """Dynamic pressure q = 0.5 * rho * v^2 [Pa]."""
        return 0.5 * self.density * speed * speed


# =============================================================================
# Atmosphere Model
# =============================================================================


@beartype
class Atmosphere:
    """US Standard Atmosphere 1976 model.

    Base pressures of every layer are integrated once from sea level, so
    each layer starts exactly where the previous one ends.

    Example:
        >>> atm = Atmosphere()
        >>> rho = atm.density(10000.0)  # Density at 10 km
        >>> T = atm.temperature(30000.0)  # Temperature at 30 km
        >>> result = atm.at_altitude(50000.0)  # All properties at 50 km
    """

    def __init__(self) -> None:
        """Initialize atmosphere model."""
        self._base_pressures = self._compute_base_pressures()

    def _compute_base_pressures(self) -> list[float]:
        """Compute pressure at the base of each layer."""
        pressures = [P0]

        for i in range(len(LAYERS) - 1):
            h0, T_base, lapse = LAYERS[i]
            h1, _, _ = LAYERS[i + 1]
            pressures.append(_layer_pressure(pressures[-1], T_base, lapse, (h1 - h0) * 1000))

        return pressures

    @staticmethod
    def _geometric_to_geopotential(h_geometric: float) -> float:
        """Convert geometric altitude [m] to geopotential altitude [m]."""
        return R_EARTH_GEOPOTENTIAL * h_geometric / (R_EARTH_GEOPOTENTIAL + h_geometric)

    def _find_layer(self, h_km: float) -> int:
        """Find the atmospheric layer index for a geopotential altitude [km]."""
        for i in range(len(LAYERS) - 1, -1, -1):
            if h_km >= LAYERS[i][0]:
                return i
        return 0

    def _layer_state(self, altitude: float) -> tuple[float, float]:
        """Temperature [K] and pressure [Pa] at a clamped geometric altitude."""
        h = min(max(altitude, MIN_ALTITUDE), MAX_ALTITUDE)
        h_km = self._geometric_to_geopotential(h) / 1000

        idx = self._find_layer(h_km)
        h0, T_base, lapse = LAYERS[idx]
        dh = (h_km - h0) * 1000  # m above layer base

        T = T_base + (lapse / 1000) * dh
        p = _layer_pressure(self._base_pressures[idx], T_base, lapse, dh)
        return T, p

    @beartype
    def temperature(self, altitude: float) -> float:
        """Static temperature [K] at a geometric altitude [m]."""
        return self._layer_state(altitude)[0]

    @beartype
    def pressure(self, altitude: float) -> float:
        """Static pressure [Pa] at a geometric altitude [m]."""
        return self._layer_state(altitude)[1]

    @beartype
    def density(self, altitude: float) -> float:
        """Air density [kg/m^3] from the ideal gas law."""
        T, p = self._layer_state(altitude)
        return p / (R_AIR * T)

    @beartype
    def speed_of_sound(self, altitude: float) -> float:
        """Speed of sound [m/s], sqrt(gamma R T)."""
        return float(np.sqrt(GAMMA_AIR * R_AIR * self.temperature(altitude)))

    @beartype
    def dynamic_pressure(self, altitude: float, velocity: float) -> float:
        """Get dynamic pressure (q = 0.5 * rho * v^2) [Pa]."""
        return 0.5 * self.density(altitude) * velocity ** 2

    @beartype
    def at_altitude(self, altitude: float) -> AtmosphereResult:
        """Get all atmospheric properties at altitude.

        Args:
            altitude: Geometric altitude [m]

        Returns:
            AtmosphereResult with all properties
        """
        T, p = self._layer_state(altitude)

        return AtmosphereResult(
            altitude=altitude,
            temperature=T,
            pressure=p,
            density=p / (R_AIR * T),
            speed_of_sound=float(np.sqrt(GAMMA_AIR * R_AIR * T)),
        )


def _layer_pressure(p_base: float, T_base: float, lapse_km: float, dh: float) -> float:
    """Hydrostatic pressure dh metres above a layer base."""
    if abs(lapse_km) < 1e-10:
        return float(p_base * np.exp(-G0 * dh / (R_AIR * T_base)))

    lapse = lapse_km / 1000  # K/m
    T = T_base + lapse * dh
    return float(p_base * (T / T_base) ** (-G0 / (R_AIR * lapse)))


# =============================================================================
# Convenience Functions
# =============================================================================


_default_atmosphere = Atmosphere()


@beartype
def atmosphere(altitude: float) -> AtmosphereResult:
    """Atmospheric properties at a geometric altitude [m]."""
    return _default_atmosphere.at_altitude(altitude)
