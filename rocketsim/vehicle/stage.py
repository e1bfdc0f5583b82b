"""Stage definition for multi-stage vehicles.

A stage carries its own propellant, engine and structure. While a stage is
active the principal inertia of the whole remaining stack is taken from
that stage and held constant; aerodynamic coefficients default to the
mission's values unless the stage overrides them.

Example:
    >>> from rocketsim.vehicle import StageBuilder
    >>>
    >>> booster = (
    ...     StageBuilder("S1")
    ...     .dry_mass(40.0)
    ...     .propellant_mass(25.0)
    ...     .thrust(5000.0)
    ...     .isp(220.0)
    ...     .build()
    ... )
    >>> booster.burn_time  # seconds
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype

from rocketsim.environment.gravity import G0

# =============================================================================
# Stage
# =============================================================================


@beartype
@dataclass(frozen=True)
class Stage:
    """One stage of a multi-stage vehicle.

    Attributes:
        name: Stage name
        dry_mass: Structure and engine mass [kg]
        propellant_mass: Loaded propellant mass [kg]
        thrust: Vacuum thrust [N]
        isp: Specific impulse [s]
        gimbal_limit: Maximum gimbal deflection [rad]
        nozzle_offset: Distance from the centre of mass aft to the nozzle [m]
        inertia: Principal moments (Ixx, Iyy, Izz) of the stack while this
            stage is active [kg*m^2]
        burn_time_limit: Optional engine cutoff time after ignition [s]
        reference_area: Aerodynamic reference area override [m^2]
        drag_coefficient: Drag coefficient override
        static_margin: Centre-of-pressure offset override [m]
    """
    name: str
    dry_mass: float
    propellant_mass: float
    thrust: float
    isp: float
    gimbal_limit: float = 0.1
    nozzle_offset: float = 1.0
    inertia: tuple[float, float, float] = (5.0, 5.0, 0.5)
    burn_time_limit: float | None = None
    reference_area: float | None = None
    drag_coefficient: float | None = None
    static_margin: float | None = None

    @property
    def wet_mass(self) -> float:
        """Dry plus propellant mass [kg]."""
        return self.dry_mass + self.propellant_mass

    @property
    def mass_flow_rate(self) -> float:
        """Propellant mass flow at full thrust [kg/s]."""
        if self.isp <= 0:
            return 0.0
        return self.thrust / (self.isp * G0)

    @property
    def exhaust_velocity(self) -> float:
        """Effective exhaust velocity Isp * g0 [m/s]."""
        return self.isp * G0

    @property
    def burn_time(self) -> float:
        """Time to exhaust the propellant, capped by the burn limit [s]."""
        mdot = self.mass_flow_rate
        if mdot <= 0:
            return 0.0
        t = self.propellant_mass / mdot
        if self.burn_time_limit is not None:
            t = min(t, self.burn_time_limit)
        return t

    @beartype
    def delta_v(self, carried_mass: float = 0.0) -> float:
        """Ideal (Tsiolkovsky) delta-v for this stage.

        Args:
            carried_mass: Mass riding on top of this stage [kg]

        Returns:
            Delta-v [m/s]
        """
        m0 = self.wet_mass + carried_mass
        mf = self.dry_mass + carried_mass
        if mf <= 0 or m0 <= mf:
            return 0.0
        return float(self.exhaust_velocity * np.log(m0 / mf))


# =============================================================================
# Stage Builder
# =============================================================================


class StageBuilder:
    """Fluent builder for `Stage`.

    Every setter returns the builder; unset fields keep small-vehicle
    defaults.
    """

    def __init__(self, name: str) -> None:
        self._fields: dict = {
            "name": name,
            "dry_mass": 10.0,
            "propellant_mass": 5.0,
            "thrust": 1000.0,
            "isp": 220.0,
            "gimbal_limit": 0.1,
            "nozzle_offset": 1.0,
            "inertia": (5.0, 5.0, 0.5),
            "burn_time_limit": None,
            "reference_area": None,
            "drag_coefficient": None,
            "static_margin": None,
        }

    def _set(self, key: str, value) -> "StageBuilder":
        self._fields[key] = value
        return self

    def dry_mass(self, value: float) -> "StageBuilder":
        return self._set("dry_mass", float(value))

    def propellant_mass(self, value: float) -> "StageBuilder":
        return self._set("propellant_mass", float(value))

    def thrust(self, value: float) -> "StageBuilder":
        return self._set("thrust", float(value))

    def isp(self, value: float) -> "StageBuilder":
        return self._set("isp", float(value))

    def gimbal_limit(self, value: float) -> "StageBuilder":
        return self._set("gimbal_limit", float(value))

    def nozzle_offset(self, value: float) -> "StageBuilder":
        return self._set("nozzle_offset", float(value))

    def inertia(self, ixx: float, iyy: float, izz: float) -> "StageBuilder":
        return self._set("inertia", (float(ixx), float(iyy), float(izz)))

    def burn_time_limit(self, value: float | None) -> "StageBuilder":
        return self._set("burn_time_limit", None if value is None else float(value))

    def reference_area(self, value: float | None) -> "StageBuilder":
        return self._set("reference_area", None if value is None else float(value))

    def drag_coefficient(self, value: float | None) -> "StageBuilder":
        return self._set("drag_coefficient", None if value is None else float(value))

    def static_margin(self, value: float | None) -> "StageBuilder":
        return self._set("static_margin", None if value is None else float(value))

    def build(self) -> Stage:
        """Create the stage. Values are checked by `Mission.validate`."""
        return Stage(**self._fields)
