"""Numerical orbit propagation.

Integrates point-mass orbital motion under inverse-square gravity, with
optional J2, using the same RK4 step as the flight simulator.

The trajectory is lazy and restartable: every iteration re-integrates from
the initial state, so nothing is stored and the samples are identical on
each pass. The final step is shortened so the last sample falls exactly at
the requested duration.

Example:
    >>> from rocketsim.orbital import KeplerianElements, propagate_orbit
    >>>
    >>> orbit = KeplerianElements.circular(400e3, inclination=np.radians(51.6))
    >>> trajectory = propagate_orbit(orbit.to_orbital_state(), orbit.period, dt=10.0)
    >>> final = trajectory.final()
    >>> print(f"Closure error: {np.linalg.norm(final.position - trajectory.initial.position):.1f} m")
"""

from collections.abc import Iterator

import numpy as np
from beartype import beartype

from rocketsim.dynamics.integrator import rk4_step
from rocketsim.environment.gravity import gravity
from rocketsim.orbital.elements import OrbitalDerivative, OrbitalState

# Remainders below this fraction of dt are absorbed into the last full step
STEP_TOLERANCE = 1e-9


def orbital_derivative(state: OrbitalState, use_j2: bool = False) -> OrbitalDerivative:
    """Time derivative of an orbital state under Earth gravity."""
    return OrbitalDerivative(
        velocity=state.velocity,
        acceleration=gravity(state.position, use_j2=use_j2),
    )


@beartype
class OrbitTrajectory:
    """Lazily propagated orbit samples.

    Iterating yields the initial state followed by one state per step.
    Continue a propagation by passing `final()` to another
    `propagate_orbit` call.
    """

    def __init__(
        self,
        initial: OrbitalState,
        duration: float,
        dt: float,
        use_j2: bool = False,
    ) -> None:
        if not np.isfinite(duration) or duration < 0:
            raise ValueError(f"Duration must be >= 0, got {duration}")
        if not np.isfinite(dt) or dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        self.initial = initial
        self.duration = duration
        self.dt = dt
        self.use_j2 = use_j2

        full_steps = int(duration // dt)
        remainder = duration - full_steps * dt
        if remainder <= STEP_TOLERANCE * dt:
            remainder = 0.0
        self._full_steps = full_steps
        self._remainder = remainder

    def _steps(self) -> Iterator[float]:
        """Step sizes, with the shortened final step if needed."""
        for _ in range(self._full_steps):
            yield self.dt
        if self._remainder > 0.0:
            yield self._remainder

    def __iter__(self) -> Iterator[OrbitalState]:
        state = self.initial
        use_j2 = self.use_j2
        t0 = self.initial.time
        elapsed = 0.0
        n_steps = len(self) - 1

        yield state
        for k, step in enumerate(self._steps(), start=1):
            state = rk4_step(state, lambda s: orbital_derivative(s, use_j2), step)
            elapsed = self.duration if k == n_steps else elapsed + step
            # Pin the clock to the step grid instead of the accumulated sum
            state = OrbitalState(time=t0 + elapsed, position=state.position, velocity=state.velocity)
            yield state

    def __len__(self) -> int:
        """Number of samples, including the initial state."""
        return 1 + self._full_steps + (1 if self._remainder > 0.0 else 0)

    def final(self) -> OrbitalState:
        """State at the end of the propagation."""
        state = self.initial
        for state in self:
            pass
        return state

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Time [s], position [m] and velocity [m/s] arrays of all samples."""
        samples = list(self)
        return (
            np.array([s.time for s in samples]),
            np.array([s.position for s in samples]),
            np.array([s.velocity for s in samples]),
        )


@beartype
def propagate_orbit(
    initial: OrbitalState,
    duration: float,
    dt: float = 1.0,
    use_j2: bool = False,
) -> OrbitTrajectory:
    """Propagate an orbit for a duration.

    Args:
        initial: Starting state
        duration: Propagation time [s]
        dt: Integration step [s]
        use_j2: Include the J2 oblateness perturbation

    Returns:
        OrbitTrajectory (lazy, restartable)

    Raises:
        ValueError: If duration is negative or dt is not positive
    """
    return OrbitTrajectory(initial, duration, dt, use_j2)
