"""Fixed-step Runge-Kutta integration.

The integrator is generic over anything that can be advanced along a
derivative: the flight `State` and the orbital `OrbitalState` both
satisfy the `Integrable` protocol, and their derivatives support the
addition and scalar multiplication RK4 needs to combine samples.

Example:
    >>> from rocketsim.dynamics import rk4_step
    >>>
    >>> next_state = rk4_step(state, lambda s: model.derivative(s, command), 0.01)
"""

from collections.abc import Callable, Iterator
from typing import Protocol, TypeVar, runtime_checkable

# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class Derivative(Protocol):
    """A state derivative that can be summed and scaled."""

    def __add__(self, other):
        ...

    def __mul__(self, scalar: float):
        ...


@runtime_checkable
class Integrable(Protocol):
    """A state that can be moved along a derivative."""

    def advance(self, derivative, dt: float):
        ...


S = TypeVar("S", bound=Integrable)


# =============================================================================
# Integration
# =============================================================================


def rk4_step(
    state: S,
    derivative_fn: Callable[[S], Derivative],
    dt: float,
) -> S:
    """Perform one classical RK4 step.

    Args:
        state: Current state
        derivative_fn: Function returning the derivative at a state
        dt: Time step [s]

    Returns:
        State at t + dt
    """
    half = 0.5 * dt

    k1 = derivative_fn(state)
    k2 = derivative_fn(state.advance(k1, half))
    k3 = derivative_fn(state.advance(k2, half))
    k4 = derivative_fn(state.advance(k3, dt))

    return state.advance(k1 + 2.0 * k2 + 2.0 * k3 + k4, dt / 6.0)


def integrate(
    state: S,
    derivative_fn: Callable[[S], Derivative],
    dt: float,
    steps: int,
) -> Iterator[S]:
    """Yield the states produced by `steps` successive RK4 steps.

    The initial state is not yielded.
    """
    for _ in range(steps):
        state = rk4_step(state, derivative_fn, dt)
        yield state
