"""Flight controller capability.

The simulator only talks to controllers through this protocol, so custom
guidance and control laws plug in without touching the runner.

Example:
    >>> from rocketsim.gnc import Controller, ZeroGimbalController
    >>>
    >>> ctrl = ZeroGimbalController()
    >>> isinstance(ctrl, Controller)
    True
"""

from typing import Protocol, runtime_checkable

from beartype import beartype

from rocketsim.dynamics.state import GncCommand, State
from rocketsim.vehicle.mission import Mission


@runtime_checkable
class Controller(Protocol):
    """Protocol for closed-loop flight controllers.

    Stateful controllers may also define `reset()`, which the simulator
    calls before every run.
    """

    def control(self, state: State, mission: Mission, dt: float) -> GncCommand:
        """Compute the gimbal command for the coming step."""
        ...

    def name(self) -> str:
        """Human-readable controller name."""
        ...


def reset_controller(controller: Controller) -> None:
    """Call `controller.reset()` if the controller defines one.

    `reset` is optional: stateless controllers only need `control` and
    `name`.
    """
    reset = getattr(controller, "reset", None)
    if callable(reset):
        reset()


@beartype
class ZeroGimbalController:
    """Open-loop controller that never deflects the nozzle."""

    def control(self, state: State, mission: Mission, dt: float) -> GncCommand:
        return GncCommand()

    def name(self) -> str:
        return "zero-gimbal"

    def reset(self) -> None:
        pass
