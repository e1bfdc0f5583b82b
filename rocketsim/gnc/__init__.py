"""GNC (Guidance, Navigation, Control) module for rocket vehicles.

Provides the controller capability used by the simulator, gravity turn
guidance, and PID-based thrust vector control.

Example:
    >>> from rocketsim.gnc import TVCController, ZeroGimbalController
    >>>
    >>> # Closed-loop ascent
    >>> ctrl = TVCController()
    >>>
    >>> # Open-loop reference
    >>> ballistic = ZeroGimbalController()
"""

from rocketsim.gnc.control import (
    PIDController,
    PIDGains,
    TVCController,
)
from rocketsim.gnc.controller import (
    Controller,
    ZeroGimbalController,
    reset_controller,
)
from rocketsim.gnc.guidance import (
    GravityTurnGuidance,
    GuidancePhase,
)

__all__ = [
    # Capability
    "Controller",
    "ZeroGimbalController",
    "reset_controller",
    # Control
    "PIDController",
    "PIDGains",
    "TVCController",
    # Guidance
    "GravityTurnGuidance",
    "GuidancePhase",
]
