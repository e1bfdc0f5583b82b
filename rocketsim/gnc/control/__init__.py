"""Control algorithms for rocket vehicles.

Provides PID controllers and thrust vector control for attitude
and trajectory control.
"""

from rocketsim.gnc.control.pid import (
    PIDController,
    PIDGains,
)
from rocketsim.gnc.control.tvc import (
    TVCController,
)

__all__ = [
    "PIDController",
    "PIDGains",
    "TVCController",
]
