"""Guidance algorithms for rocket vehicles.

Provides the three-phase gravity turn ascent program.
"""

from rocketsim.gnc.guidance.gravity_turn import (
    GravityTurnGuidance,
    GuidancePhase,
)

__all__ = [
    "GravityTurnGuidance",
    "GuidancePhase",
]
