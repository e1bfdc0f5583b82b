"""Vehicle modeling for rocket simulation.

Provides stage and mission definitions, fluent builders, reference
missions and JSON mission files.

Example:
    >>> from rocketsim.vehicle import MissionBuilder, StageBuilder
    >>>
    >>> mission = (
    ...     MissionBuilder("Demo")
    ...     .stage(StageBuilder("S1").thrust(2000.0).build())
    ...     .build()
    ... )
"""

from rocketsim.vehicle.config import (
    load_mission,
    mission_from_dict,
    mission_to_dict,
    save_mission,
)
from rocketsim.vehicle.mission import (
    GuidanceConfig,
    Mission,
    MissionBuilder,
    MissionConfigError,
)
from rocketsim.vehicle.presets import (
    PRESETS,
    pathfinder,
    single_stage,
)
from rocketsim.vehicle.stage import (
    Stage,
    StageBuilder,
)

__all__ = [
    # Stages
    "Stage",
    "StageBuilder",
    # Missions
    "GuidanceConfig",
    "Mission",
    "MissionBuilder",
    "MissionConfigError",
    # Presets
    "PRESETS",
    "pathfinder",
    "single_stage",
    # Mission files
    "load_mission",
    "mission_from_dict",
    "mission_to_dict",
    "save_mission",
]
