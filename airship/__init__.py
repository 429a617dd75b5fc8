"""Airship voyage simulator package."""

from .autopilot import (
    AutopilotCommand,
    braking_distance,
    compute_autopilot,
)

from .clock import TickClock

from .config import (
    TIME_WARP_STEPS,
    SimulationConfig,
)

from .kinematics import (
    compose_ground_speed,
    update_ground_track,
)

from .navigation import (
    EARTH_RADIUS_M,
    bearing,
    distance,
    heading_error,
    normalize_angle,
)

from .performance import (
    FUEL_CONSUMPTION_TABLE,
    PerformancePoint,
    fuel_endurance_hours,
    lookup,
)

from .persistence import (
    from_record,
    load_record,
    parse_bootstrap,
    save_record,
    to_record,
)

from .simulation import (
    RejectionReason,
    SimulationEngine,
    SimulationEvent,
    SimulationEventType,
)

from .state import (
    MAX_FUEL_CAPACITY_L,
    VehicleState,
)

from .wind import (
    WindMode,
    WindModel,
    WindState,
    beaufort_to_mps,
)

__all__ = [
    # Autopilot
    "AutopilotCommand",
    "braking_distance",
    "compute_autopilot",
    # Clock
    "TickClock",
    # Config
    "TIME_WARP_STEPS",
    "SimulationConfig",
    # Kinematics
    "compose_ground_speed",
    "update_ground_track",
    # Navigation
    "EARTH_RADIUS_M",
    "bearing",
    "distance",
    "heading_error",
    "normalize_angle",
    # Performance
    "FUEL_CONSUMPTION_TABLE",
    "PerformancePoint",
    "fuel_endurance_hours",
    "lookup",
    # Persistence
    "from_record",
    "load_record",
    "parse_bootstrap",
    "save_record",
    "to_record",
    # Simulation
    "RejectionReason",
    "SimulationEngine",
    "SimulationEvent",
    "SimulationEventType",
    # State
    "MAX_FUEL_CAPACITY_L",
    "VehicleState",
    # Wind
    "WindMode",
    "WindModel",
    "WindState",
    "beaufort_to_mps",
]
