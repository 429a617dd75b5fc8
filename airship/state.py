"""
Vehicle State for the Airship Simulator.

Holds the single mutable record that the tick orchestrator advances every
step: position on the spherical earth, heading, body and ground speed,
engine and control settings, fuel and the virtual-time accumulators that
drive the wind cadence.

Units:
- lat/lng, heading, angles: degrees
- speed, ground_speed: km/h (signed, positive = forward)
- engine_power: percent of rated power (signed, -100..100)
- fuel: liters
- distance: meters
- time: seconds of simulated (virtual) time
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# Diesel tank capacity (liters)
MAX_FUEL_CAPACITY_L = 88_000.0

# Throttle notches run from full astern to full ahead
MAX_THROTTLE_NOTCH = 5

# Rudder input range (slider notches) and notch-to-command scaling
MAX_RUDDER_INPUT = 5.0
RUDDER_SCALE = 0.1
MAX_RUDDER_COMMAND = MAX_RUDDER_INPUT * RUDDER_SCALE

# Engine power bounds (percent)
MAX_ENGINE_POWER = 100.0

# The anchor cannot hold above this ground speed (km/h)
ANCHOR_MAX_GROUND_SPEED_KMH = 5.0


# =============================================================================
# VEHICLE STATE
# =============================================================================

@dataclass
class VehicleState:
    """
    Complete state of the airship at the end of the last tick.

    Attributes:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        heading: Compass heading in degrees, normalised to [0, 360).
        speed: Body-frame speed in km/h (negative when going astern).
        ground_speed: Speed over ground after wind composition (km/h),
            signed by its projection onto the heading.
        engine_power: Continuous engine power (%), lags the throttle.
        throttle: Commanded throttle notch in [-5, 5].
        rudder: Rudder command in [-0.5, 0.5] (slider notch x 0.1).
        angular_velocity: Turn rate in degrees per second.
        prop_rotation_angle: Cosmetic propeller angle in [0, 360).
        fuel_reserve: Fuel remaining (liters).
        total_fuel_burned: Fuel consumed since spawn (liters).
        total_distance_m: Distance flown over ground since spawn (meters).
        anchor_enabled: Moored; wind has no effect and helm is locked.
        fast_brake_enabled: Full astern until speed drops to 5 km/h.
        autopilot_enabled: Autopilot steering and throttle active.
        has_target: A navigation target is set.
        target_lat: Target latitude (None without a target).
        target_lng: Target longitude (None without a target).
        virtual_elapsed_s: Simulated seconds since spawn.
        wind_last_virtual_update: Virtual time of the last wind update.
        virtual_start_time: Epoch seconds the voyage is considered to have
            started at (informational, carried through persistence).
    """
    lat: float = 0.0
    lng: float = 0.0
    heading: float = 0.0
    speed: float = 0.0
    ground_speed: float = 0.0
    engine_power: float = 0.0
    throttle: int = 0
    rudder: float = 0.0
    angular_velocity: float = 0.0
    prop_rotation_angle: float = 0.0

    # Fuel and accumulators
    fuel_reserve: float = 0.0
    total_fuel_burned: float = 0.0
    total_distance_m: float = 0.0

    # Modes
    anchor_enabled: bool = True
    fast_brake_enabled: bool = False
    autopilot_enabled: bool = False

    # Navigation target
    has_target: bool = False
    target_lat: Optional[float] = None
    target_lng: Optional[float] = None

    # Virtual time
    virtual_elapsed_s: float = 0.0
    wind_last_virtual_update: float = 0.0
    virtual_start_time: Optional[float] = None

    @classmethod
    def spawn(cls, lat: float, lng: float, anchored: bool = True) -> VehicleState:
        """
        Create a fresh airship at a position.

        All accumulators start at zero and the tank is empty.

        Args:
            lat: Spawn latitude (degrees).
            lng: Spawn longitude (degrees).
            anchored: Whether the airship starts moored.

        Returns:
            New VehicleState.
        """
        return cls(lat=lat, lng=lng, anchor_enabled=anchored)

    @property
    def is_moving(self) -> bool:
        """True if the airship has steerage way."""
        return abs(self.speed) > 0.1

    def copy(self) -> VehicleState:
        """Create an independent copy of the state."""
        return replace(self)
