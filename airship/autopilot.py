"""
Autopilot Controller for the Airship Simulator.

Flies the airship to its target and stops there:

- Steering: proportional rudder on heading error (0.01 rudder per degree,
  limited to the rudder's +/-0.5 range).
- Throttle: full ahead while far away, full astern once the remaining
  distance falls inside the braking distance plus a 500 m margin, and
  stop inside the 100 m arrival circle.

The braking distance assumes the braking deceleration of the propulsion
model (0.8 km/h per second).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .navigation import bearing, distance, heading_error
from .propulsion import BRAKING_ACCELERATION
from .state import MAX_RUDDER_COMMAND, MAX_THROTTLE_NOTCH, VehicleState


# =============================================================================
# CONSTANTS
# =============================================================================

# Rudder per degree of heading error
RUDDER_GAIN = 0.01

# Arrival circle radius (meters)
ARRIVAL_RADIUS_M = 100.0

# Extra distance added to the braking estimate before braking starts (meters)
BRAKING_MARGIN_M = 500.0

# Braking deceleration in m/s^2
BRAKING_DECELERATION_MS2 = BRAKING_ACCELERATION / 3.6


@dataclass
class AutopilotCommand:
    """
    Output of one autopilot evaluation.

    Attributes:
        rudder: Rudder command in [-0.5, 0.5].
        throttle: Throttle notch (0, -5 or +5).
        bearing_deg: Bearing to target.
        distance_m: Distance to target.
        heading_error_deg: Turn needed, (-180, 180].
    """
    rudder: float
    throttle: int
    bearing_deg: float
    distance_m: float
    heading_error_deg: float

    @property
    def arrived(self) -> bool:
        """True inside the arrival circle."""
        return self.distance_m < ARRIVAL_RADIUS_M


def braking_distance(speed_kmh: float) -> float:
    """Distance (m) needed to stop from a speed at braking deceleration."""
    speed_ms = speed_kmh / 3.6
    return speed_ms * speed_ms / (2 * BRAKING_DECELERATION_MS2)


def rudder_command(error_deg: float) -> float:
    """Proportional rudder for a heading error."""
    return max(-MAX_RUDDER_COMMAND, min(MAX_RUDDER_COMMAND, error_deg * RUDDER_GAIN))


def throttle_command(distance_m: float, speed_kmh: float) -> int:
    """
    Throttle notch for the distance remaining.

    Args:
        distance_m: Distance to target (meters).
        speed_kmh: Current body speed (km/h).

    Returns:
        0 inside the arrival circle, full astern inside braking range,
        full ahead otherwise.
    """
    if distance_m < ARRIVAL_RADIUS_M:
        command = 0
    elif distance_m < braking_distance(speed_kmh) + BRAKING_MARGIN_M:
        command = -MAX_THROTTLE_NOTCH
    else:
        command = MAX_THROTTLE_NOTCH
    return int(round(command))


def is_available(state: VehicleState) -> bool:
    """The autopilot can only fly with a target, engaged, and fuel aboard."""
    return state.has_target and state.autopilot_enabled and state.fuel_reserve > 0


def compute_autopilot(state: VehicleState) -> Optional[AutopilotCommand]:
    """
    Evaluate the autopilot against the current (pre-tick) state.

    Returns:
        The command to apply, or None if the autopilot cannot fly.
    """
    if not is_available(state):
        return None

    to_target = bearing(state.lat, state.lng, state.target_lat, state.target_lng)
    remaining = distance(state.lat, state.lng, state.target_lat, state.target_lng)
    error = heading_error(to_target, state.heading)

    return AutopilotCommand(
        rudder=rudder_command(error),
        throttle=throttle_command(remaining, state.speed),
        bearing_deg=to_target,
        distance_m=remaining,
        heading_error_deg=error,
    )
