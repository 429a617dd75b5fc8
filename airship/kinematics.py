"""
Wind/Ground Composition and Position Integration for the Airship Simulator.

Velocities are handled as 2D numpy vectors in (east, north) components,
meters per second. Compass angles are measured clockwise from north, so a
heading h points along (sin h, cos h).

Each tick, unless moored:
- the wind vector drifts the airship directly (small-angle offset), and
- ground speed is the magnitude of airship velocity plus wind, signed by
  whether that total points ahead of or behind the heading.

The airship is then moved along its heading by |ground speed| x dt, in the
direction of its body speed. A moored airship ignores the wind entirely
and its ground speed equals its body speed.
"""

from __future__ import annotations

import math

import numpy as np

from .navigation import offset_position
from .state import VehicleState
from .wind import WindState


def compass_unit_vector(degrees: float) -> np.ndarray:
    """Unit (east, north) vector for a compass direction."""
    angle = math.radians(degrees)
    return np.array([math.sin(angle), math.cos(angle)])


def wind_velocity(wind: WindState) -> np.ndarray:
    """Wind velocity vector (m/s)."""
    return wind.speed_mps * compass_unit_vector(wind.direction)


def airship_velocity(speed_kmh: float, heading: float) -> np.ndarray:
    """Airship velocity through the air (m/s)."""
    return (speed_kmh / 3.6) * compass_unit_vector(heading)


def compose_ground_speed(
    speed_kmh: float,
    heading: float,
    wind: WindState,
    anchored: bool = False
) -> float:
    """
    Ground speed (km/h) after adding the wind.

    Args:
        speed_kmh: Body speed (km/h, signed).
        heading: Heading (degrees).
        wind: Current wind.
        anchored: Moored airships feel no wind.

    Returns:
        |airship + wind| in km/h, negative when the total velocity points
        behind the heading.
    """
    if anchored:
        return speed_kmh

    total = airship_velocity(speed_kmh, heading) + wind_velocity(wind)
    magnitude_kmh = float(np.linalg.norm(total)) * 3.6
    along_heading = float(np.dot(total, compass_unit_vector(heading)))
    return magnitude_kmh if along_heading >= 0 else -magnitude_kmh


def apply_wind_drift(state: VehicleState, wind: WindState, dt: float) -> None:
    """Carry the airship with the wind for one step (no-op when moored)."""
    if state.anchor_enabled:
        return
    east_m, north_m = wind_velocity(wind) * dt
    state.lat, state.lng = offset_position(state.lat, state.lng, float(east_m), float(north_m))


def integrate_position(state: VehicleState, dt: float) -> float:
    """
    Move the airship along its heading by one step of ground speed.

    The distance covered always counts toward the odometer; the direction
    of travel follows the sign of the body speed, so a stationary airship
    is not moved along its heading.

    Returns:
        Distance covered over ground (meters).
    """
    distance_m = abs(state.ground_speed) * (dt / 3600.0) * 1000.0
    direction = math.copysign(1.0, state.speed) if state.speed != 0 else 0.0

    east_m, north_m = distance_m * direction * compass_unit_vector(state.heading)
    state.lat, state.lng = offset_position(state.lat, state.lng, float(east_m), float(north_m))
    return distance_m


def update_ground_track(state: VehicleState, wind: WindState, dt: float) -> float:
    """
    Compose ground speed, drift with the wind and integrate position.

    Args:
        state: Vehicle state to update in place.
        wind: Current wind.
        dt: Simulated time step (seconds).

    Returns:
        Distance covered over ground this step (meters).
    """
    apply_wind_drift(state, wind, dt)
    state.ground_speed = compose_ground_speed(
        state.speed, state.heading, wind, anchored=state.anchor_enabled
    )
    distance_m = integrate_position(state, dt)
    state.total_distance_m += distance_m
    return distance_m
