"""
Navigation Math for the Airship Simulator.

Great-circle bearing and the short-range distance approximation used by
the autopilot and the direction indicator, plus the small-angle helpers
that move a position by a metric offset.

Distance deliberately uses the equirectangular approximation rather than
haversine; autopilot thresholds (100 m arrival, braking margin) are tuned
against it.
"""

from __future__ import annotations

import math
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# WGS-84 equatorial radius used as the sphere radius (meters)
EARTH_RADIUS_M = 6_378_137.0

# ETA is only meaningful above this ground speed (km/h)
MIN_ETA_GROUND_SPEED_KMH = 5.0


# =============================================================================
# ANGLES
# =============================================================================

def normalize_angle(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = degrees % 360.0
    # -1e-15 % 360 rounds up to 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def heading_error(bearing_deg: float, heading_deg: float) -> float:
    """
    Signed turn needed to go from heading to bearing.

    Returns:
        Error in degrees in (-180, 180]; positive means turn right.
    """
    error = (bearing_deg - heading_deg) % 360.0
    if error > 180.0:
        error -= 360.0
    return error


# =============================================================================
# BEARING AND DISTANCE
# =============================================================================

def bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Initial great-circle bearing from point 1 to point 2.

    Args:
        lat1, lng1: Origin (degrees).
        lat2, lng2: Destination (degrees).

    Returns:
        Bearing in degrees, [0, 360), clockwise from true north.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda))
    return normalize_angle(math.degrees(math.atan2(y, x)))


def distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Equirectangular distance between two points in meters.

    dx = R * cos(lat1) * d_lng,  dy = R * d_lat
    """
    phi1 = math.radians(lat1)
    dx = EARTH_RADIUS_M * math.cos(phi1) * math.radians(lng2 - lng1)
    dy = EARTH_RADIUS_M * math.radians(lat2 - lat1)
    return math.sqrt(dx * dx + dy * dy)


# =============================================================================
# POSITION OFFSETS
# =============================================================================

def offset_position(
    lat: float,
    lng: float,
    east_m: float,
    north_m: float
) -> tuple[float, float]:
    """
    Move a position by a small metric offset (flat-earth approximation).

    Args:
        lat, lng: Start position (degrees).
        east_m: Eastward displacement (meters).
        north_m: Northward displacement (meters).

    Returns:
        (new_lat, new_lng) in degrees.
    """
    d_lat = math.degrees(north_m / EARTH_RADIUS_M)
    d_lng = math.degrees(east_m / EARTH_RADIUS_M) / math.cos(math.radians(lat))
    return lat + d_lat, lng + d_lng


def eta_seconds(distance_m: float, ground_speed_kmh: float) -> Optional[float]:
    """
    Time to cover a distance at the current ground speed.

    Returns:
        Seconds, or None when the airship is too slow for a useful estimate.
    """
    speed = abs(ground_speed_kmh)
    if speed <= MIN_ETA_GROUND_SPEED_KMH:
        return None
    return distance_m / (speed / 3.6)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that a latitude/longitude pair is finite and in range."""
    return (
        math.isfinite(lat) and math.isfinite(lng) and
        abs(lat) <= 90.0 and abs(lng) <= 180.0
    )
