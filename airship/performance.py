"""
Engine Performance Table for the Airship Simulator.

Converts engine power (percent of rated) into diesel consumption and the
steady-state airspeed that power sustains. The table comes from the
engine calibration runs; values between calibration points are linearly
interpolated, and an idle point (0%, 0 L/h, 0 km/h) anchors the bottom so
the curve is continuous from zero.

The same interpolation serves both the fuel burn and the speed target so
the two can never disagree about the engine's operating point.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np


# =============================================================================
# CALIBRATION DATA
# =============================================================================

# (power %, fuel L/h, speed km/h)
FUEL_CONSUMPTION_TABLE: tuple[tuple[float, float, float], ...] = (
    (10, 85, 63),
    (20, 170, 79),
    (30, 254, 90),
    (40, 339, 100),
    (50, 424, 107),
    (60, 508, 114),
    (70, 593, 120),
    (80, 678, 125),
    (90, 762, 130),
    (100, 847, 135),
)

_POWER_POINTS = np.array([0.0] + [row[0] for row in FUEL_CONSUMPTION_TABLE], dtype=float)
_FUEL_POINTS = np.array([0.0] + [row[1] for row in FUEL_CONSUMPTION_TABLE], dtype=float)
_SPEED_POINTS = np.array([0.0] + [row[2] for row in FUEL_CONSUMPTION_TABLE], dtype=float)

# Top of the table
MAX_SPEED_KMH = float(_SPEED_POINTS[-1])
MAX_FUEL_RATE_LPH = float(_FUEL_POINTS[-1])

# Below this much power the engine is considered stopped
IDLE_POWER_THRESHOLD = 0.1

# Endurance estimates longer than this are reported as unbounded
MAX_ENDURANCE_HOURS = 24.0


class PerformancePoint(NamedTuple):
    """Engine operating point: fuel burn (L/h) and steady speed (km/h)."""
    fuel_rate_lph: float
    speed_kmh: float


def lookup(power_percent: float) -> PerformancePoint:
    """
    Look up fuel rate and steady-state speed for an engine power.

    Args:
        power_percent: Engine power magnitude (percent). Values at or below
            zero give (0, 0); values at or above 100 give the top entry.

    Returns:
        PerformancePoint(fuel_rate_lph, speed_kmh)
    """
    if not power_percent > 0:
        return PerformancePoint(0.0, 0.0)
    if power_percent >= _POWER_POINTS[-1]:
        return PerformancePoint(MAX_FUEL_RATE_LPH, MAX_SPEED_KMH)

    fuel_rate = float(np.interp(power_percent, _POWER_POINTS, _FUEL_POINTS))
    speed = float(np.interp(power_percent, _POWER_POINTS, _SPEED_POINTS))
    return PerformancePoint(fuel_rate, speed)


def fuel_rate(power_percent: float) -> float:
    """Fuel consumption in L/h at the given power magnitude."""
    return lookup(power_percent).fuel_rate_lph


def steady_speed(power_percent: float) -> float:
    """Steady-state airspeed in km/h at the given power magnitude."""
    return lookup(power_percent).speed_kmh


def fuel_endurance_hours(fuel_reserve_l: float, engine_power: float) -> Optional[float]:
    """
    Estimate how long the remaining fuel lasts at the current power.

    Args:
        fuel_reserve_l: Fuel remaining (liters).
        engine_power: Current engine power (percent, sign ignored).

    Returns:
        Hours of running time, 0.0 for an empty tank, or None when the
        engine is idle or the estimate exceeds a day.
    """
    if fuel_reserve_l <= 0:
        return 0.0

    power = abs(engine_power)
    if power < IDLE_POWER_THRESHOLD:
        return None

    rate = fuel_rate(power)
    if rate <= 0:
        return None

    hours = fuel_reserve_l / rate
    if hours > MAX_ENDURANCE_HOURS:
        return None
    return hours
