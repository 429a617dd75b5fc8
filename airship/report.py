"""
Status Report formatting for the Airship Simulator.

Turns engine snapshots into human-readable text for the command-line
runner and any other text observer: odometer, fuel gauge with endurance,
voyage time, telegraph labels for the throttle, target bearing/ETA and
wind.
"""

from __future__ import annotations

import json
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

REPORT_WIDTH = 50
SEPARATOR_CHAR = "="

INFINITY_TEXT = "∞"

# Engine telegraph positions
THROTTLE_LABELS: dict[int, str] = {
    -5: "ASTERN FULL",
    -4: "ASTERN HALF",
    -3: "ASTERN SLOW",
    -2: "ASTERN DEAD SLOW",
    -1: "DEAD SLOW (astern)",
    0: "STOP",
    1: "DEAD SLOW",
    2: "SLOW",
    3: "HALF",
    4: "FULL",
    5: "FULL",
}


# =============================================================================
# FORMATTERS
# =============================================================================

def throttle_label(notch: int) -> str:
    """Telegraph label for a throttle notch."""
    return THROTTLE_LABELS.get(notch, "STOP")


def format_distance(meters: float) -> str:
    """Format a distance as whole kilometers and meters, e.g. '12 km 345 m'."""
    meters = max(0.0, meters)
    return f"{int(meters // 1000)} km {int(meters % 1000)} m"


def format_fuel(liters: float) -> str:
    """Format a fuel quantity with three decimals."""
    return f"{liters:.3f}"


def format_duration(total_seconds: float) -> str:
    """Format elapsed time as HH:MM:SS, or days/hours/minutes past a day."""
    total = int(max(0.0, total_seconds))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    if days > 0:
        return f"{days} d {hours} h {minutes} min"
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_endurance(hours: Optional[float]) -> str:
    """Format fuel endurance as HH:MM, or '∞' when unbounded."""
    if hours is None:
        return INFINITY_TEXT
    whole_hours = int(hours)
    minutes = int((hours - whole_hours) * 60)
    return f"{whole_hours:02d}:{minutes:02d}"


def format_eta(seconds: Optional[float]) -> str:
    """Format a time to target, '~ ∞' when not moving fast enough."""
    if seconds is None:
        return f"~ {INFINITY_TEXT}"
    hours, rest = divmod(int(seconds), 3600)
    minutes = rest // 60
    if hours > 0:
        return f"~ {hours} h {minutes} min"
    return f"~ {minutes} min"


def format_ground_speed(ground_speed: float) -> str:
    """Format ground speed, with a leading arrow when drifting backward."""
    if ground_speed >= 0:
        return f"{ground_speed:.1f} km/h"
    return f"← {abs(ground_speed):.1f} km/h"


def format_engine_power(engine_power: float) -> str:
    """Format engine power as a signed whole percentage."""
    sign = "" if engine_power >= 0 else "-"
    return f"{sign}{abs(round(engine_power))}%"


# =============================================================================
# STATUS REPORT
# =============================================================================

def format_status(snapshot: dict) -> str:
    """
    Render an engine snapshot as a multi-line status block.

    Args:
        snapshot: Dict from SimulationEngine.get_snapshot().

    Returns:
        Formatted text.
    """
    lines = []
    lines.append(SEPARATOR_CHAR * REPORT_WIDTH)
    lines.append(f"AIRSHIP STATUS  T+{format_duration(snapshot['timestamp'])}".center(REPORT_WIDTH))
    lines.append(SEPARATOR_CHAR * REPORT_WIDTH)

    position = snapshot['position']
    lines.append(f"Position:     {position['lat']:.5f}, {position['lng']:.5f}")

    target = snapshot.get('target')
    deviation = abs(round(target['course_deviation'])) if target else 0
    lines.append(f"Heading:      {round(snapshot['heading'])}° ({deviation}°)")
    lines.append(f"Ground speed: {format_ground_speed(snapshot['ground_speed'])}")
    lines.append(
        f"Engine:       {format_engine_power(snapshot['engine_power'])} "
        f"[{throttle_label(snapshot['throttle'])}]"
    )
    lines.append(f"Rudder:       {snapshot['rudder']:.1f}°")

    fuel = snapshot['fuel']
    lines.append(
        f"Diesel:       {format_fuel(fuel['burned_l'])} / {format_fuel(fuel['reserve_l'])} L "
        f"({format_endurance(fuel['endurance_h'])})"
    )
    lines.append(f"Travelled:    {format_distance(snapshot['distance_travelled_m'])}")

    if target:
        lines.append(
            f"Target:       {int(target['distance_m'] // 1000):04d} km "
            f"bearing {round(target['bearing'])}° {format_eta(target['eta_s'])}"
        )

    wind = snapshot['wind']
    lines.append(
        f"Wind:         force {wind['force']:.1f} toward {round(wind['direction'])}° "
        f"({wind['speed_mps'] * 3.6:.0f} km/h, {wind['mode']})"
    )

    modes = [name for name, active in snapshot['modes'].items() if active]
    lines.append(f"Modes:        {', '.join(modes) if modes else 'none'}")
    lines.append(f"Time warp:    {snapshot['time_warp']:g}x")

    lines.append(SEPARATOR_CHAR * REPORT_WIDTH)
    return "\n".join(lines)


def format_status_json(snapshot: dict) -> str:
    """Render an engine snapshot as indented JSON."""
    return json.dumps(snapshot, indent=2)
