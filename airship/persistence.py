"""
Session persistence and bootstrap for the Airship Simulator.

Two inputs can start a session besides a fresh spawn:

- A persisted record: the flat dictionary written by ``to_record``
  (vehicle state plus wind), typically saved as JSON between sessions.
- Bootstrap parameters: string key/value pairs such as a shared link's
  query string (``lat``, ``lng``, ``hdg``, ``spd``, ...).

Both are parsed leniently. Every field that is missing or malformed falls
back to its spawn default on its own; only an unusable position (missing,
non-numeric, or out of range) rejects the whole input, in which case the
loaders return None and the caller falls back to another session source.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from .navigation import is_valid_coordinate, normalize_angle
from .state import (
    ANCHOR_MAX_GROUND_SPEED_KMH,
    MAX_ENGINE_POWER,
    MAX_FUEL_CAPACITY_L,
    MAX_RUDDER_COMMAND,
    MAX_THROTTLE_NOTCH,
    VehicleState,
)
from .wind import WindMode, WindState


# Record keys for the wind part of a persisted record
WIND_FORCE_KEY = "wind_force"
WIND_DIRECTION_KEY = "wind_direction"
WIND_MODE_KEY = "wind_mode"


# =============================================================================
# FIELD COERCION
# =============================================================================

def _number(value: Any, default: Optional[float]) -> Optional[float]:
    """A finite int/float (not bool), or the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def _parse_float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _parse_int(raw: Optional[str]) -> Optional[int]:
    value = _parse_float(raw)
    return int(round(value)) if value is not None else None


def _sanitize(state: VehicleState) -> VehicleState:
    """Pull every field back into its valid range and fix mode conflicts."""
    state.heading = normalize_angle(state.heading)
    state.engine_power = _clamp(state.engine_power, MAX_ENGINE_POWER)
    state.throttle = int(_clamp(state.throttle, MAX_THROTTLE_NOTCH))
    state.rudder = _clamp(state.rudder, MAX_RUDDER_COMMAND)
    state.prop_rotation_angle = normalize_angle(state.prop_rotation_angle)
    state.fuel_reserve = max(0.0, min(MAX_FUEL_CAPACITY_L, state.fuel_reserve))
    state.total_fuel_burned = max(0.0, state.total_fuel_burned)
    state.total_distance_m = max(0.0, state.total_distance_m)
    state.virtual_elapsed_s = max(0.0, state.virtual_elapsed_s)
    state.wind_last_virtual_update = max(
        0.0, min(state.virtual_elapsed_s, state.wind_last_virtual_update)
    )

    if state.has_target and not (
        state.target_lat is not None and state.target_lng is not None and
        is_valid_coordinate(state.target_lat, state.target_lng)
    ):
        state.has_target = False
    if not state.has_target:
        state.target_lat = None
        state.target_lng = None
        state.autopilot_enabled = False

    # An anchor cannot hold an airship that is still underway
    if state.anchor_enabled and (
        abs(state.speed) > ANCHOR_MAX_GROUND_SPEED_KMH or
        abs(state.ground_speed) > ANCHOR_MAX_GROUND_SPEED_KMH
    ):
        state.anchor_enabled = False

    if state.anchor_enabled:
        state.throttle = 0
        state.rudder = 0.0
        state.autopilot_enabled = False
        state.fast_brake_enabled = False

    return state


# =============================================================================
# PERSISTED RECORD
# =============================================================================

def to_record(vehicle: VehicleState, wind: WindState) -> dict[str, Any]:
    """Flatten vehicle and wind state into a JSON-serialisable record."""
    record = asdict(vehicle)
    record[WIND_FORCE_KEY] = wind.force
    record[WIND_DIRECTION_KEY] = wind.direction
    record[WIND_MODE_KEY] = wind.mode.value
    return record


def from_record(record: Any) -> Optional[tuple[VehicleState, WindState]]:
    """
    Rebuild vehicle and wind state from a persisted record.

    Args:
        record: Dictionary previously produced by ``to_record`` (possibly
            edited, truncated or corrupted).

    Returns:
        (vehicle, wind), or None if the record has no usable position.
    """
    if not isinstance(record, Mapping):
        return None

    lat = _number(record.get("lat"), None)
    lng = _number(record.get("lng"), None)
    if lat is None or lng is None or not is_valid_coordinate(lat, lng):
        return None

    defaults = VehicleState.spawn(lat, lng)
    values: dict[str, Any] = {}
    for f in fields(VehicleState):
        default = getattr(defaults, f.name)
        raw = record.get(f.name, default)
        if isinstance(default, bool):
            values[f.name] = _flag(raw, default)
        elif f.name == "throttle":
            number = _number(raw, None)
            values[f.name] = int(round(number)) if number is not None else default
        elif default is None:
            values[f.name] = _number(raw, None)
        else:
            values[f.name] = _number(raw, default)

    vehicle = _sanitize(VehicleState(**values))

    wind = WindState(
        force=_number(record.get(WIND_FORCE_KEY), 0.0),
        direction=_number(record.get(WIND_DIRECTION_KEY), 0.0),
        mode=WindMode.parse(record.get(WIND_MODE_KEY)) or WindMode.AUTO,
    )
    wind.clamp()
    return vehicle, wind


def save_record(path: str, vehicle: VehicleState, wind: WindState) -> None:
    """Write a persisted record as JSON."""
    with open(path, "w") as f:
        json.dump(to_record(vehicle, wind), f, indent=2)


def load_record(path: str) -> Optional[tuple[VehicleState, WindState]]:
    """
    Load a persisted record from a JSON file.

    Returns:
        (vehicle, wind), or None if the file is missing, unreadable, or
        the record has no usable position.
    """
    record_path = Path(path)
    if not record_path.exists():
        return None
    try:
        with open(record_path) as f:
            record = json.load(f)
    except (OSError, ValueError) as e:
        print(f"[PERSIST] Could not read saved session {path}: {e}")
        return None
    return from_record(record)


# =============================================================================
# BOOTSTRAP PARAMETERS
# =============================================================================

def parse_bootstrap(params: Mapping[str, str]) -> Optional[VehicleState]:
    """
    Build a vehicle state from bootstrap key/value parameters.

    Keys:
        lat, lng: Position (required, degrees).
        hdg: Heading. spd: Speed (km/h). thr: Throttle notch.
        rud: Rudder command. eng: Engine power (%).
        tgt: "1" if a target follows in tlt/tlg.
        apl: "1" to engage the autopilot. fbr: "1" for fast brake.
        anc: "1" to start moored.
        vst: Voyage start time (epoch seconds).

    Returns:
        The vehicle state, or None if lat/lng are missing or out of range.
    """
    lat = _parse_float(params.get("lat"))
    lng = _parse_float(params.get("lng"))
    if lat is None or lng is None or not is_valid_coordinate(lat, lng):
        return None

    def safe_float(key: str, default: float) -> float:
        value = _parse_float(params.get(key))
        return default if value is None else value

    def safe_int(key: str, default: int) -> int:
        value = _parse_int(params.get(key))
        return default if value is None else value

    def safe_bool(key: str) -> bool:
        return params.get(key) == "1"

    state = VehicleState.spawn(lat, lng, anchored=safe_bool("anc"))
    state.heading = safe_float("hdg", 0.0)
    state.speed = safe_float("spd", 0.0)
    state.throttle = safe_int("thr", 0)
    state.rudder = safe_float("rud", 0.0)
    state.engine_power = safe_float("eng", 0.0)

    if safe_bool("tgt"):
        target_lat = _parse_float(params.get("tlt"))
        target_lng = _parse_float(params.get("tlg"))
        if (target_lat is not None and target_lng is not None and
                is_valid_coordinate(target_lat, target_lng)):
            state.has_target = True
            state.target_lat = target_lat
            state.target_lng = target_lng

    state.autopilot_enabled = safe_bool("apl")
    state.fast_brake_enabled = safe_bool("fbr")

    start = safe_int("vst", 0)
    state.virtual_start_time = float(start) if start > 0 else None

    return _sanitize(state)
