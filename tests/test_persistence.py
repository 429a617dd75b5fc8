"""
Tests for session persistence and bootstrap parameters.

Tests cover:
- Record round trip through JSON
- Lenient per-field fallback for malformed records
- Rejection of records without a usable position
- Mode conflict clean-up (anchored helm, autopilot without target)
- Bootstrap key/value parsing
"""

import json

import pytest

from airship.persistence import (
    from_record,
    load_record,
    parse_bootstrap,
    save_record,
    to_record,
)
from airship.state import VehicleState
from airship.wind import WindMode, WindState


@pytest.fixture
def underway():
    """An airship mid-voyage with a target and the autopilot engaged."""
    return VehicleState(
        lat=55.75,
        lng=37.62,
        heading=271.5,
        speed=88.0,
        ground_speed=92.3,
        engine_power=60.0,
        throttle=3,
        rudder=-0.2,
        fuel_reserve=4200.0,
        total_fuel_burned=311.7,
        total_distance_m=48_210.0,
        anchor_enabled=False,
        autopilot_enabled=True,
        has_target=True,
        target_lat=56.0,
        target_lng=36.0,
        virtual_elapsed_s=1800.0,
        wind_last_virtual_update=1800.0,
        virtual_start_time=1_700_000_000.0,
    )


@pytest.fixture
def wind():
    return WindState(force=4.2, direction=135.0, mode=WindMode.MANUAL)


# =============================================================================
# RECORD TESTS
# =============================================================================

class TestRecord:
    """Tests for to_record()/from_record()."""

    def test_round_trip_through_json(self, underway, wind):
        record = json.loads(json.dumps(to_record(underway, wind)))
        vehicle, restored_wind = from_record(record)
        assert vehicle == underway
        assert restored_wind == wind

    def test_wind_keys(self, underway, wind):
        record = to_record(underway, wind)
        assert record["wind_force"] == 4.2
        assert record["wind_direction"] == 135.0
        assert record["wind_mode"] == "manual"

    @pytest.mark.parametrize("record", [
        None,
        [],
        {},
        {"lat": 10.0},
        {"lat": "north", "lng": 20.0},
        {"lat": 95.0, "lng": 20.0},
        {"lat": 10.0, "lng": float("nan")},
        {"lat": True, "lng": 20.0},
    ])
    def test_unusable_position(self, record):
        assert from_record(record) is None

    def test_minimal_record_uses_spawn_defaults(self):
        vehicle, restored_wind = from_record({"lat": 10.0, "lng": 20.0})
        assert vehicle == VehicleState.spawn(10.0, 20.0)
        assert restored_wind == WindState()

    def test_malformed_fields_fall_back(self):
        vehicle, _ = from_record({
            "lat": 10.0,
            "lng": 20.0,
            "heading": "north",
            "speed": None,
            "throttle": 7,
            "fuel_reserve": -50,
            "anchor_enabled": False,
            "fast_brake_enabled": "yes",
        })
        assert vehicle.heading == 0.0
        assert vehicle.speed == 0.0
        assert vehicle.throttle == 5
        assert vehicle.fuel_reserve == 0.0
        assert not vehicle.anchor_enabled
        assert not vehicle.fast_brake_enabled

    def test_out_of_range_fields_clamped(self):
        vehicle, restored_wind = from_record({
            "lat": 10.0,
            "lng": 20.0,
            "anchor_enabled": False,
            "heading": -30.0,
            "rudder": 2.0,
            "engine_power": -180.0,
            "fuel_reserve": 1e9,
            "wind_force": 30,
            "wind_direction": 400,
            "wind_mode": "bogus",
        })
        assert vehicle.heading == 330.0
        assert vehicle.rudder == 0.5
        assert vehicle.engine_power == -100.0
        assert vehicle.fuel_reserve == 88_000.0
        assert restored_wind.force == 12.0
        assert restored_wind.direction == 40.0
        assert restored_wind.mode is WindMode.AUTO

    def test_target_flag_without_coordinates(self):
        vehicle, _ = from_record({
            "lat": 10.0,
            "lng": 20.0,
            "anchor_enabled": False,
            "has_target": True,
            "target_lat": None,
            "autopilot_enabled": True,
        })
        assert not vehicle.has_target
        assert not vehicle.autopilot_enabled

    def test_anchored_record_secures_helm(self, underway, wind):
        record = to_record(underway, wind)
        record["anchor_enabled"] = True
        record["speed"] = 0.0
        record["ground_speed"] = 2.0
        vehicle, _ = from_record(record)
        assert vehicle.anchor_enabled
        assert vehicle.throttle == 0
        assert vehicle.rudder == 0.0
        assert not vehicle.autopilot_enabled

    def test_moving_record_not_anchored(self):
        """A record underway loads with the anchor up, even without the key."""
        vehicle, _ = from_record({"lat": 0.0, "lng": 0.0, "speed": 120, "ground_speed": 120})
        assert not vehicle.anchor_enabled
        assert vehicle.speed == 120.0

    def test_drifting_record_not_anchored(self):
        """Ground speed alone above the anchor limit also raises the anchor."""
        vehicle, _ = from_record({
            "lat": 0.0, "lng": 0.0, "anchor_enabled": True, "throttle": 2,
            "speed": 0.0, "ground_speed": -20.0,
        })
        assert not vehicle.anchor_enabled
        assert vehicle.throttle == 2

    def test_throttle_rounded(self):
        vehicle, _ = from_record({"lat": 0.0, "lng": 0.0, "anchor_enabled": False, "throttle": -2.7})
        assert vehicle.throttle == -3


class TestRecordFiles:
    """Tests for save_record()/load_record()."""

    def test_save_and_load(self, tmp_path, underway, wind):
        path = tmp_path / "session.json"
        save_record(str(path), underway, wind)
        vehicle, restored_wind = load_record(str(path))
        assert vehicle == underway
        assert restored_wind == wind

    def test_missing_file(self, tmp_path):
        assert load_record(str(tmp_path / "nothing.json")) is None

    def test_corrupted_file(self, tmp_path, capsys):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert load_record(str(path)) is None
        assert "[PERSIST]" in capsys.readouterr().out


# =============================================================================
# BOOTSTRAP TESTS
# =============================================================================

class TestBootstrap:
    """Tests for parse_bootstrap()."""

    def test_full_parameters(self):
        state = parse_bootstrap({
            "lat": "55.75", "lng": "37.62", "hdg": "90", "spd": "abc",
            "thr": "3", "rud": "0.2", "eng": "40",
            "tgt": "1", "tlt": "56", "tlg": "38", "apl": "1",
        })
        assert state.lat == 55.75
        assert state.lng == 37.62
        assert state.heading == 90.0
        assert state.speed == 0.0
        assert state.throttle == 3
        assert state.rudder == pytest.approx(0.2)
        assert state.engine_power == 40.0
        assert state.has_target
        assert (state.target_lat, state.target_lng) == (56.0, 38.0)
        assert state.autopilot_enabled
        assert not state.anchor_enabled

    @pytest.mark.parametrize("params", [
        {},
        {"lat": "10"},
        {"lat": "91", "lng": "0"},
        {"lat": "10", "lng": "nan"},
        {"lat": "ten", "lng": "0"},
    ])
    def test_unusable_position(self, params):
        assert parse_bootstrap(params) is None

    def test_invalid_target_dropped(self):
        state = parse_bootstrap({
            "lat": "10", "lng": "20", "tgt": "1", "tlt": "100", "tlg": "0", "apl": "1",
        })
        assert not state.has_target
        assert not state.autopilot_enabled

    def test_flags_only_on_one(self):
        state = parse_bootstrap({"lat": "10", "lng": "20", "fbr": "true", "tgt": "yes"})
        assert not state.fast_brake_enabled
        assert not state.has_target

    def test_ranges_clamped(self):
        state = parse_bootstrap({
            "lat": "10", "lng": "20", "thr": "9", "eng": "150", "hdg": "-90", "rud": "3",
        })
        assert state.throttle == 5
        assert state.engine_power == 100.0
        assert state.heading == 270.0
        assert state.rudder == 0.5

    def test_voyage_start(self):
        state = parse_bootstrap({"lat": "10", "lng": "20", "vst": "1700000000"})
        assert state.virtual_start_time == 1_700_000_000.0
        state = parse_bootstrap({"lat": "10", "lng": "20", "vst": "0"})
        assert state.virtual_start_time is None

    def test_anchored(self):
        state = parse_bootstrap({"lat": "10", "lng": "20", "anc": "1", "thr": "4"})
        assert state.anchor_enabled
        assert state.throttle == 0

    def test_anchor_refused_at_speed(self):
        """A moored flag on a fast airship is dropped rather than trusted."""
        state = parse_bootstrap({"lat": "0", "lng": "0", "spd": "120", "anc": "1", "thr": "5"})
        assert not state.anchor_enabled
        assert state.speed == 120.0
        assert state.throttle == 5

    def test_anchor_kept_at_low_speed(self):
        state = parse_bootstrap({"lat": "0", "lng": "0", "spd": "4", "anc": "1"})
        assert state.anchor_enabled

    @pytest.mark.parametrize("raw,expected", [
        ("-2.7", -3),
        ("2.4", 2),
        ("3", 3),
    ])
    def test_throttle_rounded_like_records(self, raw, expected):
        state = parse_bootstrap({"lat": "0", "lng": "0", "thr": raw})
        assert state.throttle == expected
