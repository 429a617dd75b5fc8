"""
Tests for status report formatting.
"""

import json

import pytest

from airship.report import (
    format_distance,
    format_duration,
    format_endurance,
    format_engine_power,
    format_eta,
    format_fuel,
    format_ground_speed,
    format_status,
    format_status_json,
    throttle_label,
)
from airship.simulation import SimulationEngine
from airship.wind import WindMode, WindState


@pytest.fixture
def snapshot():
    engine = SimulationEngine.spawn(
        0.0, 0.0, anchored=False, wind=WindState(force=3, direction=90, mode=WindMode.MANUAL)
    )
    engine.add_fuel(1000)
    engine.set_target(0.5, 0.5)
    engine.set_throttle(5)
    engine.run(300, tick_interval_s=1.0)
    return engine.get_snapshot()


class TestFormatters:
    """Tests for the individual formatters."""

    @pytest.mark.parametrize("meters,expected", [
        (0.0, "0 km 0 m"),
        (999.0, "0 km 999 m"),
        (12_345.6, "12 km 345 m"),
    ])
    def test_distance(self, meters, expected):
        assert format_distance(meters) == expected

    def test_fuel(self):
        assert format_fuel(1.23456) == "1.235"
        assert format_fuel(0) == "0.000"

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00:00"),
        (3661, "01:01:01"),
        (90_061, "1 d 1 h 1 min"),
    ])
    def test_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize("hours,expected", [
        (None, "∞"),
        (0.0, "00:00"),
        (1.5, "01:30"),
        (12.25, "12:15"),
    ])
    def test_endurance(self, hours, expected):
        assert format_endurance(hours) == expected

    @pytest.mark.parametrize("seconds,expected", [
        (None, "~ ∞"),
        (600, "~ 10 min"),
        (5400, "~ 1 h 30 min"),
    ])
    def test_eta(self, seconds, expected):
        assert format_eta(seconds) == expected

    def test_ground_speed(self):
        assert format_ground_speed(12.34) == "12.3 km/h"
        assert format_ground_speed(-12.34) == "← 12.3 km/h"

    def test_engine_power(self):
        assert format_engine_power(42.6) == "43%"
        assert format_engine_power(-42.6) == "-43%"
        assert format_engine_power(0.0) == "0%"

    @pytest.mark.parametrize("notch,expected", [
        (0, "STOP"),
        (3, "HALF"),
        (5, "FULL"),
        (-5, "ASTERN FULL"),
        (9, "STOP"),
    ])
    def test_throttle_label(self, notch, expected):
        assert throttle_label(notch) == expected


class TestStatusReport:
    """Tests for the full status block."""

    def test_text(self, snapshot):
        text = format_status(snapshot)
        assert "AIRSHIP STATUS" in text
        assert "T+00:05:00" in text
        assert "[FULL]" in text
        assert "Target:" in text
        assert "bearing" in text
        assert "manual" in text

    def test_without_target(self):
        engine = SimulationEngine.spawn(10.0, 20.0)
        text = format_status(engine.get_snapshot())
        assert "Target:" not in text
        assert "anchored" in text

    def test_json(self, snapshot):
        data = json.loads(format_status_json(snapshot))
        assert data["throttle"] == 5
        assert data["target"]["lat"] == 0.5
