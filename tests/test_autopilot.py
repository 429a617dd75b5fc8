"""
Tests for the autopilot controller.

Tests cover:
- Braking distance estimate
- Proportional rudder and its limits
- Throttle schedule (ahead, astern, stop)
- Availability conditions
"""

import pytest

from airship.autopilot import (
    ARRIVAL_RADIUS_M,
    braking_distance,
    compute_autopilot,
    rudder_command,
    throttle_command,
)
from airship.state import VehicleState


@pytest.fixture
def armed():
    """Airship at the origin, heading north, autopilot engaged toward the east."""
    return VehicleState(
        anchor_enabled=False,
        fuel_reserve=500.0,
        autopilot_enabled=True,
        has_target=True,
        target_lat=0.0,
        target_lng=0.1,
    )


class TestBrakingDistance:
    """Tests for braking_distance()."""

    def test_at_rest(self):
        assert braking_distance(0.0) == 0.0

    def test_ten_meters_per_second(self):
        """v^2 / 2a with a = 0.8 km/h/s."""
        assert braking_distance(36.0) == pytest.approx(225.0)

    def test_sign_ignored(self):
        assert braking_distance(-36.0) == pytest.approx(225.0)


class TestRudderCommand:
    """Tests for rudder_command()."""

    @pytest.mark.parametrize("error,expected", [
        (0.0, 0.0),
        (20.0, 0.2),
        (-35.0, -0.35),
        (90.0, 0.5),
        (-180.0, -0.5),
    ])
    def test_proportional_and_limited(self, error, expected):
        assert rudder_command(error) == pytest.approx(expected)


class TestThrottleCommand:
    """Tests for throttle_command()."""

    def test_stop_inside_arrival_circle(self):
        assert throttle_command(ARRIVAL_RADIUS_M - 1, 50.0) == 0

    def test_full_ahead_when_far(self):
        assert throttle_command(10_000.0, 0.0) == 5

    def test_full_astern_inside_braking_range(self):
        """At 36 km/h braking starts 725 m out."""
        assert throttle_command(700.0, 36.0) == -5
        assert throttle_command(750.0, 36.0) == 5

    def test_margin_applies_at_rest(self):
        """Even at rest the 500 m margin triggers astern."""
        assert throttle_command(400.0, 0.0) == -5


class TestComputeAutopilot:
    """Tests for compute_autopilot()."""

    def test_turns_toward_target(self, armed):
        command = compute_autopilot(armed)
        assert command.bearing_deg == pytest.approx(90.0)
        assert command.heading_error_deg == pytest.approx(90.0)
        assert command.rudder == pytest.approx(0.5)
        assert command.throttle == 5
        assert command.distance_m == pytest.approx(11_131.9, rel=1e-4)
        assert not command.arrived

    def test_arrived(self, armed):
        armed.target_lng = 0.0005
        command = compute_autopilot(armed)
        assert command.arrived
        assert command.throttle == 0

    def test_disengaged(self, armed):
        armed.autopilot_enabled = False
        assert compute_autopilot(armed) is None

    def test_no_target(self, armed):
        armed.has_target = False
        assert compute_autopilot(armed) is None

    def test_no_fuel(self, armed):
        armed.fuel_reserve = 0.0
        assert compute_autopilot(armed) is None
