"""
Tests for steering dynamics.

Tests cover:
- Speed-dependent turn rate
- Angular acceleration limit
- Heading integration and wrap-around
- Loss of rudder authority without steerage way
"""

import pytest

from airship.state import VehicleState
from airship.steering import turn_rate, update_steering


@pytest.fixture
def cruising():
    """Airship at full speed with hard right rudder."""
    return VehicleState(anchor_enabled=False, speed=135.0, rudder=0.5)


class TestTurnRate:
    """Tests for turn_rate()."""

    @pytest.mark.parametrize("speed,expected", [
        (0.0, 0.3),
        (135.0, 3.0),
        (-67.5, 1.65),
    ])
    def test_scales_with_speed(self, speed, expected):
        """Turn rate grows linearly with speed magnitude."""
        assert turn_rate(speed) == pytest.approx(expected)


class TestUpdateSteering:
    """Tests for update_steering()."""

    def test_angular_acceleration_limited(self, cruising):
        """Rotation builds up at 0.5 deg/s^2."""
        update_steering(cruising, 1.0)
        assert cruising.angular_velocity == pytest.approx(0.5)
        assert cruising.heading == pytest.approx(0.5)

    def test_reaches_commanded_rate(self, cruising):
        """After three seconds the full 1.5 deg/s is reached."""
        for _ in range(3):
            update_steering(cruising, 1.0)
        assert cruising.angular_velocity == pytest.approx(1.5)
        assert cruising.heading == pytest.approx(3.0)

        update_steering(cruising, 1.0)
        assert cruising.angular_velocity == pytest.approx(1.5)

    def test_wraps_through_north(self, cruising):
        """Turning right through 360 wraps to a small heading."""
        cruising.heading = 359.8
        cruising.angular_velocity = 1.5
        update_steering(cruising, 1.0)
        assert cruising.heading == pytest.approx(1.3)

    def test_wraps_left_through_north(self, cruising):
        """Turning left through 0 wraps to a large heading."""
        cruising.heading = 0.2
        cruising.rudder = -0.5
        cruising.angular_velocity = -1.5
        update_steering(cruising, 1.0)
        assert cruising.heading == pytest.approx(358.7)

    def test_centred_rudder_stops_rotation(self, cruising):
        """Centring the rudder slews rotation back toward zero."""
        cruising.rudder = 0.0
        cruising.angular_velocity = 1.0
        update_steering(cruising, 1.0)
        assert cruising.angular_velocity == pytest.approx(0.5)

    def test_no_steerage_damps_rotation(self):
        """Without steerage way rotation decays and heading holds."""
        state = VehicleState(speed=0.05, rudder=0.5, angular_velocity=1.0, heading=45.0)
        update_steering(state, 1.0)
        assert state.angular_velocity == pytest.approx(0.95)
        assert state.heading == 45.0

    def test_no_steerage_cutoff(self):
        """Residual rotation below the cutoff is zeroed."""
        state = VehicleState(speed=0.0, angular_velocity=0.0105)
        update_steering(state, 1.0)
        assert state.angular_velocity == 0.0

    def test_heading_always_normalised(self, cruising):
        """Heading stays in [0, 360) over a long turn."""
        for _ in range(2000):
            update_steering(cruising, 0.5)
            assert 0.0 <= cruising.heading < 360.0
