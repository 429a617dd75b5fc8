"""
Steering Dynamics for the Airship Simulator.

The rudder commands a turn rate proportional to how much airflow the
fins see: a slow airship turns sluggishly, a fast one briskly. Angular
velocity slews toward the commanded rate at a fixed angular acceleration
and heading integrates it. Without steerage way the rudder has no
authority and any residual rotation dies away.
"""

from __future__ import annotations

from .navigation import normalize_angle
from .performance import MAX_SPEED_KMH
from .state import VehicleState


# =============================================================================
# CONSTANTS
# =============================================================================

# Turn rate per unit rudder at standstill and at full speed (deg/s)
MIN_TURN_RATE = 0.3
MAX_TURN_RATE = 3.0

# Angular acceleration limit (deg/s^2)
ANGULAR_ACCELERATION = 0.5

# Below this speed (km/h) the rudder has no authority
STEERAGE_SPEED = 0.1

# Per-tick decay of residual rotation without steerage, and its cutoff
ROTATION_DAMPING = 0.95
ROTATION_CUTOFF = 0.01


def turn_rate(speed: float) -> float:
    """Turn rate ceiling (deg/s per unit rudder) at the given speed."""
    return MIN_TURN_RATE + (abs(speed) / MAX_SPEED_KMH) * (MAX_TURN_RATE - MIN_TURN_RATE)


def update_steering(state: VehicleState, dt: float) -> None:
    """
    Advance angular velocity and heading by one step.

    Args:
        state: Vehicle state to update in place.
        dt: Simulated time step (seconds).
    """
    if abs(state.speed) <= STEERAGE_SPEED:
        state.angular_velocity *= ROTATION_DAMPING
        if abs(state.angular_velocity) < ROTATION_CUTOFF:
            state.angular_velocity = 0.0
        return

    target = state.rudder * turn_rate(state.speed)
    step = ANGULAR_ACCELERATION * dt
    if state.angular_velocity < target:
        state.angular_velocity = min(target, state.angular_velocity + step)
    elif state.angular_velocity > target:
        state.angular_velocity = max(target, state.angular_velocity - step)

    state.heading = normalize_angle(state.heading + state.angular_velocity * dt)
