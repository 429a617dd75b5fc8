"""
Propulsion Dynamics for the Airship Simulator.

Turns the discrete throttle notch into motion:

1. Engine power ramps toward throttle x 20 % at 1 %/s. If the commanded
   direction is opposite to the current power, the engine must first
   spool down through idle before it can reverse.
2. Fuel burns at the Performance Table rate for the current power. An
   empty tank stalls the engine (throttle and power forced to zero).
3. Target speed is the table speed for the current power, signed by the
   power. Speed approaches it with an acceleration that depends on the
   regime: slow in cruise, moderate when coasting, fast when the engine
   works against the current motion (braking or reversing).
4. With the engine idle, linear drag bleeds off residual speed.

Also carries the cosmetic propeller animation, which is driven purely by
engine power.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .navigation import normalize_angle
from .performance import IDLE_POWER_THRESHOLD, lookup
from .state import MAX_ENGINE_POWER, VehicleState


# =============================================================================
# CONSTANTS
# =============================================================================

# Engine power slew rate (% per simulated second)
ENGINE_POWER_RATE = 1.0

# Engine power per throttle notch (%)
POWER_PER_NOTCH = 20.0

# Speed response (km/h per simulated second)
CRUISE_ACCELERATION = 0.08
COAST_ACCELERATION = 0.3
BRAKING_ACCELERATION = 0.8
IDLE_DRAG = 0.3

# Speed counts as matched within this band (km/h)
SPEED_MATCH_TOLERANCE = 0.01

# Residual speed below which drag stops acting (km/h)
DRAG_CUTOFF_SPEED = 0.1

# Propeller RPM per percent of engine power
PROP_RPM_PER_POWER = 16.5


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


# =============================================================================
# ENGINE POWER
# =============================================================================

def target_engine_power(throttle: int) -> float:
    """Engine power (%) a throttle notch asks for."""
    return max(-MAX_ENGINE_POWER, min(MAX_ENGINE_POWER, throttle * POWER_PER_NOTCH))


def ramp_engine_power(engine_power: float, throttle: int, dt: float) -> float:
    """
    Advance engine power one step toward the throttle setting.

    Args:
        engine_power: Current engine power (%).
        throttle: Commanded notch.
        dt: Simulated time step (seconds).

    Returns:
        New engine power (%).
    """
    step = ENGINE_POWER_RATE * dt

    # Reversal: spool down through idle first
    if _sign(engine_power) != _sign(throttle) and engine_power != 0:
        if engine_power > 0:
            engine_power = max(0.0, engine_power - step)
        else:
            engine_power = min(0.0, engine_power + step)
        if abs(engine_power) <= IDLE_POWER_THRESHOLD:
            engine_power = 0.0
        return engine_power

    target = target_engine_power(throttle)
    if engine_power < target:
        return min(target, engine_power + step)
    if engine_power > target:
        return max(target, engine_power - step)
    return engine_power


# =============================================================================
# FUEL
# =============================================================================

@dataclass
class FuelBurn:
    """
    Result of one step of fuel accounting.

    Attributes:
        fuel_used_l: Liters consumed this step.
        stalled: True if the tank ran dry and the engine stopped.
    """
    fuel_used_l: float = 0.0
    stalled: bool = False


def burn_fuel(state: VehicleState, dt: float) -> FuelBurn:
    """
    Consume fuel for one step and stall the engine on an empty tank.

    Fuel only burns while a throttle notch is set, the engine is turning
    and there is fuel left.
    """
    if state.throttle == 0 or state.engine_power == 0 or state.fuel_reserve <= 0:
        return FuelBurn()

    fuel_used = lookup(abs(state.engine_power)).fuel_rate_lph / 3600.0 * dt

    if state.fuel_reserve >= fuel_used:
        state.fuel_reserve -= fuel_used
        state.total_fuel_burned += fuel_used
        return FuelBurn(fuel_used_l=fuel_used)

    # Last drops go into the engine, then it stalls
    fuel_used = state.fuel_reserve
    state.total_fuel_burned += fuel_used
    state.fuel_reserve = 0.0
    state.throttle = 0
    state.engine_power = 0.0
    return FuelBurn(fuel_used_l=fuel_used, stalled=True)


# =============================================================================
# SPEED
# =============================================================================

def target_speed(engine_power: float) -> float:
    """Steady-state speed (km/h) for the engine power, signed by the power."""
    return _sign(engine_power) * lookup(abs(engine_power)).speed_kmh


def speed_response(engine_power: float, speed: float) -> float:
    """
    Acceleration (km/h/s) used to approach the target speed.

    - engine idle: coasting response
    - engine working against the motion: braking response
    - otherwise: cruise response
    """
    if abs(engine_power) < IDLE_POWER_THRESHOLD:
        return COAST_ACCELERATION
    if (engine_power < 0 and speed > 0) or (engine_power > 0 and speed < 0):
        return BRAKING_ACCELERATION
    return CRUISE_ACCELERATION


def ramp_speed(speed: float, engine_power: float, dt: float) -> float:
    """Advance speed one step toward the engine's steady-state speed."""
    goal = target_speed(engine_power)
    if abs(speed - goal) <= SPEED_MATCH_TOLERANCE:
        return goal

    step = speed_response(engine_power, speed) * dt
    if speed < goal:
        return min(goal, speed + step)
    return max(goal, speed - step)


def apply_drag(speed: float, engine_power: float, dt: float) -> float:
    """Bleed off residual speed while the engine is idle."""
    if abs(engine_power) >= IDLE_POWER_THRESHOLD or abs(speed) <= DRAG_CUTOFF_SPEED:
        return speed
    drag = IDLE_DRAG * dt
    if speed > 0:
        return max(0.0, speed - drag)
    return min(0.0, speed + drag)


# =============================================================================
# PROPELLER
# =============================================================================

def propeller_rpm(engine_power: float) -> float:
    """Signed propeller RPM for an engine power (0 when idle)."""
    if abs(engine_power) < IDLE_POWER_THRESHOLD:
        return 0.0
    return engine_power * PROP_RPM_PER_POWER


def advance_propeller(angle: float, engine_power: float, dt: float) -> float:
    """Rotate the propeller by one step, returning the new angle in [0, 360)."""
    rpm = propeller_rpm(engine_power)
    if rpm == 0:
        return angle
    degrees_per_second = abs(rpm) * 360.0 / 60.0
    return normalize_angle(angle + math.copysign(degrees_per_second * dt, rpm))


# =============================================================================
# COMBINED UPDATE
# =============================================================================

def update_propulsion(state: VehicleState, dt: float) -> FuelBurn:
    """
    Run one propulsion step on the vehicle state.

    Order: engine power ramp, fuel burn (may stall), speed ramp, idle drag.

    Args:
        state: Vehicle state to update in place.
        dt: Simulated time step (seconds).

    Returns:
        The fuel accounting for the step.
    """
    state.engine_power = ramp_engine_power(state.engine_power, state.throttle, dt)
    burn = burn_fuel(state, dt)
    state.speed = ramp_speed(state.speed, state.engine_power, dt)
    state.speed = apply_drag(state.speed, state.engine_power, dt)
    return burn
