#!/usr/bin/env python3
"""
Simulation Engine for the Airship Simulator.

This module implements the tick orchestrator that:
- Advances one airship and the wind by one step per external clock tick
- Scales wall-clock time by a time-warp factor into simulated time
- Enforces the interlocks (empty tank, anchor, fast brake, autopilot)
- Accepts operator commands between ticks, refusing those that violate
  an interlock
- Publishes a read-only snapshot and an event log for observers

The engine is passive: it never schedules itself. The caller supplies the
wall-clock dt of each tick (see clock.TickClock for a timestamp driver),
which makes every run deterministic and replayable for a given seed.

Tick order:
    1. empty tank stops the engine
    2. advance virtual time
    3. automatic wind update (every 60 virtual seconds)
    4. fast brake interlock
    5. autopilot (may override throttle and rudder)
    6. propulsion (engine power, fuel, speed, drag)
    7. steering (angular velocity, heading)
    8. propeller animation
    9. wind drift and ground speed
   10. position and odometer
   11. snapshot to observers
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional

from .autopilot import compute_autopilot
from .config import TIME_WARP_STEPS, SimulationConfig, is_valid_time_warp
from .kinematics import update_ground_track
from .navigation import bearing, distance, eta_seconds, heading_error, is_valid_coordinate
from .performance import fuel_endurance_hours
from .propulsion import advance_propeller, propeller_rpm, update_propulsion
from .state import (
    ANCHOR_MAX_GROUND_SPEED_KMH,
    MAX_FUEL_CAPACITY_L,
    MAX_RUDDER_INPUT,
    MAX_THROTTLE_NOTCH,
    RUDDER_SCALE,
    VehicleState,
)
from .steering import STEERAGE_SPEED, update_steering
from .wind import RandomSource, WindMode, WindModel, WindState


# =============================================================================
# CONSTANTS
# =============================================================================

# Fast brake holds full astern above this speed and releases at or below it (km/h)
FAST_BRAKE_RELEASE_SPEED_KMH = 5.0


# =============================================================================
# EVENT TYPES
# =============================================================================

class SimulationEventType(Enum):
    """Types of events that can occur during simulation."""
    # Session flow
    SIMULATION_STARTED = auto()
    SIMULATION_PAUSED = auto()
    SIMULATION_RESUMED = auto()

    # Commands
    COMMAND_ACCEPTED = auto()
    COMMAND_REJECTED = auto()

    # Fuel
    FUEL_EXHAUSTED = auto()
    REFUELED = auto()

    # Environment
    WIND_CHANGED = auto()

    # Modes and navigation
    FAST_BRAKE_RELEASED = auto()
    AUTOPILOT_ENGAGED = auto()
    AUTOPILOT_DISENGAGED = auto()
    TARGET_SET = auto()
    TARGET_CLEARED = auto()
    TARGET_REACHED = auto()
    ANCHOR_DROPPED = auto()
    ANCHOR_RAISED = auto()


class RejectionReason(Enum):
    """Why a command was refused."""
    ANCHORED = "anchored"
    NO_FUEL = "no_fuel"
    NO_TARGET = "no_target"
    SPEED_TOO_HIGH = "speed_too_high"
    SPEED_TOO_LOW = "speed_too_low"
    INVALID_VALUE = "invalid_value"


@dataclass
class SimulationEvent:
    """
    An event that occurs during simulation.

    Attributes:
        event_type: The type of event.
        timestamp: Virtual time when the event occurred (seconds).
        command: Name of the command involved (if applicable).
        data: Additional event-specific data.
    """
    event_type: SimulationEventType
    timestamp: float
    command: Optional[str] = None
    data: dict = field(default_factory=dict)

    def __str__(self) -> str:
        command_str = f" {self.command}" if self.command else ""
        reason = self.data.get('reason')
        reason_str = f" ({reason})" if reason else ""
        return f"T+{self.timestamp:.1f}s {self.event_type.name}{command_str}{reason_str}"


def _as_number(value: Any) -> Optional[float]:
    """A finite number from a command argument, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# =============================================================================
# SIMULATION ENGINE
# =============================================================================

class SimulationEngine:
    """
    Single-airship simulation engine.

    Usage:
        engine = SimulationEngine.spawn(55.75, 37.62, seed=42)
        engine.add_fuel(1000)
        engine.set_anchor(False)
        engine.set_throttle(3)
        for _ in range(1200):
            engine.tick(0.05)
        print(engine.get_snapshot())

    Attributes:
        vehicle: The airship state, owned by the engine.
        wind: The wind state, shared with the wind model.
        wind_model: Evolves the wind in auto mode.
        time_warp: Simulated seconds per wall-clock second.
        events: Log of simulation events.
    """

    def __init__(
        self,
        vehicle: VehicleState,
        wind: Optional[WindState] = None,
        time_warp: float = 1.0,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None
    ) -> None:
        """
        Initialize the engine around an existing vehicle state.

        Args:
            vehicle: Vehicle state to simulate (spawned or loaded).
            wind: Initial wind (default calm, auto mode).
            time_warp: Initial time-warp factor; must be an allowed step.
            seed: Seed for the wind random source.
            rng: Explicit random source (overrides seed).
        """
        if not is_valid_time_warp(time_warp):
            raise ValueError(f"Time warp {time_warp} is not one of {list(TIME_WARP_STEPS)}")

        self.vehicle = vehicle
        self.wind = wind if wind is not None else WindState()
        self.wind_model = WindModel(self.wind, rng if rng is not None else random.Random(seed))
        self.time_warp = float(time_warp)

        # Event log
        self.events: list[SimulationEvent] = []

        # Event callbacks (for external observers)
        self._event_callbacks: list[Callable[[SimulationEvent], None]] = []

        # Snapshot callbacks, called once at the end of every tick
        self._snapshot_callbacks: list[Callable[[dict], None]] = []

        self._paused = False
        self._target_reached = False

        self._log_event(SimulationEventType.SIMULATION_STARTED, data={
            'lat': vehicle.lat,
            'lng': vehicle.lng,
        })

    @classmethod
    def spawn(
        cls,
        lat: float,
        lng: float,
        anchored: bool = True,
        **kwargs: Any
    ) -> SimulationEngine:
        """Start a fresh session with a newly spawned airship."""
        return cls(VehicleState.spawn(lat, lng, anchored=anchored), **kwargs)

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        lat: float,
        lng: float
    ) -> SimulationEngine:
        """Start a fresh session from a SimulationConfig."""
        vehicle = VehicleState.spawn(lat, lng, anchored=config.spawn_anchored)
        vehicle.fuel_reserve = config.initial_fuel_l
        return cls(
            vehicle,
            wind=config.initial_wind(),
            time_warp=config.time_warp,
            seed=config.seed,
        )

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    @property
    def paused(self) -> bool:
        """True while the simulation is paused."""
        return self._paused

    def pause(self) -> None:
        """Pause the simulation; ticks are dropped until resume()."""
        if not self._paused:
            self._paused = True
            self._log_event(SimulationEventType.SIMULATION_PAUSED)

    def resume(self) -> None:
        """Resume the simulation."""
        if self._paused:
            self._paused = False
            self._log_event(SimulationEventType.SIMULATION_RESUMED)

    def tick(self, dt_real: float) -> list[SimulationEvent]:
        """
        Execute one simulation step.

        Args:
            dt_real: Wall-clock seconds since the previous tick.

        Returns:
            List of events that occurred during this step.
        """
        if self._paused or not math.isfinite(dt_real) or dt_real <= 0:
            return []

        first_event = len(self.events)
        vehicle = self.vehicle
        dt = dt_real * self.time_warp

        # Empty tank: nothing turns
        if vehicle.fuel_reserve <= 0:
            vehicle.throttle = 0
            vehicle.engine_power = 0.0
            vehicle.speed = 0.0
            vehicle.ground_speed = 0.0

        vehicle.virtual_elapsed_s += dt

        if self.wind.mode is WindMode.AUTO:
            update = self.wind_model.step_auto(
                vehicle.virtual_elapsed_s, vehicle.wind_last_virtual_update
            )
            if update is not None:
                vehicle.wind_last_virtual_update = vehicle.virtual_elapsed_s
                self._log_event(SimulationEventType.WIND_CHANGED, data={
                    'force': self.wind.force,
                    'direction': self.wind.direction,
                    'direction_jump': update.direction_jump,
                    'force_jump': update.force_jump,
                })

        self._apply_fast_brake()

        if vehicle.autopilot_enabled:
            self._run_autopilot()

        burn = update_propulsion(vehicle, dt)
        if burn.stalled:
            self._log_event(SimulationEventType.FUEL_EXHAUSTED, data={
                'total_fuel_burned': vehicle.total_fuel_burned,
            })

        update_steering(vehicle, dt)

        vehicle.prop_rotation_angle = advance_propeller(
            vehicle.prop_rotation_angle, vehicle.engine_power, dt
        )

        update_ground_track(vehicle, self.wind, dt)

        self._publish_snapshot()

        return self.events[first_event:]

    def run(self, duration_s: float, tick_interval_s: float = 0.05) -> None:
        """
        Run ticks until a span of simulated time has elapsed.

        Args:
            duration_s: Simulated seconds to advance.
            tick_interval_s: Wall-clock seconds per tick.
        """
        if self._paused:
            return
        remaining = duration_s
        while remaining > 1e-9:
            dt_real = min(tick_interval_s, remaining / self.time_warp)
            self.tick(dt_real)
            remaining -= dt_real * self.time_warp

    # -------------------------------------------------------------------------
    # Tick Stages
    # -------------------------------------------------------------------------

    def _apply_fast_brake(self) -> None:
        """Hold full astern until slow, then release the brake."""
        vehicle = self.vehicle
        if not vehicle.fast_brake_enabled:
            return
        if vehicle.speed > FAST_BRAKE_RELEASE_SPEED_KMH:
            vehicle.throttle = -MAX_THROTTLE_NOTCH
        else:
            vehicle.fast_brake_enabled = False
            vehicle.throttle = 0
            self._log_event(SimulationEventType.FAST_BRAKE_RELEASED, data={
                'speed': vehicle.speed,
            })

    def _run_autopilot(self) -> None:
        """Let the autopilot set rudder and throttle, or disengage it."""
        vehicle = self.vehicle
        command = compute_autopilot(vehicle)
        if command is None:
            vehicle.throttle = 0
            vehicle.autopilot_enabled = False
            reason = RejectionReason.NO_FUEL if vehicle.has_target else RejectionReason.NO_TARGET
            self._log_event(SimulationEventType.AUTOPILOT_DISENGAGED, data={
                'reason': reason.value,
            })
            return

        vehicle.rudder = command.rudder
        vehicle.throttle = command.throttle

        if (command.arrived and abs(vehicle.speed) <= STEERAGE_SPEED and
                not self._target_reached):
            self._target_reached = True
            self._log_event(SimulationEventType.TARGET_REACHED, data={
                'distance_m': command.distance_m,
            })

    # -------------------------------------------------------------------------
    # Command Interface
    # -------------------------------------------------------------------------

    def set_throttle(self, notch: Any) -> bool:
        """
        Set the throttle notch (operator command).

        Takes the helm from the autopilot. Refused while anchored, and any
        non-zero notch is refused with an empty tank.

        Args:
            notch: Throttle notch in [-5, 5] (clamped, rounded).

        Returns:
            True if the command was accepted.
        """
        value = _as_number(notch)
        if value is None:
            return self._reject("set_throttle", RejectionReason.INVALID_VALUE, value=notch)
        if self.vehicle.anchor_enabled:
            return self._reject("set_throttle", RejectionReason.ANCHORED)

        throttle = int(round(max(-MAX_THROTTLE_NOTCH, min(MAX_THROTTLE_NOTCH, value))))
        if throttle != 0 and self.vehicle.fuel_reserve <= 0:
            return self._reject("set_throttle", RejectionReason.NO_FUEL, value=throttle)

        self._take_helm()
        self.vehicle.throttle = throttle
        return self._accept("set_throttle", value=throttle)

    def set_rudder(self, position: Any) -> bool:
        """
        Set the rudder (operator command).

        Args:
            position: Rudder input in [-5, 5] (clamped); stored as
                position x 0.1.

        Returns:
            True if the command was accepted.
        """
        value = _as_number(position)
        if value is None:
            return self._reject("set_rudder", RejectionReason.INVALID_VALUE, value=position)
        if self.vehicle.anchor_enabled:
            return self._reject("set_rudder", RejectionReason.ANCHORED)

        value = max(-MAX_RUDDER_INPUT, min(MAX_RUDDER_INPUT, value))
        self._take_helm()
        self.vehicle.rudder = value * RUDDER_SCALE
        return self._accept("set_rudder", value=self.vehicle.rudder)

    def set_target(self, lat: Any, lng: Any) -> bool:
        """Set the navigation target."""
        target_lat = _as_number(lat)
        target_lng = _as_number(lng)
        if (target_lat is None or target_lng is None or
                not is_valid_coordinate(target_lat, target_lng)):
            return self._reject("set_target", RejectionReason.INVALID_VALUE, lat=lat, lng=lng)

        vehicle = self.vehicle
        vehicle.has_target = True
        vehicle.target_lat = target_lat
        vehicle.target_lng = target_lng
        self._target_reached = False
        self._log_event(SimulationEventType.TARGET_SET, data={
            'lat': target_lat,
            'lng': target_lng,
        })
        return True

    def clear_target(self) -> bool:
        """Remove the navigation target; the autopilot goes with it."""
        vehicle = self.vehicle
        if vehicle.autopilot_enabled:
            self._disengage_autopilot("clear_target")
        had_target = vehicle.has_target
        vehicle.has_target = False
        vehicle.target_lat = None
        vehicle.target_lng = None
        if had_target:
            self._log_event(SimulationEventType.TARGET_CLEARED)
        return True

    def set_anchor(self, enabled: bool) -> bool:
        """
        Drop or raise the anchor.

        Dropping is refused above 5 km/h ground speed. A moored airship has
        its helm centred and throttle stopped, and the autopilot and fast
        brake are released. Raising is always allowed.
        """
        vehicle = self.vehicle
        if not enabled:
            if vehicle.anchor_enabled:
                vehicle.anchor_enabled = False
                self._log_event(SimulationEventType.ANCHOR_RAISED)
            return True

        if abs(vehicle.ground_speed) > ANCHOR_MAX_GROUND_SPEED_KMH:
            return self._reject(
                "set_anchor", RejectionReason.SPEED_TOO_HIGH,
                ground_speed=vehicle.ground_speed,
            )

        if vehicle.autopilot_enabled:
            self._disengage_autopilot("set_anchor")
        vehicle.anchor_enabled = True
        vehicle.fast_brake_enabled = False
        vehicle.throttle = 0
        vehicle.rudder = 0.0
        self._log_event(SimulationEventType.ANCHOR_DROPPED)
        return True

    def set_autopilot(self, enabled: bool) -> bool:
        """Engage or disengage the autopilot. Engaging needs a target."""
        vehicle = self.vehicle
        if not enabled:
            if vehicle.autopilot_enabled:
                self._disengage_autopilot("set_autopilot")
            return True

        if vehicle.anchor_enabled:
            return self._reject("set_autopilot", RejectionReason.ANCHORED)
        if not vehicle.has_target:
            return self._reject("set_autopilot", RejectionReason.NO_TARGET)

        if not vehicle.autopilot_enabled:
            vehicle.autopilot_enabled = True
            self._target_reached = False
            self._log_event(SimulationEventType.AUTOPILOT_ENGAGED, data={
                'target_lat': vehicle.target_lat,
                'target_lng': vehicle.target_lng,
            })
        return True

    def set_fast_brake(self, enabled: bool) -> bool:
        """
        Engage or release the fast brake.

        Engaging is refused when already at or below the release speed,
        since the brake would release itself immediately.
        """
        vehicle = self.vehicle
        if not enabled:
            vehicle.fast_brake_enabled = False
            return self._accept("set_fast_brake", value=False)

        if vehicle.anchor_enabled:
            return self._reject("set_fast_brake", RejectionReason.ANCHORED)
        if vehicle.speed <= FAST_BRAKE_RELEASE_SPEED_KMH:
            return self._reject(
                "set_fast_brake", RejectionReason.SPEED_TOO_LOW, speed=vehicle.speed
            )

        vehicle.fast_brake_enabled = True
        return self._accept("set_fast_brake", value=True)

    def set_wind_mode(self, mode: Any) -> bool:
        """Switch wind between auto and manual."""
        parsed = WindMode.parse(mode)
        if parsed is None:
            return self._reject("set_wind_mode", RejectionReason.INVALID_VALUE, value=mode)
        self.wind.mode = parsed
        return self._accept("set_wind_mode", value=parsed.value)

    def set_wind_manual(self, force: Any, direction: Any) -> bool:
        """Set wind force (0-12) and direction (degrees) directly."""
        force_value = _as_number(force)
        direction_value = _as_number(direction)
        if force_value is None or direction_value is None:
            return self._reject(
                "set_wind_manual", RejectionReason.INVALID_VALUE,
                force=force, direction=direction,
            )
        self.wind_model.set_manual(force_value, direction_value)
        self._log_event(SimulationEventType.WIND_CHANGED, data={
            'force': self.wind.force,
            'direction': self.wind.direction,
            'manual': True,
        })
        return True

    def randomize_wind(self) -> bool:
        """Give the wind a small random nudge."""
        self.wind_model.nudge()
        self._log_event(SimulationEventType.WIND_CHANGED, data={
            'force': self.wind.force,
            'direction': self.wind.direction,
            'nudge': True,
        })
        return True

    def add_fuel(self, liters: Any) -> bool:
        """Load fuel, up to the tank capacity."""
        amount = _as_number(liters)
        if amount is None or amount <= 0:
            return self._reject("add_fuel", RejectionReason.INVALID_VALUE, value=liters)

        vehicle = self.vehicle
        before = vehicle.fuel_reserve
        vehicle.fuel_reserve = min(MAX_FUEL_CAPACITY_L, vehicle.fuel_reserve + amount)
        self._log_event(SimulationEventType.REFUELED, data={
            'added_l': vehicle.fuel_reserve - before,
            'fuel_reserve': vehicle.fuel_reserve,
        })
        return True

    def set_time_warp(self, factor: Any) -> bool:
        """Change the time-warp factor to one of the allowed steps."""
        if not is_valid_time_warp(factor):
            return self._reject("set_time_warp", RejectionReason.INVALID_VALUE, value=factor)
        self.time_warp = float(factor)
        return self._accept("set_time_warp", value=self.time_warp)

    def _take_helm(self) -> None:
        """Manual controls override the autopilot."""
        if self.vehicle.autopilot_enabled:
            self._disengage_autopilot("manual_override")

    def _disengage_autopilot(self, cause: str) -> None:
        self.vehicle.autopilot_enabled = False
        self._log_event(SimulationEventType.AUTOPILOT_DISENGAGED, data={'cause': cause})

    def _accept(self, command: str, **data: Any) -> bool:
        self._log_event(SimulationEventType.COMMAND_ACCEPTED, command=command, data=data)
        return True

    def _reject(self, command: str, reason: RejectionReason, **data: Any) -> bool:
        data['reason'] = reason.value
        self._log_event(SimulationEventType.COMMAND_REJECTED, command=command, data=data)
        return False

    # -------------------------------------------------------------------------
    # Event Logging
    # -------------------------------------------------------------------------

    def add_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """
        Register a callback to be called for each simulation event.

        Args:
            callback: Function that takes a SimulationEvent.
        """
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """Remove an event callback."""
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    def add_snapshot_callback(self, callback: Callable[[dict], None]) -> None:
        """
        Register a callback to receive a fresh snapshot after every tick.

        Paused or ignored ticks publish nothing.

        Args:
            callback: Function that takes the dict from get_snapshot().
        """
        self._snapshot_callbacks.append(callback)

    def remove_snapshot_callback(self, callback: Callable[[dict], None]) -> None:
        """Remove a snapshot callback."""
        if callback in self._snapshot_callbacks:
            self._snapshot_callbacks.remove(callback)

    def _publish_snapshot(self) -> None:
        """Hand each snapshot observer its own copy of the current state."""
        for callback in self._snapshot_callbacks:
            try:
                callback(self.get_snapshot())
            except Exception as e:
                print(f"[SIM] Snapshot callback error: {e}")

    def _log_event(
        self,
        event_type: SimulationEventType,
        command: Optional[str] = None,
        data: Optional[dict] = None
    ) -> SimulationEvent:
        """Log a simulation event and notify callbacks."""
        event = SimulationEvent(
            event_type=event_type,
            timestamp=self.vehicle.virtual_elapsed_s,
            command=command,
            data=data or {}
        )
        self.events.append(event)

        for callback in self._event_callbacks:
            try:
                callback(event)
            except Exception as e:
                print(f"[SIM] Event callback error: {e}")

        return event

    def get_events_since(self, since_time: float) -> list[SimulationEvent]:
        """Get all events since a given virtual time."""
        return [e for e in self.events if e.timestamp >= since_time]

    def get_events_by_type(self, event_type: SimulationEventType) -> list[SimulationEvent]:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    # -------------------------------------------------------------------------
    # State Snapshot
    # -------------------------------------------------------------------------

    def get_snapshot(self) -> dict:
        """
        Get a read-only snapshot of the simulation for observers.

        Returns:
            Dict with position, motion, engine, fuel, target and wind data.
        """
        vehicle = self.vehicle

        target = None
        if vehicle.has_target:
            to_target = bearing(vehicle.lat, vehicle.lng, vehicle.target_lat, vehicle.target_lng)
            remaining = distance(vehicle.lat, vehicle.lng, vehicle.target_lat, vehicle.target_lng)
            target = {
                'lat': vehicle.target_lat,
                'lng': vehicle.target_lng,
                'bearing': to_target,
                'distance_m': remaining,
                'eta_s': eta_seconds(remaining, vehicle.ground_speed),
                'course_deviation': heading_error(to_target, vehicle.heading),
            }

        return {
            'timestamp': vehicle.virtual_elapsed_s,
            'position': {'lat': vehicle.lat, 'lng': vehicle.lng},
            'heading': vehicle.heading,
            'speed': vehicle.speed,
            'ground_speed': vehicle.ground_speed,
            'angular_velocity': vehicle.angular_velocity,
            'engine_power': vehicle.engine_power,
            'throttle': vehicle.throttle,
            'rudder': vehicle.rudder,
            'propeller': {
                'rpm': propeller_rpm(vehicle.engine_power),
                'angle': vehicle.prop_rotation_angle,
            },
            'fuel': {
                'reserve_l': vehicle.fuel_reserve,
                'burned_l': vehicle.total_fuel_burned,
                'endurance_h': fuel_endurance_hours(vehicle.fuel_reserve, vehicle.engine_power),
            },
            'distance_travelled_m': vehicle.total_distance_m,
            'modes': {
                'anchored': vehicle.anchor_enabled,
                'autopilot': vehicle.autopilot_enabled,
                'fast_brake': vehicle.fast_brake_enabled,
                'paused': self._paused,
            },
            'time_warp': self.time_warp,
            'target': target,
            'wind': {
                'force': self.wind.force,
                'direction': self.wind.direction,
                'speed_mps': self.wind.speed_mps,
                'mode': self.wind.mode.value,
            },
        }
