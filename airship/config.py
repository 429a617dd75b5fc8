"""
Simulation configuration for the Airship Simulator.

A SimulationConfig captures everything needed to start a session other
than the spawn position: clock cadence, time warp, random seed, the
initial fuel load and the initial wind.

Configs can be written as JSON:

    {
        "tick_interval_s": 0.05,
        "time_warp": 10,
        "seed": 7,
        "initial_fuel_l": 5000,
        "spawn_anchored": false,
        "wind": {"mode": "manual", "force": 3, "direction_deg": 270}
    }
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .state import MAX_FUEL_CAPACITY_L
from .wind import MAX_WIND_FORCE, WindMode, WindState


# Allowed time-warp factors, slowest to fastest
TIME_WARP_STEPS: tuple[float, ...] = (
    0.1, 1, 2, 5, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100, 1000,
)

DEFAULT_TICK_INTERVAL_S = 0.05


def is_valid_time_warp(factor: Any) -> bool:
    """Check a time-warp factor against the allowed steps."""
    if isinstance(factor, bool) or not isinstance(factor, (int, float)):
        return False
    return any(math.isclose(factor, step) for step in TIME_WARP_STEPS)


@dataclass
class SimulationConfig:
    """Session configuration."""
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    time_warp: float = 1.0
    seed: Optional[int] = None
    initial_fuel_l: float = 0.0
    spawn_anchored: bool = True
    wind_mode: WindMode = WindMode.AUTO
    wind_force: float = 0.0
    wind_direction_deg: float = 0.0

    def __post_init__(self) -> None:
        mode = WindMode.parse(self.wind_mode)
        if mode is None:
            raise ValueError(f"Unknown wind mode: {self.wind_mode!r}")
        self.wind_mode = mode

        if not self.tick_interval_s > 0:
            raise ValueError(f"Tick interval must be positive, got {self.tick_interval_s}")
        if not is_valid_time_warp(self.time_warp):
            raise ValueError(
                f"Time warp {self.time_warp} is not one of {list(TIME_WARP_STEPS)}"
            )
        if not 0 <= self.initial_fuel_l <= MAX_FUEL_CAPACITY_L:
            raise ValueError(
                f"Initial fuel must be within 0..{MAX_FUEL_CAPACITY_L:.0f} L, "
                f"got {self.initial_fuel_l}"
            )
        if not 0 <= self.wind_force <= MAX_WIND_FORCE:
            raise ValueError(f"Wind force must be within 0..12, got {self.wind_force}")

    def initial_wind(self) -> WindState:
        """Build the starting WindState."""
        wind = WindState(
            force=self.wind_force,
            direction=self.wind_direction_deg,
            mode=self.wind_mode,
        )
        wind.clamp()
        return wind

    @classmethod
    def from_json(cls, path: str) -> 'SimulationConfig':
        """Load configuration from a JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Simulation config not found: {path}")

        with open(config_path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Create configuration from a dictionary."""
        wind_data = data.get("wind", {})
        return cls(
            tick_interval_s=data.get("tick_interval_s", DEFAULT_TICK_INTERVAL_S),
            time_warp=data.get("time_warp", 1.0),
            seed=data.get("seed"),
            initial_fuel_l=data.get("initial_fuel_l", 0.0),
            spawn_anchored=data.get("spawn_anchored", True),
            wind_mode=wind_data.get("mode", WindMode.AUTO.value),
            wind_force=wind_data.get("force", 0.0),
            wind_direction_deg=wind_data.get("direction_deg", 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "tick_interval_s": self.tick_interval_s,
            "time_warp": self.time_warp,
            "seed": self.seed,
            "initial_fuel_l": self.initial_fuel_l,
            "spawn_anchored": self.spawn_anchored,
            "wind": {
                "mode": self.wind_mode.value,
                "force": self.wind_force,
                "direction_deg": self.wind_direction_deg,
            },
        }
