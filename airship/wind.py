"""
Wind Model for the Airship Simulator.

Wind is described by a Beaufort-like force (continuous, 0-12) and the
compass direction the wind blows toward. In auto mode the wind evolves
once per minute of virtual time:

- 10% chance the direction jumps to a new uniformly random bearing
- 10% chance the force jumps to a new level, drawn from a weight table
  that makes calm far likelier than storm
- otherwise a gentle drift of up to +/-4 degrees and +/-0.15 force

In manual mode the automatic evolution is suspended and values are set
directly by the operator.

The random source is injected so tests can script every roll. Only
``rng.random()`` is used, which keeps scripted fakes trivial.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Protocol

from .navigation import normalize_angle


# =============================================================================
# CONSTANTS
# =============================================================================

# Wind speed (m/s) for each Beaufort force 0..12
BEAUFORT_SCALE_MPS: tuple[float, ...] = (
    0.0, 0.5, 1.6, 3.4, 5.5, 8.0, 10.8, 13.9, 17.2, 20.8, 24.5, 28.5, 32.7,
)

MAX_WIND_FORCE = 12.0

# Relative likelihood of each force level on a force jump (0 = calm ... 12 = hurricane)
WIND_FORCE_WEIGHTS: tuple[float, ...] = (
    10, 9, 8, 7, 6, 5, 4, 3, 2, 1.5, 1, 0.5, 0.2,
)

# Auto mode cadence (virtual seconds)
WIND_UPDATE_INTERVAL_S = 60.0

# Per-update event probabilities
DIRECTION_JUMP_PROBABILITY = 0.1
FORCE_JUMP_PROBABILITY = 0.1

# Smooth drift amplitudes (half-width of the uniform range)
DRIFT_FORCE_AMPLITUDE = 0.15
DRIFT_DIRECTION_AMPLITUDE_DEG = 4.0

# Operator "random wind" nudge amplitudes
NUDGE_FORCE_AMPLITUDE = 0.3
NUDGE_DIRECTION_AMPLITUDE_DEG = 7.5


class RandomSource(Protocol):
    """Anything with a ``random()`` returning floats in [0, 1)."""

    def random(self) -> float: ...


# =============================================================================
# WIND STATE
# =============================================================================

class WindMode(Enum):
    """How the wind evolves."""
    AUTO = "auto"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: object) -> Optional[WindMode]:
        """Convert a mode or its string name, returning None if unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


@dataclass
class WindState:
    """
    Current wind.

    Attributes:
        force: Beaufort-like force, continuous in [0, 12].
        direction: Direction the wind blows toward, degrees in [0, 360).
        mode: Auto (evolves by itself) or manual (operator-set).
    """
    force: float = 0.0
    direction: float = 0.0
    mode: WindMode = WindMode.AUTO

    @property
    def speed_mps(self) -> float:
        """Wind speed in m/s."""
        return beaufort_to_mps(self.force)

    @property
    def speed_kmh(self) -> float:
        """Wind speed in km/h."""
        return self.speed_mps * 3.6

    def clamp(self) -> None:
        """Force the state back into its valid ranges."""
        self.force = clamp_force(self.force)
        self.direction = normalize_angle(self.direction)

    def copy(self) -> WindState:
        """Create an independent copy."""
        return replace(self)


@dataclass
class WindUpdate:
    """Which branches fired during one automatic wind update."""
    direction_jump: bool = False
    force_jump: bool = False

    @property
    def smooth(self) -> bool:
        """True when neither discrete event fired and the wind drifted."""
        return not (self.direction_jump or self.force_jump)


# =============================================================================
# CONVERSIONS
# =============================================================================

def clamp_force(force: float) -> float:
    """Clamp a wind force into [0, 12]."""
    return max(0.0, min(MAX_WIND_FORCE, force))


def beaufort_to_mps(force: float) -> float:
    """
    Convert a Beaufort force to wind speed.

    The force is rounded to the nearest level and clamped to [0, 12]
    before the table lookup.
    """
    if not math.isfinite(force):
        return 0.0
    level = int(math.floor(force + 0.5))
    level = max(0, min(len(BEAUFORT_SCALE_MPS) - 1, level))
    return BEAUFORT_SCALE_MPS[level]


def sample_wind_force(rng: RandomSource) -> int:
    """
    Draw a discrete force level from the weight table.

    Uses cumulative-weight sampling: a uniform draw over the total weight
    is walked down the table until it falls inside a level's band.
    """
    remaining = rng.random() * sum(WIND_FORCE_WEIGHTS)
    for level, weight in enumerate(WIND_FORCE_WEIGHTS):
        if remaining < weight:
            return level
        remaining -= weight
    return 0


# =============================================================================
# WIND MODEL
# =============================================================================

class WindModel:
    """
    Evolves a WindState over virtual time.

    Usage:
        model = WindModel(WindState(force=3, direction=90), rng=random.Random(1))
        update = model.step_auto(virtual_elapsed_s=120.0, last_update_s=60.0)

    Attributes:
        state: The wind being evolved (shared with the simulation).
        rng: Random source for the stochastic branches.
    """

    def __init__(
        self,
        state: Optional[WindState] = None,
        rng: Optional[RandomSource] = None
    ) -> None:
        self.state = state if state is not None else WindState()
        self.rng = rng if rng is not None else random.Random()

    def is_due(self, virtual_elapsed_s: float, last_update_s: float) -> bool:
        """True once a full update interval of virtual time has passed."""
        return virtual_elapsed_s - last_update_s >= WIND_UPDATE_INTERVAL_S

    def step_auto(
        self,
        virtual_elapsed_s: float,
        last_update_s: float
    ) -> Optional[WindUpdate]:
        """
        Advance the wind if an update is due.

        Does nothing in manual mode or before the interval has elapsed.

        Args:
            virtual_elapsed_s: Current virtual time (seconds).
            last_update_s: Virtual time of the previous update.

        Returns:
            The branches taken, or None if no update fired.
        """
        if self.state.mode is not WindMode.AUTO:
            return None
        if not self.is_due(virtual_elapsed_s, last_update_s):
            return None

        update = WindUpdate()
        rng = self.rng

        if rng.random() < DIRECTION_JUMP_PROBABILITY:
            self.state.direction = float(math.floor(rng.random() * 360))
            update.direction_jump = True

        if rng.random() < FORCE_JUMP_PROBABILITY:
            self.state.force = float(sample_wind_force(rng))
            update.force_jump = True

        if update.smooth:
            self.state.force += (rng.random() - 0.5) * 2 * DRIFT_FORCE_AMPLITUDE
            self.state.direction += (rng.random() - 0.5) * 2 * DRIFT_DIRECTION_AMPLITUDE_DEG

        self.state.clamp()
        return update

    def set_manual(self, force: float, direction: float) -> None:
        """Set force and direction directly (clamped/normalised)."""
        self.state.force = force
        self.state.direction = direction
        self.state.clamp()

    def nudge(self) -> None:
        """Apply a small random change to the current wind."""
        rng = self.rng
        self.state.force += (rng.random() - 0.5) * 2 * NUDGE_FORCE_AMPLITUDE
        self.state.direction += (rng.random() - 0.5) * 2 * NUDGE_DIRECTION_AMPLITUDE_DEG
        self.state.clamp()
