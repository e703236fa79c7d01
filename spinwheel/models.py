"""Core data models for the wheel engine."""

import math
from collections.abc import Hashable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from spinwheel.config import MAX_WEIGHT, MIN_WEIGHT

# Caller-defined and only compared for equality: str, int, UUID, tuple, ...
CandidateId = Hashable


def clamp_weight(value: Any) -> int:
    """Normalize a raw weight to an integer in [MIN_WEIGHT, MAX_WEIGHT].

    Non-numeric and non-finite values become 1. Halves round up.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(number):
        return 1
    return min(MAX_WEIGHT, max(MIN_WEIGHT, math.floor(number + 0.5)))


class WeightMode(str, Enum):
    """How a candidate's weight maps to its share of the wheel."""
    NORMAL = "normal"    # weight favors selection
    INVERSE = "inverse"  # weight disfavors selection (elimination draws)

    def __str__(self) -> str:
        return self.value


class SpinMode(str, Enum):
    """Session-level spin behaviour."""
    KNOCKOUT = "knockout"
    ONE_SPIN = "one-spin"
    RANDOM_BOOST = "random-boost"

    def __str__(self) -> str:
        return self.value


class Candidate(BaseModel):
    """One selectable item. The engine only compares ``id`` for equality."""
    id: CandidateId
    weight: int = 1
    label: str | None = None  # display only

    @field_validator("weight", mode="before")
    @classmethod
    def _normalize_weight(cls, value: Any) -> int:
        return clamp_weight(value)

    @property
    def display_name(self) -> str:
        return self.label or str(self.id)


class Segment(BaseModel):
    """One candidate's angular slice of the wheel, in radians."""
    candidate_id: CandidateId
    start_angle: float
    end_angle: float
    weight: float  # effective weight under the partition's weight mode
    index: int

    @property
    def span(self) -> float:
        return self.end_angle - self.start_angle


class Partition(BaseModel):
    """Ordered circular partition of [0, 2π) built from candidate weights."""
    segments: list[Segment] = Field(default_factory=list)
    total_weight: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return not self.segments or self.total_weight <= 0


class SpinSettings(BaseModel):
    """Randomization bounds for a single spin. Durations are milliseconds."""
    min_spins: float = 8
    max_spins: float = 12
    min_duration: float = 5200
    max_duration: float = 7800

    def normalized(self) -> "SpinSettings":
        """Return a copy with floors applied and max bounds not below min bounds.

        At least 2 full turns and 800 ms per spin; non-finite values fall
        back to the floor.
        """
        min_spins = max(2.0, self.min_spins if math.isfinite(self.min_spins) else 2.0)
        max_spins = max(min_spins, self.max_spins if math.isfinite(self.max_spins) else min_spins)
        min_duration = max(800.0, self.min_duration if math.isfinite(self.min_duration) else 800.0)
        max_duration = max(
            min_duration,
            self.max_duration if math.isfinite(self.max_duration) else min_duration,
        )
        return SpinSettings(
            min_spins=min_spins,
            max_spins=max_spins,
            min_duration=min_duration,
            max_duration=max_duration,
        )


class SpinResult(BaseModel):
    """Outcome of one spin. ``winning_candidate_id`` is None on degenerate input."""
    winning_candidate_id: CandidateId | None = None
    settled_rotation: float = 0.0
