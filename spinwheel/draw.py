"""Weighted random selection over a wheel partition."""

from typing import Protocol

from spinwheel.models import CandidateId, Segment


class RandomSource(Protocol):
    """Anything with a uniform ``random()`` in [0, 1); ``random.Random`` qualifies."""

    def random(self) -> float:
        ...


def draw_segment(
    segments: list[Segment],
    total_weight: float,
    rng: RandomSource,
) -> Segment | None:
    """Pick a segment with probability proportional to its effective weight.

    The first segment whose cumulative weight reaches the target wins, so
    ties go to the earlier segment.

    Args:
        segments: Partition segments in wheel order
        total_weight: Sum of the segments' effective weights
        rng: Random source

    Returns:
        The drawn segment, or None when there are no segments
    """
    if not segments:
        return None

    target = rng.random() * total_weight
    cumulative = 0.0
    for segment in segments:
        cumulative += segment.weight
        if target <= cumulative:
            return segment
    # Accumulated rounding can leave the target just past the final sum
    return segments[-1]


def draw(
    segments: list[Segment],
    total_weight: float,
    rng: RandomSource,
) -> CandidateId | None:
    """Draw a candidate id from the partition; None when it is empty."""
    segment = draw_segment(segments, total_weight, rng)
    return segment.candidate_id if segment else None
