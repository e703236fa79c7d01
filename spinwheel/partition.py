"""Pure wheel geometry: weights to segments, angles to segments."""

import math

from spinwheel.models import (
    Candidate,
    CandidateId,
    Partition,
    Segment,
    WeightMode,
    clamp_weight,
)

TAU = 2 * math.pi

# Pointer sits at the top of the wheel in screen coordinates (y grows downward)
POINTER_DIRECTION = 3 * math.pi / 2


def effective_weight(candidate: Candidate, weight_mode: WeightMode = WeightMode.NORMAL) -> float:
    """Weight a candidate contributes to the partition under ``weight_mode``."""
    weight = clamp_weight(candidate.weight)
    if weight_mode == WeightMode.INVERSE:
        return 1 / weight
    return float(weight)


def build_partition(
    candidates: list[Candidate],
    weight_mode: WeightMode = WeightMode.NORMAL,
) -> Partition:
    """Build the ordered circular partition for ``candidates``.

    Each segment spans ``effective / total * 2π`` radians, in input order.
    The last segment always ends at exactly 2π so the wrap-around boundary
    has no floating-point gap.

    Args:
        candidates: Candidates in wheel order
        weight_mode: Normal or inverse weighting

    Returns:
        Partition; empty with ``total_weight == 0`` when there is nothing to spin
    """
    if not candidates:
        return Partition()

    weights = [effective_weight(candidate, weight_mode) for candidate in candidates]
    total_weight = sum(weights)
    if total_weight <= 0:
        return Partition()

    segments: list[Segment] = []
    cursor = 0.0
    last_index = len(candidates) - 1
    for index, (candidate, weight) in enumerate(zip(candidates, weights)):
        start_angle = cursor
        end_angle = start_angle + (weight / total_weight) * TAU
        if index == last_index:
            end_angle = TAU
        cursor = end_angle
        segments.append(Segment(
            candidate_id=candidate.id,
            start_angle=start_angle,
            end_angle=end_angle,
            weight=weight,
            index=index,
        ))

    return Partition(segments=segments, total_weight=total_weight)


def selection_odds(
    candidates: list[Candidate],
    weight_mode: WeightMode = WeightMode.NORMAL,
) -> dict[CandidateId, float]:
    """Probability of each candidate being drawn under ``weight_mode``."""
    partition = build_partition(candidates, weight_mode)
    if partition.is_degenerate:
        return {}
    return {
        segment.candidate_id: segment.weight / partition.total_weight
        for segment in partition.segments
    }


def normalize_angle(angle: float) -> float:
    """Map any angle into [0, 2π)."""
    normalized = math.fmod(angle, TAU)
    if normalized < 0:
        normalized += TAU
    # fmod of a tiny negative value can round back up to exactly TAU
    if normalized >= TAU:
        normalized = 0.0
    return normalized


def pointer_angle(rotation: float) -> float:
    """Partition-local angle currently under the fixed pointer."""
    return normalize_angle(POINTER_DIRECTION - normalize_angle(rotation))


def find_segment_index(segments: list[Segment], angle: float) -> int:
    """Index of the segment containing ``angle``; -1 when there are no segments."""
    if not segments:
        return -1

    normalized = normalize_angle(angle)
    for index, segment in enumerate(segments):
        if segment.start_angle <= normalized < segment.end_angle:
            return index
    return len(segments) - 1


def candidate_at(partition: Partition, angle: float, rotation: float = 0.0) -> CandidateId | None:
    """Hit-test a screen angle against a wheel drawn at ``rotation``.

    Used to resolve clicks on a slice: ``angle`` is measured in screen space
    from the wheel's centre.
    """
    index = find_segment_index(partition.segments, angle - rotation)
    if index == -1:
        return None
    return partition.segments[index].candidate_id
