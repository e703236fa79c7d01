"""Monte Carlo fairness audit for the wheel's weighted draw.

Runs many independent draws against one partition and compares how often
each candidate came up with the probability its weight promises. The audit
always uses normal weighting, since that is what users see as "odds".
"""

import random

from pydantic import BaseModel, Field

from spinwheel.config import AUDIT_ITERATIONS
from spinwheel.draw import RandomSource, draw
from spinwheel.logging import get_logger
from spinwheel.models import Candidate, CandidateId, WeightMode
from spinwheel.partition import build_partition

log = get_logger(__name__)


class AuditEntry(BaseModel):
    """Observed vs. expected frequency for one candidate."""
    candidate_id: CandidateId
    label: str | None = None
    weight: float = Field(..., description="Effective weight under normal weighting")
    expected_ratio: float = Field(..., description="weight / total weight")
    wins: int = Field(0, description="Draws won during the audit")
    actual_ratio: float = Field(0.0, description="wins / iterations")
    diff: float = Field(0.0, description="actual_ratio - expected_ratio")


class AuditReport(BaseModel):
    """Full audit result, entries sorted by expected ratio (highest first)."""
    results: list[AuditEntry] = Field(default_factory=list)
    iterations: int
    candidates_count: int

    @property
    def max_abs_diff(self) -> float:
        return max((abs(entry.diff) for entry in self.results), default=0.0)


class AuditError(BaseModel):
    """Returned instead of a report when the audit cannot run."""
    error: str


def audit(
    candidates: list[Candidate],
    iterations: int = AUDIT_ITERATIONS,
    rng: RandomSource | None = None,
) -> AuditReport | AuditError:
    """Audit the weighted draw for ``candidates``.

    The partition is built once and every iteration draws from it with the
    same routine the live engine uses.

    Args:
        candidates: Candidates to audit
        iterations: Number of simulated draws
        rng: Random source (a fresh ``random.Random`` if None)

    Returns:
        AuditReport, or AuditError when there is nothing to audit
    """
    if not candidates:
        return AuditError(error="No candidates selected to audit.")
    if iterations <= 0:
        return AuditError(error="Iterations must be a positive number.")

    partition = build_partition(candidates, WeightMode.NORMAL)
    if partition.is_degenerate:
        return AuditError(error="Total weight is zero.")

    rng = rng or random.Random()
    labels = {candidate.id: candidate.label for candidate in candidates}
    wins: dict[CandidateId, int] = {segment.candidate_id: 0 for segment in partition.segments}

    for _ in range(iterations):
        winner_id = draw(partition.segments, partition.total_weight, rng)
        if winner_id in wins:
            wins[winner_id] += 1

    results = []
    for segment in partition.segments:
        expected = segment.weight / partition.total_weight
        actual = wins[segment.candidate_id] / iterations
        results.append(AuditEntry(
            candidate_id=segment.candidate_id,
            label=labels.get(segment.candidate_id),
            weight=segment.weight,
            expected_ratio=expected,
            wins=wins[segment.candidate_id],
            actual_ratio=actual,
            diff=actual - expected,
        ))

    results.sort(key=lambda entry: entry.expected_ratio, reverse=True)

    report = AuditReport(results=results, iterations=iterations, candidates_count=len(candidates))
    log.info(
        "audit_complete",
        iterations=iterations,
        candidates=len(candidates),
        max_abs_diff=round(report.max_abs_diff, 6),
    )
    return report
