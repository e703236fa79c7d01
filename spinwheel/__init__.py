"""Weighted wheel spins, knockout tournaments and fairness audits."""

from spinwheel.audit import AuditEntry, AuditError, AuditReport, audit
from spinwheel.draw import RandomSource, draw, draw_segment
from spinwheel.engine import SpinEngine, SpinInProgressError, WinnerMismatchError
from spinwheel.knockout import TournamentController, TournamentInProgressError, TournamentResult
from spinwheel.models import (
    Candidate,
    Partition,
    Segment,
    SpinMode,
    SpinResult,
    SpinSettings,
    WeightMode,
    clamp_weight,
)
from spinwheel.partition import build_partition, selection_odds
from spinwheel.session import SessionOutcome, WheelSession

__all__ = [
    "AuditEntry",
    "AuditError",
    "AuditReport",
    "audit",
    "RandomSource",
    "draw",
    "draw_segment",
    "SpinEngine",
    "SpinInProgressError",
    "WinnerMismatchError",
    "TournamentController",
    "TournamentInProgressError",
    "TournamentResult",
    "Candidate",
    "Partition",
    "Segment",
    "SpinMode",
    "SpinResult",
    "SpinSettings",
    "WeightMode",
    "clamp_weight",
    "build_partition",
    "selection_odds",
    "SessionOutcome",
    "WheelSession",
]
