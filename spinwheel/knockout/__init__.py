"""Knockout tournaments built on inverse-weighted spins."""

from spinwheel.knockout.controller import TournamentController, TournamentInProgressError
from spinwheel.knockout.models import (
    Elimination,
    KnockoutStage,
    KnockoutStages,
    StageConfig,
    TournamentResult,
    TournamentState,
    TournamentStatus,
)
from spinwheel.knockout.stages import DEFAULT_KNOCKOUT_STAGES, select_spin, select_stage

__all__ = [
    "TournamentController",
    "TournamentInProgressError",
    "Elimination",
    "KnockoutStage",
    "KnockoutStages",
    "StageConfig",
    "TournamentResult",
    "TournamentState",
    "TournamentStatus",
    "DEFAULT_KNOCKOUT_STAGES",
    "select_spin",
    "select_stage",
]
