"""Data models for knockout tournaments."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from spinwheel.models import Candidate, CandidateId, SpinSettings


class StageConfig(BaseModel):
    """Spin bounds and presentation delays (ms) for one pool-size band."""
    elimination_spin: SpinSettings
    final_spin: SpinSettings  # used when two candidates remain
    inter_round_delay: float = 0
    knockout_reveal_delay: float = 0
    final_reveal_delay: float = 0
    winner_reveal_delay: float = 0


class KnockoutStage(BaseModel):
    """A stage applies while at least ``min_count`` candidates remain."""
    min_count: int = Field(ge=1)
    config: StageConfig


class KnockoutStages(BaseModel):
    """Stage table ordered by descending ``min_count``.

    The table must contain a ``min_count == 1`` stage so every pool size
    has a match.
    """
    stages: list[KnockoutStage]

    @field_validator("stages")
    @classmethod
    def _order_and_check_fallback(cls, stages: list[KnockoutStage]) -> list[KnockoutStage]:
        if not stages:
            raise ValueError("Stage table must not be empty")
        ordered = sorted(stages, key=lambda stage: stage.min_count, reverse=True)
        if ordered[-1].min_count != 1:
            raise ValueError("Stage table needs a fallback stage with min_count=1")
        return ordered


class TournamentStatus(str, Enum):
    RUNNING = "running"
    FINISHED = "finished"
    INCONCLUSIVE = "inconclusive"

    def __str__(self) -> str:
        return self.value


class Elimination(BaseModel):
    candidate_id: CandidateId
    order: int


class TournamentState(BaseModel):
    """Live state of an in-progress knockout."""
    pool: list[Candidate]
    elimination_order: int = 1  # next order value to hand out
    round_number: int = 0
    status: TournamentStatus = TournamentStatus.RUNNING
    eliminations: list[Elimination] = Field(default_factory=list)


class TournamentResult(BaseModel):
    """Final outcome of a knockout."""
    status: TournamentStatus
    champion_id: CandidateId | None = None
    champion_order: int | None = None
    eliminations: list[Elimination] = Field(default_factory=list)
    remaining: list[CandidateId] = Field(default_factory=list)

    @property
    def is_conclusive(self) -> bool:
        return self.status == TournamentStatus.FINISHED and self.champion_id is not None
