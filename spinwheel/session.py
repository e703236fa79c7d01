"""Spin-mode dispatcher for a single wheel.

This is the entry point a front end calls when the user presses "spin".
It picks between a knockout, one dramatic spin, or a random-boost spin,
and returns plain data without touching any presentation layer.
"""

from pydantic import BaseModel, Field

from spinwheel.engine import SpinEngine, SpinInProgressError
from spinwheel.knockout.controller import TournamentController
from spinwheel.knockout.models import KnockoutStages, TournamentResult
from spinwheel.logging import get_logger
from spinwheel.models import Candidate, CandidateId, SpinMode, WeightMode, clamp_weight
from spinwheel.presets import DEFAULT_SPIN_SETTINGS, DRAMATIC_SPIN_SETTINGS

log = get_logger(__name__)


class SessionOutcome(BaseModel):
    """Result of one press of the spin button."""
    mode: SpinMode
    winner_id: CandidateId | None = None
    tournament: TournamentResult | None = None
    # Candidates after the spin; random-boost raises the winner's weight here
    candidates: list[Candidate] = Field(default_factory=list)


class WheelSession:
    """Routes spin requests to the engine or the knockout controller."""

    def __init__(
        self,
        engine: SpinEngine,
        controller: TournamentController | None = None,
        weight_mode: WeightMode = WeightMode.NORMAL,
        stages: KnockoutStages | None = None,
    ):
        self.engine = engine
        self.controller = controller or TournamentController(engine)
        self.weight_mode = weight_mode
        self.stages = stages

    @property
    def busy(self) -> bool:
        return self.engine.is_spinning or self.controller.in_progress

    async def spin_wheel(
        self,
        candidates: list[Candidate],
        mode: SpinMode = SpinMode.KNOCKOUT,
        weight_mode: WeightMode | None = None,
    ) -> SessionOutcome:
        """Run one spin request in the given mode.

        ``weight_mode`` applies to one-spin and single-candidate spins and
        defaults to the session's mode. Knockouts always eliminate with
        inverse weights; random-boost levels every weight to 1.

        Raises:
            SpinInProgressError: If a spin or knockout is already running
        """
        if self.busy:
            log.warning("session_spin_rejected", mode=str(mode))
            raise SpinInProgressError("The wheel is busy")

        candidates = list(candidates)
        if not candidates:
            return SessionOutcome(mode=mode)

        if mode == SpinMode.KNOCKOUT and len(candidates) > 1:
            result = await self.controller.run_tournament(candidates, self.stages)
            return SessionOutcome(
                mode=mode,
                winner_id=result.champion_id,
                tournament=result,
                candidates=candidates,
            )

        if mode == SpinMode.RANDOM_BOOST:
            return await self._random_boost(candidates)

        settings = DEFAULT_SPIN_SETTINGS if mode == SpinMode.KNOCKOUT else DRAMATIC_SPIN_SETTINGS
        result = await self.engine.spin(candidates, weight_mode or self.weight_mode, settings)
        return SessionOutcome(mode=mode, winner_id=result.winning_candidate_id, candidates=candidates)

    async def _random_boost(self, candidates: list[Candidate]) -> SessionOutcome:
        # Everyone spins at equal odds; the winner keeps a +1 on their real weight
        level = [candidate.model_copy(update={"weight": 1}) for candidate in candidates]
        result = await self.engine.spin(level, WeightMode.NORMAL, DRAMATIC_SPIN_SETTINGS)
        winner_id = result.winning_candidate_id

        boosted = [
            candidate.model_copy(update={"weight": clamp_weight(candidate.weight + 1)})
            if candidate.id == winner_id else candidate
            for candidate in candidates
        ]
        log.info("random_boost_applied", winner=winner_id)
        return SessionOutcome(mode=SpinMode.RANDOM_BOOST, winner_id=winner_id, candidates=boosted)
