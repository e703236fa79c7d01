"""Knockout orchestrator: inverse-weighted elimination until one remains."""

from structlog.contextvars import bound_contextvars

from spinwheel.clock import Sleeper, asyncio_sleep_ms
from spinwheel.engine import SpinEngine
from spinwheel.events import EventHandler
from spinwheel.knockout.models import (
    Elimination,
    KnockoutStages,
    TournamentResult,
    TournamentState,
    TournamentStatus,
)
from spinwheel.knockout.stages import DEFAULT_KNOCKOUT_STAGES, select_spin, select_stage
from spinwheel.logging import get_logger
from spinwheel.models import Candidate, WeightMode
from spinwheel.partition import selection_odds

log = get_logger(__name__)


class TournamentInProgressError(RuntimeError):
    """Raised when a knockout is requested while another one is running."""


class TournamentController:
    """Runs knockout tournaments on top of a SpinEngine.

    Each round spins the remaining pool with inverse weights and removes
    whoever the pointer lands on, so a higher preference weight means a
    lower chance of being knocked out. The last candidate standing is the
    champion.

    Delays between rounds are presentation only and go through ``sleep``;
    pass ``instant_sleep`` to run a tournament without waiting.
    """

    def __init__(
        self,
        engine: SpinEngine,
        event_handler: EventHandler | None = None,
        sleep: Sleeper | None = None,
    ):
        """Initialize the controller.

        Args:
            engine: Engine that performs each round's spin
            event_handler: Receiver for round/elimination/champion events
                (defaults to the engine's handler)
            sleep: Async delay function taking milliseconds
        """
        self.engine = engine
        self.event_handler = event_handler or engine.event_handler
        self.sleep = sleep or asyncio_sleep_ms
        self.state: TournamentState | None = None

    @property
    def in_progress(self) -> bool:
        return self.state is not None

    async def run_tournament(
        self,
        candidates: list[Candidate],
        stages: KnockoutStages | None = None,
    ) -> TournamentResult:
        """Eliminate candidates one per round until a champion remains.

        Args:
            candidates: Starting pool in wheel order (normally two or more)
            stages: Pacing table (``DEFAULT_KNOCKOUT_STAGES`` if None)

        Returns:
            TournamentResult; ``inconclusive`` when the pool is empty or a
            round fails to produce an eliminee

        Raises:
            TournamentInProgressError: If a tournament is already running
        """
        if self.state is not None:
            log.warning("tournament_rejected", reason="tournament_in_progress")
            raise TournamentInProgressError("A knockout is already in progress")

        stages = stages or DEFAULT_KNOCKOUT_STAGES
        self.state = TournamentState(pool=list(candidates))
        with bound_contextvars(tournament_size=len(candidates)):
            log.info("tournament_started")
            try:
                if not self.state.pool:
                    return self._inconclusive(self.state)
                return await self._run_rounds(self.state, stages)
            finally:
                self.state = None

    async def _run_rounds(self, state: TournamentState, stages: KnockoutStages) -> TournamentResult:
        while len(state.pool) > 1:
            remaining = len(state.pool)
            stage = select_stage(stages, remaining)
            is_final = remaining == 2
            state.round_number += 1

            self.event_handler.on_round_started(
                round_number=state.round_number,
                remaining=remaining,
                is_final=is_final,
                odds=selection_odds(state.pool, WeightMode.INVERSE),
            )
            log.info("round_started", round=state.round_number, remaining=remaining, final=is_final)

            result = await self.engine.spin(state.pool, WeightMode.INVERSE, select_spin(stages, remaining))
            eliminee_id = result.winning_candidate_id
            if eliminee_id is None:
                return self._inconclusive(state)

            removal_index = next(
                (i for i, candidate in enumerate(state.pool) if candidate.id == eliminee_id),
                None,
            )
            if removal_index is None:
                return self._inconclusive(state)

            state.pool.pop(removal_index)
            order = state.elimination_order
            state.elimination_order += 1
            state.eliminations.append(Elimination(candidate_id=eliminee_id, order=order))

            self.event_handler.on_eliminated(
                candidate_id=eliminee_id,
                order=order,
                remaining=len(state.pool),
            )
            log.info("candidate_eliminated", candidate=eliminee_id, order=order, remaining=len(state.pool))

            if len(state.pool) <= 1:
                await self.sleep(stage.final_reveal_delay if is_final else stage.knockout_reveal_delay)
                break

            await self.sleep(stage.inter_round_delay)

        return await self._crown(state, stages)

    async def _crown(self, state: TournamentState, stages: KnockoutStages) -> TournamentResult:
        champion = state.pool[0]
        state.status = TournamentStatus.FINISHED
        self.event_handler.on_champion(candidate_id=champion.id, order=state.elimination_order)
        log.info(
            "tournament_finished",
            champion=champion.id,
            order=state.elimination_order,
            rounds=state.round_number,
        )
        await self.sleep(select_stage(stages, 1).winner_reveal_delay)
        return TournamentResult(
            status=state.status,
            champion_id=champion.id,
            champion_order=state.elimination_order,
            eliminations=state.eliminations,
            remaining=[champion.id],
        )

    def _inconclusive(self, state: TournamentState) -> TournamentResult:
        state.status = TournamentStatus.INCONCLUSIVE
        remaining = [candidate.id for candidate in state.pool]
        self.event_handler.on_inconclusive(remaining=remaining)
        log.warning("tournament_inconclusive", remaining=len(remaining), rounds=state.round_number)
        return TournamentResult(
            status=state.status,
            eliminations=state.eliminations,
            remaining=remaining,
        )
