"""Unit tests for knockout stages and the tournament controller."""

import asyncio
import random
import uuid
from collections import Counter

import pytest
from pydantic import ValidationError

from spinwheel.clock import SteppedFrameClock, instant_sleep
from spinwheel.engine import SpinEngine, SpinInProgressError
from spinwheel.events import NullEventHandler, RecordingEventHandler
from spinwheel.knockout import (
    DEFAULT_KNOCKOUT_STAGES,
    KnockoutStage,
    KnockoutStages,
    StageConfig,
    TournamentController,
    TournamentInProgressError,
    TournamentStatus,
    select_spin,
    select_stage,
)
from spinwheel.models import Candidate, SpinResult, SpinSettings, WeightMode

pytestmark = pytest.mark.unit

QUICK = SpinSettings(min_spins=2, max_spins=2, min_duration=800, max_duration=800)


def make_candidates(*weights: int) -> list[Candidate]:
    return [Candidate(id=chr(ord("A") + i), weight=w) for i, w in enumerate(weights)]


def make_controller(seed: int = 1, handler=None, sleep=instant_sleep) -> TournamentController:
    """Factory: controller whose spins finish in a couple of synthetic frames."""
    engine = SpinEngine(
        clock=SteppedFrameClock(step_ms=10_000),
        rng=random.Random(seed),
        event_handler=handler,
    )
    return TournamentController(engine, sleep=sleep)


class StubEngine:
    """Engine double returning scripted spin results."""

    def __init__(self, winners):
        self.winners = list(winners)
        self.event_handler = NullEventHandler()
        self.calls = []

    async def spin(self, candidates, weight_mode=WeightMode.NORMAL, settings=None):
        self.calls.append((list(candidates), weight_mode, settings))
        return SpinResult(winning_candidate_id=self.winners.pop(0))


class TestSelectStage:
    """Tests for stage lookup by remaining pool size."""

    @pytest.mark.parametrize("remaining, inter_round_delay", [
        (40, 350),
        (13, 350),
        (12, 500),
        (7, 500),
        (6, 720),
        (4, 720),
        (3, 900),
        (2, 900),
    ])
    def test_picks_first_matching_stage(self, remaining, inter_round_delay):
        assert select_stage(DEFAULT_KNOCKOUT_STAGES, remaining).inter_round_delay == inter_round_delay

    def test_single_remaining_uses_fallback(self):
        assert select_stage(DEFAULT_KNOCKOUT_STAGES, 1).winner_reveal_delay == 900

    def test_zero_remaining_falls_back_to_last_stage(self):
        assert select_stage(DEFAULT_KNOCKOUT_STAGES, 0) == DEFAULT_KNOCKOUT_STAGES.stages[-1].config

    def test_final_round_uses_final_spin(self):
        stage = select_stage(DEFAULT_KNOCKOUT_STAGES, 2)
        assert select_spin(DEFAULT_KNOCKOUT_STAGES, 2) == stage.final_spin
        assert select_spin(DEFAULT_KNOCKOUT_STAGES, 3) == stage.elimination_spin

    def test_stages_are_sorted_descending(self):
        config = StageConfig(elimination_spin=QUICK, final_spin=QUICK)
        stages = KnockoutStages(stages=[
            KnockoutStage(min_count=1, config=config),
            KnockoutStage(min_count=5, config=config),
        ])
        assert [stage.min_count for stage in stages.stages] == [5, 1]

    def test_table_without_fallback_is_rejected(self):
        config = StageConfig(elimination_spin=QUICK, final_spin=QUICK)
        with pytest.raises(ValidationError):
            KnockoutStages(stages=[KnockoutStage(min_count=3, config=config)])

    def test_empty_table_is_rejected(self):
        with pytest.raises(ValidationError):
            KnockoutStages(stages=[])


class TestTournamentController:
    """Tests for TournamentController.run_tournament."""

    async def test_three_equal_candidates(self):
        recorder = RecordingEventHandler()
        controller = make_controller(handler=recorder)

        result = await controller.run_tournament(make_candidates(1, 1, 1))

        kinds = [e.kind for e in recorder.events if e.kind in ("eliminated", "champion")]
        assert kinds == ["eliminated", "eliminated", "champion"]
        assert result.status == TournamentStatus.FINISHED
        assert result.champion_order == 3
        assert recorder.of_kind("champion")[0].order == 3
        assert not controller.in_progress

    @pytest.mark.parametrize("size", [2, 3, 5, 8, 14, 20])
    async def test_completeness(self, size):
        recorder = RecordingEventHandler()
        controller = make_controller(seed=size, handler=recorder)
        candidates = make_candidates(*[(i % 10) + 1 for i in range(size)])

        result = await controller.run_tournament(candidates)

        eliminated = recorder.of_kind("eliminated")
        champions = recorder.of_kind("champion")
        assert [e.order for e in eliminated] == list(range(1, size))
        assert len(champions) == 1
        assert champions[0].order == size
        assert recorder.events[-1].kind == "champion"

        out_ids = [e.candidate_id for e in eliminated]
        assert len(set(out_ids)) == size - 1
        assert champions[0].candidate_id not in out_ids
        assert set(out_ids) | {champions[0].candidate_id} == {c.id for c in candidates}
        assert [e.order for e in result.eliminations] == list(range(1, size))

    async def test_rounds_announce_remaining_and_final(self):
        recorder = RecordingEventHandler()
        controller = make_controller(handler=recorder)

        await controller.run_tournament(make_candidates(3, 1, 4, 1))

        rounds = recorder.of_kind("round_started")
        assert [r.round_number for r in rounds] == [1, 2, 3]
        assert [r.remaining for r in rounds] == [4, 3, 2]
        assert [r.is_final for r in rounds] == [False, False, True]
        assert sum(rounds[0].odds.values()) == pytest.approx(1.0)

    async def test_spins_use_inverse_weights_and_stage_settings(self):
        engine = StubEngine(winners=["A", "B"])
        controller = TournamentController(engine, sleep=instant_sleep)

        await controller.run_tournament(make_candidates(1, 1, 1))

        (pool1, mode1, settings1), (pool2, mode2, settings2) = engine.calls
        assert mode1 == mode2 == WeightMode.INVERSE
        assert [c.id for c in pool1] == ["A", "B", "C"]
        assert [c.id for c in pool2] == ["B", "C"]
        stage = select_stage(DEFAULT_KNOCKOUT_STAGES, 2)
        assert settings1 == stage.elimination_spin
        assert settings2 == stage.final_spin

    async def test_delays_follow_stage_table(self):
        delays = []

        async def record_sleep(ms):
            delays.append(ms)

        controller = make_controller(sleep=record_sleep)
        await controller.run_tournament(make_candidates(1, 1, 1))

        # inter-round, final reveal, winner reveal
        assert delays == [900, 1700, 900]

    async def test_empty_pool_is_inconclusive(self):
        recorder = RecordingEventHandler()
        controller = make_controller(handler=recorder)

        result = await controller.run_tournament([])

        assert result.status == TournamentStatus.INCONCLUSIVE
        assert result.champion_id is None
        assert not result.is_conclusive
        assert recorder.of_kind("champion") == []
        assert len(recorder.of_kind("inconclusive")) == 1

    async def test_single_candidate_is_champion_immediately(self):
        recorder = RecordingEventHandler()
        controller = make_controller(handler=recorder)

        result = await controller.run_tournament([Candidate(id="solo", weight=4)])

        assert result.champion_id == "solo"
        assert result.champion_order == 1
        assert recorder.of_kind("eliminated") == []

    async def test_null_draw_is_inconclusive_not_champion(self):
        recorder = RecordingEventHandler()
        engine = StubEngine(winners=["A", None])
        controller = TournamentController(engine, event_handler=recorder, sleep=instant_sleep)

        result = await controller.run_tournament(make_candidates(1, 1, 1))

        assert result.status == TournamentStatus.INCONCLUSIVE
        assert result.champion_id is None
        assert result.remaining == ["B", "C"]
        assert [e.candidate_id for e in result.eliminations] == ["A"]
        assert recorder.of_kind("champion") == []
        assert recorder.of_kind("inconclusive")[0].remaining == ["B", "C"]

    async def test_unknown_eliminee_is_inconclusive(self):
        engine = StubEngine(winners=["Z"])
        controller = TournamentController(engine, sleep=instant_sleep)

        result = await controller.run_tournament(make_candidates(1, 1))

        assert result.status == TournamentStatus.INCONCLUSIVE
        assert result.remaining == ["A", "B"]

    async def test_second_tournament_is_rejected(self):
        controller = make_controller()
        first = asyncio.create_task(controller.run_tournament(make_candidates(1, 2, 3)))
        await asyncio.sleep(0)
        assert controller.in_progress

        with pytest.raises(TournamentInProgressError):
            await controller.run_tournament(make_candidates(1, 1))
        with pytest.raises(SpinInProgressError):
            controller.engine.spin(make_candidates(1, 1))

        result = await first
        assert result.status == TournamentStatus.FINISHED
        assert not controller.in_progress

    async def test_input_list_is_not_mutated(self):
        candidates = make_candidates(1, 2, 3)
        controller = make_controller()
        await controller.run_tournament(candidates)
        assert [c.id for c in candidates] == ["A", "B", "C"]

    async def test_heavy_candidates_are_eliminated_less_often(self):
        """Weight 10 goes out first far less often than weight 1."""
        controller = make_controller(seed=123)
        first_out = Counter()
        for _ in range(600):
            result = await controller.run_tournament(
                [Candidate(id="heavy", weight=10), Candidate(id="light", weight=1), Candidate(id="mid", weight=5)]
            )
            first_out[result.eliminations[0].candidate_id] += 1

        assert first_out["heavy"] < first_out["light"]
        assert first_out["heavy"] < first_out["mid"]

    async def test_uuid_ids_run_to_a_champion(self):
        recorder = RecordingEventHandler()
        controller = make_controller(seed=17, handler=recorder)
        candidates = [Candidate(id=uuid.uuid4(), weight=w) for w in (2, 6, 9, 1)]

        result = await controller.run_tournament(candidates)

        ids = {c.id for c in candidates}
        assert result.status == TournamentStatus.FINISHED
        assert result.champion_id in ids
        assert {e.candidate_id for e in result.eliminations} | {result.champion_id} == ids
        assert set(recorder.of_kind("round_started")[0].odds) == ids
