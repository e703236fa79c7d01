"""Pacing table for knockouts: bigger pools spin faster."""

from spinwheel.knockout.models import KnockoutStage, KnockoutStages, StageConfig
from spinwheel.models import SpinSettings

DEFAULT_KNOCKOUT_STAGES = KnockoutStages(stages=[
    KnockoutStage(min_count=13, config=StageConfig(
        elimination_spin=SpinSettings(min_spins=1, max_spins=2, min_duration=900, max_duration=1300),
        final_spin=SpinSettings(min_spins=18, max_spins=24, min_duration=12000, max_duration=18000),
        inter_round_delay=350,
        knockout_reveal_delay=450,
        final_reveal_delay=900,
        winner_reveal_delay=600,
    )),
    KnockoutStage(min_count=7, config=StageConfig(
        elimination_spin=SpinSettings(min_spins=2, max_spins=3, min_duration=1300, max_duration=1900),
        final_spin=SpinSettings(min_spins=18, max_spins=24, min_duration=11500, max_duration=17000),
        inter_round_delay=500,
        knockout_reveal_delay=650,
        final_reveal_delay=1100,
        winner_reveal_delay=650,
    )),
    KnockoutStage(min_count=4, config=StageConfig(
        elimination_spin=SpinSettings(min_spins=3, max_spins=4, min_duration=1900, max_duration=2600),
        final_spin=SpinSettings(min_spins=19, max_spins=25, min_duration=12500, max_duration=18500),
        inter_round_delay=720,
        knockout_reveal_delay=900,
        final_reveal_delay=1300,
        winner_reveal_delay=700,
    )),
    KnockoutStage(min_count=2, config=StageConfig(
        elimination_spin=SpinSettings(min_spins=4, max_spins=5, min_duration=2500, max_duration=3400),
        final_spin=SpinSettings(min_spins=20, max_spins=26, min_duration=13500, max_duration=19500),
        inter_round_delay=900,
        knockout_reveal_delay=1100,
        final_reveal_delay=1700,
        winner_reveal_delay=800,
    )),
    KnockoutStage(min_count=1, config=StageConfig(
        elimination_spin=SpinSettings(min_spins=4, max_spins=5, min_duration=2500, max_duration=3400),
        final_spin=SpinSettings(min_spins=20, max_spins=26, min_duration=13500, max_duration=19500),
        inter_round_delay=900,
        knockout_reveal_delay=1100,
        final_reveal_delay=1700,
        winner_reveal_delay=900,
    )),
])


def select_stage(stages: KnockoutStages, remaining: int) -> StageConfig:
    """Pick the first stage whose ``min_count`` the pool size reaches.

    Args:
        stages: Stage table (descending ``min_count``)
        remaining: Candidates left in the pool

    Returns:
        The matching stage config; the last stage when nothing matches
    """
    for stage in stages.stages:
        if stage.min_count <= remaining:
            return stage.config
    return stages.stages[-1].config


def select_spin(stages: KnockoutStages, remaining: int) -> SpinSettings:
    """Spin settings for a round: the final spin when two remain."""
    config = select_stage(stages, remaining)
    if remaining == 2:
        return config.final_spin
    return config.elimination_spin
