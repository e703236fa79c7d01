"""Unit tests for core data models."""

import uuid

import pytest
from pydantic import ValidationError

from spinwheel.models import (
    Candidate,
    Partition,
    Segment,
    SpinMode,
    SpinResult,
    SpinSettings,
    WeightMode,
)

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit


class TestEnums:
    """Tests for WeightMode and SpinMode."""

    def test_weight_mode_values(self):
        assert WeightMode.NORMAL.value == "normal"
        assert WeightMode.INVERSE.value == "inverse"
        assert str(WeightMode.INVERSE) == "inverse"

    def test_spin_mode_parses_cli_values(self):
        assert SpinMode("one-spin") is SpinMode.ONE_SPIN
        assert SpinMode("random-boost") is SpinMode.RANDOM_BOOST
        assert str(SpinMode.KNOCKOUT) == "knockout"


class TestCandidate:
    """Tests for Candidate model."""

    def test_minimal_candidate(self):
        candidate = Candidate(id="tt0078748")
        assert candidate.weight == 1
        assert candidate.label is None
        assert candidate.display_name == "tt0078748"

    def test_integer_ids_are_kept(self):
        assert Candidate(id=7).id == 7

    def test_uuid_and_tuple_ids_are_kept(self):
        film_id = uuid.uuid4()
        assert Candidate(id=film_id, weight=3).id == film_id
        assert Candidate(id=("film", 7), weight=3).id == ("film", 7)

    def test_unhashable_id_is_rejected(self):
        with pytest.raises(ValidationError):
            Candidate(id=["film", 7])

    def test_label_used_for_display(self):
        assert Candidate(id=1, label="Alien").display_name == "Alien"

    def test_fractional_weight_rounds_half_up(self):
        assert Candidate(id=1, weight=4.5).weight == 5


class TestPartitionModel:
    def test_default_partition_is_degenerate(self):
        assert Partition().is_degenerate

    def test_zero_total_is_degenerate(self):
        segment = Segment(candidate_id="a", start_angle=0.0, end_angle=1.0, weight=0.0, index=0)
        assert Partition(segments=[segment], total_weight=0.0).is_degenerate


class TestSpinSettings:
    """Tests for SpinSettings.normalized."""

    def test_defaults_survive_normalization(self):
        assert SpinSettings().normalized() == SpinSettings()

    def test_floors_are_applied(self):
        normalized = SpinSettings(min_spins=1, max_spins=1, min_duration=100, max_duration=50).normalized()
        assert normalized.min_spins == 2
        assert normalized.max_spins == 2
        assert normalized.min_duration == 800
        assert normalized.max_duration == 800

    def test_non_finite_values_fall_back(self):
        normalized = SpinSettings(
            min_spins=float("nan"),
            max_spins=float("inf"),
            min_duration=float("nan"),
            max_duration=float("-inf"),
        ).normalized()
        assert normalized.min_spins == 2
        assert normalized.max_spins == 2
        assert normalized.min_duration == 800
        assert normalized.max_duration == 800

    def test_max_never_below_min(self):
        normalized = SpinSettings(min_spins=6, max_spins=3).normalized()
        assert normalized.max_spins == 6


def test_spin_result_defaults():
    result = SpinResult()
    assert result.winning_candidate_id is None
    assert result.settled_rotation == 0.0
