"""Tests for the ensemble aggregator and the time-of-day table."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from signal_core.ensemble import EnsembleAggregator, TimeOfDayTable, hour_in_range
from signal_core.models import (
    DecisionDirection,
    DetectorVerdict,
    Direction,
    EnsembleConfig,
    MarketSnapshot,
    parse_hour_range,
)

from conftest import FIXED_NOON, series

SNAPSHOT = MarketSnapshot(symbol="BTCUSDT", candles={"15m": series([100.0] * 5)})


def v(
    name: str,
    score: float,
    direction: Direction = Direction.LONG,
    family: str = "",
    weight: float = 1.0,
) -> DetectorVerdict:
    return DetectorVerdict(name=name, family=family, score=score, direction=direction, weight=weight)


def aggregator(**config) -> EnsembleAggregator:
    return EnsembleAggregator(EnsembleConfig(**config), clock=lambda: FIXED_NOON)


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------

class TestTimeOfDay:
    """Tests for hour ranges and the multiplier table."""

    def test_parse_hour_range(self):
        assert parse_hour_range("04-10") == (4, 10)
        assert parse_hour_range("23-04") == (23, 4)
        assert parse_hour_range("9–17") == (9, 17)

    @pytest.mark.parametrize("key", ["abc", "25-03", "4", "04-10-12"])
    def test_parse_hour_range_rejects(self, key):
        with pytest.raises(ValueError):
            parse_hour_range(key)

    def test_hour_in_range_wraps(self):
        assert hour_in_range(23, 23, 4)
        assert hour_in_range(2, 23, 4)
        assert not hour_in_range(4, 23, 4)
        assert not hour_in_range(12, 23, 4)

    def test_end_is_exclusive(self):
        assert hour_in_range(4, 4, 10)
        assert not hour_in_range(10, 4, 10)

    @pytest.mark.parametrize("hour,expected", [
        (0, 0.3), (2, 0.3), (3, 0.3), (4, 1.1), (9, 1.1), (10, 1.0),
        (15, 1.0), (16, 0.9), (19, 0.9), (20, 0.8), (22, 0.8), (23, 0.3),
    ])
    def test_default_table(self, hour, expected):
        assert aggregator().get_time_of_day_multiplier(hour) == expected

    def test_first_match_wins(self):
        table = TimeOfDayTable({"00-24": 0.5, "10-12": 2.0})
        assert table.multiplier(11) == 0.5

    def test_unmatched_hour_uses_default(self):
        table = TimeOfDayTable({"10-12": 2.0})
        assert table.multiplier(3) == 1.0

    def test_clock_supplies_hour(self):
        agg = EnsembleAggregator(clock=lambda: datetime(2024, 1, 1, 2, 30))
        assert agg.current_hour() == 2
        assert agg.get_time_of_day_multiplier() == 0.3

    def test_invalid_range_rejected_by_config(self):
        with pytest.raises(ValidationError):
            EnsembleConfig(time_of_day_multiplier={"morning": 1.0})


# ---------------------------------------------------------------------------
# Agreement
# ---------------------------------------------------------------------------

class TestAgreement:
    """Tests for compute_agreement."""

    def test_counts_material_only(self):
        stats = aggregator().compute_agreement([
            v("a_x", 80),
            v("b_x", 40),  # at threshold: not material
            v("c_x", 90, Direction.SHORT),
            v("d_x", 0, Direction.NEUTRAL),
        ])
        assert stats.long_count == 1
        assert stats.short_count == 1
        assert stats.total_directional == 2
        assert stats.neutral_count == 2

    def test_majority(self):
        stats = aggregator().compute_agreement([
            v("a_x", 80), v("b_x", 70), v("c_x", 60, Direction.SHORT),
        ])
        assert stats.majority_direction == Direction.LONG
        assert stats.majority_count == 2
        assert stats.agreement_ratio == pytest.approx(2 / 3)

    def test_tie_has_no_majority(self):
        stats = aggregator().compute_agreement([v("a_x", 80), v("b_x", 80, Direction.SHORT)])
        assert stats.majority_direction == Direction.NEUTRAL
        assert stats.majority_count == 0

    def test_empty(self):
        stats = aggregator().compute_agreement([])
        assert stats.majority_direction == Direction.NEUTRAL
        assert stats.agreement_ratio == 0.0

    def test_custom_threshold(self):
        stats = aggregator(material_score_threshold=10).compute_agreement([v("a_x", 20)])
        assert stats.long_count == 1


# ---------------------------------------------------------------------------
# Meta-score
# ---------------------------------------------------------------------------

class TestMetaScore:
    """Tests for compute_meta_score and score_breakdown."""

    def test_single_family_unit_weights(self):
        agg = aggregator()
        verdicts = [v("m_a", 80, family="m"), v("m_b", 70, family="m"), v("m_c", 60, family="m")]
        agreement = agg.compute_agreement(verdicts)
        assert agg.compute_meta_score(verdicts, agreement, hour=12) == pytest.approx(70.0)

    def test_confluence_bonus_per_extra_family(self):
        agg = aggregator()
        verdicts = [v("a_x", 80), v("b_x", 70), v("c_x", 60)]
        breakdown = agg.score_breakdown(verdicts, agg.compute_agreement(verdicts), hour=12)
        assert breakdown.weighted_mean == pytest.approx(70.0)
        assert breakdown.families == ["a", "b", "c"]
        assert breakdown.confluence_bonus == 10
        assert breakdown.meta_score == pytest.approx(80.0)

    def test_bonus_is_capped(self):
        agg = aggregator()
        verdicts = [v(f"f{i}_x", 50) for i in range(8)]
        breakdown = agg.score_breakdown(verdicts, agg.compute_agreement(verdicts), hour=12)
        assert breakdown.confluence_bonus == 20

    def test_weights(self):
        agg = aggregator()
        verdicts = [v("a_x", 90, family="f", weight=3.0), v("b_x", 50, family="f")]
        meta = agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=12)
        assert meta == pytest.approx(80.0)

    def test_default_verdict_weight_is_one(self):
        agg = EnsembleAggregator(EnsembleConfig(), clock=lambda: FIXED_NOON)
        verdicts = [v("m_a", 80, family="m"), v("m_b", 60, family="m")]
        meta = agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=12)
        assert meta == pytest.approx(70.0)

    def test_time_multiplier_applied(self):
        agg = aggregator()
        verdicts = [v("m_a", 80, family="m"), v("m_b", 60, family="m")]
        agreement = agg.compute_agreement(verdicts)
        assert agg.compute_meta_score(verdicts, agreement, hour=2) == pytest.approx(21.0)
        assert agg.compute_meta_score(verdicts, agreement, hour=5) == pytest.approx(77.0)

    def test_clamped_to_100(self):
        agg = aggregator()
        verdicts = [v("a_x", 100), v("b_x", 100), v("c_x", 100)]
        meta = agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=5)
        assert meta == 100.0

    def test_zero_below_min_agreement(self):
        agg = aggregator(min_detector_agreement=3)
        verdicts = [v("a_x", 90), v("b_x", 90)]
        assert agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=12) == 0.0

    def test_zero_without_majority(self):
        agg = aggregator()
        verdicts = [v("a_x", 90), v("b_x", 90, Direction.SHORT)]
        assert agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=12) == 0.0

    def test_non_material_majority_side_verdicts_still_score(self):
        """Weak verdicts on the majority side pull the mean down."""
        agg = aggregator()
        verdicts = [v("m_a", 80, family="m"), v("m_b", 80, family="m"), v("m_c", 20, family="m")]
        meta = agg.compute_meta_score(verdicts, agg.compute_agreement(verdicts), hour=12)
        assert meta == pytest.approx(60.0)


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------

class TestAnalyze:
    """Tests for EnsembleAggregator.analyze."""

    def test_long_trade(self):
        decision = aggregator().analyze([v("a_x", 80), v("b_x", 70), v("c_x", 60)], SNAPSHOT)

        assert decision.direction == DecisionDirection.LONG
        assert decision.is_trade
        assert decision.confidence == 80
        assert decision.reason == "Ensemble signal: 3 detectors agree, 80.0% confidence"
        assert decision.levels.entry == 100.0
        assert decision.explain.requirements_met is True
        assert decision.explain.hour == 12
        assert decision.explain.time_multiplier == 1.0
        assert decision.explain.detector_families == ["a", "b", "c"]
        assert decision.explain.failure_reasons == []

    def test_confidence_is_rounded_meta_score(self):
        verdicts = [v("m_a", 81, family="m"), v("m_b", 70, family="m")]
        decision = aggregator().analyze(verdicts, SNAPSHOT)
        assert decision.explain.meta_score == pytest.approx(75.5)
        assert decision.confidence == 76

    def test_confidence_rounds_half_up(self):
        verdicts = [v("m_a", 79, family="m"), v("m_b", 70, family="m")]
        decision = aggregator().analyze(verdicts, SNAPSHOT)
        assert decision.explain.meta_score == pytest.approx(74.5)
        assert decision.confidence == 75

    def test_short_trade(self):
        verdicts = [v("a_x", 80, Direction.SHORT), v("b_x", 80, Direction.SHORT), v("c_x", 90)]
        decision = aggregator().analyze(verdicts, SNAPSHOT)
        assert decision.direction == DecisionDirection.SHORT
        assert decision.levels.stop_loss > decision.levels.entry > decision.levels.take_profit

    def test_insufficient_agreement(self):
        decision = aggregator(min_detector_agreement=3).analyze([v("a_x", 90), v("b_x", 90)], SNAPSHOT)

        assert decision.direction == DecisionDirection.NO_TRADE
        assert decision.confidence == 0
        assert decision.levels is None
        assert decision.explain.meta_score == 0.0
        assert decision.reason == "No trading signal: Insufficient detector agreement: 2 < 3"

    def test_low_confidence(self):
        verdicts = [v("a_x", 80), v("b_x", 70), v("c_x", 60)]
        decision = aggregator().analyze(verdicts, SNAPSHOT, hour=2)

        assert decision.direction == DecisionDirection.NO_TRADE
        assert decision.explain.meta_score == pytest.approx(24.0)
        assert decision.explain.failure_reasons == ["Low confidence: 24.0% < 60%"]

    def test_tie_is_no_trade(self):
        decision = aggregator().analyze([v("a_x", 80), v("b_x", 80, Direction.SHORT)], SNAPSHOT)
        assert decision.direction == DecisionDirection.NO_TRADE
        assert "No clear directional bias" in decision.explain.failure_reasons

    def test_all_neutral(self):
        verdicts = [DetectorVerdict.neutral(f"d{i}_x", "Insufficient data") for i in range(7)]
        decision = aggregator().analyze(verdicts, SNAPSHOT)

        assert decision.direction == DecisionDirection.NO_TRADE
        assert decision.explain.failure_reasons == [
            "Insufficient detector agreement: 0 < 2",
            "Low confidence: 0.0% < 60%",
            "No clear directional bias",
        ]
        assert len(decision.explain.verdicts) == 7

    def test_confidence_threshold_is_inclusive(self):
        verdicts = [v("m_a", 60, family="m"), v("m_b", 60, family="m")]
        decision = aggregator().analyze(verdicts, SNAPSHOT)
        assert decision.direction == DecisionDirection.LONG
        assert decision.confidence == 60

    def test_neutral_score_never_counts(self):
        """A NEUTRAL verdict with a high score is ignored by the tally."""
        verdicts = [v("a_x", 80), v("b_x", 95, Direction.NEUTRAL)]
        decision = aggregator().analyze(verdicts, SNAPSHOT)
        assert decision.explain.agreement.majority_count == 1
        assert decision.direction == DecisionDirection.NO_TRADE

    def test_min_agreement_must_be_positive(self):
        with pytest.raises(ValidationError):
            EnsembleConfig(min_detector_agreement=0)
