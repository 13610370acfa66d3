"""Ensemble aggregator: combines detector verdicts into one decision.

Decision policy:
1. Agreement: only material verdicts (directional, score above
   ``material_score_threshold``) are tallied. Exact LONG/SHORT ties
   produce no majority.
2. Meta-score: mean score of every verdict on the majority side, weighted
   by the weight the detector suite attached to each verdict,
   plus a confluence bonus per extra detector family, times the
   time-of-day multiplier, clamped to [0, 100].
3. Trade only when the majority exists, enough detectors agree, and the
   meta-score reaches ``min_confidence``.

This module is pure business logic; the only outside input is the
injected clock used for the time-of-day multiplier.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Sequence

from signal_core.ensemble.levels import LevelsGenerator
from signal_core.ensemble.time_of_day import Clock, TimeOfDayTable, local_clock
from signal_core.models import (
    AgreementStats,
    Decision,
    DecisionDirection,
    DecisionExplain,
    DetectorVerdict,
    Direction,
    EnsembleConfig,
    MarketSnapshot,
    MetaScoreBreakdown,
)

logger = logging.getLogger(__name__)


class EnsembleAggregator:
    """Turns a verdict list into agreement stats, a meta-score and a decision.

    The configuration is immutable, so one aggregator can be shared by any
    number of concurrent analyses.
    """

    def __init__(
        self,
        config: EnsembleConfig | None = None,
        levels: LevelsGenerator | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or EnsembleConfig()
        self.levels = levels or LevelsGenerator()
        self._clock = clock or local_clock(self.config.timezone)
        self._time_table = TimeOfDayTable(self.config.time_of_day_multiplier)

    # ------------------------------------------------------------------
    # Time of day
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        return self._clock()

    def current_hour(self) -> int:
        return self.now().hour

    def get_time_of_day_multiplier(self, hour: int | None = None) -> float:
        """Multiplier for ``hour`` (defaults to the clock's local hour)."""
        if hour is None:
            hour = self.current_hour()
        return self._time_table.multiplier(hour)

    # ------------------------------------------------------------------
    # Agreement and scoring
    # ------------------------------------------------------------------

    def is_material(self, verdict: DetectorVerdict) -> bool:
        return verdict.is_directional and verdict.score > self.config.material_score_threshold

    def compute_agreement(self, verdicts: Sequence[DetectorVerdict]) -> AgreementStats:
        """Tally material verdicts and find the majority direction."""
        material = [v for v in verdicts if self.is_material(v)]
        long_count = sum(1 for v in material if v.direction == Direction.LONG)
        short_count = sum(1 for v in material if v.direction == Direction.SHORT)
        total = long_count + short_count

        if long_count > short_count:
            majority, majority_count = Direction.LONG, long_count
        elif short_count > long_count:
            majority, majority_count = Direction.SHORT, short_count
        else:
            # Includes 0-0: no majority on exact ties
            majority, majority_count = Direction.NEUTRAL, 0

        return AgreementStats(
            long_count=long_count,
            short_count=short_count,
            neutral_count=len(verdicts) - total,
            total_directional=total,
            majority_direction=majority,
            majority_count=majority_count,
            agreement_ratio=majority_count / total if total > 0 else 0.0,
        )

    def score_breakdown(
        self,
        verdicts: Sequence[DetectorVerdict],
        agreement: AgreementStats,
        hour: int | None = None,
    ) -> MetaScoreBreakdown:
        """Meta-score with its components."""
        multiplier = self.get_time_of_day_multiplier(hour)
        if (
            agreement.majority_direction == Direction.NEUTRAL
            or agreement.majority_count < self.config.min_detector_agreement
        ):
            return MetaScoreBreakdown(time_multiplier=multiplier)

        weighted_sum = 0.0
        total_weight = 0.0
        families: list[str] = []
        for verdict in verdicts:
            if verdict.direction != agreement.majority_direction:
                continue
            weighted_sum += verdict.score * verdict.weight
            total_weight += verdict.weight
            if verdict.family not in families:
                families.append(verdict.family)

        if total_weight <= 0:
            return MetaScoreBreakdown(families=families, time_multiplier=multiplier)

        weighted_mean = weighted_sum / total_weight
        bonus = min(
            self.config.max_confluence_bonus,
            (len(families) - 1) * self.config.confluence_bonus_per_family,
        )
        meta = (weighted_mean + bonus) * multiplier
        return MetaScoreBreakdown(
            weighted_mean=weighted_mean,
            families=families,
            confluence_bonus=bonus,
            time_multiplier=multiplier,
            meta_score=min(100.0, max(0.0, meta)),
        )

    def compute_meta_score(
        self,
        verdicts: Sequence[DetectorVerdict],
        agreement: AgreementStats,
        hour: int | None = None,
    ) -> float:
        """Blended confidence in [0, 100]; 0 without enough agreement."""
        return self.score_breakdown(verdicts, agreement, hour).meta_score

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def analyze(
        self,
        verdicts: Sequence[DetectorVerdict],
        snapshot: MarketSnapshot,
        hour: int | None = None,
    ) -> Decision:
        """Decide LONG / SHORT / NO_TRADE for one snapshot's verdicts."""
        if hour is None:
            hour = self.current_hour()

        verdicts = list(verdicts)
        agreement = self.compute_agreement(verdicts)
        breakdown = self.score_breakdown(verdicts, agreement, hour)
        meta_score = breakdown.meta_score

        has_direction = agreement.majority_direction != Direction.NEUTRAL
        has_agreement = agreement.majority_count >= self.config.min_detector_agreement
        has_confidence = meta_score >= self.config.min_confidence

        explain = dict(
            verdicts=verdicts,
            agreement=agreement,
            meta_score=meta_score,
            score_breakdown=breakdown,
            time_multiplier=breakdown.time_multiplier,
            hour=hour,
        )

        if has_direction and has_agreement and has_confidence:
            direction = agreement.majority_direction
            levels = self.levels.generate(direction, snapshot.last_price, snapshot, verdicts)
            decision = Decision(
                direction=DecisionDirection(direction.value),
                confidence=math.floor(meta_score + 0.5),
                reason=(
                    f"Ensemble signal: {agreement.majority_count} detectors agree, "
                    f"{meta_score:.1f}% confidence"
                ),
                levels=levels,
                explain=DecisionExplain(
                    **explain,
                    requirements_met=True,
                    detector_families=breakdown.families,
                ),
            )
            logger.debug("%s: %s", snapshot.symbol, decision.reason)
            return decision

        failures = []
        if not has_agreement:
            failures.append(
                f"Insufficient detector agreement: {agreement.majority_count} < "
                f"{self.config.min_detector_agreement}"
            )
        if not has_confidence:
            failures.append(
                f"Low confidence: {meta_score:.1f}% < {self.config.min_confidence:g}%"
            )
        if not has_direction:
            failures.append("No clear directional bias")

        logger.debug("%s: no trade (%s)", snapshot.symbol, "; ".join(failures))
        return Decision(
            direction=DecisionDirection.NO_TRADE,
            confidence=0,
            reason=f"No trading signal: {failures[0]}",
            levels=None,
            explain=DecisionExplain(
                **explain,
                requirements_met=False,
                failure_reasons=failures,
                detector_families=breakdown.families,
            ),
        )
