"""Analysis service: snapshot provider -> detectors -> ensemble -> sizing.

Snapshot acquisition is the only suspension point. Everything after it
runs synchronously on the already-fetched snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from signal_app.config import Settings, get_settings
from signal_app.ensemble_config import EnsembleFileConfig, load_ensemble_config
from signal_core.detectors import DetectorSuite
from signal_core.ensemble import (
    Clock,
    EnsembleAggregator,
    LevelsGenerator,
    PositionSizer,
    build_feature_vector,
)
from signal_core.models import (
    Decision,
    DecisionDirection,
    DecisionExplain,
    DetectorConfig,
    EnsembleConfig,
    MarketSnapshot,
    PositionSizing,
    RiskConfig,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class SnapshotProvider(Protocol):
    """Source of market snapshots (exchange client, cache, fixture...)."""

    async def fetch_snapshot(self, symbol: str) -> MarketSnapshot:
        ...


class Recommendation(BaseModel):
    """Result of analysing one symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    decision: Decision
    sizing: PositionSizing | None = None
    features: dict[str, float] = {}

    @property
    def is_trade(self) -> bool:
        return self.decision.is_trade


class AnalysisService:
    """Runs the full pipeline for a symbol or an already-fetched snapshot."""

    def __init__(
        self,
        provider: SnapshotProvider | None = None,
        aggregator: EnsembleAggregator | None = None,
        detector_config: DetectorConfig | None = None,
        sizer: PositionSizer | None = None,
        suite: DetectorSuite | None = None,
    ):
        self.provider = provider
        self.aggregator = aggregator or EnsembleAggregator()
        self.detector_config = detector_config or DetectorConfig()
        self.sizer = sizer or PositionSizer()
        self.suite = suite or DetectorSuite()

    @classmethod
    def from_settings(
        cls,
        provider: SnapshotProvider | None = None,
        settings: Settings | None = None,
        file_config: EnsembleFileConfig | None = None,
        clock: Clock | None = None,
    ) -> "AnalysisService":
        """Build a service from environment settings and the YAML config."""
        settings = settings or get_settings()
        file_config = file_config or load_ensemble_config(settings.ensemble_config)

        # Environment settings win over the YAML file when explicitly set
        ensemble_values = file_config.to_ensemble_config().model_dump()
        if "timezone" in settings.model_fields_set:
            ensemble_values["timezone"] = settings.timezone
        if settings.min_confidence is not None:
            ensemble_values["min_confidence"] = settings.min_confidence
        if settings.min_detector_agreement is not None:
            ensemble_values["min_detector_agreement"] = settings.min_detector_agreement

        risk_values = file_config.risk.model_dump()
        if "account_balance" in settings.model_fields_set:
            risk_values["balance"] = settings.account_balance
        if "risk_percent" in settings.model_fields_set:
            risk_values["risk_percent"] = settings.risk_percent

        return cls(
            provider=provider,
            aggregator=EnsembleAggregator(
                EnsembleConfig(**ensemble_values),
                levels=LevelsGenerator(file_config.levels),
                clock=clock,
            ),
            detector_config=file_config.to_detector_config(),
            sizer=PositionSizer(RiskConfig(**risk_values)),
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def analyze_snapshot(self, snapshot: MarketSnapshot, hour: int | None = None) -> Recommendation:
        """Run detectors, ensemble and sizing on one snapshot."""
        verdicts = self.suite.run(snapshot, self.detector_config)
        decision = self.aggregator.analyze(verdicts, snapshot, hour)

        sizing = None
        if decision.is_trade and decision.levels is not None:
            sizing = self.sizer.size(decision.levels)

        when = self.aggregator.now()
        if hour is not None:
            when = when.replace(hour=hour)
        features = build_feature_vector(verdicts, snapshot, when, self.aggregator.levels)

        logger.info(
            "%s: %s (confidence %d) - %s",
            snapshot.symbol,
            decision.direction.value,
            decision.confidence,
            decision.reason,
        )
        return Recommendation(
            symbol=snapshot.symbol,
            decision=decision,
            sizing=sizing,
            features=features,
        )

    async def analyze_symbol(self, symbol: str, hour: int | None = None) -> Recommendation:
        """Fetch a snapshot and analyse it.

        Provider failures never propagate: they produce a NO_TRADE
        recommendation carrying the error.
        """
        if self.provider is None:
            raise RuntimeError("AnalysisService has no snapshot provider")

        try:
            snapshot = await self.provider.fetch_snapshot(symbol)
        except Exception as exc:
            logger.error("Failed to fetch snapshot for %s: %s", symbol, exc)
            return Recommendation(
                symbol=symbol,
                decision=Decision(
                    direction=DecisionDirection.NO_TRADE,
                    confidence=0,
                    reason=f"Analysis error: {exc}",
                    explain=DecisionExplain(failure_reasons=[f"Snapshot unavailable: {exc}"]),
                ),
            )

        return self.analyze_snapshot(snapshot, hour)

    async def analyze_symbols(
        self,
        symbols: Iterable[str],
        hour: int | None = None,
    ) -> list[Recommendation]:
        """Analyse several symbols concurrently, preserving input order."""
        return list(await asyncio.gather(
            *(self.analyze_symbol(symbol, hour) for symbol in symbols)
        ))
