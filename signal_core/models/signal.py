"""Verdict, decision and trade-level models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Direction(str, Enum):
    """Directional opinion of a single detector."""

    LONG = "LONG"
    SHORT = "SHORT"
    NEUTRAL = "NEUTRAL"


class DecisionDirection(str, Enum):
    """Final ensemble decision."""

    LONG = "LONG"
    SHORT = "SHORT"
    NO_TRADE = "NO_TRADE"


class DetectorVerdict(BaseModel):
    """One detector's directional score for a snapshot.

    score=0 usually pairs with NEUTRAL, but nothing enforces it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    family: str = ""
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    direction: Direction = Direction.NEUTRAL
    reason: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    weight: float = 1.0

    @model_validator(mode="before")
    @classmethod
    def _default_family(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("family") and data.get("name"):
            data = {**data, "family": str(data["name"]).split("_")[0]}
        return data

    @property
    def is_directional(self) -> bool:
        return self.direction != Direction.NEUTRAL

    @classmethod
    def neutral(cls, name: str, reason: str, family: str = "", weight: float = 1.0) -> "DetectorVerdict":
        """Build a NEUTRAL, score-0 verdict."""
        return cls(name=name, family=family, reason=reason, weight=weight)

    def with_weight(self, weight: float) -> "DetectorVerdict":
        return self.model_copy(update={"weight": weight})


class AgreementStats(BaseModel):
    """Tallies of material verdicts (directional and above the score threshold)."""

    model_config = ConfigDict(frozen=True)

    long_count: int = 0
    short_count: int = 0
    neutral_count: int = 0  # verdicts that did not count as material
    total_directional: int = 0
    majority_direction: Direction = Direction.NEUTRAL
    majority_count: int = 0
    agreement_ratio: float = 0.0


class MetaScoreBreakdown(BaseModel):
    """Components of the meta-score, kept for the explain payload."""

    model_config = ConfigDict(frozen=True)

    weighted_mean: float = 0.0
    families: list[str] = Field(default_factory=list)
    confluence_bonus: float = 0.0
    time_multiplier: float = 1.0
    meta_score: float = 0.0


class TradeLevels(BaseModel):
    """Entry, stop-loss and take-profit prices for a decision."""

    model_config = ConfigDict(frozen=True)

    entry: float
    stop_loss: float
    take_profit: float
    risk_reward_ratio: float


class PositionSizing(BaseModel):
    """Trade size in base units and the amount risked."""

    model_config = ConfigDict(frozen=True)

    size: float = 0.0
    max_loss: float = 0.0


class DecisionExplain(BaseModel):
    """Everything that went into a decision."""

    model_config = ConfigDict(frozen=True)

    verdicts: list[DetectorVerdict] = Field(default_factory=list)
    agreement: AgreementStats = Field(default_factory=AgreementStats)
    meta_score: float = 0.0
    score_breakdown: MetaScoreBreakdown = Field(default_factory=MetaScoreBreakdown)
    time_multiplier: float = 1.0
    hour: int | None = None
    requirements_met: bool = False
    failure_reasons: list[str] = Field(default_factory=list)
    detector_families: list[str] = Field(default_factory=list)


class Decision(BaseModel):
    """Result of one ensemble analysis call. Never persisted."""

    model_config = ConfigDict(frozen=True)

    direction: DecisionDirection = DecisionDirection.NO_TRADE
    confidence: int = 0
    reason: str = "No trading signal generated"
    levels: TradeLevels | None = None
    explain: DecisionExplain = Field(default_factory=DecisionExplain)

    @property
    def is_trade(self) -> bool:
        return self.direction != DecisionDirection.NO_TRADE
