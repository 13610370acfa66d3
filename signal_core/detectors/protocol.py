"""Detector protocol and the shared fault boundary.

This module provides:
- Detector: Runtime-checkable Protocol that every detector satisfies
- BaseDetector: Base class that converts insufficient data and
  computation faults into NEUTRAL, score-0 verdicts
"""

from __future__ import annotations

import logging
import math
from typing import Any, ClassVar, Protocol, runtime_checkable

from signal_core.models import DetectorConfig, DetectorVerdict, Direction, MarketSnapshot

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "Insufficient data"


class InsufficientData(Exception):
    """Raised inside a detector when required history is missing."""


@runtime_checkable
class Detector(Protocol):
    """Protocol that all detectors must implement.

    Detectors are stateless: the same snapshot and config always give
    the same verdict, and evaluating one detector never affects another.
    """

    @property
    def name(self) -> str:
        """Unique detector identifier (e.g., 'momentum_breakout')."""
        ...

    @property
    def family(self) -> str:
        """Detector family used for the confluence bonus."""
        ...

    def evaluate(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        """Score the snapshot. Must never raise."""
        ...


class BaseDetector:
    """Shared ``evaluate`` wrapper around a detector's ``detect`` method.

    Subclasses set ``name``/``family`` and implement ``detect``, which may
    raise ``InsufficientData`` or any arithmetic/indexing error; both
    degrade to a NEUTRAL verdict here.
    """

    name: ClassVar[str] = ""
    family: ClassVar[str] = ""

    def evaluate(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        try:
            return self.detect(snapshot, config)
        except InsufficientData as exc:
            return self.neutral(str(exc) or INSUFFICIENT_DATA)
        except Exception as exc:
            logger.warning("Detector %s failed on %s: %s", self.name, snapshot.symbol, exc)
            return self.neutral(f"Error: {exc}")

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Verdict helpers
    # ------------------------------------------------------------------

    def neutral(self, reason: str, metadata: dict[str, Any] | None = None) -> DetectorVerdict:
        return DetectorVerdict(
            name=self.name,
            family=self.family,
            score=0.0,
            direction=Direction.NEUTRAL,
            reason=reason,
            metadata=metadata or {},
        )

    def verdict(
        self,
        score: float,
        direction: Direction,
        reason: str,
        metadata: dict[str, Any] | None = None,
    ) -> DetectorVerdict:
        """Build a verdict with the score clamped to [0, 100] and rounded."""
        if not math.isfinite(score):
            raise ValueError(f"non-finite score {score!r}")
        clamped = max(0.0, min(100.0, float(score)))
        return DetectorVerdict(
            name=self.name,
            family=self.family,
            score=float(round(clamped)),
            direction=direction,
            reason=reason,
            metadata=metadata or {},
        )

    @staticmethod
    def require(condition: bool, reason: str = INSUFFICIENT_DATA) -> None:
        """Raise InsufficientData unless ``condition`` holds."""
        if not condition:
            raise InsufficientData(reason)
