"""Position sizing from risk configuration and trade levels."""

from __future__ import annotations

from signal_core.indicators import position_size
from signal_core.models import PositionSizing, RiskConfig, TradeLevels


class PositionSizer:
    """Risks ``risk_percent`` of ``balance`` between entry and stop."""

    def __init__(self, config: RiskConfig | None = None):
        self.config = config or RiskConfig()

    def size(self, levels: TradeLevels) -> PositionSizing:
        return position_size(
            self.config.balance,
            self.config.risk_percent,
            levels.entry,
            levels.stop_loss,
        )
