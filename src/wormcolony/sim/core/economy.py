from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .config import EconomyConfig


class EconomyAction(str, Enum):
    FEED = "feed"
    SMALL_BUY = "smallBuy"
    WHALE_BUY = "whaleBuy"
    SELL = "sell"
    STORM = "storm"


@dataclass(slots=True)
class EconomyState:
    """Economy counters that drive every population and mutation decision.

    The simulation only reads these. Callers adjusting them are expected to
    keep them non-negative; :func:`wormcolony.sim.systems.market.adjust`
    does that clamping.
    """

    buyers: int = 0
    volume: float = 0.0
    market_cap: float = 0.0

    def growth_score(self, config: EconomyConfig | None = None) -> float:
        config = config or EconomyConfig()
        return (
            self.market_cap / config.market_cap_divisor
            + self.volume / config.volume_divisor
            + self.buyers / config.buyers_divisor
        )
