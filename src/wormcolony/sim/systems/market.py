from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.economy import EconomyAction
from .shockwaves import emit_shockwave

if TYPE_CHECKING:
    from ..core.state import SimulationState

# action -> (buyers range, volume range, market cap range, shockwave on colony 0)
_ACTIONS = {
    EconomyAction.FEED: ((0, 0), (20.0, 90.0), (120.0, 460.0), None),
    EconomyAction.SMALL_BUY: ((1, 1), (180.0, 900.0), (900.0, 3200.0), None),
    EconomyAction.WHALE_BUY: ((2, 5), (2500.0, 8500.0), (9000.0, 22000.0), 1.2),
    EconomyAction.SELL: ((0, 0), (-2600.0, -600.0), (-9000.0, -2200.0), None),
    EconomyAction.STORM: ((0, 0), (5000.0, 18000.0), (2000.0, 8000.0), 1.0),
}


def adjust(state: SimulationState, buyers: int = 0, volume: float = 0.0, market_cap: float = 0.0) -> None:
    """Shift the economy counters, flooring each at zero."""
    economy = state.economy
    economy.buyers = max(0, economy.buyers + int(buyers))
    economy.volume = max(0.0, economy.volume + float(volume))
    economy.market_cap = max(0.0, economy.market_cap + float(market_cap))


def apply_action(state: SimulationState, action: EconomyAction | str) -> None:
    action = EconomyAction(action)
    rng = state.rng
    buyers_range, volume_range, cap_range, shock = _ACTIONS[action]
    adjust(
        state,
        buyers=rng.next_int_inclusive(*buyers_range),
        volume=rng.next_range(*volume_range),
        market_cap=rng.next_range(*cap_range),
    )
    if shock is not None and state.colonies:
        emit_shockwave(state.colonies[0], shock, state.config.shockwave)
