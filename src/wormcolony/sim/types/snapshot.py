from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    colonies: List[Dict[str, Any]]
    economy: "SnapshotEconomy"
    boss: Dict[str, Any] | None
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotEconomy:
    buyers: int
    volume: float
    market_cap: float
    growth_score: float
    next_split_threshold: float


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    tick_rate: float
    render_rate: float
    seed: int
    config_version: str
    selected: int
