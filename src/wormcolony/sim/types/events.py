from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    EVENT = "EVENT"
    BOSS = "BOSS"
    DASH = "DASH"
    MUTATION = "MUTATION"
    HATCH = "HATCH"


@dataclass(slots=True)
class SimEvent:
    kind: EventKind
    message: str
    tick: int
    sim_time: float


@dataclass(slots=True)
class EventLogEntry:
    kind: EventKind
    message: str
    sim_time: float
    count: int = 1
