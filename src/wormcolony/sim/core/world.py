from __future__ import annotations

import logging
import math
from time import perf_counter
from typing import Any, Dict, List

from .config import SimulationConfig
from .economy import EconomyAction, EconomyState
from .entities import Colony, Worm
from .rng import DeterministicRng
from .state import BossDashing, SimulationState
from ..systems import boss as boss_system
from ..systems import market, mutation, population, registry, shockwaves, steering
from ..systems import metrics as metrics_system
from ..systems.events import EventBus, EventListener, EventLog
from ..types.events import EventKind
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotEconomy, SnapshotMetadata

logger = logging.getLogger(__name__)


class World:
    """Owns one simulation and runs its step function.

    Everything the renderer, audio or UI layers need is read through
    :meth:`snapshot`, :attr:`events` and :attr:`event_log`; all mutation
    happens inside :meth:`step` or the explicit control calls.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._event_log = EventLog(config.events)
        events = EventBus()
        events.subscribe(self._event_log)
        self._state = self._new_state(events)
        self._metrics: TickMetrics | None = None
        self._bootstrap()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def colonies(self) -> List[Colony]:
        return self._state.colonies

    @property
    def economy(self) -> EconomyState:
        return self._state.economy

    @property
    def events(self) -> EventBus:
        return self._state.events

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def selected_index(self) -> int:
        return self._state.selected

    @property
    def boss(self) -> Worm | None:
        return self._state.boss.worm if self._state.boss is not None else None

    def subscribe(self, listener: EventListener) -> None:
        self._state.events.subscribe(listener)

    def reset(self) -> None:
        self._rng.reset()
        self._event_log.clear()
        # listeners survive a reset; the state they observe does not
        self._state = self._new_state(self._state.events)
        self._state.events.tick = 0
        self._state.events.sim_time = 0.0
        self._metrics = None
        self._bootstrap()

    def step(self, tick: int, dt: float | None = None) -> TickMetrics:
        start = perf_counter()
        config = self._config
        state = self._state
        if dt is None:
            dt = config.time_step
        if not math.isfinite(dt) or dt < 0.0:
            logger.debug("skipping tick %d with unusable dt %r", tick, dt)
            return self._metrics if self._metrics is not None else self._collect(tick, 0, 0, start)
        dt = min(dt, config.max_frame_dt)

        state.tick = tick
        state.sim_time += dt
        state.events.tick = tick
        state.events.sim_time = state.sim_time
        hatches_before = state.hatches
        mutations_before = state.mutations

        shockwaves.resolve_scheduled(state, dt)
        boss_system.ensure_boss(state)
        registry.try_split(state)
        boss_system.tick_dash_timer(state, dt)
        registry.drift_colonies(state)
        steering.update_worms(state, dt)
        mutation.tick_mutation(state, dt)
        population.maybe_spawn(state, dt)

        return self._collect(tick, state.hatches - hatches_before, state.mutations - mutations_before, start)

    def apply_action(self, action: EconomyAction | str) -> None:
        market.apply_action(self._state, action)

    def adjust_economy(self, buyers: int = 0, volume: float = 0.0, market_cap: float = 0.0) -> None:
        market.adjust(self._state, buyers=buyers, volume=volume, market_cap=market_cap)

    def trigger_mutation(self) -> Worm | None:
        return mutation.mutate_random(self._state)

    def select_colony(self, index: int) -> bool:
        if not 0 <= index < len(self._state.colonies):
            return False
        self._state.selected = index
        dna = self._state.colonies[index].dna
        self._state.events.emit(
            EventKind.EVENT,
            f"Selected Colony #{index + 1} • {dna.temperament.value} • {dna.biome.value}",
        )
        return True

    def snapshot(self, tick: int) -> Snapshot:
        state = self._state
        metrics = self._metrics if self._metrics is not None else self._collect(tick, 0, 0, perf_counter())
        boss = state.boss
        boss_payload = None
        if boss is not None:
            boss_payload = {
                "worm": boss.worm.id,
                "colony": boss.colony_index,
                "dashing": boss.dashing,
                "dashes": boss.dashes,
                "time_left": boss.phase.time_left if isinstance(boss.phase, BossDashing) else 0.0,
                "countdown": 0.0 if isinstance(boss.phase, BossDashing) else boss.phase.countdown,
            }
        return Snapshot(
            tick=tick,
            metrics=metrics,
            colonies=[self._colony_snapshot(colony) for colony in state.colonies],
            economy=SnapshotEconomy(
                buyers=state.economy.buyers,
                volume=state.economy.volume,
                market_cap=state.economy.market_cap,
                growth_score=state.growth_score(),
                next_split_threshold=state.next_split_threshold,
            ),
            boss=boss_payload,
            metadata=SnapshotMetadata(
                sim_dt=self._config.time_step,
                tick_rate=0.0 if self._config.time_step <= 0 else 1.0 / self._config.time_step,
                render_rate=self._config.render_rate,
                seed=self._config.seed,
                config_version=self._config.config_version,
                selected=state.selected,
            ),
        )

    def _new_state(self, events: EventBus) -> SimulationState:
        return SimulationState(config=self._config, rng=self._rng, events=events)

    def _bootstrap(self) -> None:
        registry.seed_root_colony(self._state)

    def _collect(self, tick: int, hatches: int, mutations: int, start: float) -> TickMetrics:
        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(self._state, tick, hatches, mutations, elapsed_ms)
        self._metrics = metrics
        return metrics

    @staticmethod
    def _colony_snapshot(colony: Colony) -> Dict[str, Any]:
        dna = colony.dna
        return {
            "id": colony.id,
            "x": colony.position.x,
            "y": colony.position.y,
            "vx": colony.velocity.x,
            "vy": colony.velocity.y,
            "dna": {
                "hue": dna.hue,
                "chaos": dna.chaos,
                "drift": dna.drift,
                "aura": dna.aura,
                "temperament": dna.temperament.value,
                "biome": dna.biome.value,
                "style": dna.style.value,
            },
            "nodes": [
                {"ox": node.offset.x, "oy": node.offset.y, "r": node.radius, "phase": node.phase, "speed": node.speed}
                for node in colony.nodes
            ],
            "mutations": colony.mutations,
            "shockwaves": [
                {"r": wave.radius, "v": wave.growth_rate, "a": wave.alpha, "w": wave.width}
                for wave in colony.shockwaves
            ],
            "worms": [World._worm_snapshot(worm) for worm in colony.worms],
        }

    @staticmethod
    def _worm_snapshot(worm: Worm) -> Dict[str, Any]:
        return {
            "id": worm.id,
            "type": worm.type.value,
            "hue": worm.hue,
            "width": worm.width,
            "speed": worm.speed,
            "phase": worm.phase,
            "is_boss": worm.is_boss,
            "orbit_dir": worm.orbit_dir,
            "segments": [[seg.position.x, seg.position.y, seg.heading] for seg in worm.segments],
            "limbs": [
                {"at": limb.attachment_index, "len": limb.length, "ang": limb.angle, "wob": limb.wobble_rate}
                for limb in worm.limbs
            ],
        }
