from __future__ import annotations

import argparse
import csv
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional, Sequence

from ..sim.core.config import SimulationConfig
from ..sim.core.economy import EconomyAction
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics
from ..sim.types.events import SimEvent

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "sim_time",
    "colonies",
    "worms",
    "growth_score",
    "target_population",
    "hatches",
    "mutations",
    "shockwaves",
    "boss_present",
    "boss_dashing",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        f"{metrics.sim_time:.4f}",
        metrics.colonies,
        metrics.worms,
        f"{metrics.growth_score:.4f}",
        metrics.target_population,
        metrics.hatches,
        metrics.mutations,
        metrics.shockwaves,
        int(metrics.boss_present),
        int(metrics.boss_dashing),
        f"{tick_ms:.3f}",
    ]


def parse_action_schedule(entries: Sequence[str]) -> list[tuple[EconomyAction, int]]:
    """Parse ``NAME:EVERY`` pairs such as ``whaleBuy:120``."""
    schedule = []
    for entry in entries:
        name, _, every = entry.partition(":")
        try:
            action = EconomyAction(name)
        except ValueError:
            raise ValueError(f"Unknown action: {name}") from None
        interval = int(every) if every else 1
        if interval <= 0:
            raise ValueError(f"Action interval must be positive: {entry}")
        schedule.append((action, interval))
    return schedule


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0}
    return {"min": float(min(values)), "max": float(max(values)), "avg": float(sum(values) / len(values))}


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    actions: Sequence[str] = (),
    config: Optional[SimulationConfig] = None,
) -> World:
    config = config or SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)
    schedule = parse_action_schedule(actions)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    worm_series: list[float] = []
    event_counts: Counter[str] = Counter()

    def _count(event: SimEvent) -> None:
        event_counts[event.kind.value] += 1

    world.subscribe(_count)

    try:
        for tick in range(steps):
            for action, every in schedule:
                if tick % every == 0:
                    world.apply_action(action)
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            worm_series.append(float(metrics.worms))
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info(
        "ran %d steps: %d colonies, %d worms, boss=%s",
        steps,
        len(world.colonies),
        world.state.total_worms(),
        world.boss is not None,
    )

    if summary_path:
        economy = world.economy
        summary = {
            "steps": steps,
            "seed": config.seed,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "worms": _summary_stats(worm_series),
            "colonies": len(world.colonies),
            "boss": world.boss is not None,
            "events": dict(event_counts),
            "economy": {
                "buyers": economy.buyers,
                "volume": economy.volume,
                "market_cap": economy.market_cap,
                "growth_score": world.state.growth_score(),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless worm colony simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--action",
        action="append",
        default=[],
        metavar="NAME:EVERY",
        help="Apply an economic action every N ticks (feed, smallBuy, whaleBuy, sell, storm).",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    try:
        run_headless(
            args.steps,
            args.seed,
            args.log,
            deterministic_log=args.deterministic_log,
            summary_path=args.summary,
            actions=args.action,
            config=config,
        )
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
