from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class EconomyConfig:
    market_cap_divisor: float = 20000.0
    volume_divisor: float = 6000.0
    buyers_divisor: float = 10.0


@dataclass
class ColonyConfig:
    max_colonies: int = 16
    split_step: float = 25000.0
    split_distance_min: float = 240.0
    split_distance_max: float = 460.0
    split_hue_spread: float = 90.0
    starters_min: int = 2
    starters_max: int = 7
    starter_large_chance: float = 0.25
    root_hue: float = 150.0
    initial_velocity: float = 0.14
    drift_jitter: float = 0.018
    velocity_damping: float = 0.986
    node_count: tuple[int, int] = (4, 7)
    node_offset: float = 70.0


@dataclass
class WormConfig:
    segment_count: tuple[int, int] = (10, 18)
    large_segment_count: tuple[int, int] = (18, 28)
    segment_length: tuple[float, float] = (7.0, 12.0)
    large_segment_length: tuple[float, float] = (10.0, 16.0)
    width: tuple[float, float] = (4.2, 7.0)
    large_width: tuple[float, float] = (7.0, 11.0)
    speed: tuple[float, float] = (0.5, 1.05)
    large_speed: tuple[float, float] = (0.38, 0.75)
    turn_rate: tuple[float, float] = (0.008, 0.02)
    hue_spread: float = 160.0
    spawn_spread: float = 55.0
    limb_length: tuple[float, float] = (22.0, 70.0)
    large_limb_length: tuple[float, float] = (35.0, 90.0)


@dataclass
class PopulationConfig:
    base_target: float = 3.0
    growth_target_slope: float = 2.0
    max_target: int = 96
    max_interval: float = 1.25
    min_interval: float = 0.16
    growth_interval_slope: float = 0.04
    large_chance: float = 0.18
    shockwave_chance: float = 0.35
    shockwave_strength: float = 0.6


@dataclass
class SteeringConfig:
    speed_factor: float = 2.05
    boss_boost: float = 1.8
    jitter_wobble: float = 0.10
    jitter_frequency: float = 2.0
    desire_frequency: float = 1.4
    hunter_wobble: float = 0.20
    default_wobble: float = 0.12
    orbit_radius: float = 150.0
    orbit_aura_radius: float = 60.0
    leash_radius: float = 330.0
    leash_aura_radius: float = 60.0
    leash_pull: float = 0.05
    leash_overage_pull: float = 0.08
    leash_turn_offset: float = 0.8
    leash_turn_rate: float = 0.14


@dataclass
class ChainConfig:
    follow: float = 0.8


@dataclass
class MutationConfig:
    max_interval: float = 2.1
    min_interval: float = 0.42
    growth_interval_slope: float = 0.08
    fire_chance: float = 0.62
    rare_chance: float = 0.06
    color_weight: float = 0.30
    speed_weight: float = 0.26
    width_weight: float = 0.22
    limb_large_chance: float = 0.35
    min_width: float = 3.5
    max_width: float = 16.0
    rare_max_width: float = 18.0
    speed_cap: float = 6.0
    shockwave_chance: float = 0.22
    shockwave_strength: float = 0.9
    rare_shockwave_strength: float = 1.2


@dataclass
class BossConfig:
    market_cap_threshold: float = 50000.0
    width_multiplier: float = 1.6
    speed_multiplier: float = 0.72
    hue: float = 120.0
    limbs: int = 4
    emerge_shockwave: float = 1.4
    dash_interval: tuple[float, float] = (8.0, 14.0)
    dash_duration: tuple[float, float] = (0.55, 0.85)
    dash_impulse: tuple[float, float] = (680.0, 980.0)
    dash_arc: float = 1.9
    dash_decay_per_second: float = 0.10
    dash_turn_rate: float = 0.25
    orbit_flip_chance: float = 0.35
    dash_leash_radius: float = 520.0
    dash_leash_aura_radius: float = 120.0
    dash_leash_pull: float = 0.06
    dash_leash_damping: float = 0.65
    closing_shockwave: float = 1.2


@dataclass
class ShockwaveConfig:
    base_growth: float = 2.6
    growth_per_strength: float = 1.2
    initial_alpha: float = 0.85
    base_width: float = 2.0
    decay: float = 0.96
    min_alpha: float = 0.06
    giant_layers: tuple[tuple[float, float], ...] = ((0.0, 3.0), (0.04, 2.4), (0.09, 1.8))


@dataclass
class EventLogConfig:
    capacity: int = 80
    merge_window_seconds: float = 1.4


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    max_frame_dt: float = 0.05
    render_rate: float = 40.0
    seed: int = 42
    config_version: str = "v1"
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    colony: ColonyConfig = field(default_factory=ColonyConfig)
    worm: WormConfig = field(default_factory=WormConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    mutation: MutationConfig = field(default_factory=MutationConfig)
    boss: BossConfig = field(default_factory=BossConfig)
    shockwave: ShockwaveConfig = field(default_factory=ShockwaveConfig)
    events: EventLogConfig = field(default_factory=EventLogConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    snapshot_queue_limit: int = 120


_SECTIONS = {
    "economy": EconomyConfig,
    "colony": ColonyConfig,
    "worm": WormConfig,
    "population": PopulationConfig,
    "steering": SteeringConfig,
    "chain": ChainConfig,
    "mutation": MutationConfig,
    "boss": BossConfig,
    "shockwave": ShockwaveConfig,
    "events": EventLogConfig,
}


def _tuples(values: dict) -> dict:
    # YAML has no tuples; ranges arrive as lists.
    converted = {}
    for key, value in values.items():
        if isinstance(value, list):
            value = tuple(tuple(item) if isinstance(item, list) else item for item in value)
        converted[key] = value
    return converted


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: cls(**_tuples(raw.get(name) or {})) for name, cls in _SECTIONS.items()}
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    return SimulationConfig(**sections, **sim_values)
