from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from pygame.math import Vector2


class WormType(str, Enum):
    DRIFTER = "DRIFTER"
    ORBITER = "ORBITER"
    HUNTER = "HUNTER"


class Temperament(str, Enum):
    CALM = "CALM"
    AGGRESSIVE = "AGGRESSIVE"
    CHAOTIC = "CHAOTIC"
    TOXIC = "TOXIC"


class Biome(str, Enum):
    NEON_GARDEN = "NEON GARDEN"
    DEEP_SEA = "DEEP SEA"
    VOID_BLOOM = "VOID BLOOM"
    GLASS_CAVE = "GLASS CAVE"
    ARC_STORM = "ARC STORM"


class ColonyStyle(str, Enum):
    COMET = "COMET"
    CROWN = "CROWN"
    ARC = "ARC"
    SPIRAL = "SPIRAL"
    DRIFT = "DRIFT"


@dataclass(slots=True)
class ColonyDna:
    hue: float
    chaos: float = 1.0
    drift: float = 1.0
    aura: float = 1.0
    temperament: Temperament = Temperament.CALM
    biome: Biome = Biome.NEON_GARDEN
    style: ColonyStyle = ColonyStyle.COMET


@dataclass(slots=True)
class ColonyNode:
    offset: Vector2
    radius: float
    phase: float
    speed: float


@dataclass(slots=True)
class Segment:
    position: Vector2
    heading: float
    length: float


@dataclass(slots=True)
class Limb:
    attachment_index: int
    length: float
    angle: float
    wobble_rate: float


@dataclass(slots=True)
class Shockwave:
    radius: float
    growth_rate: float
    alpha: float
    width: float


@dataclass(slots=True)
class Worm:
    id: str
    type: WormType
    hue: float
    width: float
    speed: float
    turn_rate: float
    phase: float
    segments: List[Segment] = field(default_factory=list)
    limbs: List[Limb] = field(default_factory=list)
    is_boss: bool = False
    orbit_dir: int = 1
    orbit_bias: float = 1.0
    orbit_tight: float = 1.0

    @property
    def head(self) -> Segment:
        return self.segments[0]


@dataclass(slots=True)
class Colony:
    id: str
    position: Vector2
    velocity: Vector2
    dna: ColonyDna
    nodes: List[ColonyNode] = field(default_factory=list)
    worms: List[Worm] = field(default_factory=list)
    shockwaves: List[Shockwave] = field(default_factory=list)
    mutations: int = 0
