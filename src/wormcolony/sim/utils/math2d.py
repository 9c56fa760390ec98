from __future__ import annotations

import math

from pygame.math import Vector2

TAU = math.pi * 2.0


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _lerp_angle(a: float, b: float, t: float) -> float:
    """Interpolate from ``a`` toward ``b`` along the shortest arc."""
    delta = math.fmod(b - a, TAU)
    if delta > math.pi:
        delta -= TAU
    if delta < -math.pi:
        delta += TAU
    return a + delta * t


def _wrap_hue(hue: float) -> float:
    wrapped = hue % 360.0
    # -1e-18 % 360.0 rounds to 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def _heading_between(origin: Vector2, target: Vector2) -> float:
    return math.atan2(target.y - origin.y, target.x - origin.x)


def _polar(angle: float, length: float) -> Vector2:
    return Vector2(math.cos(angle) * length, math.sin(angle) * length)
