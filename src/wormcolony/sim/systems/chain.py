from __future__ import annotations

import math

from ..core.entities import Worm


def relax_chain(worm: Worm, follow: float = 0.8) -> None:
    """Pull each trailing segment toward its rest point behind the one ahead.

    Segments move ``follow`` of the way to the point one segment length from
    their predecessor, so lengths are only approximately kept and the body
    lags through sharp turns.
    """
    keep = 1.0 - follow
    segments = worm.segments
    for index in range(1, len(segments)):
        prev = segments[index - 1].position
        seg = segments[index]
        dx = seg.position.x - prev.x
        dy = seg.position.y - prev.y
        angle = math.atan2(dy, dx)
        target_x = prev.x + math.cos(angle) * seg.length
        target_y = prev.y + math.sin(angle) * seg.length
        seg.position.update(
            seg.position.x * keep + target_x * follow,
            seg.position.y * keep + target_y * follow,
        )
        seg.heading = angle
