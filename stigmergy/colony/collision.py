"""Short-range repulsion between ants.

Ants within ``avoidance_radius`` of each other push apart: the heading is
blended toward the summed repulsion vector and the position is nudged a
little along it.  With nobody in range the input comes back untouched.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from stigmergy.world.geometry import (
    Position,
    distance,
    normalize_angle,
    shortest_delta,
    wrap,
)

if TYPE_CHECKING:
    from stigmergy.world.entities import Ant

DEFAULT_AVOIDANCE_RADIUS = 8.0
DEFAULT_AVOIDANCE_STRENGTH = 0.5
MAX_NUDGE = 1.0


def avoid_collisions(
    position: Position,
    direction: float,
    others: Iterable[Ant],
    self_id: str,
    width: float,
    height: float,
    *,
    avoidance_radius: float = DEFAULT_AVOIDANCE_RADIUS,
    avoidance_strength: float = DEFAULT_AVOIDANCE_STRENGTH,
    max_nudge: float = MAX_NUDGE,
) -> tuple[Position, float]:
    """Steer away from nearby ants.

    Args:
        position: Candidate position after this tick's movement.
        direction: Candidate heading.
        others: All ants in the snapshot (``self_id`` is skipped).
        self_id: Id of the ant being moved.
        width: World width.
        height: World height.
        avoidance_radius: Neighbours closer than this repel.
        avoidance_strength: Blend weight per neighbour, capped at 1 total.
        max_nudge: Longest allowed position correction.

    Returns:
        ``(position, direction)`` -- the very same objects when no
        neighbour is in range.
    """
    force_x = 0.0
    force_y = 0.0
    count = 0
    for other in others:
        if other.id == self_id:
            continue
        dist = distance(position, other.position, width, height)
        # coincident ants have no direction to push along
        if dist <= 0.0 or dist >= avoidance_radius:
            continue
        dx, dy = shortest_delta(other.position, position, width, height)
        length = math.hypot(dx, dy)
        if length <= 0.0:
            continue
        weight = (avoidance_radius - dist) / avoidance_radius
        force_x += dx / length * weight
        force_y += dy / length * weight
        count += 1

    if count == 0:
        return position, direction

    blend = min(count * avoidance_strength, 1.0)
    away = math.atan2(force_y, force_x)
    new_direction = direction + normalize_angle(away - direction) * blend

    nudge_x = force_x * blend * 0.5
    nudge_y = force_y * blend * 0.5
    nudge = math.hypot(nudge_x, nudge_y)
    if nudge > max_nudge:
        nudge_x *= max_nudge / nudge
        nudge_y *= max_nudge / nudge
    nudged = Position(position.x + nudge_x, position.y + nudge_y)
    return wrap(nudged, width, height), new_direction
