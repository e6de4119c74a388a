"""Movement primitives for ants on the torus.

Three ways to take one step:

- ``random_walk``: jitter the heading and walk forward.
- ``seek``: walk straight at a target, snapping onto it when close
  enough that a full step would overshoot.
- ``biased_seek``: blend a pull toward a target with random jitter.  This
  is how ants approach food they can see without beelining.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from stigmergy.world.geometry import (
    Position,
    heading_offset,
    normalize_angle,
    shortest_delta,
    wrap,
)

if TYPE_CHECKING:
    from numpy.random import Generator

DEFAULT_SPEED = 2.0
DEFAULT_TURN_RANGE = 0.5
DEFAULT_BIAS_STRENGTH = 0.3


def random_turn(rng: Generator, turn_range: float) -> float:
    """Draw a uniform turn in ``[-turn_range / 2, turn_range / 2)``."""
    return (float(rng.random()) - 0.5) * turn_range


def random_walk(
    position: Position,
    direction: float,
    width: float,
    height: float,
    rng: Generator,
    *,
    speed: float = DEFAULT_SPEED,
    turn_range: float = DEFAULT_TURN_RANGE,
) -> tuple[Position, float]:
    """Perturb the heading and step ``speed`` units along it.

    Args:
        position: Current location.
        direction: Current heading in radians.
        width: World width.
        height: World height.
        rng: Random source for the heading jitter.
        speed: Step length.
        turn_range: Total width of the uniform heading jitter.

    Returns:
        The wrapped new position and the new heading.
    """
    new_direction = direction + random_turn(rng, turn_range)
    moved = heading_offset(position, new_direction, speed)
    return wrap(moved, width, height), new_direction


def seek(
    position: Position,
    target: Position,
    width: float,
    height: float,
    speed: float = DEFAULT_SPEED,
) -> Position:
    """Move straight toward ``target`` along the shortest path.

    If the target is closer than one step the result is exactly the
    target, so repeated calls never oscillate around it.
    """
    dx, dy = shortest_delta(position, target, width, height)
    dist = math.hypot(dx, dy)
    if dist < speed:
        return target
    moved = Position(
        position.x + dx / dist * speed,
        position.y + dy / dist * speed,
    )
    return wrap(moved, width, height)


def biased_seek(
    position: Position,
    direction: float,
    target: Position,
    width: float,
    height: float,
    rng: Generator,
    *,
    bias_strength: float = DEFAULT_BIAS_STRENGTH,
    turn_range: float = 0.8,
    speed: float = DEFAULT_SPEED,
) -> tuple[Position, float]:
    """Step with a heading pulled partly toward ``target``.

    The heading correction is ``bias_strength`` times the angular gap to
    the target plus ``1 - bias_strength`` times uniform jitter.  At 1.0
    the ant turns fully onto the target bearing; at 0.0 it is a random
    walk.

    Returns:
        The wrapped new position and the new heading.
    """
    dx, dy = shortest_delta(position, target, width, height)
    target_direction = math.atan2(dy, dx)
    turn = random_turn(rng, turn_range)
    gap = normalize_angle(target_direction - direction)
    new_direction = direction + gap * bias_strength + turn * (1.0 - bias_strength)
    moved = heading_offset(position, new_direction, speed)
    return wrap(moved, width, height), new_direction
