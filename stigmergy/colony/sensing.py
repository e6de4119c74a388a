"""Sensing -- pheromone gradients and target lookups.

``follow_pheromone`` implements the classic three-sensor scheme: probe
ahead-left, ahead and ahead-right, and turn toward whichever smells
strongest.  The target queries are linear scans with toroidal distance.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Protocol, TypeVar

from stigmergy.pheromones.fields import PheromoneField, PheromoneType
from stigmergy.world.geometry import Position, distance, heading_offset

SENSOR_DISTANCE = 20.0
SENSOR_ANGLE = math.pi / 4
DETECTION_RADIUS = 30.0
MINIMUM_STRENGTH = 0.1


class Located(Protocol):
    """Anything with a ``position``."""

    @property
    def position(self) -> Position: ...


T = TypeVar("T", bound=Located)


def follow_pheromone(
    position: Position,
    field: PheromoneField,
    ptype: PheromoneType,
    direction: float,
    width: float,
    height: float,
    *,
    sensor_distance: float = SENSOR_DISTANCE,
    sensor_angle: float = SENSOR_ANGLE,
    detection_radius: float = DETECTION_RADIUS,
    minimum_strength: float = MINIMUM_STRENGTH,
) -> float:
    """Pick a heading from three pheromone sensors.

    Sensors sit ``sensor_distance`` ahead at ``direction - sensor_angle``,
    ``direction`` and ``direction + sensor_angle``, evaluated in that
    order.  The first sensor with the highest reading wins.

    Returns:
        The winning sensor heading, or ``direction`` itself when the best
        reading does not exceed ``minimum_strength``.
    """
    if not field:
        return direction

    best_heading = direction
    best_strength = -1.0
    for heading in (direction - sensor_angle, direction, direction + sensor_angle):
        probe = heading_offset(position, heading, sensor_distance)
        reading = field.strength(probe, ptype, detection_radius, width, height)
        if reading > best_strength:
            best_strength = reading
            best_heading = heading

    if best_strength <= minimum_strength:
        return direction
    return best_heading


def find_nearest_target(
    position: Position,
    targets: Sequence[T],
    width: float,
    height: float,
    max_distance: float = math.inf,
) -> T | None:
    """Return the closest target strictly nearer than ``max_distance``.

    Ties keep the first target encountered.
    """
    nearest: T | None = None
    best = max_distance
    for target in targets:
        dist = distance(position, target.position, width, height)
        if dist < best:
            nearest = target
            best = dist
    return nearest


def targets_in_radius(
    position: Position,
    targets: Sequence[T],
    radius: float,
    width: float,
    height: float,
) -> list[T]:
    """Return every target within ``radius`` (inclusive), in input order."""
    return [
        target
        for target in targets
        if distance(position, target.position, width, height) <= radius
    ]
