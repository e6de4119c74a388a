"""Geometry on a toroidal (wrap-around) plane.

The world is a ``width`` x ``height`` rectangle whose opposite edges are
joined.  Every helper here measures along the shorter of the direct and
the wrap-around path on each axis.  All functions are pure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

TAU = 2.0 * math.pi


@dataclass(frozen=True)
class Position:
    """A point on the plane.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
    """

    x: float
    y: float


def _wrap_axis(value: float, modulus: float) -> float:
    wrapped = value % modulus
    # -1e-20 % 800 rounds up to 800.0
    if wrapped >= modulus:
        return 0.0
    return wrapped


def wrap(position: Position, width: float, height: float) -> Position:
    """Map a position into ``[0, width) x [0, height)``.

    Args:
        position: Any point, possibly outside the world or negative.
        width: World width.
        height: World height.

    Returns:
        The equivalent point inside the world.
    """
    return Position(_wrap_axis(position.x, width), _wrap_axis(position.y, height))


def _shortest_axis(delta: float, span: float) -> float:
    if delta > span / 2:
        return delta - span
    if delta < -span / 2:
        return delta + span
    return delta


def shortest_delta(
    source: Position,
    target: Position,
    width: float,
    height: float,
) -> tuple[float, float]:
    """Return the signed displacement from ``source`` to ``target``.

    Each axis picks whichever of the direct or wrapped offsets is shorter.
    """
    return (
        _shortest_axis(target.x - source.x, width),
        _shortest_axis(target.y - source.y, height),
    )


def distance(a: Position, b: Position, width: float, height: float) -> float:
    """Euclidean distance between two points on the torus.

    Args:
        a: First point.
        b: Second point.
        width: World width.
        height: World height.

    Returns:
        The shortest distance, 0.0 when the points coincide.
    """
    dx = abs(a.x - b.x) % width
    dy = abs(a.y - b.y) % height
    dx = min(dx, width - dx)
    dy = min(dy, height - dy)
    return math.sqrt(dx * dx + dy * dy)


def distances(
    position: Position,
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    width: float,
    height: float,
) -> NDArray[np.float64]:
    """Vectorised :func:`distance` from one point to many."""
    dx = np.abs(xs - position.x) % width
    dy = np.abs(ys - position.y) % height
    dx = np.minimum(dx, width - dx)
    dy = np.minimum(dy, height - dy)
    return np.sqrt(dx * dx + dy * dy)


def bearing(source: Position, target: Position, width: float, height: float) -> float:
    """Heading (radians) of the shortest path from ``source`` to ``target``."""
    dx, dy = shortest_delta(source, target, width, height)
    return math.atan2(dy, dx)


def normalize_angle(angle: float) -> float:
    """Reduce an angle to the half-open range ``(-pi, pi]``."""
    normalized = math.remainder(angle, TAU)
    if normalized <= -math.pi:
        normalized += TAU
    return normalized


def heading_offset(position: Position, angle: float, length: float) -> Position:
    """Project ``length`` units from ``position`` along ``angle`` (unwrapped)."""
    return Position(
        position.x + math.cos(angle) * length,
        position.y + math.sin(angle) * length,
    )
