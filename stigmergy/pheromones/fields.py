"""PheromoneField -- sparse grid of trail deposits.

Deposits are keyed by a quantised grid cell rather than by continuous
position, so repeated deposits in the same neighbourhood accumulate into
one entry.  The field is treated as immutable: every operation returns a
new field and leaves the receiver untouched, which is what lets a tick
read one consistent field while ants describe their deposits against it.
Evaporation lives in ``decay.py``.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from stigmergy.world.geometry import Position, distances

CELL_SIZE = 10.0
MAX_INTENSITY = 100.0

CellKey = tuple[int, int]


class PheromoneType(Enum):
    """The two trail chemicals."""

    TO_FOOD = "toFood"
    TO_NEST = "toNest"


@dataclass(frozen=True)
class Pheromone:
    """One live deposit.

    Attributes:
        position: Centre of the grid cell holding the deposit.
        intensity: Concentration in ``[0, MAX_INTENSITY]``.
        ptype: Which trail this deposit belongs to.
    """

    position: Position
    intensity: float
    ptype: PheromoneType


def cell_key(position: Position) -> CellKey:
    """Return the integer grid cell containing ``position``."""
    return (math.floor(position.x / CELL_SIZE), math.floor(position.y / CELL_SIZE))


def cell_center(key: CellKey) -> Position:
    """Return the canonical position stored for a cell."""
    return Position(
        key[0] * CELL_SIZE + CELL_SIZE / 2,
        key[1] * CELL_SIZE + CELL_SIZE / 2,
    )


@dataclass
class PheromoneField:
    """All live pheromone deposits for a world.

    At most one entry exists per cell.  A deposit of a different type
    into an occupied cell intensifies it but keeps the existing type.

    Attributes:
        cells: Mapping from grid cell to its deposit.
    """

    cells: dict[CellKey, Pheromone] = field(default_factory=dict)
    _arrays: dict[
        PheromoneType,
        tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]],
    ] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.cells)

    def __bool__(self) -> bool:
        return bool(self.cells)

    def __iter__(self) -> Iterator[Pheromone]:
        return iter(self.cells.values())

    def get(self, position: Position) -> Pheromone | None:
        """Return the deposit in the cell containing ``position``, if any."""
        return self.cells.get(cell_key(position))

    def deposit_entry(
        self,
        position: Position,
        ptype: PheromoneType,
        amount: float,
    ) -> tuple[CellKey, Pheromone]:
        """Compute the entry a deposit would produce, without applying it.

        Args:
            position: Where the ant stands.
            ptype: Trail type to lay.
            amount: Intensity to add.

        Returns:
            The cell key and the resulting deposit for that cell.
        """
        key = cell_key(position)
        existing = self.cells.get(key)
        if existing is not None:
            entry = Pheromone(
                position=existing.position,
                intensity=min(MAX_INTENSITY, existing.intensity + amount),
                ptype=existing.ptype,
            )
        else:
            entry = Pheromone(
                position=cell_center(key),
                intensity=min(MAX_INTENSITY, amount),
                ptype=ptype,
            )
        return key, entry

    def deposit(
        self,
        position: Position,
        ptype: PheromoneType,
        amount: float,
    ) -> PheromoneField:
        """Return a new field with one deposit applied."""
        key, entry = self.deposit_entry(position, ptype, amount)
        return self.merge({key: entry})

    def merge(self, updates: Mapping[CellKey, Pheromone]) -> PheromoneField:
        """Return a new field with ``updates`` overwriting matching cells."""
        if not updates:
            return self
        cells = dict(self.cells)
        cells.update(updates)
        return PheromoneField(cells=cells)

    def strength(
        self,
        position: Position,
        ptype: PheromoneType,
        radius: float,
        width: float,
        height: float,
    ) -> float:
        """Sum distance-weighted intensity of one type near ``position``.

        Each entry strictly within ``radius`` contributes
        ``intensity / (1 + distance)`` using toroidal distance.

        Returns:
            The summed strength, 0.0 when nothing qualifies.
        """
        xs, ys, intensities = self._points(ptype)
        if intensities.size == 0:
            return 0.0
        dist = distances(position, xs, ys, width, height)
        near = dist < radius
        return float(np.sum(intensities[near] / (1.0 + dist[near])))

    def _points(
        self,
        ptype: PheromoneType,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """Coordinate and intensity arrays for one type, built once."""
        cached = self._arrays.get(ptype)
        if cached is None:
            entries = [p for p in self.cells.values() if p.ptype is ptype]
            cached = (
                np.array([p.position.x for p in entries], dtype=np.float64),
                np.array([p.position.y for p in entries], dtype=np.float64),
                np.array([p.intensity for p in entries], dtype=np.float64),
            )
            self._arrays[ptype] = cached
        return cached
