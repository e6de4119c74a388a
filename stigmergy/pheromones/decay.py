"""Evaporation models for the pheromone field.

Separated from ``fields.py`` so that decay models can be swapped
independently.  Both models return a new field and drop entries whose
intensity falls to or below the model's threshold.

- **Exponential**: ``intensity *= rate``.  Trails fade at a constant
  relative rate.
- **Logarithmic**: the amount evaporated grows with the current
  intensity, so concentrated cells shed proportionally more and trails
  converge toward a steady band instead of saturating at the cap.
"""

from __future__ import annotations

import math
from enum import Enum

from stigmergy.pheromones.fields import CellKey, Pheromone, PheromoneField

EXPONENTIAL_THRESHOLD = 0.01
LOGARITHMIC_THRESHOLD = 0.1
BASE_EVAPORATION = 0.05

_LOG_SCALE = math.log10(101.0)


class DecayModel(Enum):
    """Selectable evaporation models."""

    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"


def _rebuild(
    field: PheromoneField,
    intensities: dict[CellKey, float],
    threshold: float,
) -> PheromoneField:
    cells = {}
    for key, intensity in intensities.items():
        if intensity > threshold:
            old = field.cells[key]
            cells[key] = Pheromone(
                position=old.position,
                intensity=intensity,
                ptype=old.ptype,
            )
    return PheromoneField(cells=cells)


def exponential_decay(field: PheromoneField, rate: float) -> PheromoneField:
    """Multiply every intensity by ``rate`` and prune faint entries.

    Args:
        field: The field to decay.
        rate: Retained fraction per decay call (e.g. 0.99).

    Returns:
        A new field.
    """
    intensities = {key: p.intensity * rate for key, p in field.cells.items()}
    return _rebuild(field, intensities, EXPONENTIAL_THRESHOLD)


def logarithmic_evaporation(intensity: float, rate: float) -> float:
    """Return how much a cell of ``intensity`` loses in one decay call.

    ``rate`` is read as evaporation strength: 0.9 evaporates hard, 0.999
    barely at all.
    """
    log_factor = math.log10(intensity + 1.0) / _LOG_SCALE
    strength = (1.0 - rate) * 10.0
    return BASE_EVAPORATION + log_factor * strength * intensity


def logarithmic_decay(field: PheromoneField, rate: float) -> PheromoneField:
    """Evaporate with intensity-weighted loss and prune faint entries."""
    intensities = {
        key: p.intensity - logarithmic_evaporation(p.intensity, rate)
        for key, p in field.cells.items()
    }
    return _rebuild(field, intensities, LOGARITHMIC_THRESHOLD)


def decay(
    field: PheromoneField,
    rate: float,
    model: DecayModel = DecayModel.EXPONENTIAL,
) -> PheromoneField:
    """Run one decay pass with the selected model."""
    match model:
        case DecayModel.EXPONENTIAL:
            return exponential_decay(field, rate)
        case DecayModel.LOGARITHMIC:
            return logarithmic_decay(field, rate)
        case _:
            msg = f"unknown decay model {model!r}"
            raise ValueError(msg)
