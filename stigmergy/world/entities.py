"""Entities that live on the plane: ants and food.

Entities are frozen dataclasses.  The simulation never mutates one in
place; every tick produces replacements via :func:`dataclasses.replace`,
so a snapshot handed to a renderer stays valid while the next one is
being computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from stigmergy.world.geometry import Position


class AntState(Enum):
    """The two behavioural states of a forager."""

    FORAGING = auto()
    RETURNING = auto()


@dataclass(frozen=True)
class Ant:
    """A single ant agent.

    Attributes:
        id: Unique identifier, stable for the lifetime of a run.
        position: Current location on the torus.
        direction: Facing in radians.  Any real value; geometry helpers
            interpret it modulo 2*pi.
        has_food: True while carrying food back to the nest.
        target_food: Id of the food item last collected from.  A weak
            reference: the food may already be gone.
        food_amount: Amount the food item held at pickup time.  Scales
            trail strength on the way home.
    """

    id: str
    position: Position
    direction: float
    has_food: bool = False
    target_food: str | None = None
    food_amount: float | None = None

    @property
    def state(self) -> AntState:
        """Return the behavioural state implied by ``has_food``."""
        return AntState.RETURNING if self.has_food else AntState.FORAGING


@dataclass(frozen=True)
class Food:
    """A food source.

    Attributes:
        id: Unique identifier.
        position: Location on the torus.
        amount: Units left.  Each collection removes exactly one.
    """

    id: str
    position: Position
    amount: float
