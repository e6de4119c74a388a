"""Ant behaviour -- one tick of decision-making for a single forager.

Ants have two states, driven by ``Ant.has_food``:

- **Foraging**: look for food.  Food close enough is collected on the
  spot; food that is merely visible is approached with a biased walk.
  With no food in sight the ant may follow ``TO_FOOD`` trails (with
  probability ``tracking_strength``) or else wanders randomly.
- **Returning**: walk straight home, laying a ``TO_FOOD`` trail behind
  it.  Richer food sources produce stronger trails, up to 3x the base
  deposit.  Arriving at the nest drops the food and ends the tick.

Behaviour never mutates shared state.  ``execute_behavior`` reads a
snapshot view and returns a ``BehaviorResult`` describing the ant's
replacement, the pheromone cells it wants written and any change to the
food it touched; the simulation engine merges those for all ants.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from stigmergy.colony.collision import avoid_collisions
from stigmergy.colony.movement import biased_seek, random_walk, seek
from stigmergy.colony.sensing import (
    find_nearest_target,
    follow_pheromone,
    targets_in_radius,
)
from stigmergy.pheromones.fields import (
    CellKey,
    Pheromone,
    PheromoneField,
    PheromoneType,
)
from stigmergy.world.entities import Ant, AntState, Food
from stigmergy.world.geometry import Position, bearing, distance, normalize_angle

if TYPE_CHECKING:
    from numpy.random import Generator

# -- Constants ---------------------------------------------------------------

FOOD_DETECTION_RANGE = 20.0
FOOD_COLLECTION_RANGE = 10.0
NEST_ARRIVAL_RANGE = 10.0
COLLISION_AVOIDANCE_RADIUS = 6.0
COLLISION_AVOIDANCE_STRENGTH = 0.5
ANT_SPEED = 2.0
FOOD_APPROACH_BIAS = 0.4
FOOD_APPROACH_TURN_RANGE = 0.8
EXPLORE_TURN_RANGE = 0.5
MEANINGFUL_TURN = 0.1  # radians
QUALITY_SCALE = 30.0
MAX_QUALITY_BONUS = 2.0


class DepositPolicy(Enum):
    """When ants lay pheromone.

    ``RETURNING`` only lays ``TO_FOOD`` trails on the way home.  ``BOTH``
    additionally has searching ants lay ``TO_NEST`` trails.
    """

    RETURNING = "returning"
    BOTH = "both"


@dataclass(frozen=True)
class AntContext:
    """Read-only view of the world for one ant's decision.

    Attributes:
        ant: The ant being updated.
        foods: All food in the snapshot.
        pheromones: The snapshot's pheromone field.
        nest: Nest location.
        ants: All ants in the snapshot, for collision avoidance.
        width: World width.
        height: World height.
        deposit_amount: Base pheromone laid per step.
        tracking_strength: Probability of acting on a trail gradient.
        deposit_policy: Which states lay pheromone.
    """

    ant: Ant
    foods: Sequence[Food]
    pheromones: PheromoneField
    nest: Position
    ants: Sequence[Ant]
    width: float
    height: float
    deposit_amount: float
    tracking_strength: float
    deposit_policy: DepositPolicy = DepositPolicy.RETURNING


@dataclass(frozen=True)
class BehaviorResult:
    """What one ant wants to happen this tick.

    Attributes:
        ant: Replacement for the ant.
        deposits: Pheromone entries to write, keyed by cell.
        food_update: ``(food_id, new_amount)`` after a collection that
            leaves food behind.
        removed_food: Id of a food item emptied by a collection.
    """

    ant: Ant
    deposits: dict[CellKey, Pheromone] = field(default_factory=dict)
    food_update: tuple[str, float] | None = None
    removed_food: str | None = None


def quality_multiplier(food_amount: float | None) -> float:
    """Scale factor for trail strength, from 1x up to 3x.

    Args:
        food_amount: Amount the food source held at pickup, or None.

    Returns:
        ``1 + min(food_amount / 30, 2)``, or 1.0 when nothing was recorded.
    """
    if not food_amount:
        return 1.0
    return 1.0 + min(food_amount / QUALITY_SCALE, MAX_QUALITY_BONUS)


def execute_behavior(context: AntContext, rng: Generator) -> BehaviorResult:
    """Run one tick of the ant's state machine.

    Args:
        context: Snapshot view for this ant.
        rng: Random source for movement jitter and trail-following draws.

    Returns:
        The ant's intended changes.
    """
    match context.ant.state:
        case AntState.FORAGING:
            return _forage(context, rng)
        case AntState.RETURNING:
            return _return_home(context)


# -- Returning ---------------------------------------------------------------


def _return_home(context: AntContext) -> BehaviorResult:
    """Walk toward the nest laying trail, or drop food on arrival."""
    ant = context.ant
    if distance(ant.position, context.nest, context.width, context.height) < (
        NEST_ARRIVAL_RANGE
    ):
        return BehaviorResult(
            ant=replace(ant, has_food=False, target_food=None, food_amount=None),
        )

    moved = seek(ant.position, context.nest, context.width, context.height, ANT_SPEED)
    # Facing comes from the bearing, not from seek, so a snapping final
    # step still points at the nest.
    heading = bearing(ant.position, context.nest, context.width, context.height)
    position, direction = _avoid(context, moved, heading)

    amount = context.deposit_amount * quality_multiplier(ant.food_amount)
    key, entry = context.pheromones.deposit_entry(
        ant.position,
        PheromoneType.TO_FOOD,
        amount,
    )
    return BehaviorResult(
        ant=replace(ant, position=position, direction=direction),
        deposits={key: entry},
    )


# -- Foraging ----------------------------------------------------------------


def _forage(context: AntContext, rng: Generator) -> BehaviorResult:
    """Collect, approach, or search for food."""
    ant = context.ant
    visible = targets_in_radius(
        ant.position,
        context.foods,
        FOOD_DETECTION_RANGE,
        context.width,
        context.height,
    )
    food = find_nearest_target(ant.position, visible, context.width, context.height)
    if food is None:
        return _explore(context, rng)

    gap = distance(ant.position, food.position, context.width, context.height)
    if gap < FOOD_COLLECTION_RANGE:
        return _collect(ant, food)
    return _approach(context, food, rng)


def _collect(ant: Ant, food: Food) -> BehaviorResult:
    """Pick up one unit of food.  The ant does not move this tick."""
    remaining = food.amount - 1
    carrying = replace(
        ant,
        has_food=True,
        target_food=food.id,
        food_amount=food.amount,
    )
    if remaining <= 0:
        return BehaviorResult(ant=carrying, removed_food=food.id)
    return BehaviorResult(ant=carrying, food_update=(food.id, remaining))


def _approach(context: AntContext, food: Food, rng: Generator) -> BehaviorResult:
    """Walk toward visible food with a partial bias."""
    ant = context.ant
    moved, heading = biased_seek(
        ant.position,
        ant.direction,
        food.position,
        context.width,
        context.height,
        rng,
        bias_strength=FOOD_APPROACH_BIAS,
        turn_range=FOOD_APPROACH_TURN_RANGE,
        speed=ANT_SPEED,
    )
    position, direction = _avoid(context, moved, heading)
    return BehaviorResult(
        ant=replace(ant, position=position, direction=direction),
        deposits=_search_deposits(context),
    )


def _explore(context: AntContext, rng: Generator) -> BehaviorResult:
    """Follow a food trail when one is sensed and chosen, else wander."""
    ant = context.ant
    heading = ant.direction
    if context.pheromones and rng.random() < context.tracking_strength:
        candidate = follow_pheromone(
            ant.position,
            context.pheromones,
            PheromoneType.TO_FOOD,
            ant.direction,
            context.width,
            context.height,
        )
        if abs(normalize_angle(candidate - ant.direction)) > MEANINGFUL_TURN:
            heading = candidate

    moved, turned = random_walk(
        ant.position,
        heading,
        context.width,
        context.height,
        rng,
        speed=ANT_SPEED,
        turn_range=EXPLORE_TURN_RANGE,
    )
    position, direction = _avoid(context, moved, turned)
    return BehaviorResult(
        ant=replace(ant, position=position, direction=direction),
        deposits=_search_deposits(context),
    )


# -- Helpers -----------------------------------------------------------------


def _avoid(
    context: AntContext,
    position: Position,
    direction: float,
) -> tuple[Position, float]:
    return avoid_collisions(
        position,
        direction,
        context.ants,
        context.ant.id,
        context.width,
        context.height,
        avoidance_radius=COLLISION_AVOIDANCE_RADIUS,
        avoidance_strength=COLLISION_AVOIDANCE_STRENGTH,
    )


def _search_deposits(context: AntContext) -> dict[CellKey, Pheromone]:
    """Trail laid by a searching ant at its pre-move position, if any."""
    match context.deposit_policy:
        case DepositPolicy.RETURNING:
            return {}
        case DepositPolicy.BOTH:
            key, entry = context.pheromones.deposit_entry(
                context.ant.position,
                PheromoneType.TO_NEST,
                context.deposit_amount,
            )
            return {key: entry}
        case _:
            msg = f"unknown deposit policy {context.deposit_policy!r}"
            raise ValueError(msg)
