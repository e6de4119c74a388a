"""Simulation engine -- snapshot transforms and the tick scheduler.

The core is a set of pure functions over an immutable ``Snapshot``:

- ``initialize`` / ``reset`` build a fresh colony at the nest.
- ``step`` advances one tick.  Every ant decides against the *same*
  input snapshot, so no ant sees another ant's move from the same tick.
  Results are then merged in one pass:

  1. Ants are replaced by id.
  2. Emptied food is removed, then remaining amounts are updated.
  3. Pheromone deposits are merged by cell (last writer wins).
  4. The field decays if ``decay_interval_ms`` has elapsed since the
     previous decay, independent of how often ticks run.

- ``place_food`` / ``scatter_food`` / ``remove_food`` edit the food list.

``SimulationEngine`` is the stateful collaborator around that core: it
owns the current snapshot, the RNG and the frame clock, and decides when
a tick is due from ``frame_interval_ms / speed``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
from numpy.random import Generator

from stigmergy.colony.ant import AntContext, BehaviorResult, execute_behavior
from stigmergy.pheromones.decay import decay
from stigmergy.pheromones.fields import CellKey, Pheromone, PheromoneField
from stigmergy.simulation.config import ConfigError, SimulationConfig
from stigmergy.world.entities import Ant, Food
from stigmergy.world.geometry import TAU, Position, wrap

logger = logging.getLogger(__name__)

# Changing any of these moves the world out from under the ants.
_LAYOUT_FIELDS = frozenset(
    {"ant_count", "world_width", "world_height", "nest_x", "nest_y"},
)


@dataclass(frozen=True)
class Snapshot:
    """Complete world state between two ticks.

    Attributes:
        ants: All ants, in creation order.
        foods: All food items, in placement order.
        pheromones: The pheromone field.
        nest: Nest location.
        width: World width.
        height: World height.
        running: Whether the scheduler should advance this world.
        tick: Ticks stepped since initialisation.
        last_decay_at: Time (ms) of the most recent decay pass.
        next_food_id: Counter used to mint food ids.
    """

    ants: tuple[Ant, ...]
    foods: tuple[Food, ...]
    pheromones: PheromoneField
    nest: Position
    width: float
    height: float
    running: bool = False
    tick: int = 0
    last_decay_at: float = 0.0
    next_food_id: int = 0


# -- Snapshot transforms -----------------------------------------------------


def initialize(
    config: SimulationConfig,
    rng: Generator,
    foods: Iterable[Food] | None = None,
    *,
    now: float = 0.0,
    running: bool = False,
) -> Snapshot:
    """Build ``config.ant_count`` ants at the nest with random headings.

    Args:
        config: Validated configuration.
        rng: Random source for headings.
        foods: Food to start with (none by default).
        now: Current time in ms; the decay clock starts here.
        running: Initial running flag.

    Returns:
        A snapshot with an empty pheromone field.
    """
    nest = config.nest
    ants = tuple(
        Ant(
            id=f"ant-{i}",
            position=nest,
            direction=float(rng.uniform(0.0, TAU)),
        )
        for i in range(config.ant_count)
    )
    food_items = tuple(foods or ())
    return Snapshot(
        ants=ants,
        foods=food_items,
        pheromones=PheromoneField(),
        nest=nest,
        width=config.world_width,
        height=config.world_height,
        running=running,
        last_decay_at=now,
        next_food_id=_next_food_id(food_items),
    )


def reset(config: SimulationConfig, rng: Generator, *, now: float = 0.0) -> Snapshot:
    """Start over: fresh ants, no food, no pheromone, not running."""
    return initialize(config, rng, now=now, running=False)


def step(
    snapshot: Snapshot,
    config: SimulationConfig,
    rng: Generator,
    *,
    now: float,
) -> Snapshot:
    """Advance the world by one tick.

    Args:
        snapshot: The state to read.  Left untouched.
        config: Validated configuration.
        rng: Random source shared by all ants this tick.
        now: Current time in ms, for the decay cadence.

    Returns:
        The next snapshot.
    """
    results = [
        execute_behavior(_context(snapshot, config, ant), rng) for ant in snapshot.ants
    ]
    ants = _apply_ants(snapshot.ants, results)
    foods = _apply_foods(snapshot.foods, results)

    deposits: dict[CellKey, Pheromone] = {}
    for result in results:
        deposits.update(result.deposits)
    pheromones = snapshot.pheromones.merge(deposits)

    last_decay_at = snapshot.last_decay_at
    if now - last_decay_at >= config.decay_interval_ms:
        pheromones = decay(pheromones, config.pheromone_decay_rate, config.decay_model)
        last_decay_at = now

    return replace(
        snapshot,
        ants=ants,
        foods=foods,
        pheromones=pheromones,
        tick=snapshot.tick + 1,
        last_decay_at=last_decay_at,
    )


def place_food(
    snapshot: Snapshot,
    position: Position,
    amount: float = SimulationConfig.default_food_amount,
) -> Snapshot:
    """Append one food item at ``position`` (wrapped into the world)."""
    food = Food(
        id=f"food-{snapshot.next_food_id}",
        position=wrap(position, snapshot.width, snapshot.height),
        amount=amount,
    )
    return replace(
        snapshot,
        foods=(*snapshot.foods, food),
        next_food_id=snapshot.next_food_id + 1,
    )


def scatter_food(
    snapshot: Snapshot,
    count: int,
    rng: Generator,
    *,
    bounds: tuple[float, float] | None = None,
    amount_range: tuple[float, float] = (
        SimulationConfig.scatter_amount_min,
        SimulationConfig.scatter_amount_max,
    ),
) -> Snapshot:
    """Append ``count`` food items at uniform-random positions.

    Args:
        snapshot: Snapshot to extend.
        count: Number of items.
        rng: Random source for positions and amounts.
        bounds: ``(width, height)`` of the scatter area, defaulting to the
            whole world.
        amount_range: Half-open range for the random amounts.

    Returns:
        The extended snapshot.
    """
    width, height = bounds if bounds is not None else (snapshot.width, snapshot.height)
    low, high = amount_range
    foods = list(snapshot.foods)
    next_id = snapshot.next_food_id
    for _ in range(count):
        position = Position(
            float(rng.uniform(0.0, width)),
            float(rng.uniform(0.0, height)),
        )
        foods.append(
            Food(
                id=f"food-{next_id}",
                position=wrap(position, snapshot.width, snapshot.height),
                amount=float(rng.uniform(low, high)),
            ),
        )
        next_id += 1
    return replace(snapshot, foods=tuple(foods), next_food_id=next_id)


def remove_food(snapshot: Snapshot, food_id: str) -> Snapshot:
    """Drop a food item by id.  Unknown ids are ignored."""
    foods = tuple(food for food in snapshot.foods if food.id != food_id)
    if len(foods) == len(snapshot.foods):
        return snapshot
    return replace(snapshot, foods=foods)


# -- Step internals ----------------------------------------------------------


def _context(snapshot: Snapshot, config: SimulationConfig, ant: Ant) -> AntContext:
    return AntContext(
        ant=ant,
        foods=snapshot.foods,
        pheromones=snapshot.pheromones,
        nest=snapshot.nest,
        ants=snapshot.ants,
        width=snapshot.width,
        height=snapshot.height,
        deposit_amount=config.pheromone_deposit_amount,
        tracking_strength=config.pheromone_tracking_strength,
        deposit_policy=config.deposit_policy,
    )


def _apply_ants(
    ants: tuple[Ant, ...],
    results: list[BehaviorResult],
) -> tuple[Ant, ...]:
    updated = {result.ant.id: result.ant for result in results}
    return tuple(updated.get(ant.id, ant) for ant in ants)


def _apply_foods(
    foods: tuple[Food, ...],
    results: list[BehaviorResult],
) -> tuple[Food, ...]:
    removed: set[str] = set()
    amounts: dict[str, float] = {}
    for result in results:
        if result.removed_food is not None:
            removed.add(result.removed_food)
        if result.food_update is not None:
            food_id, amount = result.food_update
            amounts[food_id] = amount
    if not removed and not amounts:
        return foods

    kept = (food for food in foods if food.id not in removed)
    return tuple(
        replace(food, amount=amounts[food.id]) if food.id in amounts else food
        for food in kept
    )


def _next_food_id(foods: tuple[Food, ...]) -> int:
    highest = -1
    for food in foods:
        prefix, _, number = food.id.rpartition("-")
        if prefix == "food" and number.isdigit():
            highest = max(highest, int(number))
    return highest + 1


# -- Scheduler ---------------------------------------------------------------


@dataclass
class SimulationEngine:
    """Owns the current snapshot and drives it forward in real time.

    Call ``advance`` once per display frame.  While paused it keeps the
    frame clock current without touching the world, so resuming costs
    nothing.

    Attributes:
        config: Validated simulation configuration.
        snapshot: The authoritative world state.
        rng: Master seeded random generator.
        last_frame_at: Time (ms) of the last tick, or of the last paused
            frame.
    """

    config: SimulationConfig
    snapshot: Snapshot = field(init=False)
    rng: Generator = field(init=False)
    last_frame_at: float = field(init=False, default=0.0)
    _clock: float = field(init=False, default=0.0, repr=False)

    def __post_init__(self) -> None:
        """Validate config, seed the RNG and build the first snapshot."""
        self.config.validate()
        self.rng = np.random.default_rng(self.config.seed)
        self.snapshot = initialize(self.config, self.rng)
        logger.debug(
            "initialised %d ants in %gx%g world",
            len(self.snapshot.ants),
            self.config.world_width,
            self.config.world_height,
        )

    @property
    def running(self) -> bool:
        """Whether ``advance`` steps the world."""
        return self.snapshot.running

    @property
    def tick(self) -> int:
        """Ticks stepped since the last (re)initialisation."""
        return self.snapshot.tick

    def advance(self, now: float) -> bool:
        """Step once if running and a tick interval has elapsed.

        Args:
            now: Current time in ms (e.g. ``pygame.time.get_ticks()``).

        Returns:
            True if a tick was stepped.
        """
        self._clock = now
        if not self.snapshot.running:
            self.last_frame_at = now
            return False
        if now - self.last_frame_at < self.config.tick_interval_ms:
            return False
        self._step(now)
        self.last_frame_at = now
        return True

    def run(self, ticks: int) -> None:
        """Step a fixed number of ticks on a synthetic clock.

        Each tick advances the clock by one tick interval, so decay
        happens at the same simulated cadence as in real time.  The
        running flag is ignored.
        """
        for _ in range(ticks):
            self._clock += self.config.tick_interval_ms
            self._step(self._clock)

    def toggle(self) -> bool:
        """Flip the running flag and return the new value."""
        self.snapshot = replace(self.snapshot, running=not self.snapshot.running)
        return self.snapshot.running

    def reset(self) -> None:
        """Fresh ants, no food, no pheromone, paused."""
        self.snapshot = reset(self.config, self.rng, now=self._clock)
        logger.debug("reset to %d ants", len(self.snapshot.ants))

    def place_food(self, position: Position) -> None:
        self.snapshot = place_food(
            self.snapshot,
            position,
            self.config.default_food_amount,
        )

    def scatter_food(self, count: int) -> None:
        self.snapshot = scatter_food(
            self.snapshot,
            count,
            self.rng,
            amount_range=(
                self.config.scatter_amount_min,
                self.config.scatter_amount_max,
            ),
        )

    def remove_food(self, food_id: str) -> None:
        self.snapshot = remove_food(self.snapshot, food_id)

    def update_config(self, **changes: Any) -> SimulationConfig:
        """Apply and validate parameter changes.

        Changing the ant count, world size or nest rebuilds the ants (and
        clears pheromone) but keeps food and the running flag.  Other
        changes apply from the next tick.

        Raises:
            ConfigError: If the new configuration is invalid; the old one
                stays in effect.
        """
        unknown = changes.keys() - SimulationConfig.__dataclass_fields__.keys()
        if unknown:
            msg = f"unknown config keys {sorted(unknown)}"
            raise ConfigError(msg)
        config = replace(self.config, **changes).validate()
        self.config = config
        if _LAYOUT_FIELDS & changes.keys():
            foods = tuple(
                replace(
                    food,
                    position=wrap(
                        food.position,
                        config.world_width,
                        config.world_height,
                    ),
                )
                for food in self.snapshot.foods
            )
            self.snapshot = initialize(
                config,
                self.rng,
                foods,
                now=self._clock,
                running=self.snapshot.running,
            )
            logger.debug("rebuilt colony after changing %s", sorted(changes))
        return config

    def _step(self, now: float) -> None:
        decayed_at = self.snapshot.last_decay_at
        self.snapshot = step(self.snapshot, self.config, self.rng, now=now)
        if self.snapshot.last_decay_at != decayed_at:
            logger.debug(
                "tick %d: decayed pheromones, %d cells remain",
                self.snapshot.tick,
                len(self.snapshot.pheromones),
            )
