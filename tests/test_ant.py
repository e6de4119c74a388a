"""Tests for stigmergy.colony.ant -- the per-ant state machine."""

import math

import numpy as np
import pytest
from numpy.random import Generator

from stigmergy.colony.ant import (
    ANT_SPEED,
    AntContext,
    DepositPolicy,
    execute_behavior,
    quality_multiplier,
)
from stigmergy.pheromones.fields import PheromoneField, PheromoneType
from stigmergy.world.entities import Ant, AntState, Food
from stigmergy.world.geometry import Position, distance

NEST = Position(400.0, 300.0)


def _context(
    ant: Ant,
    foods: tuple[Food, ...] = (),
    pheromones: PheromoneField | None = None,
    ants: tuple[Ant, ...] | None = None,
    *,
    nest: Position = NEST,
    tracking_strength: float = 0.7,
    deposit_policy: DepositPolicy = DepositPolicy.RETURNING,
) -> AntContext:
    return AntContext(
        ant=ant,
        foods=foods,
        pheromones=pheromones if pheromones is not None else PheromoneField(),
        nest=nest,
        ants=ants if ants is not None else (ant,),
        width=800.0,
        height=600.0,
        deposit_amount=2.0,
        tracking_strength=tracking_strength,
        deposit_policy=deposit_policy,
    )


class TestAntState:
    """Tests for the state derived from has_food."""

    def test_states(self) -> None:
        ant = Ant(id="a", position=NEST, direction=0.0)
        assert ant.state is AntState.FORAGING
        carrying = Ant(id="a", position=NEST, direction=0.0, has_food=True)
        assert carrying.state is AntState.RETURNING


class TestQualityMultiplier:
    """Tests for the trail-strength scale factor."""

    def test_missing_amount(self) -> None:
        assert quality_multiplier(None) == 1.0
        assert quality_multiplier(0) == 1.0

    def test_scales_and_caps(self) -> None:
        assert quality_multiplier(15.0) == 1.5
        assert quality_multiplier(30.0) == 2.0
        assert quality_multiplier(60.0) == 3.0
        assert quality_multiplier(300.0) == 3.0


class TestCollecting:
    """Foraging -> Returning."""

    def test_collects_food_in_range(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        food = Food(id="food-0", position=Position(105.0, 100.0), amount=10.0)
        result = execute_behavior(_context(ant, (food,)), rng)
        assert result.ant.has_food
        assert result.ant.target_food == "food-0"
        assert result.ant.food_amount == 10.0
        assert result.food_update == ("food-0", 9.0)
        assert result.removed_food is None
        assert result.ant.position == ant.position
        assert result.deposits == {}

    def test_last_unit_removes_food(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        food = Food(id="food-0", position=Position(100.0, 104.0), amount=1.0)
        result = execute_behavior(_context(ant, (food,)), rng)
        assert result.ant.has_food
        assert result.removed_food == "food-0"
        assert result.food_update is None

    def test_collects_across_edge(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(2.0, 300.0), direction=0.0)
        food = Food(id="food-0", position=Position(796.0, 300.0), amount=5.0)
        result = execute_behavior(_context(ant, (food,)), rng)
        assert result.ant.has_food

    def test_approaches_visible_food(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        food = Food(id="food-0", position=Position(115.0, 100.0), amount=10.0)
        result = execute_behavior(_context(ant, (food,)), rng)
        assert not result.ant.has_food
        assert result.food_update is None
        assert distance(result.ant.position, food.position, 800, 600) < 15.0
        assert result.deposits == {}

    def test_nearest_visible_food_wins(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        far = Food(id="far", position=Position(108.0, 100.0), amount=10.0)
        near = Food(id="near", position=Position(100.0, 103.0), amount=10.0)
        result = execute_behavior(_context(ant, (far, near)), rng)
        assert result.ant.target_food == "near"


class TestReturning:
    """Returning -> Foraging, and the trip home."""

    def test_drops_food_at_nest(self, rng: Generator) -> None:
        ant = Ant(
            id="a",
            position=Position(405.0, 300.0),
            direction=1.0,
            has_food=True,
            target_food="food-0",
            food_amount=20.0,
        )
        result = execute_behavior(_context(ant), rng)
        assert not result.ant.has_food
        assert result.ant.target_food is None
        assert result.ant.food_amount is None
        assert result.ant.position == ant.position
        assert result.ant.direction == ant.direction
        assert result.deposits == {}

    def test_walks_home_laying_trail(self, rng: Generator) -> None:
        ant = Ant(
            id="a",
            position=Position(300.0, 300.0),
            direction=2.0,
            has_food=True,
            target_food="food-0",
            food_amount=30.0,
        )
        result = execute_behavior(_context(ant), rng)
        assert result.ant.has_food
        assert math.isclose(result.ant.position.x, 300.0 + ANT_SPEED)
        assert math.isclose(result.ant.position.y, 300.0)
        assert result.ant.direction == 0.0
        ((key, entry),) = result.deposits.items()
        assert key == (30, 30)
        assert entry.ptype is PheromoneType.TO_FOOD
        assert entry.intensity == 2.0 * 2.0

    def test_faces_nest_across_edge(self, rng: Generator) -> None:
        ant = Ant(
            id="a",
            position=Position(790.0, 300.0),
            direction=0.0,
            has_food=True,
        )
        result = execute_behavior(_context(ant, nest=Position(10.0, 300.0)), rng)
        assert result.ant.direction == 0.0
        assert math.isclose(result.ant.position.x, 792.0)

    def test_dangling_target_is_harmless(self, rng: Generator) -> None:
        ant = Ant(
            id="a",
            position=Position(300.0, 300.0),
            direction=0.0,
            has_food=True,
            target_food="food-gone",
        )
        result = execute_behavior(_context(ant), rng)
        assert result.ant.target_food == "food-gone"
        assert len(result.deposits) == 1


class TestExploring:
    """Foraging with no food in sight."""

    def test_random_walk_without_trails(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.5)
        result = execute_behavior(_context(ant), rng)
        assert math.isclose(
            distance(ant.position, result.ant.position, 800, 600),
            ANT_SPEED,
        )
        assert abs(result.ant.direction - 0.5) <= 0.25
        assert result.deposits == {}

    def test_dangling_target_while_foraging(self, rng: Generator) -> None:
        ant = Ant(
            id="a",
            position=Position(100.0, 100.0),
            direction=0.5,
            target_food="food-gone",
        )
        result = execute_behavior(_context(ant), rng)
        assert not result.ant.has_food

    def test_follows_trail_when_tracking(self, rng: Generator) -> None:
        trail = PheromoneField().deposit(
            Position(114.0, 85.0),
            PheromoneType.TO_FOOD,
            50.0,
        )
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        for _ in range(20):
            result = execute_behavior(
                _context(ant, pheromones=trail, tracking_strength=1.0),
                rng,
            )
            assert abs(result.ant.direction - (-math.pi / 4)) <= 0.25

    def test_ignores_trail_without_tracking(self, rng: Generator) -> None:
        trail = PheromoneField().deposit(
            Position(114.0, 85.0),
            PheromoneType.TO_FOOD,
            50.0,
        )
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        for _ in range(20):
            result = execute_behavior(
                _context(ant, pheromones=trail, tracking_strength=0.0),
                rng,
            )
            assert abs(result.ant.direction) <= 0.25

    def test_avoids_crowding(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        crowd = tuple(
            Ant(id=f"b{i}", position=Position(104.0, 100.0), direction=0.0)
            for i in range(5)
        )
        alone = execute_behavior(_context(ant, ants=(ant,)), np.random.default_rng(1))
        crowded = execute_behavior(
            _context(ant, ants=(ant, *crowd)),
            np.random.default_rng(1),
        )
        assert crowded.ant.position.x < alone.ant.position.x


class TestSearchDeposits:
    """The deposit-while-searching variant."""

    def test_returning_policy_lays_nothing_while_searching(
        self,
        rng: Generator,
    ) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        result = execute_behavior(_context(ant), rng)
        assert result.deposits == {}

    def test_both_policy_lays_nest_trail(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        result = execute_behavior(
            _context(ant, deposit_policy=DepositPolicy.BOTH),
            rng,
        )
        ((key, entry),) = result.deposits.items()
        assert key == (10, 10)
        assert entry.ptype is PheromoneType.TO_NEST
        assert entry.intensity == 2.0

    def test_both_policy_collection_lays_nothing(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        food = Food(id="food-0", position=Position(101.0, 100.0), amount=3.0)
        result = execute_behavior(
            _context(ant, (food,), deposit_policy=DepositPolicy.BOTH),
            rng,
        )
        assert result.ant.has_food
        assert result.deposits == {}

    def test_unknown_policy_raises(self, rng: Generator) -> None:
        ant = Ant(id="a", position=Position(100.0, 100.0), direction=0.0)
        with pytest.raises(ValueError, match="unknown deposit policy"):
            execute_behavior(_context(ant, deposit_policy="both"), rng)
