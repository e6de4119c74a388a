"""Tests for stigmergy.world.geometry -- torus wrap, distance, angles."""

import math

import numpy as np
from numpy.random import Generator

from stigmergy.world.geometry import (
    Position,
    bearing,
    distance,
    distances,
    normalize_angle,
    shortest_delta,
    wrap,
)


class TestWrap:
    """Tests for toroidal wrapping."""

    def test_inside_unchanged(self) -> None:
        assert wrap(Position(10.0, 20.0), 100, 50) == Position(10.0, 20.0)

    def test_exact_boundary_maps_to_zero(self) -> None:
        assert wrap(Position(100.0, 50.0), 100, 50) == Position(0.0, 0.0)

    def test_negative_coordinates(self) -> None:
        assert wrap(Position(-10.0, -1.0), 100, 100) == Position(90.0, 99.0)

    def test_far_outside(self) -> None:
        assert wrap(Position(250.0, -130.0), 100, 100) == Position(50.0, 70.0)

    def test_tiny_negative_does_not_round_to_width(self) -> None:
        wrapped = wrap(Position(-1e-20, -1e-20), 800, 600)
        assert wrapped.x == 0.0
        assert wrapped.y == 0.0

    def test_idempotent_and_in_bounds(self, rng: Generator) -> None:
        for _ in range(200):
            width = float(rng.uniform(1.0, 1000.0))
            height = float(rng.uniform(1.0, 1000.0))
            p = Position(
                float(rng.uniform(-5000, 5000)),
                float(rng.uniform(-5000, 5000)),
            )
            once = wrap(p, width, height)
            assert wrap(once, width, height) == once
            assert 0.0 <= once.x < width
            assert 0.0 <= once.y < height


class TestDistance:
    """Tests for toroidal distance."""

    def test_same_point_is_zero(self) -> None:
        p = Position(12.5, 7.0)
        assert distance(p, p, 100, 100) == 0.0

    def test_matches_euclid_when_close(self) -> None:
        assert math.isclose(
            distance(Position(10, 10), Position(13, 14), 100, 100),
            5.0,
        )

    def test_uses_wrap_shortcut(self) -> None:
        assert math.isclose(distance(Position(1, 1), Position(99, 1), 100, 100), 2.0)
        assert math.isclose(distance(Position(1, 1), Position(1, 99), 100, 100), 2.0)

    def test_symmetric(self, rng: Generator) -> None:
        for _ in range(100):
            a = Position(float(rng.uniform(0, 80)), float(rng.uniform(0, 60)))
            b = Position(float(rng.uniform(0, 80)), float(rng.uniform(0, 60)))
            assert distance(a, b, 80, 60) == distance(b, a, 80, 60)

    def test_never_exceeds_direct(self, rng: Generator) -> None:
        for _ in range(100):
            a = Position(float(rng.uniform(0, 80)), float(rng.uniform(0, 60)))
            b = Position(float(rng.uniform(0, 80)), float(rng.uniform(0, 60)))
            direct = math.hypot(a.x - b.x, a.y - b.y)
            assert distance(a, b, 80, 60) <= direct + 1e-9

    def test_vectorised_matches_scalar(self) -> None:
        origin = Position(5.0, 95.0)
        points = [Position(95.0, 5.0), Position(50.0, 50.0), Position(5.0, 95.0)]
        xs = np.array([p.x for p in points])
        ys = np.array([p.y for p in points])
        expected = [distance(origin, p, 100, 100) for p in points]
        assert np.allclose(distances(origin, xs, ys, 100, 100), expected)


class TestShortestDelta:
    """Tests for the signed shortest displacement."""

    def test_direct(self) -> None:
        assert shortest_delta(Position(10, 10), Position(13, 6), 100, 100) == (3, -4)

    def test_across_edge(self) -> None:
        assert shortest_delta(Position(95, 50), Position(5, 50), 100, 100) == (10, 0)
        assert shortest_delta(Position(5, 50), Position(95, 50), 100, 100) == (-10, 0)

    def test_bearing_across_edge(self) -> None:
        # Target sits "behind" the left edge, so the ant should face west.
        angle = bearing(Position(2, 50), Position(98, 50), 100, 100)
        assert math.isclose(abs(angle), math.pi)


class TestNormalizeAngle:
    """Tests for angle normalisation."""

    def test_in_range_unchanged(self) -> None:
        assert math.isclose(normalize_angle(1.0), 1.0)

    def test_pi_stays_pi(self) -> None:
        assert normalize_angle(math.pi) == math.pi

    def test_minus_pi_maps_to_pi(self) -> None:
        assert normalize_angle(-math.pi) == math.pi

    def test_large_angles(self) -> None:
        assert math.isclose(normalize_angle(2 * math.pi + 0.5), 0.5)
        assert math.isclose(normalize_angle(-4 * math.pi - 0.5), -0.5)

    def test_result_range(self, rng: Generator) -> None:
        for angle in rng.uniform(-100.0, 100.0, size=500):
            result = normalize_angle(float(angle))
            assert -math.pi < result <= math.pi
            assert math.isclose(math.cos(result), math.cos(angle), abs_tol=1e-9)
