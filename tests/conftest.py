"""Shared fixtures for the stigmergy test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from stigmergy.pheromones.fields import PheromoneField
from stigmergy.simulation.config import SimulationConfig


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def small_config() -> SimulationConfig:
    """A 100x100 world with five ants for fast tests."""
    return SimulationConfig(world_width=100.0, world_height=100.0, ant_count=5)


@pytest.fixture
def empty_field() -> PheromoneField:
    """A pheromone field with no deposits."""
    return PheromoneField()
