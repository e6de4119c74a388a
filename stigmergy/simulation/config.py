"""Config -- load simulation parameters from YAML files.

Every tunable the UI exposes (world size, ant count, pheromone rates,
speed) plus the timing and model choices live in YAML and are parsed into
a typed dataclass here.  ``validate`` enforces the declared bounds so the
simulation core can trust its inputs and never re-checks them per tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from stigmergy.colony.ant import DepositPolicy
from stigmergy.pheromones.decay import DecayModel
from stigmergy.world.geometry import Position


class ConfigError(ValueError):
    """A configuration value is missing, malformed or out of bounds."""


@dataclass(frozen=True)
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for reproducible runs.
        world_width: Width of the toroidal world.
        world_height: Height of the toroidal world.
        nest_x: Nest column; None means the world centre.
        nest_y: Nest row; None means the world centre.
        ant_count: Ants created on initialise/reset (0-100).
        pheromone_decay_rate: Retained fraction (exponential model) or
            evaporation strength (logarithmic model), 0.9-0.999.
        pheromone_deposit_amount: Base trail intensity per step, 0.1-10.
        pheromone_tracking_strength: Probability that a searching ant acts
            on a sensed trail, 0-1.
        speed: Simulation speed multiplier, 0.1-10.
        frame_interval_ms: Tick interval at speed 1.
        decay_interval_ms: Minimum time between pheromone decay passes.
        decay_model: Evaporation model.
        deposit_policy: Which ant states lay pheromone.
        default_food_amount: Amount of a food item placed by hand.
        scatter_amount_min: Lower bound for scattered food amounts.
        scatter_amount_max: Upper bound for scattered food amounts.
    """

    seed: int = 42
    world_width: float = 800.0
    world_height: float = 600.0
    nest_x: float | None = None
    nest_y: float | None = None
    ant_count: int = 50

    # Pheromones
    pheromone_decay_rate: float = 0.99
    pheromone_deposit_amount: float = 2.0
    pheromone_tracking_strength: float = 0.7

    # Timing
    speed: float = 1.0
    frame_interval_ms: float = 50.0
    decay_interval_ms: float = 500.0

    # Model variants
    decay_model: DecayModel = DecayModel.EXPONENTIAL
    deposit_policy: DepositPolicy = DepositPolicy.RETURNING

    # Food
    default_food_amount: float = 100.0
    scatter_amount_min: float = 50.0
    scatter_amount_max: float = 150.0

    @property
    def nest(self) -> Position:
        """Nest location, defaulting to the world centre."""
        x = self.world_width / 2 if self.nest_x is None else self.nest_x
        y = self.world_height / 2 if self.nest_y is None else self.nest_y
        return Position(x, y)

    @property
    def tick_interval_ms(self) -> float:
        """Time between ticks at the current speed."""
        return self.frame_interval_ms / self.speed

    def validate(self) -> SimulationConfig:
        """Check every bound.

        Returns:
            ``self``, so calls can be chained.

        Raises:
            ConfigError: Naming the first offending field.
        """
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            msg = f"seed must be an integer, got {self.seed!r}"
            raise ConfigError(msg)
        _positive("world_width", self.world_width)
        _positive("world_height", self.world_height)
        nest = self.nest
        _between("nest_x", nest.x, 0.0, self.world_width, upper_open=True)
        _between("nest_y", nest.y, 0.0, self.world_height, upper_open=True)
        if isinstance(self.ant_count, bool) or not isinstance(self.ant_count, int):
            msg = f"ant_count must be an integer, got {self.ant_count!r}"
            raise ConfigError(msg)
        _between("ant_count", self.ant_count, 0, 100)
        _between("pheromone_decay_rate", self.pheromone_decay_rate, 0.9, 0.999)
        _between("pheromone_deposit_amount", self.pheromone_deposit_amount, 0.1, 10.0)
        _between(
            "pheromone_tracking_strength",
            self.pheromone_tracking_strength,
            0.0,
            1.0,
        )
        _between("speed", self.speed, 0.1, 10.0)
        _positive("frame_interval_ms", self.frame_interval_ms)
        _positive("decay_interval_ms", self.decay_interval_ms)
        _positive("default_food_amount", self.default_food_amount)
        _positive("scatter_amount_min", self.scatter_amount_min)
        _member("decay_model", self.decay_model, DecayModel)
        _member("deposit_policy", self.deposit_policy, DepositPolicy)
        if self.scatter_amount_max < self.scatter_amount_min:
            msg = (
                f"scatter_amount_max ({self.scatter_amount_max}) is below "
                f"scatter_amount_min ({self.scatter_amount_min})"
            )
            raise ConfigError(msg)
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load and validate configuration from a YAML file.

        Missing keys take their defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            A validated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ConfigError: If a value is malformed or out of bounds.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            msg = f"{path}: expected a mapping at the top level"
            raise ConfigError(msg)

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            msg = f"{path}: unknown keys {sorted(unknown)}"
            raise ConfigError(msg)

        defaults = cls()
        return cls(
            seed=data.get("seed", defaults.seed),
            world_width=data.get("world_width", defaults.world_width),
            world_height=data.get("world_height", defaults.world_height),
            nest_x=data.get("nest_x", defaults.nest_x),
            nest_y=data.get("nest_y", defaults.nest_y),
            ant_count=data.get("ant_count", defaults.ant_count),
            pheromone_decay_rate=data.get(
                "pheromone_decay_rate",
                defaults.pheromone_decay_rate,
            ),
            pheromone_deposit_amount=data.get(
                "pheromone_deposit_amount",
                defaults.pheromone_deposit_amount,
            ),
            pheromone_tracking_strength=data.get(
                "pheromone_tracking_strength",
                defaults.pheromone_tracking_strength,
            ),
            speed=data.get("speed", defaults.speed),
            frame_interval_ms=data.get(
                "frame_interval_ms",
                defaults.frame_interval_ms,
            ),
            decay_interval_ms=data.get(
                "decay_interval_ms",
                defaults.decay_interval_ms,
            ),
            decay_model=_enum(
                DecayModel,
                "decay_model",
                data.get("decay_model", defaults.decay_model),
            ),
            deposit_policy=_enum(
                DepositPolicy,
                "deposit_policy",
                data.get("deposit_policy", defaults.deposit_policy),
            ),
            default_food_amount=data.get(
                "default_food_amount",
                defaults.default_food_amount,
            ),
            scatter_amount_min=data.get(
                "scatter_amount_min",
                defaults.scatter_amount_min,
            ),
            scatter_amount_max=data.get(
                "scatter_amount_max",
                defaults.scatter_amount_max,
            ),
        ).validate()


def _enum(enum_cls: type, name: str, value: object) -> object:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        msg = f"{name} must be one of {choices}, got {value!r}"
        raise ConfigError(msg) from None


def _member(name: str, value: object, enum_cls: type) -> None:
    if not isinstance(value, enum_cls):
        msg = f"{name} must be a {enum_cls.__name__}, got {value!r}"
        raise ConfigError(msg)


def _number(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigError(msg)
    return float(value)


def _positive(name: str, value: object) -> None:
    if _number(name, value) <= 0:
        msg = f"{name} must be positive, got {value!r}"
        raise ConfigError(msg)


def _between(
    name: str,
    value: object,
    low: float,
    high: float,
    *,
    upper_open: bool = False,
) -> None:
    number = _number(name, value)
    too_high = number >= high if upper_open else number > high
    if number < low or too_high:
        closing = ")" if upper_open else "]"
        msg = f"{name} must be in [{low}, {high}{closing}, got {value!r}"
        raise ConfigError(msg)
