"""Entry point for ``python -m stigmergy``.

Loads a YAML config, builds a simulation engine and either opens a
Pygame window to watch the ants forage or, with ``--headless``, runs a
fixed number of ticks and prints a summary.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from stigmergy.simulation.config import SimulationConfig
from stigmergy.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def build_parser() -> argparse.ArgumentParser:
    """Return the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="stigmergy",
        description="stigmergy - ant colony foraging simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=None,
        help="Path to YAML config file (default: config/default.yaml if present)",
    )
    parser.add_argument(
        "--foods",
        type=int,
        default=5,
        help="Food items scattered at start (default: 5)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=1.0,
        help="Pixels per world unit (default: 1.0)",
    )
    parser.add_argument(
        "--headless",
        type=int,
        metavar="TICKS",
        default=None,
        help="Run TICKS ticks without a window and print a summary",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser


def load_config(path: pathlib.Path | None) -> SimulationConfig:
    """Load ``path``, else the bundled default file, else built-in defaults."""
    if path is not None:
        return SimulationConfig.from_yaml(path)
    if _DEFAULT_CONFIG.is_file():
        return SimulationConfig.from_yaml(_DEFAULT_CONFIG)
    return SimulationConfig().validate()


def summarize(engine: SimulationEngine) -> str:
    """One-line description of the engine's current world."""
    snapshot = engine.snapshot
    carrying = sum(1 for ant in snapshot.ants if ant.has_food)
    return (
        f"tick={snapshot.tick} ants={len(snapshot.ants)} carrying={carrying} "
        f"foods={len(snapshot.foods)} trail_cells={len(snapshot.pheromones)}"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, create engine, run headless or launch renderer."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    engine = SimulationEngine(config=config)
    engine.scatter_food(args.foods)
    logger.info("loaded config with %d ants", config.ant_count)

    if args.headless is not None:
        engine.run(ticks=args.headless)
        print(summarize(engine))
        return

    from stigmergy.ui.pygame_client import PygameRenderer

    engine.toggle()
    renderer = PygameRenderer(engine=engine, scale=args.scale)
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
