"""Pygame 2D visualization for the stigmergy simulation.

Renders the nest, food, pheromone trails and ants in a window and turns
mouse/keyboard input into engine calls.  The engine decides when a tick
is due; this loop only calls ``advance`` every display frame, so pausing
never stops the loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import pygame

if TYPE_CHECKING:
    from stigmergy.simulation.engine import SimulationEngine

from stigmergy.pheromones.fields import MAX_INTENSITY, PheromoneType
from stigmergy.simulation.config import ConfigError
from stigmergy.world.entities import AntState
from stigmergy.world.geometry import Position

# Colour palette
_BG = (240, 248, 255)
_NEST = (210, 105, 30)
_FOOD = (50, 205, 50)
_TEXT = (40, 40, 40)
_PANEL = (225, 232, 240)

_ANT_COLOURS: dict[AntState, tuple[int, int, int]] = {
    AntState.FORAGING: (139, 69, 19),
    AntState.RETURNING: (255, 99, 71),
}

_PHEROMONE_COLOURS: dict[PheromoneType, tuple[int, int, int]] = {
    PheromoneType.TO_FOOD: (65, 105, 225),
    PheromoneType.TO_NEST: (220, 20, 60),
}

_ANT_RADIUS = 3
_FOOD_RADIUS = 6
_NEST_RADIUS = 20
_PHEROMONE_MIN_RADIUS = 1
_PHEROMONE_MAX_RADIUS = 8


class PygameRenderer:
    """Renders a SimulationEngine's snapshot into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        scale: Pixels per world unit.
        screen: The Pygame display surface.
    """

    _SPEED_STEPS: ClassVar[list[float]] = [0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0]

    def __init__(
        self,
        engine: SimulationEngine,
        scale: float = 1.0,
        scatter_count: int = 5,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            scale: Pixels per world unit.
            scatter_count: Food items added by the scatter key.
        """
        self.engine = engine
        self.scale = scale
        self.scatter_count = scatter_count
        self._speed_index = self._nearest_speed(engine.config.speed)

        self._world_w = int(engine.config.world_width * scale)
        self._world_h = int(engine.config.world_height * scale)
        self._panel_width = 220

        pygame.init()
        self.screen = pygame.display.set_mode(
            (self._world_w + self._panel_width, self._world_h),
        )
        pygame.display.set_caption("stigmergy")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

    def _nearest_speed(self, speed: float) -> int:
        """Return the index of the closest speed preset."""
        return min(
            range(len(self._SPEED_STEPS)),
            key=lambda i: abs(self._SPEED_STEPS[i] - speed),
        )

    def run(self, fps: int = 60) -> None:
        """Main loop: handle events, let the engine tick, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            self.clock.tick(fps)
            self._handle_events()
            self.engine.advance(pygame.time.get_ticks())
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                x, y = event.pos
                if x < self._world_w and y < self._world_h:
                    self.engine.place_food(Position(x / self.scale, y / self.scale))
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.engine.toggle()
        elif key == pygame.K_r:
            self.engine.reset()
        elif key == pygame.K_f:
            self.engine.scatter_food(self.scatter_count)
        elif key in (pygame.K_PLUS, pygame.K_EQUALS):
            self._set_speed(self._speed_index + 1)
        elif key == pygame.K_MINUS:
            self._set_speed(self._speed_index - 1)

    def _set_speed(self, index: int) -> None:
        index = max(0, min(len(self._SPEED_STEPS) - 1, index))
        try:
            self.engine.update_config(speed=self._SPEED_STEPS[index])
        except ConfigError:
            return
        self._speed_index = index

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_pheromones()
        self._draw_nest()
        self._draw_food()
        self._draw_ants()
        self._draw_info_panel()
        pygame.display.flip()

    def _to_screen(self, position: Position) -> tuple[int, int]:
        return int(position.x * self.scale), int(position.y * self.scale)

    def _draw_pheromones(self) -> None:
        """Draw trails as translucent dots sized by intensity."""
        field = self.engine.snapshot.pheromones
        if not field:
            return
        overlay = pygame.Surface((self._world_w, self._world_h), pygame.SRCALPHA)
        span = _PHEROMONE_MAX_RADIUS - _PHEROMONE_MIN_RADIUS
        for pheromone in field:
            t = min(pheromone.intensity / MAX_INTENSITY, 1.0)
            radius = _PHEROMONE_MIN_RADIUS + int(t * span)
            alpha = 40 + int(t * 160)
            pygame.draw.circle(
                overlay,
                (*_PHEROMONE_COLOURS[pheromone.ptype], alpha),
                self._to_screen(pheromone.position),
                radius,
            )
        self.screen.blit(overlay, (0, 0))

    def _draw_nest(self) -> None:
        pygame.draw.circle(
            self.screen,
            _NEST,
            self._to_screen(self.engine.snapshot.nest),
            _NEST_RADIUS,
        )

    def _draw_food(self) -> None:
        """Draw food as green dots, bigger for richer sources."""
        for food in self.engine.snapshot.foods:
            radius = _FOOD_RADIUS + min(int(food.amount / 50), 4)
            pygame.draw.circle(
                self.screen,
                _FOOD,
                self._to_screen(food.position),
                radius,
            )

    def _draw_ants(self) -> None:
        """Draw each ant as a small dot coloured by state."""
        for ant in self.engine.snapshot.ants:
            pygame.draw.circle(
                self.screen,
                _ANT_COLOURS[ant.state],
                self._to_screen(ant.position),
                _ANT_RADIUS,
            )

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        pygame.draw.rect(
            self.screen,
            _PANEL,
            (self._world_w, 0, self._panel_width, self._world_h),
        )
        snapshot = self.engine.snapshot
        config = self.engine.config
        carrying = sum(1 for ant in snapshot.ants if ant.has_food)

        lines = [
            f"Tick: {snapshot.tick}",
            f"Speed: {config.speed:g}x",
            f"{'RUNNING' if snapshot.running else 'PAUSED'}",
            "",
            f"Ants: {len(snapshot.ants)}",
            f"  carrying: {carrying}",
            f"Food items: {len(snapshot.foods)}",
            f"Food left: {sum(food.amount for food in snapshot.foods):.0f}",
            f"Trail cells: {len(snapshot.pheromones)}",
            "",
            "--- Controls ---",
            "click: place food",
            "SPACE: run/pause",
            "F: scatter food",
            "R: reset",
            "+/-: speed",
            "ESC: quit",
        ]

        x = self._world_w + 10
        y = 10
        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (x, y))
            y += 18
