"""Pygame shell for Ring Flight.

Deterministic flight/scoring/state lives in ring_flight/* (core modules).
This module only samples input, drives ``GameController.tick`` once per frame
and draws the snapshot with a simple chase camera.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .config import LOG_LEVEL_ENV, FlightConfig, load_flight_config
from .controls import ControlSignals, PitchInput, signals_for_event
from .craft import Vec3
from .flight_core import FlightSnapshot, GameController, GameState, build_flight_game
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

SKY = (8, 10, 22)
RING_COLOR = (0, 255, 0)
RING_DONE_COLOR = (0, 120, 40)
CRAFT_COLOR = (255, 0, 0)
TEXT_MAIN = (235, 235, 245)
TEXT_ALERT = (255, 90, 90)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def update(self) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def update(self) -> None:
        if self._screens:
            self._screens[-1].update()

    def render(self) -> None:
        if not self._screens:
            return
        # The display surface may have been resized since the last frame.
        self._surface = pygame.display.get_surface() or self._surface
        self._screens[-1].render(self._surface)


@dataclass(slots=True)
class ChaseCamera:
    """Trails the craft from behind and above; looks down -z."""

    x: float
    y: float
    z: float
    fov_deg: float = 75.0
    near: float = 0.1
    far: float = 5000.0
    follow: float = 0.1

    @classmethod
    def behind(cls, target: Vec3) -> "ChaseCamera":
        return cls(target.x, target.y + 2.0, target.z + 10.0)

    def update(self, target: Vec3) -> None:
        self.x += (target.x - self.x) * self.follow
        self.y += (target.y + 2.0 - self.y) * self.follow
        self.z += (target.z + 10.0 - self.z) * self.follow

    def project(
        self,
        point: Vec3,
        size: tuple[int, int],
        *,
        look_y: float,
    ) -> tuple[float, float, float] | None:
        """Return (screen_x, screen_y, pixels_per_unit) or None if clipped."""

        depth = self.z - point.z
        if depth < self.near or depth > self.far:
            return None
        w, h = size
        focal = (h / 2.0) / math.tan(math.radians(self.fov_deg) / 2.0)
        scale = focal / depth
        sx = w / 2.0 + (point.x - self.x) * scale
        # Vertical framing keeps the craft's altitude near screen centre.
        sy = h / 2.0 - (point.y - look_y) * scale
        return sx, sy, scale


class FlightScreen:
    def __init__(
        self,
        app: App,
        *,
        controller: GameController,
        pitch_input: PitchInput,
    ) -> None:
        self._app = app
        self._controller = controller
        self._pitch_input = pitch_input
        self._small_font = pygame.font.Font(None, 26)
        self._camera = ChaseCamera.behind(controller.snapshot().craft_position)
        self._pending = ControlSignals()

    @property
    def camera(self) -> ChaseCamera:
        return self._camera

    def handle_event(self, event: pygame.event.Event) -> None:
        self._pitch_input.handle_event(event)
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self._app.quit()
            return
        self._pending = self._pending.merge(signals_for_event(event))

    def update(self) -> None:
        signals, self._pending = self._pending, ControlSignals()
        if signals.restart_requested:
            self._controller.restart()
            self._camera = ChaseCamera.behind(self._controller.snapshot().craft_position)
        elif signals.start_requested:
            self._controller.start()

        if self._controller.state is GameState.RUNNING:
            pitch = self._pitch_input.sample(pygame.key.get_pressed())
            self._controller.tick(pitch)
            self._camera.update(self._controller.snapshot().craft_position)

    def render(self, surface: pygame.Surface) -> None:
        snap = self._controller.snapshot()
        surface.fill(SKY)
        self._draw_scene(surface, snap)
        self._draw_hud(surface, snap)

    def _draw_scene(self, surface: pygame.Surface, snap: FlightSnapshot) -> None:
        size = surface.get_size()
        look_y = snap.craft_position.y + 2.0

        # Far rings first so near ones overlap them.
        for ring in sorted(snap.rings, key=lambda r: r.center.z):
            projected = self._camera.project(ring.center, size, look_y=look_y)
            if projected is None:
                continue
            sx, sy, scale = projected
            radius = int(ring.major_radius * scale)
            if radius < 1 or radius > 4 * max(size):
                continue
            width = max(1, int(ring.tube_radius * 2.0 * scale))
            color = RING_DONE_COLOR if ring.checked else RING_COLOR
            pygame.draw.circle(surface, color, (int(sx), int(sy)), radius, min(width, radius))

        projected = self._camera.project(snap.craft_position, size, look_y=look_y)
        if projected is not None:
            sx, sy, scale = projected
            side = max(2, int(scale))
            rect = pygame.Rect(0, 0, side, side)
            rect.center = (int(sx), int(sy))
            pygame.draw.rect(surface, CRAFT_COLOR, rect)

    def _draw_hud(self, surface: pygame.Surface, snap: FlightSnapshot) -> None:
        w, h = surface.get_size()
        score = self._app.font.render(f"Score: {snap.score}", True, TEXT_MAIN)
        surface.blit(score, (20, 16))

        if snap.state is GameState.IDLE:
            lines = ("Press any key or a gamepad button to start", "Up/Down or right stick to pitch")
            color = TEXT_MAIN
        elif snap.state is GameState.CRASHED:
            lines = ("Crashed!", "Press Space to restart")
            color = TEXT_ALERT
        else:
            return

        y = h // 2 - 40
        for i, text in enumerate(lines):
            font = self._app.font if i == 0 else self._small_font
            img = font.render(text, True, color)
            surface.blit(img, (w // 2 - img.get_width() // 2, y))
            y += img.get_height() + 10


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: FlightConfig | None = None,
) -> int:
    setup_logging(os.environ.get(LOG_LEVEL_ENV, "INFO"))
    cfg = config or load_flight_config()
    controller = build_flight_game(config=cfg)

    pygame.init()
    pygame.display.set_caption("Ring Flight")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    pitch_input = PitchInput(axis_index=cfg.pitch_axis, calibration=cfg.pitch_calibration)
    app.push(FlightScreen(app, controller=controller, pitch_input=pitch_input))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
