"""Input source for the flight loop.

Turns pygame joystick/keyboard state into one pitch value per frame and
pygame events into edge-triggered start/restart requests. Nothing here
touches game state; the scheduler in ``app.run`` feeds the results to the
controller.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import pygame

from .config import AxisCalibrationSettings

logger = logging.getLogger(__name__)

_CLIMB_KEYS = (pygame.K_UP, pygame.K_w)
_DIVE_KEYS = (pygame.K_DOWN, pygame.K_s)


def _clamp(value: float, lo: float, hi: float) -> float:
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return float(value)


def apply_axis_calibration(raw: float, settings: AxisCalibrationSettings) -> float:
    value = _clamp(float(raw), -1.0, 1.0)
    if settings.invert:
        value = -value

    pos_span = max(0.001, float(settings.max_raw))
    neg_span = max(0.001, abs(float(settings.min_raw)))
    normalized = value / (pos_span if value >= 0.0 else neg_span)
    normalized = _clamp(normalized, -1.0, 1.0)

    deadzone = _clamp(float(settings.deadzone), 0.0, 0.45)
    magnitude = abs(normalized)
    if magnitude <= deadzone:
        return 0.0
    scaled = (magnitude - deadzone) / max(0.001, 1.0 - deadzone)
    normalized = math.copysign(scaled, normalized)

    curve = _clamp(float(settings.curve), 0.4, 2.6)
    curved = math.copysign(abs(normalized) ** curve, normalized)
    return _clamp(curved, -1.0, 1.0)


@dataclass(frozen=True, slots=True)
class ControlSignals:
    start_requested: bool = False
    restart_requested: bool = False

    def merge(self, other: "ControlSignals") -> "ControlSignals":
        return ControlSignals(
            start_requested=self.start_requested or other.start_requested,
            restart_requested=self.restart_requested or other.restart_requested,
        )


def signals_for_event(event: pygame.event.Event) -> ControlSignals:
    # Space restarts from anywhere; any other key or a pad button asks to start.
    if event.type == pygame.KEYDOWN:
        if event.key == pygame.K_SPACE:
            return ControlSignals(restart_requested=True)
        if event.key == pygame.K_ESCAPE:
            return ControlSignals()
        return ControlSignals(start_requested=True)
    if event.type == pygame.JOYBUTTONDOWN:
        return ControlSignals(start_requested=True)
    return ControlSignals()


def keyboard_pitch(pressed: object) -> float:
    """Full-deflection fallback from held keys. Climbing is negative pitch."""

    def held(keys: tuple[int, ...]) -> bool:
        return any(bool(pressed[k]) for k in keys)  # type: ignore[index]

    value = 0.0
    if held(_CLIMB_KEYS):
        value -= 1.0
    if held(_DIVE_KEYS):
        value += 1.0
    return value


class PitchInput:
    """Tracks at most one joystick and reads its pitch axis each frame.

    Without a device the stick reads 0 and held keys are used instead.
    """

    def __init__(self, *, axis_index: int = 3, calibration: AxisCalibrationSettings | None = None) -> None:
        self._axis_index = int(axis_index)
        self._calibration = calibration or AxisCalibrationSettings()
        self._joystick: pygame.joystick.JoystickType | None = None

    @property
    def connected(self) -> bool:
        return self._joystick is not None

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.JOYDEVICEADDED:
            if self._joystick is not None:
                return
            try:
                js = pygame.joystick.Joystick(event.device_index)
                if not js.get_init():
                    js.init()
            except pygame.error as exc:
                logger.warning("Could not open joystick %s: %s", event.device_index, exc)
                return
            self._joystick = js
            logger.info("Gamepad connected: %s", js.get_name())
        elif event.type == pygame.JOYDEVICEREMOVED:
            js = self._joystick
            if js is not None and js.get_instance_id() == event.instance_id:
                self._joystick = None
                logger.info("Gamepad disconnected")

    def stick_value(self) -> float:
        js = self._joystick
        if js is None:
            return 0.0
        try:
            if self._axis_index >= js.get_numaxes():
                return 0.0
            raw = float(js.get_axis(self._axis_index))
        except pygame.error:
            return 0.0
        return apply_axis_calibration(raw, self._calibration)

    def sample(self, pressed: object | None = None) -> float:
        """Pitch deflection in [-1, 1] for this frame."""

        value = self.stick_value()
        if value == 0.0 and pressed is not None:
            value = keyboard_pitch(pressed)
        return _clamp(value, -1.0, 1.0)
