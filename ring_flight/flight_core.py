from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum

from .collision import CollisionJudge, PassOutcome, is_crossed
from .config import FlightConfig
from .craft import CraftState, Vec3, advance, reset
from .ring_field import Ring, RingField

logger = logging.getLogger(__name__)


class GameState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    CRASHED = "crashed"


class GameEventKind(StrEnum):
    STARTED = "started"
    RING_PASSED = "ring_passed"
    CRASHED = "crashed"
    RESTARTED = "restarted"


@dataclass(frozen=True, slots=True)
class RingPassEvent:
    tick: int
    ring_index: int
    outcome: PassOutcome
    distance: float
    craft_position: Vec3
    score: int


@dataclass(frozen=True, slots=True)
class FlightSnapshot:
    """View model for the presentation layer (pure data)."""

    state: GameState
    score: int
    craft_position: Vec3
    rings: tuple[Ring, ...]
    tick: int
    last_outcome: PassOutcome | None = None


@dataclass(frozen=True, slots=True)
class GameEvent:
    kind: GameEventKind
    snapshot: FlightSnapshot
    pass_event: RingPassEvent | None = None


@dataclass(frozen=True, slots=True)
class FlightSummary:
    rings_total: int
    rings_scored: int
    rings_missed: int
    crashed_on: int | None
    ticks: int


GameListener = Callable[[GameEvent], None]


def _clamp_unit(x: float) -> float:
    # No usable reading counts as a centred stick.
    if not math.isfinite(x):
        return 0.0
    return -1.0 if x <= -1.0 else 1.0 if x >= 1.0 else float(x)


class GameController:
    """Frame-driven flight loop: idle -> running -> crashed -> (restart) idle.

    - Owns the craft, the ring field, the score and the lifecycle state.
    - ``tick`` is driven by an external scheduler once per frame.
    - Out-of-contract calls (``tick`` outside RUNNING, ``start`` outside IDLE)
      are no-ops so an input layer can call them in any order.
    """

    def __init__(
        self,
        *,
        field: RingField,
        start_position: Vec3,
        speed: float,
        pitch_sensitivity: float,
        judge: CollisionJudge | None = None,
    ) -> None:
        if not (math.isfinite(speed) and speed > 0):
            raise ValueError("speed must be finite and > 0")
        if not (math.isfinite(pitch_sensitivity) and pitch_sensitivity >= 0):
            raise ValueError("pitch_sensitivity must be finite and >= 0")
        if not all(math.isfinite(v) for v in start_position.as_tuple()):
            raise ValueError("start_position must be finite")

        self._field = field
        self._start_position = start_position
        self._speed = float(speed)
        self._pitch_sensitivity = float(pitch_sensitivity)
        self._judge = judge if judge is not None else CollisionJudge()

        self._state = GameState.IDLE
        self._score = 0
        self._craft = reset(start_position)
        self._tick = 0
        self._last_outcome: PassOutcome | None = None
        self._events: list[RingPassEvent] = []
        self._listeners: list[GameListener] = []

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def score(self) -> int:
        return self._score

    @property
    def craft(self) -> CraftState:
        return self._craft

    @property
    def field(self) -> RingField:
        return self._field

    def add_listener(self, listener: GameListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        if self._state is not GameState.IDLE:
            return
        self._state = GameState.RUNNING
        logger.info("Flight started")
        self._emit(GameEventKind.STARTED)

    def tick(self, pitch_input: float = 0.0) -> None:
        """Advance one frame and judge every ring crossed during it.

        Listeners are notified only after the whole frame has been applied,
        so every event of a tick carries the end-of-tick snapshot.
        """

        if self._state is not GameState.RUNNING:
            return

        pitch = _clamp_unit(pitch_input) * self._pitch_sensitivity
        self._craft = advance(self._craft, speed=self._speed, pitch=pitch)
        self._tick += 1
        position = self._craft.position
        pending: list[tuple[GameEventKind, RingPassEvent]] = []

        # Rings are ordered by decreasing z, so index order is crossing order.
        for ring in self._field:
            if not is_crossed(position, ring):
                continue
            judgement = self._judge.evaluate(position, ring)
            outcome = judgement.outcome
            self._last_outcome = outcome

            if outcome is PassOutcome.SCORED:
                self._score += 1
                logger.info("Ring %d passed successfully. Score: %d", ring.index, self._score)
            elif outcome is PassOutcome.CRASHED:
                self._state = GameState.CRASHED
                logger.info("Crashed on ring %d (distance %.2f)", ring.index, judgement.distance)
            else:
                logger.debug("Missed ring %d (distance %.2f)", ring.index, judgement.distance)

            event = RingPassEvent(
                tick=self._tick,
                ring_index=ring.index,
                outcome=outcome,
                distance=judgement.distance,
                craft_position=position,
                score=self._score,
            )
            self._events.append(event)
            pending.append((GameEventKind.RING_PASSED, event))

            if outcome is PassOutcome.CRASHED:
                pending.append((GameEventKind.CRASHED, event))
                break

        for kind, event in pending:
            self._emit(kind, event)

    def restart(self) -> None:
        self._craft = reset(self._start_position)
        self._score = 0
        self._field.reset_checks()
        self._state = GameState.IDLE
        self._tick = 0
        self._last_outcome = None
        self._events.clear()
        logger.info("Flight reset")
        self._emit(GameEventKind.RESTARTED)

    def events(self) -> list[RingPassEvent]:
        return list(self._events)

    def summary(self) -> FlightSummary:
        crashed_on = next(
            (e.ring_index for e in self._events if e.outcome is PassOutcome.CRASHED),
            None,
        )
        return FlightSummary(
            rings_total=len(self._field),
            rings_scored=sum(1 for e in self._events if e.outcome is PassOutcome.SCORED),
            rings_missed=sum(1 for e in self._events if e.outcome is PassOutcome.MISSED),
            crashed_on=crashed_on,
            ticks=self._tick,
        )

    def snapshot(self) -> FlightSnapshot:
        return FlightSnapshot(
            state=self._state,
            score=self._score,
            craft_position=self._craft.position,
            rings=tuple(replace(r) for r in self._field),
            tick=self._tick,
            last_outcome=self._last_outcome,
        )

    def _emit(self, kind: GameEventKind, pass_event: RingPassEvent | None = None) -> None:
        if not self._listeners:
            return
        event = GameEvent(kind=kind, snapshot=self.snapshot(), pass_event=pass_event)
        for listener in list(self._listeners):
            listener(event)


def build_flight_game(*, config: FlightConfig | None = None) -> GameController:
    cfg = config or FlightConfig()
    field = RingField.generate(
        count=cfg.ring_count,
        spacing=cfg.ring_spacing,
        start_offset=cfg.ring_start_offset,
        altitude_a=cfg.altitude_a,
        altitude_b=cfg.altitude_b,
        major_radius=cfg.major_radius,
        tube_radius=cfg.tube_radius,
    )
    return GameController(
        field=field,
        start_position=cfg.start_position,
        speed=cfg.speed,
        pitch_sensitivity=cfg.pitch_sensitivity,
        judge=CollisionJudge(include_lateral=cfg.include_lateral),
    )
