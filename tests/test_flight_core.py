from __future__ import annotations

import pytest

from ring_flight.collision import PassOutcome
from ring_flight.config import FlightConfig
from ring_flight.craft import Vec3
from ring_flight.flight_core import (
    GameController,
    GameEvent,
    GameEventKind,
    GameState,
    build_flight_game,
)
from ring_flight.ring_field import RingField


def _single_ring_game(*, craft_y: float) -> GameController:
    # One ring (major 8, tube 0.7) at the origin; one tick carries the craft past it.
    cfg = FlightConfig(
        ring_count=1,
        ring_start_offset=0.0,
        altitude_a=0.0,
        altitude_b=0.0,
        start_position=Vec3(0.0, craft_y, 1.0),
        speed=2.0,
    )
    return build_flight_game(config=cfg)


def test_new_game_is_idle_with_zero_score() -> None:
    game = build_flight_game()
    snap = game.snapshot()
    assert snap.state is GameState.IDLE
    assert snap.score == 0
    assert snap.craft_position == Vec3(0.0, 0.0, 500.0)
    assert len(snap.rings) == 10
    assert snap.last_outcome is None


def test_scenario_pass_inside_ring_scores() -> None:
    game = _single_ring_game(craft_y=5.0)
    game.start()
    game.tick(0.0)

    assert game.state is GameState.RUNNING
    assert game.score == 1
    assert game.field[0].checked is True
    assert game.snapshot().last_outcome is PassOutcome.SCORED


def test_scenario_clipping_rim_crashes_and_freezes_game() -> None:
    game = _single_ring_game(craft_y=8.0)
    game.start()
    game.tick(0.0)

    assert game.state is GameState.CRASHED
    assert game.score == 0
    frozen = game.snapshot()

    game.tick(1.0)
    game.tick(-1.0)
    after = game.snapshot()
    assert after.craft_position == frozen.craft_position
    assert after.tick == frozen.tick
    assert after.score == 0


def test_scenario_missing_ring_has_no_effect_but_marks_checked() -> None:
    game = _single_ring_game(craft_y=9.0)
    game.start()
    game.tick(0.0)

    assert game.state is GameState.RUNNING
    assert game.score == 0
    assert game.field[0].checked is True
    assert [e.outcome for e in game.events()] == [PassOutcome.MISSED]


def test_scenario_one_tick_crossing_two_rings_processes_both_in_order() -> None:
    cfg = FlightConfig(
        ring_count=2,
        ring_spacing=150.0,
        ring_start_offset=0.0,
        altitude_a=0.0,
        altitude_b=0.0,
        start_position=Vec3(0.0, 0.0, 1.0),
        speed=200.0,
    )
    game = build_flight_game(config=cfg)
    game.start()
    game.tick(0.0)

    assert game.score == 2
    events = game.events()
    assert [e.ring_index for e in events] == [0, 1]
    assert {e.tick for e in events} == {1}
    assert [e.score for e in events] == [1, 2]


def test_crash_stops_processing_remaining_rings_this_tick() -> None:
    cfg = FlightConfig(
        ring_count=2,
        ring_spacing=150.0,
        ring_start_offset=0.0,
        altitude_a=8.0,
        altitude_b=0.0,
        start_position=Vec3(0.0, 0.0, 1.0),
        speed=200.0,
    )
    game = build_flight_game(config=cfg)
    game.start()
    game.tick(0.0)

    assert game.state is GameState.CRASHED
    assert game.field[0].checked is True
    assert game.field[1].checked is False
    assert game.score == 0


def test_tick_before_start_is_noop() -> None:
    game = build_flight_game()
    game.tick(1.0)
    snap = game.snapshot()
    assert snap.state is GameState.IDLE
    assert snap.craft_position == Vec3(0.0, 0.0, 500.0)
    assert snap.tick == 0


def test_tick_scales_and_clamps_pitch_input() -> None:
    game = build_flight_game()
    game.start()
    game.tick(1.0)
    assert game.craft.position.y == pytest.approx(-0.2)
    assert game.craft.position.z == pytest.approx(500.0 - 100.0 / 60.0)

    game.tick(-5.0)
    assert game.craft.position.y == pytest.approx(0.0)


def test_start_outside_idle_is_noop() -> None:
    game = _single_ring_game(craft_y=8.0)
    game.start()
    game.start()
    assert game.state is GameState.RUNNING

    game.tick(0.0)
    assert game.state is GameState.CRASHED
    game.start()
    assert game.state is GameState.CRASHED


@pytest.mark.parametrize("craft_y", [0.0, 8.0, 9.0])
def test_restart_from_any_state_resets_everything(craft_y: float) -> None:
    game = _single_ring_game(craft_y=craft_y)
    game.restart()
    assert game.state is GameState.IDLE

    game.start()
    game.tick(0.0)
    game.restart()

    snap = game.snapshot()
    assert snap.state is GameState.IDLE
    assert snap.score == 0
    assert snap.tick == 0
    assert snap.craft_position == Vec3(0.0, craft_y, 1.0)
    assert not any(r.checked for r in snap.rings)
    assert game.events() == []


def test_ring_is_judged_once_per_playthrough() -> None:
    game = _single_ring_game(craft_y=0.0)
    game.start()
    for _ in range(20):
        game.tick(0.0)
    assert len(game.events()) == 1
    assert game.score == 1


def test_snapshot_rings_are_copies() -> None:
    game = build_flight_game()
    snap = game.snapshot()
    snap.rings[0].checked = True
    assert game.field[0].checked is False


def test_listeners_receive_lifecycle_events() -> None:
    game = _single_ring_game(craft_y=8.0)
    received: list[GameEvent] = []
    game.add_listener(received.append)

    game.start()
    game.tick(0.0)
    game.restart()

    kinds = [e.kind for e in received]
    assert kinds == [
        GameEventKind.STARTED,
        GameEventKind.RING_PASSED,
        GameEventKind.CRASHED,
        GameEventKind.RESTARTED,
    ]
    assert received[2].snapshot.state is GameState.CRASHED
    assert received[2].pass_event is not None
    assert received[2].pass_event.outcome is PassOutcome.CRASHED

    game.remove_listener(received.append)
    game.start()
    assert len(received) == 4


def test_summary_counts_outcomes() -> None:
    cfg = FlightConfig(
        ring_count=3,
        ring_spacing=10.0,
        ring_start_offset=0.0,
        altitude_a=0.0,
        altitude_b=20.0,
        start_position=Vec3(0.0, 0.0, 1.0),
        speed=2.0,
    )
    game = build_flight_game(config=cfg)
    game.start()
    for _ in range(20):
        game.tick(0.0)

    summary = game.summary()
    assert summary.rings_total == 3
    assert summary.rings_scored == 2
    assert summary.rings_missed == 1
    assert summary.crashed_on is None
    assert summary.ticks == 20


_NAN = float("nan")


@pytest.mark.parametrize(
    ("speed", "sensitivity", "start"),
    [
        (0.0, 0.2, Vec3(0.0, 0.0, 1.0)),
        (-1.0, 0.2, Vec3(0.0, 0.0, 1.0)),
        (1.0, -0.1, Vec3(0.0, 0.0, 1.0)),
        (_NAN, 0.2, Vec3(0.0, 0.0, 1.0)),
        (float("inf"), 0.2, Vec3(0.0, 0.0, 1.0)),
        (1.0, _NAN, Vec3(0.0, 0.0, 1.0)),
        (1.0, 0.2, Vec3(0.0, _NAN, 1.0)),
    ],
)
def test_controller_rejects_invalid_motion_parameters(speed: float, sensitivity: float, start: Vec3) -> None:
    field = RingField.generate(
        count=1,
        spacing=1.0,
        start_offset=0.0,
        altitude_a=0.0,
        altitude_b=0.0,
        major_radius=8.0,
        tube_radius=0.7,
    )
    with pytest.raises(ValueError):
        GameController(
            field=field,
            start_position=start,
            speed=speed,
            pitch_sensitivity=sensitivity,
        )


@pytest.mark.parametrize("pitch", [_NAN, float("inf"), float("-inf")])
def test_non_finite_pitch_reads_as_centred_stick(pitch: float) -> None:
    game = _single_ring_game(craft_y=5.0)
    game.start()
    game.tick(pitch)

    assert game.craft.position.y == pytest.approx(5.0)
    assert game.score == 1


def test_listener_sees_tick_fully_applied_before_notification() -> None:
    cfg = FlightConfig(
        ring_count=2,
        ring_spacing=150.0,
        ring_start_offset=0.0,
        altitude_a=0.0,
        altitude_b=0.0,
        start_position=Vec3(0.0, 0.0, 1.0),
        speed=200.0,
    )
    game = build_flight_game(config=cfg)
    game.start()
    seen: list[GameEvent] = []
    game.add_listener(seen.append)

    game.tick(0.0)

    assert [e.pass_event.ring_index for e in seen if e.pass_event is not None] == [0, 1]
    assert all(e.snapshot.score == 2 for e in seen)
    assert all(r.checked for r in seen[0].snapshot.rings)


def test_failing_listener_does_not_leave_tick_half_applied() -> None:
    cfg = FlightConfig(
        ring_count=2,
        ring_spacing=150.0,
        ring_start_offset=0.0,
        altitude_a=0.0,
        altitude_b=0.0,
        start_position=Vec3(0.0, 0.0, 1.0),
        speed=200.0,
    )
    game = build_flight_game(config=cfg)
    game.start()

    def explode(event: GameEvent) -> None:
        raise RuntimeError("listener failed")

    game.add_listener(explode)

    with pytest.raises(RuntimeError):
        game.tick(0.0)

    assert game.score == 2
    assert [r.checked for r in game.field] == [True, True]
    assert len(game.events()) == 2
