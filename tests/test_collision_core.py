from __future__ import annotations

import pytest

from ring_flight.collision import CollisionJudge, PassOutcome, classify, is_crossed
from ring_flight.craft import Vec3
from ring_flight.ring_field import Ring


def _ring(major: float = 8.0, tube: float = 0.7) -> Ring:
    return Ring(index=0, center=Vec3(0.0, 0.0, 0.0), major_radius=major, tube_radius=tube)


@pytest.mark.parametrize(
    ("y", "expected"),
    [
        (5.0, PassOutcome.SCORED),
        (8.0, PassOutcome.CRASHED),
        (9.0, PassOutcome.MISSED),
        (-5.0, PassOutcome.SCORED),
        (-8.5, PassOutcome.CRASHED),
    ],
)
def test_evaluate_classifies_by_planar_distance(y: float, expected: PassOutcome) -> None:
    ring = _ring()
    judgement = CollisionJudge().evaluate(Vec3(0.0, y, -1.0), ring)

    assert judgement.outcome is expected
    assert judgement.distance == pytest.approx(abs(y))
    assert judgement.ring is ring
    assert ring.checked is True


def test_boundary_distances_resolve_to_crash() -> None:
    ring = _ring(major=8.0, tube=1.0)
    assert classify(7.0, ring) is PassOutcome.CRASHED
    assert classify(9.0, ring) is PassOutcome.CRASHED
    assert classify(6.999, ring) is PassOutcome.SCORED
    assert classify(9.001, ring) is PassOutcome.MISSED


def test_planar_distance_ignores_forward_axis_and_uses_lateral() -> None:
    ring = _ring()
    judge = CollisionJudge()
    assert judge.planar_distance(Vec3(3.0, 4.0, -1000.0), ring) == pytest.approx(5.0)


def test_judge_without_lateral_freedom_drops_x() -> None:
    ring = _ring()
    judge = CollisionJudge(include_lateral=False)
    assert judge.include_lateral is False
    assert judge.planar_distance(Vec3(30.0, 4.0, -1.0), ring) == pytest.approx(4.0)


def test_is_crossed_requires_unchecked_ring_behind_craft() -> None:
    ring = _ring()
    assert is_crossed(Vec3(0.0, 0.0, 1.0), ring) is False
    assert is_crossed(Vec3(0.0, 0.0, 0.0), ring) is False
    assert is_crossed(Vec3(0.0, 0.0, -0.1), ring) is True

    ring.checked = True
    assert is_crossed(Vec3(0.0, 0.0, -0.1), ring) is False
