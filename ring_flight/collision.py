from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from .craft import Vec3
from .ring_field import Ring


class PassOutcome(StrEnum):
    SCORED = "scored"
    CRASHED = "crashed"
    MISSED = "missed"


@dataclass(frozen=True, slots=True)
class Judgement:
    outcome: PassOutcome
    ring: Ring
    distance: float


def is_crossed(craft_position: Vec3, ring: Ring) -> bool:
    """True once the craft is past the ring's plane and the ring is still unjudged."""

    return not ring.checked and craft_position.z < ring.center.z


def classify(distance: float, ring: Ring) -> PassOutcome:
    # Closed interval on the rim: touching either edge is a crash.
    if distance < ring.inner_radius:
        return PassOutcome.SCORED
    if distance <= ring.outer_radius:
        return PassOutcome.CRASHED
    return PassOutcome.MISSED


class CollisionJudge:
    """Decides what happened when the craft flew through a ring's plane.

    The judge is called at most once per ring: ``evaluate`` marks the ring
    checked, and callers gate on :func:`is_crossed` before calling it.
    """

    def __init__(self, *, include_lateral: bool = True) -> None:
        self._include_lateral = bool(include_lateral)

    @property
    def include_lateral(self) -> bool:
        return self._include_lateral

    def planar_distance(self, craft_position: Vec3, ring: Ring) -> float:
        dx = craft_position.x - ring.center.x if self._include_lateral else 0.0
        dy = craft_position.y - ring.center.y
        return math.sqrt(dx * dx + dy * dy)

    def evaluate(self, craft_position: Vec3, ring: Ring) -> Judgement:
        distance = self.planar_distance(craft_position, ring)
        ring.checked = True
        return Judgement(outcome=classify(distance, ring), ring=ring, distance=distance)
