from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec3:
    """Point in flight space: x lateral, y vertical, z forward (craft flies toward -z)."""

    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True, slots=True)
class CraftState:
    position: Vec3


def advance(state: CraftState, *, speed: float, pitch: float) -> CraftState:
    """Move the craft one frame forward.

    Positive pitch pushes the nose down, so it is subtracted from altitude.
    The lateral coordinate is never touched.
    """

    p = state.position
    return CraftState(position=Vec3(p.x, p.y - float(pitch), p.z - float(speed)))


def reset(initial_position: Vec3) -> CraftState:
    return CraftState(position=initial_position)
