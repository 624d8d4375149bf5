from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from .craft import Vec3


@dataclass(slots=True)
class Ring:
    index: int
    center: Vec3
    major_radius: float
    tube_radius: float
    checked: bool = False

    @property
    def inner_radius(self) -> float:
        # Anything strictly closer than this passes through the hole.
        return self.major_radius - self.tube_radius

    @property
    def outer_radius(self) -> float:
        return self.major_radius + self.tube_radius


class RingField:
    """Ordered, fixed sequence of ring obstacles.

    Rings are laid out once along the forward axis with decreasing ``z`` and
    alternate between two altitudes. Only ``checked`` changes after creation.
    """

    def __init__(self, rings: list[Ring]) -> None:
        self._rings = rings

    @classmethod
    def generate(
        cls,
        *,
        count: int,
        spacing: float,
        start_offset: float,
        altitude_a: float,
        altitude_b: float,
        major_radius: float,
        tube_radius: float,
    ) -> "RingField":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError("count must be an int >= 0")
        numbers = (spacing, start_offset, altitude_a, altitude_b, major_radius, tube_radius)
        if not all(math.isfinite(v) for v in numbers):
            raise ValueError("ring geometry must be finite")
        if spacing < 0:
            raise ValueError("spacing must be >= 0")
        if not (0.0 < tube_radius < major_radius):
            raise ValueError("tube_radius must be in (0, major_radius)")

        rings: list[Ring] = []
        for i in range(count):
            altitude = altitude_a if i % 2 == 0 else altitude_b
            rings.append(
                Ring(
                    index=i,
                    center=Vec3(0.0, float(altitude), float(start_offset) - i * float(spacing)),
                    major_radius=float(major_radius),
                    tube_radius=float(tube_radius),
                )
            )
        return cls(rings)

    def reset_checks(self) -> None:
        for ring in self._rings:
            ring.checked = False

    def rings(self) -> tuple[Ring, ...]:
        return tuple(self._rings)

    def __len__(self) -> int:
        return len(self._rings)

    def __iter__(self) -> Iterator[Ring]:
        return iter(self._rings)

    def __getitem__(self, index: int) -> Ring:
        return self._rings[index]
