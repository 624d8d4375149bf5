from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .craft import Vec3

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "RING_FLIGHT_CONFIG_PATH"
LOG_LEVEL_ENV = "RING_FLIGHT_LOG_LEVEL"


def _as_float(value: object, fallback: float) -> float:
    try:
        result = float(value)  # type: ignore[arg-type]
    except Exception:
        return fallback
    return result if math.isfinite(result) else fallback


def _as_int(value: object, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    if isinstance(value, float) and not value.is_integer():
        return fallback
    try:
        return int(value)  # type: ignore[arg-type]
    except Exception:
        return fallback


def _as_bool(value: object, fallback: bool) -> bool:
    # JSON gives real booleans; strings like "false" are not trusted.
    return value if isinstance(value, bool) else fallback


def _clamp(value: float, lo: float, hi: float) -> float:
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return float(value)


@dataclass(frozen=True, slots=True)
class AxisCalibrationSettings:
    min_raw: float = -1.0
    max_raw: float = 1.0
    deadzone: float = 0.05
    invert: bool = False
    curve: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_raw": float(self.min_raw),
            "max_raw": float(self.max_raw),
            "deadzone": float(self.deadzone),
            "invert": bool(self.invert),
            "curve": float(self.curve),
        }

    @classmethod
    def from_dict(cls, data: object) -> "AxisCalibrationSettings":
        if not isinstance(data, dict):
            return cls()
        min_raw = _clamp(_as_float(data.get("min_raw"), -1.0), -1.0, 0.0)
        max_raw = _clamp(_as_float(data.get("max_raw"), 1.0), 0.0, 1.0)
        if min_raw >= -0.001:
            min_raw = -1.0
        if max_raw <= 0.001:
            max_raw = 1.0
        return cls(
            min_raw=min_raw,
            max_raw=max_raw,
            deadzone=_clamp(_as_float(data.get("deadzone"), 0.05), 0.0, 0.45),
            invert=_as_bool(data.get("invert"), False),
            curve=_clamp(_as_float(data.get("curve"), 1.0), 0.4, 2.6),
        )


@dataclass(frozen=True, slots=True)
class FlightConfig:
    ring_count: int = 10
    ring_spacing: float = 150.0
    ring_start_offset: float = 300.0
    altitude_a: float = 0.0
    altitude_b: float = 6.0
    major_radius: float = 8.0
    tube_radius: float = 0.7
    # 100 ft/s at 60 frames per second.
    speed: float = 100.0 / 60.0
    start_position: Vec3 = Vec3(0.0, 0.0, 500.0)
    pitch_sensitivity: float = 0.2
    include_lateral: bool = True
    pitch_axis: int = 3
    pitch_calibration: AxisCalibrationSettings = field(default_factory=AxisCalibrationSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ring_count": self.ring_count,
            "ring_spacing": self.ring_spacing,
            "ring_start_offset": self.ring_start_offset,
            "altitude_a": self.altitude_a,
            "altitude_b": self.altitude_b,
            "major_radius": self.major_radius,
            "tube_radius": self.tube_radius,
            "speed": self.speed,
            "start_position": list(self.start_position.as_tuple()),
            "pitch_sensitivity": self.pitch_sensitivity,
            "include_lateral": self.include_lateral,
            "pitch_axis": self.pitch_axis,
            "pitch_calibration": self.pitch_calibration.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: object) -> "FlightConfig":
        """Build a config, keeping the default for every missing or malformed field.

        Geometry is not validated here; ``RingField.generate`` rejects bad rings.
        """

        if not isinstance(data, dict):
            return cls()
        d = cls()

        start = d.start_position
        raw_start = data.get("start_position")
        if isinstance(raw_start, (list, tuple)) and len(raw_start) == 3:
            start = Vec3(
                _as_float(raw_start[0], start.x),
                _as_float(raw_start[1], start.y),
                _as_float(raw_start[2], start.z),
            )

        calibration = d.pitch_calibration
        if "pitch_calibration" in data:
            calibration = AxisCalibrationSettings.from_dict(data.get("pitch_calibration"))

        return cls(
            ring_count=_as_int(data.get("ring_count"), d.ring_count),
            ring_spacing=_as_float(data.get("ring_spacing"), d.ring_spacing),
            ring_start_offset=_as_float(data.get("ring_start_offset"), d.ring_start_offset),
            altitude_a=_as_float(data.get("altitude_a"), d.altitude_a),
            altitude_b=_as_float(data.get("altitude_b"), d.altitude_b),
            major_radius=_as_float(data.get("major_radius"), d.major_radius),
            tube_radius=_as_float(data.get("tube_radius"), d.tube_radius),
            speed=_as_float(data.get("speed"), d.speed),
            start_position=start,
            pitch_sensitivity=_as_float(data.get("pitch_sensitivity"), d.pitch_sensitivity),
            include_lateral=_as_bool(data.get("include_lateral"), d.include_lateral),
            pitch_axis=max(0, _as_int(data.get("pitch_axis"), d.pitch_axis)),
            pitch_calibration=calibration,
        )


def default_config_path() -> Path | None:
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return None


def load_flight_config(path: Path | None = None) -> FlightConfig:
    if path is None:
        path = default_config_path()
    if path is None:
        return FlightConfig()
    if not path.exists():
        logger.warning("Config file %s not found, using defaults", path)
        return FlightConfig()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read config %s (%s), using defaults", path, exc)
        return FlightConfig()
    logger.info("Loaded flight config from %s", path)
    return FlightConfig.from_dict(payload)
