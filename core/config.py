"""
Animation timing configuration.

Durations are base values in milliseconds; the speed multiplier shortens or
stretches all of them at once. Files are TOML with an ``[animation]`` table:

    [animation]
    speed = 1.5
    highlight_ms = 250
"""

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from core.errors import ConfigError

logger = logging.getLogger(__name__)

MIN_SPEED = 0.5
MAX_SPEED = 3.0


@dataclass(frozen=True)
class AnimationConfig:
    """Base durations for every kind of step plus the global speed multiplier."""
    status_ms: int = 1000
    brief_status_ms: int = 500
    highlight_ms: int = 300
    pivot_ms: int = 600
    recolor_ms: int = 500
    reposition_ms: int = 800
    show_value_ms: int = 500
    speed: float = 1.0
    check_invariants: bool = False

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith("_ms"):
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ConfigError(f"{f.name} must be a positive integer, got {value!r}")
        if isinstance(self.speed, bool) or not isinstance(self.speed, (int, float)):
            raise ConfigError(f"speed must be a number, got {self.speed!r}")
        if not isinstance(self.check_invariants, bool):
            raise ConfigError("check_invariants must be a boolean")
        # clamp like the playback slider does (0.5x - 3x)
        object.__setattr__(self, "speed", max(MIN_SPEED, min(MAX_SPEED, float(self.speed))))

    def scale_duration(self, base_ms: int) -> int:
        """Higher speed means a shorter duration; never below 1 ms."""
        if self.speed <= 0:
            return base_ms
        return max(1, int(base_ms / self.speed))

    def with_speed(self, speed: float) -> "AnimationConfig":
        return replace(self, speed=speed)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AnimationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ConfigError(f"Unknown animation setting(s): {', '.join(unknown)}")
        return cls(**dict(mapping))


def load_config(path) -> AnimationConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    section = data.get("animation", {})
    if not isinstance(section, dict):
        raise ConfigError("[animation] must be a table")

    config = AnimationConfig.from_mapping(section)
    logger.debug("Loaded animation config from %s: %s", path, config)
    return config
