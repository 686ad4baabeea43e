from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

CONFIG_ENV_VAR = "YARD_SIM_CONFIG"

_DURATION_FIELDS = (
    "bridge_ms",
    "hook_rise_ms",
    "lift_ms",
    "travel_ms",
    "lower_ms",
    "tick_interval_ms",
)

_POSITIVE_FIELDS = ("bay_pitch", "row_pitch", "tier_height", "gate_spacing")
_NON_NEGATIVE_FIELDS = ("plate_thickness", "hook_clearance")


@dataclass(frozen=True)
class YardConfig:
    """Scene dimensions (metres) and crane timings (milliseconds)."""

    bay_pitch: float = 2.5
    row_pitch: float = 2.6
    tier_height: float = 2.3
    container_height_ratio: float = 0.9
    plate_thickness: float = 0.05
    travel_height: float = 5.5
    crane_z: float = -1.2
    hook_clearance: float = 0.2
    gate_x: float = -6.0
    gate_z: float = 0.0
    gate_spacing: float = 2.8
    bridge_ms: float = 800.0
    hook_rise_ms: float = 600.0
    lift_ms: float = 600.0
    travel_ms: float = 900.0
    lower_ms: float = 600.0
    tick_interval_ms: int = 16

    def __post_init__(self) -> None:
        for name in _DURATION_FIELDS + _POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than 0")
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if not 0 < self.container_height_ratio <= 1:
            raise ValueError("container_height_ratio must be in (0, 1]")
        if self.travel_height <= self.tier_height * 2:
            raise ValueError("travel_height must clear two stacked tiers")

    @property
    def container_height(self) -> float:
        return self.tier_height * self.container_height_ratio

    @property
    def container_half_height(self) -> float:
        return self.container_height / 2


DEFAULT_CONFIG = YardConfig()


def _coerce(key: str, value: Any) -> float | int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for {key}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid value for {key}: {value!r}") from e
    if key == "tick_interval_ms":
        if not number.is_integer():
            raise ValueError(f"{key} must be a whole number of milliseconds: {value!r}")
        return int(number)
    return number


def config_from_dict(data: Dict[str, Any], base: YardConfig | None = None) -> YardConfig:
    base = base or DEFAULT_CONFIG
    known = {f.name: f for f in fields(YardConfig)}
    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown config key: {key}")
        overrides[key] = _coerce(key, value)
    return replace(base, **overrides)


def get_config_path() -> str | None:
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return str(Path(env_path).expanduser().resolve())
    return None


def load_config(path: str | os.PathLike | None = None) -> YardConfig:
    """Load a :class:`YardConfig` from JSON.

    The explicit ``path`` wins, then ``$YARD_SIM_CONFIG``; without either the
    defaults are returned.
    """

    config_path = str(path) if path is not None else get_config_path()
    if config_path is None:
        return DEFAULT_CONFIG
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config in {config_path} must be a JSON object")
    return config_from_dict(data)
