from __future__ import annotations

import itertools

from .config import DEFAULT_CONFIG, YardConfig
from .geometry import Vec3


class GateQueue:
    """Staging lane left of bay A where unplaced containers wait."""

    def __init__(self, config: YardConfig = DEFAULT_CONFIG, start: int = 0) -> None:
        self.config = config
        self._counter = itertools.count(start)

    def next_index(self) -> int:
        return next(self._counter)

    def position_for(self, index: int) -> Vec3:
        if index < 0:
            raise ValueError("gate index must be non-negative")
        return (
            self.config.gate_x,
            self.config.container_half_height,
            self.config.gate_z + index * self.config.gate_spacing,
        )
