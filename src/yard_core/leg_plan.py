from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .config import DEFAULT_CONFIG, YardConfig
from .geometry import Vec3


class Entity(Enum):
    BRIDGE = "bridge"
    HOOK = "hook"
    PAYLOAD = "payload"


@dataclass(frozen=True)
class Leg:
    entity: Entity
    target: Vec3
    duration_ms: float


Stage = Tuple[Leg, ...]


@dataclass(frozen=True)
class MovePlan:
    """Ordered stages of crane legs; legs inside one stage run together."""

    name: str
    stages: Tuple[Stage, ...]

    def legs(self) -> Tuple[Leg, ...]:
        return tuple(leg for stage in self.stages for leg in stage)

    @property
    def duration_ms(self) -> float:
        return sum(max(leg.duration_ms for leg in stage) for stage in self.stages if stage)


def build_move_plan(
    name: str,
    payload_start: Vec3,
    destination: Vec3,
    config: YardConfig = DEFAULT_CONFIG,
) -> MovePlan:
    """Pick up whatever sits at ``payload_start`` and set it down at ``destination``.

    ``destination`` is the centre the payload ends on. The bridge never leaves
    the crane line; only its x follows the destination.
    """

    travel = config.travel_height
    pick_top = (payload_start[0], travel, payload_start[2])
    drop_top = (destination[0], travel, destination[2])
    hook_rest = (
        destination[0],
        destination[1] + config.container_half_height + config.hook_clearance,
        config.crane_z,
    )

    stages: Tuple[Stage, ...] = (
        (
            Leg(Entity.BRIDGE, (destination[0], travel, config.crane_z), config.bridge_ms),
            Leg(Entity.HOOK, pick_top, config.hook_rise_ms),
        ),
        (Leg(Entity.PAYLOAD, pick_top, config.lift_ms),),
        (
            Leg(Entity.HOOK, (drop_top[0], travel, config.crane_z), config.travel_ms),
            Leg(Entity.PAYLOAD, drop_top, config.travel_ms),
        ),
        (
            Leg(Entity.HOOK, hook_rest, config.lower_ms),
            Leg(Entity.PAYLOAD, destination, config.lower_ms),
        ),
    )
    return MovePlan(name=name, stages=stages)
