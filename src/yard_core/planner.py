from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from .errors import EdgeOverflow, NoSupport, TargetOccupied
from .ledger import OccupancyLedger
from .models import ROWS, Cell, Container, Slot
from .slot_address import format_slot


class PlacementRefusal(Enum):
    EDGE_OVERFLOW = "edge_overflow"
    TARGET_OCCUPIED = "target_occupied"
    NO_SUPPORT = "no_support"


_REFUSAL_ERRORS = {
    PlacementRefusal.EDGE_OVERFLOW: EdgeOverflow,
    PlacementRefusal.TARGET_OCCUPIED: TargetOccupied,
    PlacementRefusal.NO_SUPPORT: NoSupport,
}


@dataclass(frozen=True)
class PlacementDecision:
    container_id: str
    slot: Slot
    accepted: bool
    tier: int | None = None
    cells: Tuple[Cell, ...] = field(default_factory=tuple)
    reason: PlacementRefusal | None = None

    def raise_for_refusal(self) -> None:
        if self.accepted:
            return
        raise _REFUSAL_ERRORS[self.reason](self.container_id, format_slot(self.slot))


def footprint(container: Container, slot: Slot, tier: int) -> Tuple[Cell, ...] | None:
    """Cells ``container`` covers at ``slot``; ``None`` when it runs off the last row."""
    span = container.size_class.cells
    if slot.row + span - 1 > ROWS:
        return None
    return tuple(Cell(slot.bay, slot.row + offset, tier) for offset in range(span))


class PlacementPlanner:
    """Decide the tier and cells for a placement without touching the ledger.

    Tier 1 always wins when free. Tier 2 needs every cell underneath held by
    some other container; one 40' box or two 20' boxes both count.
    """

    def __init__(self, ledger: OccupancyLedger) -> None:
        self.ledger = ledger

    def _refuse(self, container: Container, slot: Slot, reason: PlacementRefusal) -> PlacementDecision:
        return PlacementDecision(container.id, slot, accepted=False, reason=reason)

    def _is_supported(self, container: Container, cells: Tuple[Cell, ...]) -> bool:
        for cell in cells:
            below = cell.below()
            if below is None:
                continue
            occupant = self.ledger.occupant(below)
            if occupant is None or occupant is container:
                return False
        return True

    def plan(self, container: Container, slot: Slot) -> PlacementDecision:
        ground = footprint(container, slot, 1)
        if ground is None:
            return self._refuse(container, slot, PlacementRefusal.EDGE_OVERFLOW)
        if self.ledger.is_free(ground, except_container=container):
            return PlacementDecision(container.id, slot, accepted=True, tier=1, cells=ground)

        stacked = footprint(container, slot, 2)
        if stacked is None:
            return self._refuse(container, slot, PlacementRefusal.EDGE_OVERFLOW)
        if not self.ledger.is_free(stacked, except_container=container):
            return self._refuse(container, slot, PlacementRefusal.TARGET_OCCUPIED)
        if not self._is_supported(container, stacked):
            return self._refuse(container, slot, PlacementRefusal.NO_SUPPORT)
        return PlacementDecision(container.id, slot, accepted=True, tier=2, cells=stacked)
