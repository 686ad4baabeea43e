from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from .errors import BlockedByOccupantsAbove
from .ledger import OccupancyLedger
from .models import Container


@dataclass(frozen=True)
class RemovalDecision:
    container_id: str
    removable: bool
    blockers: FrozenSet[Container] = field(default_factory=frozenset)

    @property
    def blocker_ids(self) -> FrozenSet[str]:
        return frozenset(blocker.id for blocker in self.blockers)

    def raise_for_blockers(self) -> None:
        if not self.removable:
            raise BlockedByOccupantsAbove(self.container_id, self.blocker_ids)


class RemovalValidator:
    def __init__(self, ledger: OccupancyLedger) -> None:
        self.ledger = ledger

    def check(self, container: Container) -> RemovalDecision:
        """Report the containers resting on top of ``container``.

        Staged containers have nothing to lift, so asking is a caller bug.
        """
        if container.is_staged:
            raise ValueError(f"container {container.id!r} is staged at the gate")
        blockers = set()
        for cell in container.occupied_cells:
            blockers.update(self.ledger.occupants_above(cell))
        return RemovalDecision(
            container.id, removable=not blockers, blockers=frozenset(blockers)
        )
