from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

import numpy as np

from .ledger import OccupancyLedger
from .models import BAYS, ROWS, Cell, Container, Slot
from .slot_address import format_slot


@dataclass(frozen=True)
class OccupancyDelta:
    container_id: str
    added: Tuple[Cell, ...]
    removed: Tuple[Cell, ...]


@dataclass(frozen=True)
class YardSnapshot:
    """Read-only view of the ledger handed to the HUD."""

    cells: Mapping[Cell, str] = field(default_factory=lambda: MappingProxyType({}))
    staged: Tuple[str, ...] = ()

    @classmethod
    def from_ledger(
        cls, ledger: OccupancyLedger, containers: Iterable[Container] = ()
    ) -> "YardSnapshot":
        cells = {cell: container.id for cell, container in ledger.items()}
        staged = tuple(
            container.id
            for container in sorted(
                (c for c in containers if c.is_staged),
                key=lambda c: (c.gate_index if c.gate_index is not None else -1, c.id),
            )
        )
        return cls(cells=MappingProxyType(cells), staged=staged)

    def occupant_id(self, cell: Cell) -> str | None:
        return self.cells.get(cell)

    def slot_labels(self) -> Dict[str, List[str]]:
        labels: Dict[str, List[str]] = {}
        for cell in sorted(self.cells):
            key = format_slot(Slot(cell.bay, cell.row))
            labels.setdefault(key, []).append(f"{self.cells[cell]}@t{cell.tier}")
        return labels

    def heat_map(self) -> np.ndarray:
        """Occupied tiers per slot, indexed ``[row - 1, bay - 1]``."""
        grid = np.zeros((ROWS, BAYS), dtype=int)
        for cell in self.cells:
            grid[cell.row - 1, cell.bay - 1] += 1
        return grid
