from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .errors import LedgerConflict
from .models import Cell, Container

logger = logging.getLogger(__name__)


class OccupancyLedger:
    """Authoritative cell -> container mapping.

    :meth:`commit` is the only mutator. It swaps in a fully built mapping and
    the container's new cell tuple together, so a failed commit leaves both
    sides untouched.
    """

    def __init__(self) -> None:
        self._cells: Dict[Cell, Container] = {}
        self._committing: Set[int] = set()

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def occupant(self, cell: Cell) -> Container | None:
        return self._cells.get(cell)

    def items(self) -> Iterator[Tuple[Cell, Container]]:
        return iter(sorted(self._cells.items()))

    def is_free(
        self, cells: Iterable[Cell], except_container: Container | None = None
    ) -> bool:
        for cell in cells:
            occupant = self._cells.get(cell)
            if occupant is not None and occupant is not except_container:
                return False
        return True

    def occupants_above(self, cell: Cell) -> Set[Container]:
        above = cell.above()
        if above is None:
            return set()
        occupant = self._cells.get(above)
        if occupant is None or occupant is self._cells.get(cell):
            return set()
        return {occupant}

    def commit(
        self,
        container: Container,
        new_cells: Iterable[Cell],
        previous_cells: Iterable[Cell],
    ) -> None:
        key = id(container)
        if key in self._committing:
            raise RuntimeError(f"commit for {container.id!r} is already in progress")
        self._committing.add(key)
        try:
            new_cells = tuple(new_cells)
            updated = dict(self._cells)
            for cell in previous_cells:
                if updated.get(cell) is container:
                    del updated[cell]
            for cell in new_cells:
                occupant = updated.get(cell)
                if occupant is not None and occupant is not container:
                    raise LedgerConflict(
                        f"Cell {cell} already holds {occupant.id!r}, "
                        f"cannot commit {container.id!r}"
                    )
                updated[cell] = container
            container.occupied_cells = new_cells
            self._cells = updated
        finally:
            self._committing.discard(key)
        logger.debug("Ledger commit %s -> %s", container.id, list(new_cells))

    def inconsistencies(self, containers: Iterable[Container]) -> List[str]:
        """Describe every break of the ledger <-> container agreement."""
        problems: List[str] = []
        owned: Dict[int, Set[Cell]] = {}
        known: Set[int] = set()
        for cell, occupant in self._cells.items():
            owned.setdefault(id(occupant), set()).add(cell)
        for container in containers:
            known.add(id(container))
            ledger_cells = owned.get(id(container), set())
            own_cells = set(container.occupied_cells)
            if len(own_cells) != len(container.occupied_cells):
                problems.append(f"{container.id}: duplicate cells {container.occupied_cells}")
            if ledger_cells != own_cells:
                problems.append(
                    f"{container.id}: ledger has {sorted(ledger_cells)}, "
                    f"container has {sorted(own_cells)}"
                )
        for cell, occupant in self._cells.items():
            if id(occupant) not in known:
                problems.append(f"{cell}: held by unregistered container {occupant.id}")
        return problems
