from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

BAYS = 3
ROWS = 3
TIERS = 2
BAY_LETTERS = ("A", "B", "C")


@dataclass(frozen=True, order=True)
class Slot:
    """Ground position in the yard, addressed as bay letter + row number."""

    bay: int
    row: int

    def __post_init__(self) -> None:
        if not 1 <= self.bay <= BAYS or not 1 <= self.row <= ROWS:
            raise ValueError(f"slot out of range: bay={self.bay}, row={self.row}")


@dataclass(frozen=True, order=True)
class Cell:
    bay: int
    row: int
    tier: int

    def __post_init__(self) -> None:
        if (
            not 1 <= self.bay <= BAYS
            or not 1 <= self.row <= ROWS
            or not 1 <= self.tier <= TIERS
        ):
            raise ValueError(
                f"cell out of range: bay={self.bay}, row={self.row}, tier={self.tier}"
            )

    @property
    def slot(self) -> Slot:
        return Slot(self.bay, self.row)

    def above(self) -> Cell | None:
        if self.tier >= TIERS:
            return None
        return Cell(self.bay, self.row, self.tier + 1)

    def below(self) -> Cell | None:
        if self.tier <= 1:
            return None
        return Cell(self.bay, self.row, self.tier - 1)


class SizeClass(Enum):
    ONE_UNIT = "20ft"
    TWO_UNIT = "40ft"

    @property
    def cells(self) -> int:
        return 2 if self is SizeClass.TWO_UNIT else 1


@dataclass(eq=False)
class Container:
    """A cargo unit; hashed by identity so it can key ledger lookups."""

    id: str
    size_class: SizeClass = SizeClass.ONE_UNIT
    occupied_cells: Tuple[Cell, ...] = field(default_factory=tuple)
    gate_index: int | None = None

    @property
    def is_staged(self) -> bool:
        return not self.occupied_cells

    @property
    def tier(self) -> int | None:
        if not self.occupied_cells:
            return None
        return self.occupied_cells[0].tier

    def __repr__(self) -> str:
        return f"Container({self.id!r}, {self.size_class.value})"
