import pytest

from yard_core.ledger import OccupancyLedger
from yard_core.models import Cell, Container, SizeClass
from yard_core.snapshot import YardSnapshot


@pytest.fixture
def snapshot():
    ledger = OccupancyLedger()
    base = Container("BASE", SizeClass.TWO_UNIT, gate_index=0)
    top = Container("TOP", SizeClass.ONE_UNIT, gate_index=1)
    waiting_late = Container("W2", SizeClass.ONE_UNIT, gate_index=5)
    waiting_early = Container("W1", SizeClass.ONE_UNIT, gate_index=3)
    ledger.commit(base, (Cell(2, 1, 1), Cell(2, 2, 1)), ())
    base.gate_index = None
    ledger.commit(top, (Cell(2, 1, 2),), ())
    top.gate_index = None
    return YardSnapshot.from_ledger(ledger, [base, top, waiting_late, waiting_early])


def test_empty_snapshot():
    empty = YardSnapshot()
    assert empty.staged == ()
    assert empty.slot_labels() == {}
    assert empty.heat_map().sum() == 0


def test_occupant_lookup(snapshot):
    assert snapshot.occupant_id(Cell(2, 2, 1)) == "BASE"
    assert snapshot.occupant_id(Cell(2, 1, 2)) == "TOP"
    assert snapshot.occupant_id(Cell(1, 1, 1)) is None


def test_staged_in_gate_order(snapshot):
    assert snapshot.staged == ("W1", "W2")


def test_slot_labels(snapshot):
    assert snapshot.slot_labels() == {"B1": ["BASE@t1", "TOP@t2"], "B2": ["BASE@t1"]}


def test_heat_map_counts_tiers(snapshot):
    grid = snapshot.heat_map()
    assert grid.shape == (3, 3)
    assert grid[0, 1] == 2
    assert grid[1, 1] == 1
    assert grid.sum() == 3


def test_cells_are_read_only(snapshot):
    with pytest.raises(TypeError):
        snapshot.cells[Cell(1, 1, 1)] = "X"
