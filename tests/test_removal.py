import pytest

from yard_core.errors import BlockedByOccupantsAbove
from yard_core.ledger import OccupancyLedger
from yard_core.models import Cell, Container, SizeClass
from yard_core.removal import RemovalValidator


def test_free_container_is_removable():
    ledger = OccupancyLedger()
    box = Container("C1")
    ledger.commit(box, [Cell(1, 1, 1)], ())
    decision = RemovalValidator(ledger).check(box)
    assert decision.removable
    assert decision.blockers == frozenset()
    decision.raise_for_blockers()


def test_top_tier_container_is_removable():
    ledger = OccupancyLedger()
    base, top = Container("C1"), Container("C2")
    ledger.commit(base, [Cell(1, 1, 1)], ())
    ledger.commit(top, [Cell(1, 1, 2)], ())
    assert RemovalValidator(ledger).check(top).removable


def test_blocked_container_reports_blockers():
    ledger = OccupancyLedger()
    base, top = Container("C1"), Container("C2")
    ledger.commit(base, [Cell(1, 1, 1)], ())
    ledger.commit(top, [Cell(1, 1, 2)], ())

    decision = RemovalValidator(ledger).check(base)
    assert not decision.removable
    assert decision.blockers == frozenset({top})
    with pytest.raises(BlockedByOccupantsAbove) as excinfo:
        decision.raise_for_blockers()
    assert excinfo.value.blockers == frozenset({"C2"})


def test_two_unit_collects_blockers_over_both_cells():
    ledger = OccupancyLedger()
    base = Container("C1", SizeClass.TWO_UNIT)
    left, right = Container("C2"), Container("C3")
    ledger.commit(base, [Cell(2, 1, 1), Cell(2, 2, 1)], ())
    ledger.commit(left, [Cell(2, 1, 2)], ())
    ledger.commit(right, [Cell(2, 2, 2)], ())

    decision = RemovalValidator(ledger).check(base)
    assert decision.blocker_ids == frozenset({"C2", "C3"})


def test_staged_container_is_usage_error():
    with pytest.raises(ValueError):
        RemovalValidator(OccupancyLedger()).check(Container("C1"))
