from yard_app.core.hud import describe_error, staged_summary
from yard_core.errors import BlockedByOccupantsAbove, EdgeOverflow
from yard_core.snapshot import YardSnapshot


def test_blocked_message_names_single_blocker():
    error = BlockedByOccupantsAbove("C01", ["C02"])
    assert describe_error(error) == "Remove C02 first: it sits on C01"


def test_blocked_message_agrees_with_several_blockers():
    error = BlockedByOccupantsAbove("C01", ["C03", "C02"])
    assert describe_error(error) == "Remove C02, C03 first: they sit on C01"


def test_yard_error_uses_its_message():
    error = EdgeOverflow("C04", "A3")
    assert describe_error(error) == str(error)


def test_unexpected_error():
    assert describe_error(RuntimeError("boom")) == "Unexpected error: boom"


def test_staged_summary():
    assert staged_summary(YardSnapshot()) == "Gate: empty"
    assert staged_summary(YardSnapshot(staged=("C01", "C02"))) == "Gate: C01, C02"
