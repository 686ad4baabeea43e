import numpy as np
import pytest

from yard_core.choreographer import Body, LegStatus, MoveChoreographer, SequenceState, ease_in_out
from yard_core.errors import OperationInProgress, SequenceAborted
from yard_core.leg_plan import Entity, Leg, MovePlan


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_choreographer():
    clock = FakeClock()
    bridge = Body("bridge", (0.0, 5.0, -1.0))
    hook = Body("hook", (0.0, 4.5, -1.0))
    return MoveChoreographer(bridge, hook, clock), clock


def simple_plan(name="move"):
    return MovePlan(
        name,
        (
            (
                Leg(Entity.BRIDGE, (10.0, 5.0, -1.0), 100),
                Leg(Entity.HOOK, (0.0, 5.0, -1.0), 50),
            ),
            (Leg(Entity.PAYLOAD, (0.0, 5.0, 0.0), 100),),
        ),
    )


def test_ease_in_out_curve():
    assert ease_in_out(0.0) == 0.0
    assert ease_in_out(1.0) == 1.0
    assert ease_in_out(0.5) == pytest.approx(0.5)
    assert ease_in_out(0.25) == pytest.approx(0.125)
    assert ease_in_out(0.75) == pytest.approx(0.875)
    assert ease_in_out(2.0) == 1.0


def test_leg_positions_follow_eased_progress():
    chor, clock = make_choreographer()
    payload = Body("C1", (0.0, 1.0, 0.0))
    chor.start(simple_plan(), payload)

    clock.now = 25
    chor.tick()
    # bridge at 25% progress, eased to 12.5%
    assert chor.bridge.position[0] == pytest.approx(1.25)
    assert chor.hook.position[1] == pytest.approx(4.75)


def test_sequence_runs_stages_in_order_and_commits_once():
    chor, clock = make_choreographer()
    payload = Body("C1", (0.0, 1.0, 0.0))
    commits = []
    future = chor.start(simple_plan(), payload, on_commit=lambda: commits.append(clock.now))

    assert chor.busy
    clock.now = 50
    chor.tick()
    assert payload.position[1] == 1.0
    clock.now = 100
    assert chor.tick() is SequenceState.RUNNING
    np.testing.assert_allclose(chor.bridge.position, (10.0, 5.0, -1.0))

    clock.now = 150
    chor.tick()
    assert payload.position[1] == pytest.approx(3.0)
    assert commits == []

    clock.now = 200
    assert chor.tick() is SequenceState.COMPLETED
    assert commits == [200]
    assert future.result() is SequenceState.COMPLETED
    assert not chor.busy
    assert chor.state is SequenceState.COMPLETED

    chor.tick()
    assert commits == [200]


def test_second_start_rejected_while_busy():
    chor, clock = make_choreographer()
    commits = []
    first = chor.start(simple_plan("first"), Body("C1", (0, 1, 0)), on_commit=lambda: commits.append("first"))

    with pytest.raises(OperationInProgress):
        chor.start(simple_plan("second"), Body("C2", (0, 1, 0)), on_commit=lambda: commits.append("second"))

    clock.now = 1000
    chor.tick()
    clock.now = 2000
    chor.tick()
    assert first.result() is SequenceState.COMPLETED
    assert commits == ["first"]


def test_cancel_aborts_without_commit_and_releases_gate():
    chor, clock = make_choreographer()
    payload = Body("C1", (0.0, 1.0, 0.0))
    commits = []
    future = chor.start(simple_plan(), payload, on_commit=lambda: commits.append(1))

    clock.now = 40
    chor.tick()
    assert chor.cancel("stop")
    clock.now = 60
    assert chor.tick() is SequenceState.ABORTED

    assert commits == []
    assert not chor.busy
    with pytest.raises(SequenceAborted) as excinfo:
        future.result()
    assert excinfo.value.reason == "stop"
    # canceled legs stay where they were interrupted
    assert chor.bridge.position[0] < 10.0


def test_newer_leg_on_same_body_cancels_older_one():
    chor, clock = make_choreographer()
    payload = Body("C1", (0.0, 1.0, 0.0))
    completed = []
    future = chor.start(simple_plan(), payload, on_leg_complete=completed.append)

    clock.now = 10
    chor.tick()
    chor.move(chor.bridge, Leg(Entity.BRIDGE, (-5.0, 5.0, -1.0), 10))

    clock.now = 60
    chor.tick()
    with pytest.raises(SequenceAborted) as excinfo:
        future.result()
    assert "bridge" in excinfo.value.reason
    assert [leg.entity for leg in completed] == [Entity.HOOK]
    assert chor.bridge.position[0] == pytest.approx(-5.0)


def test_free_leg_superseded_by_sequence_is_canceled():
    chor, clock = make_choreographer()
    parked = chor.move(chor.bridge, Leg(Entity.BRIDGE, (-5.0, 5.0, -1.0), 100))
    chor.start(simple_plan(), Body("C1", (0, 1, 0)))

    clock.now = 10
    chor.tick()
    assert parked.status is LegStatus.CANCELED
    assert chor.busy


def test_exception_in_commit_aborts_and_releases_gate():
    chor, clock = make_choreographer()

    def broken_commit():
        raise RuntimeError("disk on fire")

    future = chor.start(simple_plan(), Body("C1", (0, 1, 0)), on_commit=broken_commit)
    clock.now = 1000
    chor.tick()
    clock.now = 2000
    chor.tick()

    assert not chor.busy
    error = future.exception()
    assert isinstance(error, SequenceAborted)
    assert isinstance(error.__cause__, RuntimeError)


def test_done_callback_may_start_next_sequence():
    chor, clock = make_choreographer()
    started = []

    def chain(_future):
        started.append(chor.start(simple_plan("next"), Body("C2", (0, 1, 0))))

    chor.start(simple_plan("first"), Body("C1", (0, 1, 0))).add_done_callback(chain)
    clock.now = 1000
    chor.tick()
    clock.now = 2000
    chor.tick()

    assert len(started) == 1
    assert chor.active_name == "next"


def test_zero_duration_legs_complete_on_first_tick():
    chor, clock = make_choreographer()
    plan = MovePlan("snap", ((Leg(Entity.HOOK, (1.0, 1.0, 1.0), 0),),))
    future = chor.start(plan, Body("C1", (0, 1, 0)))
    chor.tick()
    assert future.result() is SequenceState.COMPLETED
    np.testing.assert_allclose(chor.hook.position, (1.0, 1.0, 1.0))
