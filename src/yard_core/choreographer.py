from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

import numpy as np

from .errors import OperationInProgress, SequenceAborted
from .geometry import Vec3
from .leg_plan import Entity, Leg, MovePlan

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
LegCallback = Callable[[Leg], None]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def ease_in_out(t: float) -> float:
    """Quadratic ease-in/ease-out on ``[0, 1]``."""
    t = min(1.0, max(0.0, t))
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


@dataclass(eq=False)
class Body:
    """Something the crane moves. ``generation`` bumps on every new leg."""

    name: str
    position: np.ndarray
    generation: int = 0

    def __post_init__(self) -> None:
        self.position = np.array(self.position, dtype=float)

    def point(self) -> Vec3:
        return (float(self.position[0]), float(self.position[1]), float(self.position[2]))


class LegStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELED = "canceled"


@dataclass(eq=False)
class ActiveLeg:
    leg: Leg
    body: Body
    token: int
    start: np.ndarray
    target: np.ndarray
    t0: float
    on_complete: Optional[LegCallback] = None
    status: LegStatus = LegStatus.RUNNING

    def progress(self, now: float) -> float:
        if self.leg.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.t0) / self.leg.duration_ms))

    def advance(self, now: float) -> LegStatus:
        if self.status is not LegStatus.RUNNING:
            return self.status
        if self.token != self.body.generation:
            self.status = LegStatus.CANCELED
            return self.status
        p = self.progress(now)
        if p >= 1.0:
            self.body.position = self.target.copy()
            self.status = LegStatus.COMPLETED
            if self.on_complete is not None:
                self.on_complete(self.leg)
        else:
            self.body.position = self.start + (self.target - self.start) * ease_in_out(p)
        return self.status


class SequenceState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(eq=False)
class _Sequence:
    plan: MovePlan
    bodies: Dict[Entity, Body]
    future: Future
    on_commit: Optional[Callable[[], None]]
    on_leg_complete: Optional[LegCallback]
    stage_index: int = -1
    legs: List[ActiveLeg] = field(default_factory=list)
    abort_reason: str = ""


class MoveChoreographer:
    """Run one :class:`MovePlan` at a time, driven by an external tick.

    ``start`` takes the busy gate and returns a future. ``tick`` advances every
    in-flight leg; when the last stage finishes the commit callback runs and
    the future resolves to :attr:`SequenceState.COMPLETED`. A canceled leg or
    an exception aborts the sequence and fails the future with
    :class:`SequenceAborted`. The gate is released on every outcome before
    the future resolves, so done-callbacks may start the next sequence.
    """

    def __init__(self, bridge: Body, hook: Body, clock: Clock = monotonic_ms) -> None:
        self.bridge = bridge
        self.hook = hook
        self._clock = clock
        self._sequence: _Sequence | None = None
        self._free_legs: List[ActiveLeg] = []
        self._last_state = SequenceState.IDLE

    @property
    def busy(self) -> bool:
        return self._sequence is not None

    @property
    def state(self) -> SequenceState:
        if self._sequence is not None:
            return SequenceState.RUNNING
        return self._last_state

    @property
    def active_name(self) -> str | None:
        return self._sequence.plan.name if self._sequence is not None else None

    @property
    def in_flight(self) -> bool:
        return self.busy or bool(self._free_legs)

    def issue(
        self,
        body: Body,
        leg: Leg,
        now: float,
        on_complete: Optional[LegCallback] = None,
    ) -> ActiveLeg:
        body.generation += 1
        return ActiveLeg(
            leg=leg,
            body=body,
            token=body.generation,
            start=body.position.copy(),
            target=np.array(leg.target, dtype=float),
            t0=now,
            on_complete=on_complete,
        )

    def move(self, body: Body, leg: Leg) -> ActiveLeg:
        """Animate ``body`` outside any sequence (parking, nudges).

        Any leg still running on ``body`` is superseded, including one that
        belongs to the active sequence, which then aborts.
        """
        active = self.issue(body, leg, self._clock())
        self._free_legs.append(active)
        return active

    def start(
        self,
        plan: MovePlan,
        payload: Body,
        on_commit: Optional[Callable[[], None]] = None,
        on_leg_complete: Optional[LegCallback] = None,
    ) -> Future:
        if self._sequence is not None:
            logger.info("Rejected %s: %s still running", plan.name, self._sequence.plan.name)
            raise OperationInProgress(self._sequence.plan.name)

        future: Future = Future()
        future.set_running_or_notify_cancel()
        sequence = _Sequence(
            plan=plan,
            bodies={Entity.BRIDGE: self.bridge, Entity.HOOK: self.hook, Entity.PAYLOAD: payload},
            future=future,
            on_commit=on_commit,
            on_leg_complete=on_leg_complete,
        )
        self._sequence = sequence
        logger.info("Sequence %s started (%d stages)", plan.name, len(plan.stages))
        try:
            if plan.stages:
                self._issue_stage(sequence, 0, self._clock())
        except Exception as exc:
            logger.exception("Sequence %s failed to start", plan.name)
            self._finish(sequence, SequenceState.ABORTED, str(exc), exc)
        return future

    def cancel(self, reason: str = "canceled") -> bool:
        """Invalidate the active sequence's legs; it aborts on the next tick."""
        sequence = self._sequence
        if sequence is None:
            return False
        sequence.abort_reason = reason
        for active in sequence.legs:
            if active.status is LegStatus.RUNNING:
                active.body.generation += 1
        return True

    def tick(self, now: float | None = None) -> SequenceState:
        now = self._clock() if now is None else now
        if self._free_legs:
            self._free_legs = [
                active for active in self._free_legs if active.advance(now) is LegStatus.RUNNING
            ]

        sequence = self._sequence
        if sequence is None:
            return self.state
        try:
            outcome = self._advance(sequence, now)
        except Exception as exc:
            logger.exception("Sequence %s failed", sequence.plan.name)
            self._finish(sequence, SequenceState.ABORTED, str(exc) or type(exc).__name__, exc)
            return SequenceState.ABORTED
        if outcome is not SequenceState.RUNNING:
            self._finish(sequence, outcome, sequence.abort_reason)
        return outcome

    def _issue_stage(self, sequence: _Sequence, index: int, now: float) -> None:
        sequence.stage_index = index
        logger.debug(
            "Sequence %s stage %d/%d at %.0f ms",
            sequence.plan.name,
            index + 1,
            len(sequence.plan.stages),
            now,
        )
        sequence.legs = [
            self.issue(sequence.bodies[leg.entity], leg, now, sequence.on_leg_complete)
            for leg in sequence.plan.stages[index]
        ]

    def _advance(self, sequence: _Sequence, now: float) -> SequenceState:
        while True:
            statuses = [active.advance(now) for active in sequence.legs]
            if LegStatus.CANCELED in statuses:
                if not sequence.abort_reason:
                    canceled = next(
                        a for a in sequence.legs if a.status is LegStatus.CANCELED
                    )
                    sequence.abort_reason = f"{canceled.leg.entity.value} leg superseded"
                return SequenceState.ABORTED
            if LegStatus.RUNNING in statuses:
                return SequenceState.RUNNING
            next_index = sequence.stage_index + 1
            if next_index >= len(sequence.plan.stages):
                if sequence.on_commit is not None:
                    sequence.on_commit()
                return SequenceState.COMPLETED
            self._issue_stage(sequence, next_index, now)

    def _finish(
        self,
        sequence: _Sequence,
        state: SequenceState,
        reason: str = "",
        cause: BaseException | None = None,
    ) -> None:
        try:
            for active in sequence.legs:
                if active.status is LegStatus.RUNNING:
                    active.body.generation += 1
                    active.status = LegStatus.CANCELED
        finally:
            if self._sequence is sequence:
                self._sequence = None
            self._last_state = state

        name = sequence.plan.name
        if state is SequenceState.COMPLETED:
            logger.info("Sequence %s completed", name)
            sequence.future.set_result(state)
            return
        logger.warning("Sequence %s aborted: %s", name, reason)
        error = SequenceAborted(name, reason or "aborted")
        error.__cause__ = cause
        sequence.future.set_exception(error)
