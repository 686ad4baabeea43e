from __future__ import annotations

import itertools
import logging
from concurrent.futures import Future
from functools import partial
from typing import Callable, Dict, List, Tuple

from .choreographer import Body, Clock, MoveChoreographer, SequenceState, monotonic_ms
from .config import DEFAULT_CONFIG, YardConfig
from .errors import (
    ContainerAlreadyStaged,
    ContainerNotFound,
    InvalidSlotFormat,
    NoActiveContainer,
    OperationInProgress,
)
from .gate import GateQueue
from .geometry import bridge_home, cells_center, hook_home
from .leg_plan import Entity, Leg, MovePlan, build_move_plan
from .ledger import OccupancyLedger
from .models import Cell, Container, SizeClass
from .planner import PlacementPlanner
from .removal import RemovalValidator
from .slot_address import format_slot, require_slot
from .snapshot import OccupancyDelta, YardSnapshot

logger = logging.getLogger(__name__)

PlanListener = Callable[[str, MovePlan], None]
DeltaListener = Callable[[OccupancyDelta], None]
SnapshotListener = Callable[[YardSnapshot], None]


class Yard:
    """Entry point for collaborators: requests in, plans/deltas/snapshots out."""

    def __init__(self, config: YardConfig | None = None, clock: Clock = monotonic_ms) -> None:
        self.config = config or DEFAULT_CONFIG
        self.ledger = OccupancyLedger()
        self.gate = GateQueue(self.config)
        self.planner = PlacementPlanner(self.ledger)
        self.removal = RemovalValidator(self.ledger)
        self.bridge = Body("bridge", bridge_home(self.config))
        self.hook = Body("hook", hook_home(self.config))
        self.choreographer = MoveChoreographer(self.bridge, self.hook, clock)
        self.bodies: Dict[str, Body] = {}
        self.active_id: str | None = None
        self._containers: Dict[str, Container] = {}
        self._ids = itertools.count(1)
        self._snapshot = YardSnapshot()
        self._plan_listeners: List[PlanListener] = []
        self._delta_listeners: List[DeltaListener] = []
        self._snapshot_listeners: List[SnapshotListener] = []

    # ----- registry -----

    @property
    def containers(self) -> Tuple[Container, ...]:
        return tuple(self._containers.values())

    @property
    def active(self) -> Container | None:
        if self.active_id is None:
            return None
        return self._containers.get(self.active_id)

    @property
    def busy(self) -> bool:
        return self.choreographer.busy

    def get(self, container_id: str) -> Container:
        try:
            return self._containers[container_id]
        except KeyError:
            raise ContainerNotFound(container_id) from None

    def select(self, container_id: str) -> Container:
        container = self.get(container_id)
        self.active_id = container.id
        return container

    def _next_id(self) -> str:
        while True:
            candidate = f"C{next(self._ids):02d}"
            if candidate not in self._containers:
                return candidate

    def add_container(
        self, size_class: SizeClass = SizeClass.ONE_UNIT, container_id: str | None = None
    ) -> Container:
        container_id = container_id or self._next_id()
        if container_id in self._containers:
            raise ValueError(f"Container id already in use: {container_id}")
        index = self.gate.next_index()
        container = Container(container_id, size_class, gate_index=index)
        self._containers[container_id] = container
        self.bodies[container_id] = Body(container_id, self.gate.position_for(index))
        if self.active_id is None:
            self.active_id = container_id
        logger.info("Staged %r at gate %d", container, index)
        self._refresh_snapshot()
        return container

    def _resolve(self, request: str, container_id: str | None) -> Container:
        if not container_id:
            if self.active_id is None:
                logger.info("Rejected %s: no container selected", request)
                raise NoActiveContainer()
            container_id = self.active_id
        try:
            return self.get(container_id)
        except ContainerNotFound:
            logger.info("Rejected %s: unknown container %r", request, container_id)
            raise

    def _ensure_idle(self, request: str) -> None:
        if self.choreographer.busy:
            logger.info(
                "Rejected %s: crane busy with %s", request, self.choreographer.active_name
            )
            raise OperationInProgress(self.choreographer.active_name)

    def _ensure_clear(self, request: str, container: Container) -> None:
        decision = self.removal.check(container)
        if not decision.removable:
            logger.info(
                "Rejected %s of %s: blocked by %s",
                request,
                container.id,
                ", ".join(sorted(decision.blocker_ids)),
            )
        decision.raise_for_blockers()

    # ----- requests -----

    def request_placement(self, container_id: str | None, slot_text: str) -> Future:
        """Validate and start moving a container onto ``slot_text``.

        Every refusal is raised before anything moves. An already placed
        container is relocated, which needs the same clearance as a removal.
        """
        self._ensure_idle("placement")
        container = self._resolve("placement", container_id)
        try:
            slot = require_slot(slot_text)
        except InvalidSlotFormat:
            logger.info("Rejected placement of %s: bad slot %r", container.id, slot_text)
            raise
        if not container.is_staged:
            self._ensure_clear("placement", container)
        decision = self.planner.plan(container, slot)
        if not decision.accepted:
            logger.info(
                "Rejected placement of %s at %s: %s",
                container.id,
                format_slot(slot),
                decision.reason.value,
            )
        decision.raise_for_refusal()

        body = self.bodies[container.id]
        plan = build_move_plan(
            f"place {container.id} -> {format_slot(slot)}/t{decision.tier}",
            body.point(),
            cells_center(decision.cells, self.config),
            self.config,
        )
        previous = container.occupied_cells

        def commit() -> None:
            self.ledger.commit(container, decision.cells, previous)
            container.gate_index = None

        return self._run(container, plan, previous, commit)

    def request_removal(self, container_id: str | None) -> Future:
        self._ensure_idle("removal")
        container = self._resolve("removal", container_id)
        if container.is_staged:
            logger.info("Rejected removal of %s: already at the gate", container.id)
            raise ContainerAlreadyStaged(container.id)
        self._ensure_clear("removal", container)

        index = self.gate.next_index()
        body = self.bodies[container.id]
        plan = build_move_plan(
            f"remove {container.id} -> gate {index}",
            body.point(),
            self.gate.position_for(index),
            self.config,
        )
        previous = container.occupied_cells

        def commit() -> None:
            self.ledger.commit(container, (), previous)
            container.gate_index = index

        return self._run(container, plan, previous, commit)

    def park_crane(self) -> None:
        self._ensure_idle("park")
        self.choreographer.move(
            self.bridge, Leg(Entity.BRIDGE, bridge_home(self.config), self.config.bridge_ms)
        )
        self.choreographer.move(
            self.hook, Leg(Entity.HOOK, hook_home(self.config), self.config.hook_rise_ms)
        )

    def tick(self, now: float | None = None) -> SequenceState:
        return self.choreographer.tick(now)

    def _run(
        self,
        container: Container,
        plan: MovePlan,
        previous: Tuple[Cell, ...],
        commit: Callable[[], None],
    ) -> Future:
        future = self.choreographer.start(plan, self.bodies[container.id], on_commit=commit)
        logger.info("Accepted %s", plan.name)
        self._notify(self._plan_listeners, container.id, plan)
        future.add_done_callback(partial(self._sequence_done, container, previous))
        return future

    def _sequence_done(
        self, container: Container, previous: Tuple[Cell, ...], future: Future
    ) -> None:
        if future.exception() is not None:
            logger.info("No ledger change for %s: %s", container.id, future.exception())
            return
        problems = self.ledger.inconsistencies(self._containers.values())
        if problems:
            logger.error("Ledger inconsistent after commit: %s", "; ".join(problems))
        current = container.occupied_cells
        delta = OccupancyDelta(
            container_id=container.id,
            added=tuple(cell for cell in current if cell not in previous),
            removed=tuple(cell for cell in previous if cell not in current),
        )
        self._notify(self._delta_listeners, delta)
        self._refresh_snapshot()

    # ----- read side -----

    def snapshot(self) -> YardSnapshot:
        return self._snapshot

    def _refresh_snapshot(self) -> None:
        self._snapshot = YardSnapshot.from_ledger(self.ledger, self._containers.values())
        self._notify(self._snapshot_listeners, self._snapshot)

    def on_plan(self, callback: PlanListener) -> None:
        self._plan_listeners.append(callback)

    def on_delta(self, callback: DeltaListener) -> None:
        self._delta_listeners.append(callback)

    def on_snapshot(self, callback: SnapshotListener) -> None:
        self._snapshot_listeners.append(callback)

    @staticmethod
    def _notify(listeners: List[Callable], *args) -> None:
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Yard listener %r failed", listener)
