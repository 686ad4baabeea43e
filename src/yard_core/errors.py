from __future__ import annotations

from typing import Iterable


class YardError(Exception):
    """Base class for every refusal the yard reports to a caller."""

    code = "yard_error"


class InvalidSlotFormat(YardError):
    code = "invalid_slot_format"

    def __init__(self, text: str) -> None:
        super().__init__(f"Slot must be A1..C3, got {text!r}")
        self.text = text


class NoActiveContainer(YardError):
    code = "no_active_container"

    def __init__(self) -> None:
        super().__init__("No container selected")


class ContainerNotFound(YardError):
    code = "container_not_found"

    def __init__(self, container_id: str) -> None:
        super().__init__(f"Unknown container {container_id!r}")
        self.container_id = container_id


class ContainerAlreadyStaged(YardError):
    code = "container_already_staged"

    def __init__(self, container_id: str) -> None:
        super().__init__(f"Container {container_id!r} is already at the gate")
        self.container_id = container_id


class EdgeOverflow(YardError):
    code = "edge_overflow"

    def __init__(self, container_id: str, slot_label: str) -> None:
        super().__init__(
            f"Container {container_id!r} does not fit starting at {slot_label}: "
            "no row left to extend into"
        )
        self.container_id = container_id
        self.slot_label = slot_label


class TargetOccupied(YardError):
    code = "target_occupied"

    def __init__(self, container_id: str, slot_label: str) -> None:
        super().__init__(f"Slot {slot_label} is full for container {container_id!r}")
        self.container_id = container_id
        self.slot_label = slot_label


class NoSupport(YardError):
    code = "no_support"

    def __init__(self, container_id: str, slot_label: str) -> None:
        super().__init__(
            f"Container {container_id!r} would not be fully supported at {slot_label}"
        )
        self.container_id = container_id
        self.slot_label = slot_label


class BlockedByOccupantsAbove(YardError):
    code = "blocked_by_occupants_above"

    def __init__(self, container_id: str, blockers: Iterable[str]) -> None:
        self.container_id = container_id
        self.blockers = frozenset(blockers)
        names = ", ".join(sorted(self.blockers))
        super().__init__(f"Container {container_id!r} is blocked by {names}")


class OperationInProgress(YardError):
    code = "operation_in_progress"

    def __init__(self, active: str | None = None) -> None:
        detail = f" ({active})" if active else ""
        super().__init__(f"Crane is busy{detail}")
        self.active = active


class SequenceAborted(YardError):
    code = "sequence_aborted"

    def __init__(self, sequence: str, reason: str) -> None:
        super().__init__(f"Sequence {sequence!r} aborted: {reason}")
        self.sequence = sequence
        self.reason = reason


class LedgerConflict(YardError):
    code = "ledger_conflict"
