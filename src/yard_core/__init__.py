"""Slot/tier occupancy rules and crane move sequencing for a 3x3 yard."""

from .choreographer import Body, MoveChoreographer, SequenceState, ease_in_out
from .config import DEFAULT_CONFIG, YardConfig, load_config
from .errors import (
    BlockedByOccupantsAbove,
    ContainerAlreadyStaged,
    ContainerNotFound,
    EdgeOverflow,
    InvalidSlotFormat,
    LedgerConflict,
    NoActiveContainer,
    NoSupport,
    OperationInProgress,
    SequenceAborted,
    TargetOccupied,
    YardError,
)
from .gate import GateQueue
from .leg_plan import Entity, Leg, MovePlan, build_move_plan
from .ledger import OccupancyLedger
from .models import Cell, Container, SizeClass, Slot
from .planner import PlacementDecision, PlacementPlanner, PlacementRefusal
from .removal import RemovalDecision, RemovalValidator
from .slot_address import format_slot, parse_slot, require_slot
from .snapshot import OccupancyDelta, YardSnapshot
from .yard import Yard

__all__ = [
    "Body",
    "BlockedByOccupantsAbove",
    "Cell",
    "Container",
    "ContainerAlreadyStaged",
    "ContainerNotFound",
    "DEFAULT_CONFIG",
    "EdgeOverflow",
    "Entity",
    "GateQueue",
    "InvalidSlotFormat",
    "Leg",
    "LedgerConflict",
    "MoveChoreographer",
    "MovePlan",
    "NoActiveContainer",
    "NoSupport",
    "OccupancyDelta",
    "OccupancyLedger",
    "OperationInProgress",
    "PlacementDecision",
    "PlacementPlanner",
    "PlacementRefusal",
    "RemovalDecision",
    "RemovalValidator",
    "SequenceAborted",
    "SequenceState",
    "SizeClass",
    "Slot",
    "TargetOccupied",
    "Yard",
    "YardConfig",
    "YardError",
    "YardSnapshot",
    "build_move_plan",
    "ease_in_out",
    "format_slot",
    "load_config",
    "parse_slot",
    "require_slot",
]
