"""Bay scheduling core: conflicts, slot grid, lane resolution and placement.

Framework-free; the API layer supplies persistence through the store and
project-directory protocols in :mod:`bayplanner.scheduling.placement`.
"""

from bayplanner.scheduling.conflicts import find_conflicts, has_conflict, ranges_overlap
from bayplanner.scheduling.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    SchedulingError,
    SideEffectWarning,
    ValidationError,
)
from bayplanner.scheduling.placement import PlacementEngine, PlacementResult, SchedulePayload
from bayplanner.scheduling.rows import DragSession, DropEvent, resolve_row
from bayplanner.scheduling.slots import Slot, SlotRef, build_slots, make_slot_id, parse_slot_id
from bayplanner.scheduling.types import ConflictScope, ScheduleStatus, ViewMode

__all__ = [
    "ConflictError",
    "ConflictScope",
    "DragSession",
    "DropEvent",
    "NotFoundError",
    "PersistenceError",
    "PlacementEngine",
    "PlacementResult",
    "SchedulePayload",
    "ScheduleStatus",
    "SchedulingError",
    "SideEffectWarning",
    "Slot",
    "SlotRef",
    "ValidationError",
    "ViewMode",
    "build_slots",
    "find_conflicts",
    "has_conflict",
    "make_slot_id",
    "parse_slot_id",
    "ranges_overlap",
    "resolve_row",
]
