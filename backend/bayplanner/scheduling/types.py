"""Shared value types for the scheduling core.

The core reads bays and schedules through the attribute protocols below, so
ORM rows, Pydantic models and plain dataclasses can all be passed in.
"""

from datetime import date
from enum import Enum
from typing import Protocol


class ViewMode(str, Enum):
    """Timeline granularity; sets the length of one slot."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    MAINTENANCE = "maintenance"


class ConflictScope(str, Enum):
    """Whether two schedules collide per bay or only within the same row."""

    BAY = "bay"
    ROW = "row"


class BayLike(Protocol):
    id: int
    name: str
    bay_number: int
    team: str | None
    is_active: bool


class ScheduleLike(Protocol):
    id: int
    project_id: int
    bay_id: int
    start_date: date
    end_date: date
    row: int


class ProjectLike(Protocol):
    id: int
    project_number: str
    name: str
