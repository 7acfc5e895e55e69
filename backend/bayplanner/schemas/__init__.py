"""Pydantic v2 schemas for request/response validation."""

from bayplanner.schemas.bay import BayCreate, BayResponse, TeamGroupResponse
from bayplanner.schemas.project import ProjectCreate, ProjectResponse
from bayplanner.schemas.schedule import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    PlacementResponse,
    PointerPosition,
    ScheduleCreate,
    ScheduleDrop,
    ScheduleMove,
    ScheduleResponse,
    ScheduleStatusUpdate,
)
from bayplanner.schemas.timeline import (
    BarResponse,
    TimelineBarsResponse,
    TimelineSlotsResponse,
    WeeklyUtilizationResponse,
)

__all__ = [
    "BarResponse",
    "BayCreate",
    "BayResponse",
    "ConflictCheckRequest",
    "ConflictCheckResponse",
    "PlacementResponse",
    "PointerPosition",
    "ProjectCreate",
    "ProjectResponse",
    "ScheduleCreate",
    "ScheduleDrop",
    "ScheduleMove",
    "ScheduleResponse",
    "ScheduleStatusUpdate",
    "TeamGroupResponse",
    "TimelineBarsResponse",
    "TimelineSlotsResponse",
    "WeeklyUtilizationResponse",
]
