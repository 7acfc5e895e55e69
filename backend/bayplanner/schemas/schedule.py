"""ManufacturingSchedule Pydantic schemas."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from bayplanner.scheduling.dates import parse_date
from bayplanner.scheduling.errors import SchedulingError
from bayplanner.scheduling.rows import DropEvent
from bayplanner.scheduling.types import ScheduleStatus, ViewMode


def _coerce_date(value: Any) -> Any:
    """Route every incoming date through the core's date-only parser."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except SchedulingError as exc:
        raise ValueError(exc.message) from exc


class PointerPosition(BaseModel):
    """Vertical drop position inside a bay's lane area, in pixels."""

    pointer_y: float
    container_top: float = 0.0
    row_height_px: float | None = Field(default=None, gt=0)

    def to_drop_event(self, default_row_height: float) -> DropEvent:
        return DropEvent(
            pointer_y=self.pointer_y,
            container_top=self.container_top,
            row_height_px=self.row_height_px or default_row_height,
        )


class ScheduleCreate(BaseModel):
    """Place a project into a bay."""

    project_id: int
    bay_id: int
    start_date: date
    end_date: date | None = Field(default=None, description="Defaults to start + default duration")
    row: int | None = Field(default=None, ge=0)
    total_hours: int | None = Field(default=None, ge=0)
    pointer: PointerPosition | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _coerce_date(value)


class ScheduleMove(BaseModel):
    """Move a schedule to a new bay, date range or lane."""

    bay_id: int
    start_date: date
    end_date: date | None = Field(default=None, description="Defaults to keeping the current length")
    row: int | None = Field(default=None, ge=0)
    pointer: PointerPosition | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _coerce_date(value)


class ScheduleDrop(BaseModel):
    """A project dropped onto a timeline slot."""

    project_id: int
    slot_id: str = Field(..., max_length=100)
    pointer: PointerPosition | None = None


class ScheduleStatusUpdate(BaseModel):
    status: ScheduleStatus


class ConflictCheckRequest(BaseModel):
    bay_id: int
    start_date: date
    end_date: date | None = None
    exclude_schedule_id: int | None = None
    row: int | None = Field(default=None, ge=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _coerce_date(value)


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicting_schedule_ids: list[int] = Field(default_factory=list)


class ScheduleResponse(BaseModel):
    """Schema for schedule responses."""

    id: int
    project_id: int
    bay_id: int
    start_date: date
    end_date: date
    status: str
    row: int
    total_hours: int | None
    notes: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PlacementResponse(BaseModel):
    """Result of a create, move or drop."""

    schedule: ScheduleResponse
    created: bool
    requested_row: int
    row_matches: bool
    warnings: list[dict[str, Any]] = Field(default_factory=list)


class ClearAllResponse(BaseModel):
    deleted: int


class StatusRefreshResponse(BaseModel):
    updated: int
    schedules: list[ScheduleResponse] = Field(default_factory=list)


# Far wider than any rendered timeline
MAX_RESIZE_DELTA_PX = 1_000_000.0


class ScheduleResize(BaseModel):
    """Horizontal drag of one bar edge, in timeline pixels."""

    edge: Literal["start", "end"]
    delta_px: float = Field(ge=-MAX_RESIZE_DELTA_PX, le=MAX_RESIZE_DELTA_PX, allow_inf_nan=False)
    view_mode: ViewMode = ViewMode.WEEK
    slot_width_px: float | None = Field(default=None, gt=0, allow_inf_nan=False)
