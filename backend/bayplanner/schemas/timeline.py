"""Timeline grid, bar and utilization schemas."""

from datetime import date

from pydantic import BaseModel, Field

from bayplanner.scheduling.types import ViewMode


class SlotResponse(BaseModel):
    id: str
    bay_id: int
    anchor: date
    end: date
    view_mode: ViewMode
    position: int
    occupied: bool
    schedule_id: int | None = None

    model_config = {"from_attributes": True}


class BaySlotsResponse(BaseModel):
    bay_id: int
    bay_number: int
    bay_name: str
    team: str | None
    slots: list[SlotResponse]


class TimelineSlotsResponse(BaseModel):
    window_start: date
    window_end: date
    view_mode: ViewMode
    bays: list[BaySlotsResponse] = Field(default_factory=list)


class BarResponse(BaseModel):
    """Pixel placement of one schedule bar."""

    schedule_id: int
    project_id: int
    bay_id: int
    row: int
    start_date: date
    end_date: date
    left: float
    width: float
    top: float
    working_days: int | None


class TimelineBarsResponse(BaseModel):
    window_start: date
    window_end: date
    view_mode: ViewMode
    slot_width_px: float
    row_height_px: float
    bars: list[BarResponse] = Field(default_factory=list)


class PhaseAlignmentResponse(BaseModel):
    project_id: int
    project_number: str
    phase: str
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}


class WeeklyUtilizationResponse(BaseModel):
    week_key: str
    week_start: date
    week_end: date
    bay_id: int
    bay_name: str
    team_name: str
    utilization_percentage: int
    project_count: int
    aligned_phases: list[PhaseAlignmentResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}
