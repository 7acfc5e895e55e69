"""ManufacturingBay Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class BayCreate(BaseModel):
    """Schema for creating or replacing a bay."""

    bay_number: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    equipment: str | None = None
    team: str | None = Field(default="General", max_length=100)
    staff_count: int = Field(default=0, ge=0)
    hours_per_person_per_week: int = Field(default=40, ge=0, le=168)
    is_active: bool = True


class BayResponse(BaseModel):
    """Schema for bay responses."""

    id: int
    bay_number: int
    name: str
    description: str | None
    equipment: str | None
    team: str | None
    staff_count: int
    hours_per_person_per_week: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamGroupResponse(BaseModel):
    """Bays sharing a team label, ordered by bay number."""

    id: str
    team: str
    bays: list[BayResponse]
    current_week_projects: int = 0
    current_week_utilization: int = 0
