"""Project Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Schema for registering a project that can be scheduled."""

    project_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    status: str = Field(default="pending", max_length=20)
    total_hours: int | None = Field(default=None, ge=0)
    fab_percentage: float | None = Field(default=None, ge=0, le=100)
    paint_percentage: float | None = Field(default=None, ge=0, le=100)
    production_percentage: float | None = Field(default=None, ge=0, le=100)
    it_percentage: float | None = Field(default=None, ge=0, le=100)
    ntc_percentage: float | None = Field(default=None, ge=0, le=100)
    qc_percentage: float | None = Field(default=None, ge=0, le=100)


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    id: int
    project_number: str
    name: str
    status: str
    total_hours: int | None
    fab_percentage: float | None
    paint_percentage: float | None
    production_percentage: float | None
    it_percentage: float | None
    ntc_percentage: float | None
    qc_percentage: float | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
