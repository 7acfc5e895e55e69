"""SQLAlchemy ORM models."""

from bayplanner.models.bay import ManufacturingBay
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule

__all__ = [
    "ManufacturingBay",
    "ManufacturingSchedule",
    "Project",
]
