"""ManufacturingBay SQLAlchemy model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from bayplanner.core.database import Base


class ManufacturingBay(Base):
    """A manufacturing bay that hosts project schedules in parallel rows."""

    __tablename__ = "manufacturing_bays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bay_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    equipment: Mapped[str | None] = mapped_column(Text, nullable=True)
    team: Mapped[str | None] = mapped_column(
        String(100), nullable=True, server_default="General", comment="Display grouping"
    )
    staff_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    hours_per_person_per_week: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="40"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
