"""ManufacturingSchedule SQLAlchemy model."""

from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bayplanner.core.database import Base


class ManufacturingSchedule(Base):
    """One project placed in one bay lane for an inclusive date range."""

    __tablename__ = "manufacturing_schedules"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="date_order"),
        CheckConstraint('"row" >= 0', name="row_non_negative"),
        Index("ix_manufacturing_schedules_bay_dates", "bay_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bay_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("manufacturing_bays.id"), nullable=False, index=True
    )
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="scheduled")
    row: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0", comment="Lane within the bay"
    )
    total_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Concurrent edits of the same row fail with StaleDataError instead of
    # silently overwriting each other
    __mapper_args__ = {"version_id_col": version}

    bay: Mapped["ManufacturingBay"] = relationship()
    project: Mapped["Project"] = relationship()
