"""Project SQLAlchemy model.

Projects are owned by the project-tracking side of the dashboard; the
scheduler only reads their identity and may set ``status`` to ``active``.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from bayplanner.core.database import Base


class Project(Base):
    """A customer project that can be placed into a bay."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="pending")
    total_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fab_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    paint_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    production_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    it_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    ntc_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    qc_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
