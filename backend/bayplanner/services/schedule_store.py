"""SQLAlchemy implementations of the placement engine's collaborators.

Every read of a bay inside a placement takes a row lock on that bay, so two
requests placing into the same bay run one after the other and each sees
the other's schedule in its conflict snapshot.
"""

import logging
from collections.abc import Sequence
from datetime import date

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bayplanner.core.config import settings
from bayplanner.core.database import get_db
from bayplanner.models.bay import ManufacturingBay
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.scheduling.errors import NotFoundError, PersistenceError
from bayplanner.scheduling.placement import PlacementEngine, SchedulePayload

logger = logging.getLogger(__name__)


class SqlScheduleStore:
    """Schedule persistence on top of one request-scoped session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_bay(self, bay_id: int) -> ManufacturingBay | None:
        """Load a bay and lock its row until the transaction ends."""
        try:
            result = await self.db.execute(
                select(ManufacturingBay).where(ManufacturingBay.id == bay_id).with_for_update()
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load bay {bay_id}: {exc}") from exc
        return result.scalar_one_or_none()

    async def get_schedule(self, schedule_id: int) -> ManufacturingSchedule | None:
        try:
            return await self.db.get(ManufacturingSchedule, schedule_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load schedule {schedule_id}: {exc}") from exc

    async def find_schedule_for_project(self, project_id: int) -> ManufacturingSchedule | None:
        """Earliest schedule of a project, if it has one."""
        query = (
            select(ManufacturingSchedule)
            .where(ManufacturingSchedule.project_id == project_id)
            .order_by(ManufacturingSchedule.start_date, ManufacturingSchedule.id)
            .limit(1)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load schedules of project {project_id}: {exc}") from exc
        return result.scalars().first()

    async def list_schedules(
        self,
        bay_id: int | None = None,
        project_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> Sequence[ManufacturingSchedule]:
        """Schedules matching the filters; ``start``/``end`` keep overlapping ones."""
        query = select(ManufacturingSchedule)
        if bay_id is not None:
            query = query.where(ManufacturingSchedule.bay_id == bay_id)
        if project_id is not None:
            query = query.where(ManufacturingSchedule.project_id == project_id)
        if end is not None:
            query = query.where(ManufacturingSchedule.start_date <= end)
        if start is not None:
            query = query.where(ManufacturingSchedule.end_date >= start)
        query = query.order_by(
            ManufacturingSchedule.bay_id, ManufacturingSchedule.start_date, ManufacturingSchedule.id
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not list schedules: {exc}") from exc
        return list(result.scalars().all())

    async def create_schedule(self, payload: SchedulePayload) -> ManufacturingSchedule:
        schedule = ManufacturingSchedule(
            project_id=payload.project_id,
            bay_id=payload.bay_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            row=payload.row,
            total_hours=payload.total_hours,
        )
        self.db.add(schedule)
        try:
            await self.db.flush()
            await self.db.refresh(schedule)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not save schedule: {exc}") from exc
        return schedule

    async def update_schedule(self, schedule_id: int, payload: SchedulePayload) -> ManufacturingSchedule:
        schedule = await self.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")

        schedule.bay_id = payload.bay_id
        schedule.start_date = payload.start_date
        schedule.end_date = payload.end_date
        schedule.row = payload.row
        schedule.total_hours = payload.total_hours
        try:
            await self.db.flush()
            await self.db.refresh(schedule)
        except StaleDataError as exc:
            raise PersistenceError(
                f"Schedule {schedule_id} was changed by another request; reload and retry"
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not update schedule {schedule_id}: {exc}") from exc
        return schedule

    async def update_status(self, schedule_id: int, status: str) -> ManufacturingSchedule:
        schedule = await self.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        schedule.status = status
        try:
            await self.db.flush()
            await self.db.refresh(schedule)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not update schedule {schedule_id}: {exc}") from exc
        return schedule

    async def delete_schedule(self, schedule_id: int) -> ManufacturingSchedule:
        """Remove a schedule; its project drops back into the unassigned pool."""
        schedule = await self.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        try:
            await self.db.delete(schedule)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete schedule {schedule_id}: {exc}") from exc
        return schedule

    async def clear_all(self) -> int:
        try:
            result = await self.db.execute(delete(ManufacturingSchedule))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not clear schedules: {exc}") from exc
        return result.rowcount or 0


class SqlProjectDirectory:
    """Project lookups and the best-effort status write."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_project(self, project_id: int) -> Project | None:
        try:
            return await self.db.get(Project, project_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load project {project_id}: {exc}") from exc

    async def update_project_status(self, project_id: int, status: str) -> None:
        """Set a project's status inside a SAVEPOINT.

        A failure rolls back only the savepoint; the schedule written earlier
        in the same transaction is kept.
        """
        async with self.db.begin_nested():
            project = await self.db.get(Project, project_id)
            if project is None:
                raise NotFoundError(f"Project {project_id} not found")
            project.status = status
        logger.debug("Project %s status set to %s", project_id, status)


def build_placement_engine(db: AsyncSession) -> PlacementEngine:
    return PlacementEngine(
        SqlScheduleStore(db),
        SqlProjectDirectory(db),
        max_rows=settings.MAX_ROWS,
        default_duration_days=settings.DEFAULT_DURATION_DAYS,
        conflict_scope=settings.CONFLICT_SCOPE,
    )


async def get_placement_engine(db: AsyncSession = Depends(get_db)) -> PlacementEngine:
    """FastAPI dependency: a placement engine bound to the request session."""
    return build_placement_engine(db)


async def get_schedule_store(db: AsyncSession = Depends(get_db)) -> SqlScheduleStore:
    return SqlScheduleStore(db)
