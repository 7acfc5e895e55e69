"""Placement engine: create and move bay schedules.

Each operation runs against a snapshot of the target bay's schedules read at
the start of the call:

1. Normalize dates (a missing end date is derived from the start).
2. Validate ids, range, bay and lane.
3. Reject with ConflictError when the range overlaps another schedule in
   the target bay (the schedule being moved is excluded).
4. Persist through the schedule store and return what it saved.
5. Best effort: mark the project ``active`` when today is inside the range.
   A failure there is logged and reported as a SideEffectWarning; the
   schedule write stands.

The engine keeps no state between calls. Persistence and project lookups
are injected collaborators so the same engine runs against SQLAlchemy in
the API and against in-memory fakes in tests.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

from bayplanner.scheduling.conflicts import find_conflicts
from bayplanner.scheduling.dates import format_date, parse_date, shift_date
from bayplanner.scheduling.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    SideEffectWarning,
    ValidationError,
)
from bayplanner.scheduling.rows import DEFAULT_MAX_ROWS, DropEvent, resolve_row
from bayplanner.scheduling.slots import parse_slot_id
from bayplanner.scheduling.status import ACTIVE_PROJECT_STATUS
from bayplanner.scheduling.types import BayLike, ConflictScope, ProjectLike, ScheduleLike

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 7


@dataclass(frozen=True)
class SchedulePayload:
    """Write request handed to the schedule store."""

    project_id: int
    bay_id: int
    start_date: date
    end_date: date
    row: int = 0
    total_hours: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "projectId": self.project_id,
            "bayId": self.bay_id,
            "startDate": format_date(self.start_date),
            "endDate": format_date(self.end_date),
            "row": self.row,
        }
        if self.total_hours is not None:
            data["totalHours"] = self.total_hours
        return data


class ScheduleStore(Protocol):
    async def get_bay(self, bay_id: int) -> BayLike | None: ...

    async def get_schedule(self, schedule_id: int) -> ScheduleLike | None: ...

    async def find_schedule_for_project(self, project_id: int) -> ScheduleLike | None: ...

    async def list_schedules(self, bay_id: int | None = None) -> Sequence[ScheduleLike]: ...

    async def create_schedule(self, payload: SchedulePayload) -> ScheduleLike: ...

    async def update_schedule(self, schedule_id: int, payload: SchedulePayload) -> ScheduleLike: ...


class ProjectDirectory(Protocol):
    async def get_project(self, project_id: int) -> ProjectLike | None: ...

    async def update_project_status(self, project_id: int, status: str) -> None: ...


@dataclass
class PlacementResult:
    """Outcome of a successful create or move."""

    schedule: ScheduleLike
    requested_row: int
    created: bool
    warnings: list[SideEffectWarning] = field(default_factory=list)

    @property
    def row_matches(self) -> bool:
        """Whether the store saved the lane that was asked for."""
        return (self.schedule.row or 0) == self.requested_row


class PlacementEngine:
    """Validates, conflict-checks and persists schedule placements."""

    def __init__(
        self,
        store: ScheduleStore,
        projects: ProjectDirectory,
        *,
        max_rows: int = DEFAULT_MAX_ROWS,
        default_duration_days: int = DEFAULT_DURATION_DAYS,
        conflict_scope: ConflictScope | str = ConflictScope.BAY,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.projects = projects
        self.max_rows = max_rows
        self.default_duration_days = default_duration_days
        self.conflict_scope = ConflictScope(conflict_scope)
        self.today = today

    # ---------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------

    async def create_schedule(
        self,
        project_id: int | None,
        bay_id: int | None,
        start_date: object,
        end_date: object = None,
        row: int | None = None,
        drop: DropEvent | None = None,
        total_hours: int | None = None,
    ) -> PlacementResult:
        """Place a project into a bay. Raises ConflictError on overlap."""
        project_id = self._require_id(project_id, "project_id")
        bay_id = self._require_id(bay_id, "bay_id")
        start, end = self.normalize_range(start_date, end_date)
        lane = self.resolve_lane(row, drop)
        if total_hours is not None and total_hours < 0:
            raise ValidationError("total_hours must not be negative")

        await self._require_active_bay(bay_id)
        if await self.projects.get_project(project_id) is None:
            raise NotFoundError(f"Project {project_id} not found")

        await self._check_conflicts(bay_id, start, end, lane)

        payload = SchedulePayload(
            project_id=project_id,
            bay_id=bay_id,
            start_date=start,
            end_date=end,
            row=lane,
            total_hours=total_hours,
        )
        try:
            schedule = await self.store.create_schedule(payload)
        except PersistenceError:
            logger.exception("Failed to create schedule %s", payload.to_dict())
            raise

        logger.info(
            "Scheduled project %s in bay %s row %s from %s to %s",
            project_id, bay_id, lane, format_date(start), format_date(end),
        )
        warnings = await self._promote_project(project_id, start, end)
        return PlacementResult(schedule=schedule, requested_row=lane, created=True, warnings=warnings)

    async def move_schedule(
        self,
        schedule_id: int | None,
        new_bay_id: int | None,
        new_start_date: object,
        new_end_date: object = None,
        row: int | None = None,
        drop: DropEvent | None = None,
    ) -> PlacementResult:
        """Move a schedule to another bay, dates or lane.

        Without an end date the schedule keeps its current length. Without a
        row or drop position it keeps its current lane.
        """
        schedule_id = self._require_id(schedule_id, "schedule_id")
        new_bay_id = self._require_id(new_bay_id, "bay_id")

        existing = await self.store.get_schedule(schedule_id)
        if existing is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")

        if new_end_date is None:
            start = parse_date(new_start_date, "start_date")
            end = shift_date(start, existing.end_date - existing.start_date, "end_date")
        else:
            start, end = self.normalize_range(new_start_date, new_end_date)

        if row is None and drop is None:
            lane = existing.row or 0
        else:
            lane = self.resolve_lane(row, drop)

        await self._require_active_bay(new_bay_id)
        await self._check_conflicts(new_bay_id, start, end, lane, exclude_schedule_id=schedule_id)

        payload = SchedulePayload(
            project_id=existing.project_id,
            bay_id=new_bay_id,
            start_date=start,
            end_date=end,
            row=lane,
            total_hours=getattr(existing, "total_hours", None),
        )
        try:
            schedule = await self.store.update_schedule(schedule_id, payload)
        except PersistenceError:
            logger.exception("Failed to move schedule %s to %s", schedule_id, payload.to_dict())
            raise

        logger.info(
            "Moved schedule %s to bay %s row %s from %s to %s",
            schedule_id, new_bay_id, lane, format_date(start), format_date(end),
        )
        warnings = await self._promote_project(existing.project_id, start, end)
        return PlacementResult(schedule=schedule, requested_row=lane, created=False, warnings=warnings)

    async def place_drop(
        self, project_id: int | None, slot_id: str, drop: DropEvent | None = None
    ) -> PlacementResult:
        """Handle a project dropped onto a timeline slot.

        The slot id gives the bay and start date. A project that already has
        a schedule is moved there, keeping its length; otherwise a new
        schedule of the default duration is created.
        """
        project_id = self._require_id(project_id, "project_id")
        target = parse_slot_id(slot_id)
        existing = await self.store.find_schedule_for_project(project_id)
        if existing is not None:
            return await self.move_schedule(existing.id, target.bay_id, target.anchor, drop=drop)
        return await self.create_schedule(project_id, target.bay_id, target.anchor, drop=drop)

    async def check_conflict(
        self,
        bay_id: int | None,
        start_date: object,
        end_date: object = None,
        exclude_schedule_id: int | None = None,
        row: int | None = None,
    ) -> list[ScheduleLike]:
        """Dry run: the schedules a placement would collide with."""
        bay_id = self._require_id(bay_id, "bay_id")
        start, end = self.normalize_range(start_date, end_date)
        snapshot = await self.store.list_schedules(bay_id=bay_id)
        return find_conflicts(bay_id, start, end, snapshot, exclude_schedule_id, self._scope_row(row))

    # ---------------------------------------------------------------
    # Normalization
    # ---------------------------------------------------------------

    def normalize_range(self, start_date: object, end_date: object = None) -> tuple[date, date]:
        """Parse both bounds; a missing end is start plus the default duration."""
        start = parse_date(start_date, "start_date")
        if end_date is None:
            end = shift_date(start, self.default_duration_days, "end_date")
        else:
            end = parse_date(end_date, "end_date")
        if end < start:
            raise ValidationError(
                f"end_date {format_date(end)} is before start_date {format_date(start)}"
            )
        return start, end

    def resolve_lane(self, row: int | None, drop: DropEvent | None) -> int:
        """Explicit row wins and must be a valid lane; else derive from the drop."""
        if row is not None:
            if row < 0 or row >= self.max_rows:
                raise ValidationError(f"row must be between 0 and {self.max_rows - 1}, got {row}")
            return row
        return resolve_row(drop, self.max_rows)

    @staticmethod
    def _require_id(value: int | None, name: str) -> int:
        if value is None:
            raise ValidationError(f"{name} is required")
        return value

    # ---------------------------------------------------------------
    # Checks and side effects
    # ---------------------------------------------------------------

    def _scope_row(self, row: int | None) -> int | None:
        return row if self.conflict_scope is ConflictScope.ROW else None

    async def _require_active_bay(self, bay_id: int) -> BayLike:
        bay = await self.store.get_bay(bay_id)
        if bay is None:
            raise NotFoundError(f"Bay {bay_id} not found")
        if not bay.is_active:
            raise ValidationError(f"Bay {bay_id} is not active")
        return bay

    async def _check_conflicts(
        self,
        bay_id: int,
        start: date,
        end: date,
        lane: int,
        exclude_schedule_id: int | None = None,
    ) -> None:
        snapshot = await self.store.list_schedules(bay_id=bay_id)
        scope_row = self._scope_row(lane)
        conflicts = find_conflicts(bay_id, start, end, snapshot, exclude_schedule_id, scope_row)
        if conflicts:
            logger.info(
                "Rejected placement in bay %s (%s to %s): overlaps schedules %s",
                bay_id, format_date(start), format_date(end), [c.id for c in conflicts],
            )
            raise ConflictError(bay_id, start, end, [c.id for c in conflicts], row=scope_row)

    async def _promote_project(self, project_id: int, start: date, end: date) -> list[SideEffectWarning]:
        today = self.today()
        if not start <= today <= end:
            return []
        try:
            await self.projects.update_project_status(project_id, ACTIVE_PROJECT_STATUS)
        except Exception as exc:
            logger.warning("Could not mark project %s active: %s", project_id, exc)
            return [
                SideEffectWarning(
                    message=f"Schedule saved, but project status was not updated: {exc}",
                    project_id=project_id,
                )
            ]
        return []
