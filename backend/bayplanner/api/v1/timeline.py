"""Timeline API endpoints: slot grid, bar geometry and bay utilization."""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bayplanner.api.v1.errors import http_error
from bayplanner.core.config import settings
from bayplanner.core.database import get_db
from bayplanner.models.bay import ManufacturingBay
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.schemas.timeline import (
    BarResponse,
    BaySlotsResponse,
    PhaseAlignmentResponse,
    SlotResponse,
    TimelineBarsResponse,
    TimelineSlotsResponse,
    WeeklyUtilizationResponse,
)
from bayplanner.scheduling.dates import count_working_days, shift_date
from bayplanner.scheduling.errors import SchedulingError, ValidationError
from bayplanner.scheduling.geometry import bar_geometry
from bayplanner.scheduling.slots import align_anchor, build_slots
from bayplanner.scheduling.types import ViewMode
from bayplanner.scheduling.utilization import weekly_bay_utilization

router = APIRouter(prefix="/timeline", tags=["timeline"])


async def _schedules_in_window(db: AsyncSession, start: date, end: date) -> list[ManufacturingSchedule]:
    result = await db.execute(
        select(ManufacturingSchedule)
        .where(ManufacturingSchedule.start_date <= end, ManufacturingSchedule.end_date >= start)
        .order_by(ManufacturingSchedule.bay_id, ManufacturingSchedule.start_date)
    )
    return list(result.scalars().all())


def _window(start: date | None, end: date | None) -> tuple[date, date]:
    window_start = start or date.today()
    try:
        window_end = end or shift_date(window_start, 90, "end")
        if window_end < window_start:
            raise ValidationError("end must not be before start")
    except SchedulingError as exc:
        raise http_error(exc)
    return window_start, window_end


@router.get("/slots", response_model=TimelineSlotsResponse)
async def get_slots(
    start: date | None = Query(None, description="Window start, defaults to today"),
    end: date | None = Query(None, description="Window end, defaults to start + 90 days"),
    view_mode: ViewMode = Query(ViewMode.WEEK),
    db: AsyncSession = Depends(get_db),
) -> TimelineSlotsResponse:
    """Occupancy grid for every active bay over the window."""
    window_start, window_end = _window(start, end)

    bays_result = await db.execute(select(ManufacturingBay).where(ManufacturingBay.is_active.is_(True)))
    bays = list(bays_result.scalars().all())
    # Week and month cells start before the window start
    first_cell = align_anchor(window_start, view_mode)
    schedules = await _schedules_in_window(db, first_cell, window_end)

    try:
        grid = build_slots(
            bays, schedules, window_start, window_end, view_mode,
            max_window_days=settings.MAX_WINDOW_DAYS,
        )
    except SchedulingError as exc:
        raise http_error(exc)

    bays_by_id = {bay.id: bay for bay in bays}
    return TimelineSlotsResponse(
        window_start=window_start,
        window_end=window_end,
        view_mode=view_mode,
        bays=[
            BaySlotsResponse(
                bay_id=bay_id,
                bay_number=bays_by_id[bay_id].bay_number,
                bay_name=bays_by_id[bay_id].name,
                team=bays_by_id[bay_id].team,
                slots=[SlotResponse.model_validate(slot) for slot in slots],
            )
            for bay_id, slots in grid.items()
        ],
    )


@router.get("/bars", response_model=TimelineBarsResponse)
async def get_bars(
    start: date | None = Query(None),
    end: date | None = Query(None),
    view_mode: ViewMode = Query(ViewMode.WEEK),
    bay_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> TimelineBarsResponse:
    """Pixel placement of each schedule bar relative to the window start."""
    window_start, window_end = _window(start, end)
    if (window_end - window_start).days + 1 > settings.MAX_WINDOW_DAYS:
        raise http_error(ValidationError(f"Timeline window is limited to {settings.MAX_WINDOW_DAYS} days"))

    schedules = await _schedules_in_window(db, window_start, window_end)
    bars: list[BarResponse] = []
    for schedule in schedules:
        if bay_id is not None and schedule.bay_id != bay_id:
            continue
        geometry = bar_geometry(
            schedule.start_date, schedule.end_date, window_start, view_mode, settings.SLOT_WIDTH_PX
        )
        bars.append(
            BarResponse(
                schedule_id=schedule.id,
                project_id=schedule.project_id,
                bay_id=schedule.bay_id,
                row=schedule.row,
                start_date=schedule.start_date,
                end_date=schedule.end_date,
                left=geometry.left,
                width=geometry.width,
                top=schedule.row * settings.ROW_HEIGHT_PX,
                working_days=count_working_days(schedule.start_date, schedule.end_date),
            )
        )

    return TimelineBarsResponse(
        window_start=window_start,
        window_end=window_end,
        view_mode=view_mode,
        slot_width_px=settings.SLOT_WIDTH_PX,
        row_height_px=settings.ROW_HEIGHT_PX,
        bars=bars,
    )


@router.get("/utilization", response_model=list[WeeklyUtilizationResponse])
async def get_utilization(
    start: date | None = Query(None, description="First week, defaults to this week"),
    weeks: int | None = Query(None, ge=1, le=104),
    db: AsyncSession = Depends(get_db),
) -> list[WeeklyUtilizationResponse]:
    """Weekly utilization per bay from the loading phases of its projects."""
    first_day = start or date.today()
    week_count = weeks or settings.UTILIZATION_WEEKS
    try:
        last_day = shift_date(first_day, timedelta(weeks=week_count), "start")
    except SchedulingError as exc:
        raise http_error(exc)

    bays_result = await db.execute(select(ManufacturingBay).where(ManufacturingBay.is_active.is_(True)))
    # Later phases can run past a schedule's end date, so only the start bounds the query
    schedules_result = await db.execute(
        select(ManufacturingSchedule).where(ManufacturingSchedule.start_date <= last_day)
    )
    schedules = list(schedules_result.scalars().all())
    project_ids = {s.project_id for s in schedules}
    projects: list[Project] = []
    if project_ids:
        projects_result = await db.execute(select(Project).where(Project.id.in_(project_ids)))
        projects = list(projects_result.scalars().all())

    rows = weekly_bay_utilization(
        schedules,
        projects,
        bays_result.scalars().all(),
        first_day,
        weeks=week_count,
        excluded_teams=settings.excluded_teams,
    )
    return [
        WeeklyUtilizationResponse(
            week_key=row.week_key,
            week_start=row.week_start,
            week_end=row.week_end,
            bay_id=row.bay_id,
            bay_name=row.bay_name,
            team_name=row.team_name,
            utilization_percentage=row.utilization_percentage,
            project_count=row.project_count,
            aligned_phases=[PhaseAlignmentResponse.model_validate(a) for a in row.aligned_phases],
        )
        for row in rows
    ]
