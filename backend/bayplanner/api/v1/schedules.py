"""Schedule API endpoints: listing, placement, moves and status changes.

Placements go through the PlacementEngine; scheduling errors become HTTP
errors with the error's structured payload as ``detail``.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bayplanner.api.v1.errors import http_error
from bayplanner.core.config import settings
from bayplanner.core.rate_limit import rate_limit_writes
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.schemas.schedule import (
    ClearAllResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
    PlacementResponse,
    PointerPosition,
    ScheduleCreate,
    ScheduleDrop,
    ScheduleMove,
    ScheduleResize,
    ScheduleResponse,
    ScheduleStatusUpdate,
    StatusRefreshResponse,
)
from bayplanner.scheduling.errors import NotFoundError, SchedulingError
from bayplanner.scheduling.geometry import resize_dates
from bayplanner.scheduling.placement import PlacementEngine, PlacementResult
from bayplanner.scheduling.rows import DropEvent
from bayplanner.scheduling.status import date_driven_status, transition_status
from bayplanner.services.schedule_store import (
    SqlScheduleStore,
    get_placement_engine,
    get_schedule_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _drop_event(pointer: PointerPosition | None) -> DropEvent | None:
    if pointer is None:
        return None
    return pointer.to_drop_event(settings.ROW_HEIGHT_PX)


def _placement_response(result: PlacementResult) -> PlacementResponse:
    return PlacementResponse(
        schedule=ScheduleResponse.model_validate(result.schedule),
        created=result.created,
        requested_row=result.requested_row,
        row_matches=result.row_matches,
        warnings=[w.to_dict() for w in result.warnings],
    )


@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(
    bay_id: int | None = Query(None),
    project_id: int | None = Query(None),
    start: date | None = Query(None, description="Keep schedules ending on or after this date"),
    end: date | None = Query(None, description="Keep schedules starting on or before this date"),
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> list[ManufacturingSchedule]:
    """List schedules, optionally limited to a bay, a project or a date window."""
    if start is not None and end is not None and end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    try:
        return list(await store.list_schedules(bay_id=bay_id, project_id=project_id, start=start, end=end))
    except SchedulingError as exc:
        raise http_error(exc)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: int,
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> ManufacturingSchedule:
    """Get a single schedule by ID."""
    try:
        schedule = await store.get_schedule(schedule_id)
    except SchedulingError as exc:
        raise http_error(exc)
    if schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule


@router.post(
    "",
    response_model=PlacementResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_writes)],
)
async def create_schedule(
    payload: ScheduleCreate,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementResponse:
    """Place a project into a bay.

    Returns 409 with the conflicting schedule ids when the dates overlap
    another schedule in the bay.
    """
    try:
        result = await engine.create_schedule(
            project_id=payload.project_id,
            bay_id=payload.bay_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            row=payload.row,
            drop=_drop_event(payload.pointer),
            total_hours=payload.total_hours,
        )
    except SchedulingError as exc:
        raise http_error(exc)
    return _placement_response(result)


@router.put(
    "/{schedule_id}",
    response_model=PlacementResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def move_schedule(
    schedule_id: int,
    payload: ScheduleMove,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementResponse:
    """Move a schedule to another bay, date range or lane."""
    try:
        result = await engine.move_schedule(
            schedule_id=schedule_id,
            new_bay_id=payload.bay_id,
            new_start_date=payload.start_date,
            new_end_date=payload.end_date,
            row=payload.row,
            drop=_drop_event(payload.pointer),
        )
    except SchedulingError as exc:
        raise http_error(exc)
    return _placement_response(result)


@router.post(
    "/{schedule_id}/resize",
    response_model=PlacementResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def resize_schedule(
    schedule_id: int,
    payload: ScheduleResize,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementResponse:
    """Drag one edge of a bar; the other edge and the lane stay put."""
    try:
        schedule = await engine.store.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        start, end = resize_dates(
            schedule.start_date,
            schedule.end_date,
            payload.edge,
            payload.delta_px,
            payload.view_mode,
            payload.slot_width_px or settings.SLOT_WIDTH_PX,
        )
        result = await engine.move_schedule(
            schedule_id=schedule_id,
            new_bay_id=schedule.bay_id,
            new_start_date=start,
            new_end_date=end,
        )
    except SchedulingError as exc:
        raise http_error(exc)
    return _placement_response(result)


@router.post(
    "/drop",
    response_model=PlacementResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def drop_on_slot(
    payload: ScheduleDrop,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> PlacementResponse:
    """Place or move a project by the id of the timeline slot it was dropped on."""
    try:
        result = await engine.place_drop(
            project_id=payload.project_id,
            slot_id=payload.slot_id,
            drop=_drop_event(payload.pointer),
        )
    except SchedulingError as exc:
        raise http_error(exc)
    return _placement_response(result)


@router.post("/check-conflict", response_model=ConflictCheckResponse)
async def check_conflict(
    payload: ConflictCheckRequest,
    engine: PlacementEngine = Depends(get_placement_engine),
) -> ConflictCheckResponse:
    """Report whether a placement would collide, without writing anything."""
    try:
        conflicts = await engine.check_conflict(
            bay_id=payload.bay_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            exclude_schedule_id=payload.exclude_schedule_id,
            row=payload.row,
        )
    except SchedulingError as exc:
        raise http_error(exc)
    return ConflictCheckResponse(
        has_conflict=bool(conflicts),
        conflicting_schedule_ids=[c.id for c in conflicts],
    )


@router.patch(
    "/{schedule_id}/status",
    response_model=ScheduleResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def update_schedule_status(
    schedule_id: int,
    payload: ScheduleStatusUpdate,
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> ManufacturingSchedule:
    """Manually change a schedule's status along the allowed transitions."""
    try:
        schedule = await store.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        new_status = transition_status(schedule.status, payload.status)
        return await store.update_status(schedule_id, new_status.value)
    except SchedulingError as exc:
        raise http_error(exc)


@router.post(
    "/refresh-status",
    response_model=StatusRefreshResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def refresh_schedule_status(
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> StatusRefreshResponse:
    """Apply date-driven status changes (started and finished schedules)."""
    today = date.today()
    changed: list[ManufacturingSchedule] = []
    try:
        for schedule in await store.list_schedules():
            new_status = date_driven_status(schedule.status, schedule.start_date, schedule.end_date, today)
            if new_status.value != schedule.status:
                changed.append(await store.update_status(schedule.id, new_status.value))
    except SchedulingError as exc:
        raise http_error(exc)

    logger.info("Date-driven status refresh updated %d schedules", len(changed))
    return StatusRefreshResponse(
        updated=len(changed),
        schedules=[ScheduleResponse.model_validate(s) for s in changed],
    )


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(rate_limit_writes)],
)
async def delete_schedule(
    schedule_id: int,
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> None:
    """Delete a schedule; the project returns to the unassigned pool."""
    try:
        schedule = await store.delete_schedule(schedule_id)
    except SchedulingError as exc:
        raise http_error(exc)
    logger.info("Deleted schedule %s (project %s)", schedule_id, schedule.project_id)


@router.post(
    "/clear-all",
    response_model=ClearAllResponse,
    dependencies=[Depends(rate_limit_writes)],
)
async def clear_all_schedules(
    store: SqlScheduleStore = Depends(get_schedule_store),
) -> ClearAllResponse:
    """Remove every schedule from every bay."""
    try:
        deleted = await store.clear_all()
    except SchedulingError as exc:
        raise http_error(exc)
    logger.warning("Cleared all schedules (%d removed)", deleted)
    return ClearAllResponse(deleted=deleted)
