"""Manufacturing bay CRUD API endpoints."""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bayplanner.core.database import get_db
from bayplanner.models.bay import ManufacturingBay
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.schemas.bay import BayCreate, BayResponse, TeamGroupResponse
from bayplanner.scheduling.dates import start_of_week
from bayplanner.scheduling.utilization import group_bays_by_team, team_week_utilization

router = APIRouter(prefix="/bays", tags=["bays"])


async def _get_bay_or_404(db: AsyncSession, bay_id: int) -> ManufacturingBay:
    result = await db.execute(select(ManufacturingBay).where(ManufacturingBay.id == bay_id))
    bay = result.scalar_one_or_none()
    if bay is None:
        raise HTTPException(status_code=404, detail="Bay not found")
    return bay


@router.get("", response_model=list[BayResponse])
async def list_bays(
    active_only: bool = Query(False),
    team: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[ManufacturingBay]:
    """List bays ordered by bay number."""
    query = select(ManufacturingBay)

    if active_only:
        query = query.where(ManufacturingBay.is_active.is_(True))
    if team is not None:
        query = query.where(ManufacturingBay.team == team)

    query = query.order_by(ManufacturingBay.bay_number)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/teams", response_model=list[TeamGroupResponse])
async def list_bay_teams(
    db: AsyncSession = Depends(get_db),
) -> list[TeamGroupResponse]:
    """Active bays grouped by team, with each team's load for the current week."""
    today = date.today()
    bays_result = await db.execute(
        select(ManufacturingBay).where(ManufacturingBay.is_active.is_(True))
    )
    # Later phases can run past a schedule's end date, so only the start bounds the query
    schedules_result = await db.execute(
        select(ManufacturingSchedule).where(
            ManufacturingSchedule.start_date <= start_of_week(today) + timedelta(days=6)
        )
    )
    schedules = list(schedules_result.scalars().all())
    projects: list[Project] = []
    if schedules:
        projects_result = await db.execute(
            select(Project).where(Project.id.in_({s.project_id for s in schedules}))
        )
        projects = list(projects_result.scalars().all())

    groups: list[TeamGroupResponse] = []
    for group in group_bays_by_team(bays_result.scalars().all()):
        count, percentage, _ = team_week_utilization(schedules, projects, group.bays, today)
        groups.append(
            TeamGroupResponse(
                id=group.id,
                team=group.team,
                bays=[BayResponse.model_validate(bay) for bay in group.bays],
                current_week_projects=count,
                current_week_utilization=percentage,
            )
        )
    return groups


@router.post("", response_model=BayResponse, status_code=status.HTTP_201_CREATED)
async def create_bay(
    payload: BayCreate,
    db: AsyncSession = Depends(get_db),
) -> ManufacturingBay:
    """Create a new bay."""
    existing = await db.execute(
        select(ManufacturingBay).where(ManufacturingBay.bay_number == payload.bay_number)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail=f"Bay number {payload.bay_number} already exists")

    bay = ManufacturingBay(**payload.model_dump())
    db.add(bay)
    await db.flush()
    await db.refresh(bay)
    return bay


@router.get("/{bay_id}", response_model=BayResponse)
async def get_bay(
    bay_id: int,
    db: AsyncSession = Depends(get_db),
) -> ManufacturingBay:
    """Get a single bay by ID."""
    return await _get_bay_or_404(db, bay_id)


@router.put("/{bay_id}", response_model=BayResponse)
async def update_bay(
    bay_id: int,
    payload: BayCreate,
    db: AsyncSession = Depends(get_db),
) -> ManufacturingBay:
    """Replace a bay's attributes. Existing schedules are left where they are."""
    bay = await _get_bay_or_404(db, bay_id)

    for field, value in payload.model_dump().items():
        setattr(bay, field, value)

    await db.flush()
    await db.refresh(bay)
    return bay


@router.delete("/{bay_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bay(
    bay_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a bay that has no schedules."""
    bay = await _get_bay_or_404(db, bay_id)

    result = await db.execute(
        select(func.count()).select_from(ManufacturingSchedule).where(ManufacturingSchedule.bay_id == bay_id)
    )
    if (result.scalar() or 0) > 0:
        raise HTTPException(
            status_code=409,
            detail="Bay still has schedules; move or delete them first",
        )
    await db.delete(bay)
