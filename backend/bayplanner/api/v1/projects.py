"""Project API endpoints: registration, lookup and the unassigned pool."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bayplanner.core.database import get_db
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.schemas.project import ProjectCreate, ProjectResponse
from bayplanner.scheduling.utilization import unassigned_projects

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    status_filter: str | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[Project]:
    """List projects with optional status filter and pagination."""
    query = select(Project)

    if status_filter is not None:
        query = query.where(Project.status == status_filter)

    query = query.order_by(Project.project_number).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/unassigned", response_model=list[ProjectResponse])
async def list_unassigned_projects(
    db: AsyncSession = Depends(get_db),
) -> list[Project]:
    """Projects that have no schedule in any bay."""
    projects_result = await db.execute(select(Project).order_by(Project.project_number))
    schedules_result = await db.execute(select(ManufacturingSchedule))
    return unassigned_projects(projects_result.scalars().all(), schedules_result.scalars().all())


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_db),
) -> Project:
    existing = await db.execute(
        select(Project).where(Project.project_number == payload.project_number)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=409, detail=f"Project {payload.project_number} already exists"
        )

    project = Project(**payload.model_dump())
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
) -> Project:
    """Get a single project by ID."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project
