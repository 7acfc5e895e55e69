"""Demo data: two bay teams, a handful of projects and non-overlapping schedules.

Dates are relative to the seeding day so the timeline always has something
in progress, something upcoming and a project left in the unassigned pool.
"""

from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bayplanner.models.bay import ManufacturingBay
from bayplanner.models.project import Project
from bayplanner.models.schedule import ManufacturingSchedule
from bayplanner.scheduling.dates import start_of_week

BAYS = [
    # (bay_number, name, team, staff_count)
    (1, "Bay 1", "Chavez / Davidson", 6),
    (2, "Bay 2", "Chavez / Davidson", 6),
    (3, "Bay 3", "Held / Rodriguez", 5),
    (4, "Bay 4", "Held / Rodriguez", 5),
    (5, "Bay 5", "LIBBY", 3),
]

PROJECTS = [
    # (project_number, name, total_hours)
    ("804125", "Mobile Command Unit", 3200),
    ("804131", "Armored Response Vehicle", 4100),
    ("804140", "Mobile Medical Clinic", 2800),
    ("804152", "Bomb Squad Truck", 3600),
    ("804160", "Communications Trailer", 1500),
    ("804177", "Rescue Truck", 2400),
]

# (project index, bay index, start offset in weeks, length in days, row)
SCHEDULES = [
    (0, 0, -2, 55, 0),
    (1, 0, 6, 69, 1),
    (2, 1, 1, 41, 0),
    (3, 2, 0, 83, 0),
    (4, 3, 3, 27, 0),
]


def _create_bays() -> list[ManufacturingBay]:
    return [
        ManufacturingBay(
            bay_number=number,
            name=name,
            team=team,
            staff_count=staff,
            hours_per_person_per_week=40,
            is_active=True,
        )
        for number, name, team, staff in BAYS
    ]


def _create_projects() -> list[Project]:
    return [
        Project(project_number=number, name=name, status="pending", total_hours=hours)
        for number, name, hours in PROJECTS
    ]


def _create_schedules(
    bays: list[ManufacturingBay], projects: list[Project], today: date
) -> list[ManufacturingSchedule]:
    monday = start_of_week(today)
    schedules = []
    for project_idx, bay_idx, week_offset, length, row in SCHEDULES:
        start = monday + timedelta(weeks=week_offset)
        schedules.append(
            ManufacturingSchedule(
                project_id=projects[project_idx].id,
                bay_id=bays[bay_idx].id,
                start_date=start,
                end_date=start + timedelta(days=length),
                row=row,
                total_hours=projects[project_idx].total_hours,
            )
        )
    return schedules


async def seed_demo_data(session: AsyncSession, today: date | None = None) -> dict[str, int]:
    """Seed the database with demo bays, projects and schedules.

    Args:
        session: An async SQLAlchemy session.
        today: Reference day for the relative schedule dates.

    Returns:
        Dictionary with counts of created entities.
    """
    bays = _create_bays()
    projects = _create_projects()

    session.add_all(bays)
    session.add_all(projects)

    # Ids are needed for the schedule foreign keys
    await session.flush()

    schedules = _create_schedules(bays, projects, today or date.today())
    session.add_all(schedules)
    await session.flush()

    return {
        "manufacturing_bays": len(bays),
        "projects": len(projects),
        "manufacturing_schedules": len(schedules),
    }


async def seed_if_empty(session: AsyncSession) -> dict[str, int] | None:
    """Seed demo data only if the database is empty.

    Returns:
        Seed counts if data was seeded, None if database already has data.
    """
    result = await session.execute(select(func.count()).select_from(ManufacturingBay))
    count = result.scalar() or 0

    if count > 0:
        return None

    return await seed_demo_data(session)
