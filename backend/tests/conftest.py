"""Pytest configuration with fixtures for async testing."""

from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from bayplanner.scheduling.errors import PersistenceError
from bayplanner.scheduling.placement import PlacementEngine, SchedulePayload


# ---------------------------------------------------------------------------
# Test Data Factories (using MagicMock for SQLAlchemy 2.0 compatibility)
# ---------------------------------------------------------------------------


def _make_mock(defaults: dict[str, Any], overrides: dict[str, Any]) -> MagicMock:
    """Create a MagicMock with given attributes."""
    merged = {**defaults, **overrides}
    mock = MagicMock()
    for k, v in merged.items():
        setattr(mock, k, v)
    return mock


class BayFactory:
    """Factory for creating ManufacturingBay instances for testing."""

    _counter = 0

    @classmethod
    def create(cls, **overrides: Any) -> MagicMock:
        cls._counter += 1
        defaults = {
            "id": cls._counter,
            "bay_number": cls._counter,
            "name": f"Bay {cls._counter}",
            "description": None,
            "equipment": None,
            "team": "General",
            "staff_count": 4,
            "hours_per_person_per_week": 40,
            "is_active": True,
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        }
        return _make_mock(defaults, overrides)


class ProjectFactory:
    """Factory for creating Project instances for testing."""

    _counter = 0

    @classmethod
    def create(cls, **overrides: Any) -> MagicMock:
        cls._counter += 1
        defaults = {
            "id": cls._counter,
            "project_number": f"80{cls._counter:04d}",
            "name": f"Test Project {cls._counter}",
            "status": "pending",
            "total_hours": 1000,
            "fab_percentage": None,
            "paint_percentage": None,
            "production_percentage": None,
            "it_percentage": None,
            "ntc_percentage": None,
            "qc_percentage": None,
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        }
        return _make_mock(defaults, overrides)


class ScheduleFactory:
    """Factory for creating ManufacturingSchedule instances for testing."""

    _counter = 0

    @classmethod
    def create(cls, **overrides: Any) -> MagicMock:
        cls._counter += 1
        now = datetime.now(timezone.utc)
        defaults = {
            "id": cls._counter,
            "bay_id": 1,
            "project_id": cls._counter,
            "start_date": date(2025, 6, 1),
            "end_date": date(2025, 6, 10),
            "status": "scheduled",
            "row": 0,
            "total_hours": None,
            "notes": None,
            "version": 1,
            "created_at": now,
            "updated_at": now,
        }
        return _make_mock(defaults, overrides)


# ---------------------------------------------------------------------------
# In-memory collaborators for the placement engine
# ---------------------------------------------------------------------------


class FakeScheduleStore:
    """Schedule store backed by dicts; optionally fails writes."""

    def __init__(self, bays=(), schedules=()) -> None:
        self.bays = {b.id: b for b in bays}
        self.schedules = {s.id: s for s in schedules}
        self._next_id = max(self.schedules, default=0) + 1
        self.fail_writes = False
        self.saved_row: int | None = None
        self.writes: list[SchedulePayload] = []

    async def get_bay(self, bay_id):
        return self.bays.get(bay_id)

    async def get_schedule(self, schedule_id):
        return self.schedules.get(schedule_id)

    async def find_schedule_for_project(self, project_id):
        matches = sorted(
            (s for s in self.schedules.values() if s.project_id == project_id),
            key=lambda s: (s.start_date, s.id),
        )
        return matches[0] if matches else None

    async def list_schedules(self, bay_id=None):
        return [s for s in self.schedules.values() if bay_id is None or s.bay_id == bay_id]

    def _check_write(self, payload: SchedulePayload) -> None:
        if self.fail_writes:
            raise PersistenceError("database unavailable")
        self.writes.append(payload)

    async def create_schedule(self, payload: SchedulePayload):
        self._check_write(payload)
        schedule = ScheduleFactory.create(
            id=self._next_id,
            project_id=payload.project_id,
            bay_id=payload.bay_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            row=payload.row if self.saved_row is None else self.saved_row,
            total_hours=payload.total_hours,
        )
        self._next_id += 1
        self.schedules[schedule.id] = schedule
        return schedule

    async def update_schedule(self, schedule_id, payload: SchedulePayload):
        self._check_write(payload)
        schedule = self.schedules[schedule_id]
        schedule.bay_id = payload.bay_id
        schedule.start_date = payload.start_date
        schedule.end_date = payload.end_date
        schedule.row = payload.row if self.saved_row is None else self.saved_row
        return schedule


class FakeProjectDirectory:
    """Project lookups; ``fail_status_update`` makes the status write raise."""

    def __init__(self, projects=()) -> None:
        self.projects = {p.id: p for p in projects}
        self.fail_status_update = False
        self.status_updates: list[tuple[int, str]] = []

    async def get_project(self, project_id):
        return self.projects.get(project_id)

    async def update_project_status(self, project_id, status):
        if self.fail_status_update:
            raise RuntimeError("projects table is locked")
        self.status_updates.append((project_id, status))
        self.projects[project_id].status = status


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bay_factory():
    """Provide BayFactory for tests."""
    BayFactory._counter = 0
    return BayFactory


@pytest.fixture
def project_factory():
    """Provide ProjectFactory for tests."""
    ProjectFactory._counter = 0
    return ProjectFactory


@pytest.fixture
def schedule_factory():
    """Provide ScheduleFactory for tests."""
    ScheduleFactory._counter = 0
    return ScheduleFactory


@pytest.fixture
def bay(bay_factory):
    return bay_factory.create(id=1, bay_number=1)


@pytest.fixture
def project(project_factory):
    return project_factory.create(id=1)


@pytest.fixture
def store(bay, bay_factory):
    """Store with bay 1 (active), bay 2 (active) and bay 3 (inactive)."""
    return FakeScheduleStore(
        bays=[
            bay,
            bay_factory.create(id=2, bay_number=2),
            bay_factory.create(id=3, bay_number=3, is_active=False),
        ]
    )


@pytest.fixture
def projects(project_factory):
    return FakeProjectDirectory([project_factory.create(id=i) for i in range(1, 6)])


@pytest.fixture
def engine(store, projects):
    """Placement engine whose 'today' is outside every test schedule."""
    return PlacementEngine(store, projects, today=lambda: date(2024, 1, 1))


@pytest.fixture
def mock_db():
    """Provide a mock AsyncSession for unit tests."""
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    return session
