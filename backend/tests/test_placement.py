"""Tests for the placement engine against in-memory collaborators."""

from datetime import date

import pytest

from bayplanner.scheduling.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from bayplanner.scheduling.placement import PlacementEngine, SchedulePayload
from bayplanner.scheduling.rows import DropEvent


@pytest.fixture
def june_schedule(store, schedule_factory):
    """Project 1 in bay 1, June 1st to 10th 2025, lane 0."""
    schedule = schedule_factory.create(
        id=100, project_id=1, bay_id=1, start_date=date(2025, 6, 1), end_date=date(2025, 6, 10)
    )
    store.schedules[schedule.id] = schedule
    store._next_id = 101
    return schedule


class TestCreateSchedule:
    @pytest.mark.asyncio
    async def test_create_in_empty_bay(self, engine, store):
        result = await engine.create_schedule(2, 1, "2025-06-01", "2025-06-10")
        assert result.created is True
        assert result.schedule.bay_id == 1
        assert result.schedule.start_date == date(2025, 6, 1)
        assert result.schedule.end_date == date(2025, 6, 10)
        assert result.requested_row == 0
        assert result.row_matches
        assert len(store.schedules) == 1

    @pytest.mark.asyncio
    async def test_identical_range_conflicts(self, engine, store, june_schedule):
        with pytest.raises(ConflictError) as exc_info:
            await engine.create_schedule(2, 1, "2025-06-01", "2025-06-10")
        assert exc_info.value.conflicting_ids == [june_schedule.id]
        assert exc_info.value.bay_id == 1
        assert len(store.writes) == 0

    @pytest.mark.asyncio
    async def test_adjacent_range_succeeds(self, engine, june_schedule):
        result = await engine.create_schedule(2, 1, "2025-06-11", "2025-06-20")
        assert result.schedule.start_date == date(2025, 6, 11)

    @pytest.mark.asyncio
    async def test_conflict_in_other_lane_still_rejected(self, engine, june_schedule):
        with pytest.raises(ConflictError):
            await engine.create_schedule(2, 1, "2025-06-05", "2025-06-06", row=3)

    @pytest.mark.asyncio
    async def test_same_range_in_other_bay_succeeds(self, engine, june_schedule):
        result = await engine.create_schedule(2, 2, "2025-06-01", "2025-06-10")
        assert result.schedule.bay_id == 2

    @pytest.mark.asyncio
    async def test_missing_end_uses_default_duration(self, engine):
        result = await engine.create_schedule(2, 1, "2025-06-01")
        assert result.schedule.end_date == date(2025, 6, 8)

    @pytest.mark.asyncio
    async def test_timestamp_input_keeps_calendar_date(self, engine):
        result = await engine.create_schedule(2, 1, "2025-06-01T23:30:00-07:00", "2025-06-03T00:00:00Z")
        assert result.schedule.start_date == date(2025, 6, 1)
        assert result.schedule.end_date == date(2025, 6, 3)

    @pytest.mark.asyncio
    async def test_one_day_schedule_allowed(self, engine):
        result = await engine.create_schedule(2, 1, "2025-06-01", "2025-06-01")
        assert result.schedule.start_date == result.schedule.end_date

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, engine, store):
        with pytest.raises(ValidationError):
            await engine.create_schedule(2, 1, "2025-06-10", "2025-06-01")
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_missing_ids_rejected(self, engine):
        with pytest.raises(ValidationError):
            await engine.create_schedule(None, 1, "2025-06-01")
        with pytest.raises(ValidationError):
            await engine.create_schedule(2, None, "2025-06-01")

    @pytest.mark.asyncio
    async def test_unknown_bay_is_not_found(self, engine):
        with pytest.raises(NotFoundError):
            await engine.create_schedule(2, 99, "2025-06-01")

    @pytest.mark.asyncio
    async def test_inactive_bay_rejected(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            await engine.create_schedule(2, 3, "2025-06-01")
        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    async def test_unknown_project_is_not_found(self, engine):
        with pytest.raises(NotFoundError):
            await engine.create_schedule(99, 1, "2025-06-01")

    @pytest.mark.asyncio
    async def test_negative_hours_rejected(self, engine):
        with pytest.raises(ValidationError):
            await engine.create_schedule(2, 1, "2025-06-01", total_hours=-5)

    @pytest.mark.asyncio
    async def test_explicit_row_out_of_range_rejected(self, engine):
        with pytest.raises(ValidationError):
            await engine.create_schedule(2, 1, "2025-06-01", row=4)

    @pytest.mark.asyncio
    async def test_pointer_drop_picks_lane(self, engine):
        drop = DropEvent(pointer_y=30, container_top=0, row_height_px=12)
        result = await engine.create_schedule(2, 1, "2025-06-01", "2025-06-03", drop=drop)
        assert result.requested_row == 2
        assert result.schedule.row == 2

    @pytest.mark.asyncio
    async def test_store_changing_lane_is_reported(self, engine, store):
        store.saved_row = 0
        result = await engine.create_schedule(2, 1, "2025-06-01", row=2)
        assert result.requested_row == 2
        assert result.row_matches is False

    @pytest.mark.asyncio
    async def test_default_end_past_calendar_rejected(self, engine, store):
        with pytest.raises(ValidationError, match="end_date"):
            await engine.create_schedule(2, 1, "9999-12-30")
        assert store.schedules == {}

    @pytest.mark.asyncio
    async def test_persistence_error_propagates(self, engine, store, projects):
        store.fail_writes = True
        with pytest.raises(PersistenceError):
            await engine.create_schedule(2, 1, "2025-06-01")
        assert projects.status_updates == []


class TestMoveSchedule:
    @pytest.mark.asyncio
    async def test_move_overlapping_itself_succeeds(self, engine, june_schedule):
        result = await engine.move_schedule(june_schedule.id, 1, "2025-06-03", "2025-06-12")
        assert result.created is False
        assert result.schedule.start_date == date(2025, 6, 3)
        assert result.schedule.end_date == date(2025, 6, 12)

    @pytest.mark.asyncio
    async def test_move_into_other_schedule_conflicts(self, engine, store, june_schedule, schedule_factory):
        other = schedule_factory.create(
            id=200, project_id=2, bay_id=2, start_date=date(2025, 6, 1), end_date=date(2025, 6, 10)
        )
        store.schedules[other.id] = other
        with pytest.raises(ConflictError) as exc_info:
            await engine.move_schedule(june_schedule.id, 2, "2025-06-05", "2025-06-07")
        assert exc_info.value.conflicting_ids == [200]
        assert june_schedule.bay_id == 1

    @pytest.mark.asyncio
    async def test_move_without_end_keeps_length(self, engine, june_schedule):
        result = await engine.move_schedule(june_schedule.id, 2, "2025-07-01")
        assert result.schedule.bay_id == 2
        assert result.schedule.end_date == date(2025, 7, 10)

    @pytest.mark.asyncio
    async def test_move_without_row_keeps_lane(self, engine, june_schedule):
        june_schedule.row = 3
        result = await engine.move_schedule(june_schedule.id, 2, "2025-07-01")
        assert result.requested_row == 3
        assert result.schedule.row == 3

    @pytest.mark.asyncio
    async def test_move_with_pointer_changes_lane(self, engine, june_schedule):
        drop = DropEvent(pointer_y=15, row_height_px=12)
        result = await engine.move_schedule(june_schedule.id, 1, "2025-06-01", drop=drop)
        assert result.schedule.row == 1

    @pytest.mark.asyncio
    async def test_kept_length_past_calendar_rejected(self, engine, june_schedule):
        with pytest.raises(ValidationError):
            await engine.move_schedule(june_schedule.id, 1, "9999-12-28")
        assert june_schedule.start_date == date(2025, 6, 1)

    @pytest.mark.asyncio
    async def test_move_unknown_schedule(self, engine):
        with pytest.raises(NotFoundError):
            await engine.move_schedule(999, 1, "2025-06-01")

    @pytest.mark.asyncio
    async def test_move_to_inactive_bay_rejected(self, engine, june_schedule):
        with pytest.raises(ValidationError):
            await engine.move_schedule(june_schedule.id, 3, "2025-06-01")


class TestPlaceDrop:
    @pytest.mark.asyncio
    async def test_drop_unscheduled_project_creates(self, engine):
        result = await engine.place_drop(2, "slot-2-2025-06-02")
        assert result.created is True
        assert result.schedule.bay_id == 2
        assert result.schedule.start_date == date(2025, 6, 2)
        assert result.schedule.end_date == date(2025, 6, 9)

    @pytest.mark.asyncio
    async def test_drop_scheduled_project_moves(self, engine, store, june_schedule):
        result = await engine.place_drop(1, "slot-2-week-2025-07-07")
        assert result.created is False
        assert result.schedule.id == june_schedule.id
        assert (result.schedule.start_date, result.schedule.end_date) == (date(2025, 7, 7), date(2025, 7, 16))
        assert len(store.schedules) == 1

    @pytest.mark.asyncio
    async def test_drop_onto_occupied_slot_conflicts(self, engine, june_schedule):
        with pytest.raises(ConflictError):
            await engine.place_drop(2, "slot-1-2025-06-05")

    @pytest.mark.asyncio
    async def test_drop_with_bad_slot_id(self, engine):
        with pytest.raises(ValidationError):
            await engine.place_drop(2, "row-1-2025-06-05")


class TestCheckConflict:
    @pytest.mark.asyncio
    async def test_dry_run_reports_without_writing(self, engine, store, june_schedule):
        conflicts = await engine.check_conflict(1, "2025-06-10", "2025-06-12")
        assert [c.id for c in conflicts] == [june_schedule.id]
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_dry_run_excludes_moved_schedule(self, engine, june_schedule):
        conflicts = await engine.check_conflict(1, "2025-06-10", "2025-06-12", exclude_schedule_id=june_schedule.id)
        assert conflicts == []


class TestRowScope:
    @pytest.fixture
    def row_engine(self, store, projects):
        return PlacementEngine(store, projects, conflict_scope="row", today=lambda: date(2024, 1, 1))

    @pytest.mark.asyncio
    async def test_other_lane_is_free(self, row_engine, june_schedule):
        result = await row_engine.create_schedule(2, 1, "2025-06-05", "2025-06-06", row=1)
        assert result.schedule.row == 1

    @pytest.mark.asyncio
    async def test_same_lane_conflicts(self, row_engine, june_schedule):
        with pytest.raises(ConflictError) as exc_info:
            await row_engine.create_schedule(2, 1, "2025-06-05", "2025-06-06", row=0)
        assert exc_info.value.row == 0
        assert exc_info.value.to_dict()["row"] == 0


class TestProjectPromotion:
    @pytest.fixture
    def june_engine(self, store, projects):
        return PlacementEngine(store, projects, today=lambda: date(2025, 6, 5))

    @pytest.mark.asyncio
    async def test_project_marked_active_when_today_inside(self, june_engine, projects):
        result = await june_engine.create_schedule(2, 1, "2025-06-01", "2025-06-10")
        assert projects.status_updates == [(2, "active")]
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_future_schedule_leaves_status(self, june_engine, projects):
        await june_engine.create_schedule(2, 1, "2025-07-01", "2025-07-10")
        assert projects.status_updates == []

    @pytest.mark.asyncio
    async def test_status_failure_becomes_warning(self, june_engine, store, projects):
        projects.fail_status_update = True
        result = await june_engine.create_schedule(2, 1, "2025-06-01", "2025-06-10")
        assert len(store.schedules) == 1
        assert len(result.warnings) == 1
        warning = result.warnings[0].to_dict()
        assert warning["kind"] == "side_effect"
        assert warning["project_id"] == 2


class TestSchedulePayload:
    def test_to_dict_uses_iso_dates(self):
        payload = SchedulePayload(project_id=1, bay_id=2, start_date=date(2025, 6, 1), end_date=date(2025, 6, 10), row=1)
        assert payload.to_dict() == {
            "projectId": 1,
            "bayId": 2,
            "startDate": "2025-06-01",
            "endDate": "2025-06-10",
            "row": 1,
        }
