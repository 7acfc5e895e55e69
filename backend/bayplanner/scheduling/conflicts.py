"""Conflict detection for bay schedules.

Two ranges collide when ``s1 <= e2 and s2 <= e1``. Both ends are inclusive,
so a schedule ending on the 10th and another starting on the 10th conflict,
while one ending on the 10th and one starting on the 11th do not.
"""

from collections.abc import Iterable
from datetime import date

from bayplanner.scheduling.types import ScheduleLike


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive date-range overlap. Symmetric in its two ranges."""
    return start1 <= end2 and start2 <= end1


def _collides(
    schedule: ScheduleLike,
    bay_id: int,
    start_date: date,
    end_date: date,
    exclude_schedule_id: int | None,
    row: int | None,
) -> bool:
    if schedule.bay_id != bay_id:
        return False
    if exclude_schedule_id is not None and schedule.id == exclude_schedule_id:
        return False
    if row is not None and (schedule.row or 0) != row:
        return False
    return ranges_overlap(start_date, end_date, schedule.start_date, schedule.end_date)


def find_conflicts(
    bay_id: int,
    start_date: date,
    end_date: date,
    schedules: Iterable[ScheduleLike],
    exclude_schedule_id: int | None = None,
    row: int | None = None,
) -> list[ScheduleLike]:
    """Return the schedules in ``bay_id`` that overlap ``[start_date, end_date]``.

    ``exclude_schedule_id`` drops the schedule being moved from the check.
    With ``row`` set only schedules in that lane count; with ``row=None``
    every lane in the bay does.
    """
    return [
        s for s in schedules if _collides(s, bay_id, start_date, end_date, exclude_schedule_id, row)
    ]


def has_conflict(
    bay_id: int,
    start_date: date,
    end_date: date,
    schedules: Iterable[ScheduleLike],
    exclude_schedule_id: int | None = None,
    row: int | None = None,
) -> bool:
    """True if any other schedule in the bay overlaps the candidate range."""
    return any(
        _collides(s, bay_id, start_date, end_date, exclude_schedule_id, row) for s in schedules
    )
