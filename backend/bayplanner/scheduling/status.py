"""Schedule status lifecycle.

    scheduled -> in_progress -> complete

``maintenance`` can be entered from any status and only leaves back to
``scheduled``. Transitions are driven by date triggers or manual edits,
never by placement.
"""

from datetime import date

from bayplanner.scheduling.errors import ValidationError
from bayplanner.scheduling.types import ScheduleStatus

ALLOWED_TRANSITIONS: dict[ScheduleStatus, frozenset[ScheduleStatus]] = {
    ScheduleStatus.SCHEDULED: frozenset({ScheduleStatus.IN_PROGRESS, ScheduleStatus.MAINTENANCE}),
    ScheduleStatus.IN_PROGRESS: frozenset({ScheduleStatus.COMPLETE, ScheduleStatus.MAINTENANCE}),
    ScheduleStatus.COMPLETE: frozenset({ScheduleStatus.MAINTENANCE}),
    ScheduleStatus.MAINTENANCE: frozenset({ScheduleStatus.SCHEDULED}),
}

# Project status written when today falls inside a placed schedule
ACTIVE_PROJECT_STATUS = "active"


def parse_status(value: str | ScheduleStatus) -> ScheduleStatus:
    try:
        return ScheduleStatus(value)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in ScheduleStatus)
        raise ValidationError(f"Unknown schedule status {value!r}; expected one of {allowed}") from exc


def can_transition(current: str | ScheduleStatus, target: str | ScheduleStatus) -> bool:
    current_status = parse_status(current)
    target_status = parse_status(target)
    return current_status == target_status or target_status in ALLOWED_TRANSITIONS[current_status]


def transition_status(current: str | ScheduleStatus, target: str | ScheduleStatus) -> ScheduleStatus:
    """Validate a status change and return the new status."""
    if not can_transition(current, target):
        raise ValidationError(
            f"Cannot move schedule from {parse_status(current).value} to {parse_status(target).value}"
        )
    return parse_status(target)


def date_driven_status(
    current: str | ScheduleStatus, start_date: date, end_date: date, today: date
) -> ScheduleStatus:
    """Status the calendar implies, stepping only along allowed transitions.

    Maintenance and complete schedules are left alone.
    """
    status = parse_status(current)
    if status is ScheduleStatus.SCHEDULED and start_date <= today:
        status = ScheduleStatus.IN_PROGRESS
    if status is ScheduleStatus.IN_PROGRESS and today > end_date:
        status = ScheduleStatus.COMPLETE
    return status
