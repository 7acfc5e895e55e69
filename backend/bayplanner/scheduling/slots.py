"""Time-axis grid for the bay timeline.

One slot per day, week or month for every active bay in the visible window.
Slots are recomputed from scratch on each call; nothing is cached between
calls, so equal inputs always yield equal grids.

Slot ids encode the bay and anchor date so a drop target can be turned
back into a placement without a lookup table::

    slot-12-2025-06-02          day view
    slot-12-week-2025-06-02     week view (anchor is a Monday)
    slot-12-month-2025-06-01    month view (anchor is the 1st)
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from bayplanner.scheduling.conflicts import ranges_overlap
from bayplanner.scheduling.dates import add_months, days_in_month, start_of_month, start_of_week
from bayplanner.scheduling.errors import ValidationError
from bayplanner.scheduling.types import BayLike, ScheduleLike, ViewMode

DEFAULT_MAX_WINDOW_DAYS = 400

_SLOT_ID = re.compile(r"^slot-(?P<bay>\d+)-(?:(?P<mode>week|month)-)?(?P<anchor>\d{4}-\d{2}-\d{2})$")


@dataclass(frozen=True)
class SlotRef:
    """The parts recovered from a slot id."""

    bay_id: int
    anchor: date
    view_mode: ViewMode


@dataclass(frozen=True)
class Slot:
    """One computed calendar cell for one bay. Never persisted."""

    id: str
    bay_id: int
    anchor: date
    end: date
    view_mode: ViewMode
    position: int
    occupied: bool
    schedule_id: int | None = None

    @property
    def interval_days(self) -> int:
        return (self.end - self.anchor).days + 1


def make_slot_id(bay_id: int, anchor: date, view_mode: ViewMode) -> str:
    mode = ViewMode(view_mode)
    if mode is ViewMode.DAY:
        return f"slot-{bay_id}-{anchor.isoformat()}"
    return f"slot-{bay_id}-{mode.value}-{anchor.isoformat()}"


def parse_slot_id(slot_id: str) -> SlotRef:
    """Recover bay id, anchor date and view mode from a drop-target id."""
    match = _SLOT_ID.match(slot_id or "")
    if match is None:
        raise ValidationError(f"Unrecognised drop target {slot_id!r}")
    try:
        anchor = date.fromisoformat(match.group("anchor"))
    except ValueError as exc:
        raise ValidationError(f"Drop target {slot_id!r} carries an invalid date") from exc
    mode = ViewMode(match.group("mode") or "day")
    return SlotRef(bay_id=int(match.group("bay")), anchor=anchor, view_mode=mode)


def slot_end(anchor: date, view_mode: ViewMode) -> date:
    """Inclusive last date covered by the slot starting at ``anchor``."""
    mode = ViewMode(view_mode)
    if mode is ViewMode.DAY:
        return anchor
    if mode is ViewMode.WEEK:
        # The week holding date.max is cut short
        return anchor + timedelta(days=min(6, (date.max - anchor).days))
    return anchor.replace(day=days_in_month(anchor))


def align_anchor(value: date, view_mode: ViewMode) -> date:
    """Snap a date to the start of the slot containing it."""
    mode = ViewMode(view_mode)
    if mode is ViewMode.WEEK:
        return start_of_week(value)
    if mode is ViewMode.MONTH:
        return start_of_month(value)
    return value


def slot_anchors(window_start: date, window_end: date, view_mode: ViewMode) -> list[date]:
    """Slot start dates covering ``[window_start, window_end]`` in order."""
    mode = ViewMode(view_mode)
    anchors: list[date] = []
    current = align_anchor(window_start, mode)
    while current <= window_end:
        anchors.append(current)
        try:
            if mode is ViewMode.DAY:
                current += timedelta(days=1)
            elif mode is ViewMode.WEEK:
                current += timedelta(days=7)
            else:
                current = add_months(current, 1)
        except (OverflowError, ValueError):
            # Past the last representable date
            break
    return anchors


def build_slots(
    bays: Iterable[BayLike],
    schedules: Iterable[ScheduleLike],
    window_start: date,
    window_end: date,
    view_mode: ViewMode,
    max_window_days: int = DEFAULT_MAX_WINDOW_DAYS,
) -> dict[int, list[Slot]]:
    """Build the occupancy grid for every active bay.

    A slot is occupied when any schedule of its bay overlaps any day of the
    slot's interval, using the same inclusive rule as the conflict detector.
    """
    if window_end < window_start:
        raise ValidationError("window_end must not be before window_start")
    if (window_end - window_start).days + 1 > max_window_days:
        raise ValidationError(f"Timeline window is limited to {max_window_days} days")

    mode = ViewMode(view_mode)
    anchors = slot_anchors(window_start, window_end, mode)

    by_bay: dict[int, list[ScheduleLike]] = {}
    for schedule in schedules:
        by_bay.setdefault(schedule.bay_id, []).append(schedule)
    for bay_schedules in by_bay.values():
        bay_schedules.sort(key=lambda s: (s.start_date, s.id))

    grid: dict[int, list[Slot]] = {}
    for bay in sorted((b for b in bays if b.is_active), key=lambda b: (b.bay_number, b.id)):
        bay_schedules = by_bay.get(bay.id, [])
        cells: list[Slot] = []
        for position, anchor in enumerate(anchors):
            end = slot_end(anchor, mode)
            occupant = next(
                (s for s in bay_schedules if ranges_overlap(anchor, end, s.start_date, s.end_date)),
                None,
            )
            cells.append(
                Slot(
                    id=make_slot_id(bay.id, anchor, mode),
                    bay_id=bay.id,
                    anchor=anchor,
                    end=end,
                    view_mode=mode,
                    position=position,
                    occupied=occupant is not None,
                    schedule_id=occupant.id if occupant is not None else None,
                )
            )
        grid[bay.id] = cells
    return grid
