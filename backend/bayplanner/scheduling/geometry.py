"""Pixel geometry for schedule bars on the timeline.

Bars are positioned from the window start and sized by duration, scaled by
how many pixels one day takes in the current view mode.
"""

import math
from dataclasses import dataclass
from datetime import date

from bayplanner.scheduling.dates import shift_date
from bayplanner.scheduling.errors import ValidationError
from bayplanner.scheduling.types import ViewMode

MONTH_DAYS = 30


@dataclass(frozen=True)
class BarGeometry:
    left: float
    width: float


def pixels_per_day(view_mode: ViewMode, slot_width_px: float) -> float:
    mode = ViewMode(view_mode)
    if mode is ViewMode.DAY:
        return slot_width_px
    if mode is ViewMode.WEEK:
        return slot_width_px / 7
    return slot_width_px / MONTH_DAYS


def bar_geometry(
    start_date: date,
    end_date: date,
    window_start: date,
    view_mode: ViewMode,
    slot_width_px: float,
) -> BarGeometry:
    """Left offset and width of a bar; the width includes the end date."""
    per_day = pixels_per_day(view_mode, slot_width_px)
    left = (start_date - window_start).days * per_day
    width = ((end_date - start_date).days + 1) * per_day
    return BarGeometry(left=left, width=width)


def pixel_delta_to_days(delta_px: float, view_mode: ViewMode, slot_width_px: float) -> int:
    """Whole days represented by a horizontal drag of ``delta_px``."""
    per_day = pixels_per_day(view_mode, slot_width_px)
    if per_day <= 0:
        return 0
    days = delta_px / per_day
    if not math.isfinite(days):
        raise ValidationError(f"delta_px {delta_px!r} does not map to a day count")
    return round(days)


def resize_dates(
    start_date: date,
    end_date: date,
    edge: str,
    delta_px: float,
    view_mode: ViewMode,
    slot_width_px: float,
) -> tuple[date, date]:
    """New ``(start, end)`` after dragging the ``"start"`` or ``"end"`` edge.

    The dragged edge stops at the opposite edge, so the result is at least a
    one-day schedule.
    """
    days = pixel_delta_to_days(delta_px, view_mode, slot_width_px)
    span = (end_date - start_date).days
    if edge == "start":
        return shift_date(start_date, min(days, span), "start_date"), end_date
    if edge == "end":
        return start_date, shift_date(end_date, max(days, -span), "end_date")
    raise ValidationError(f"edge must be 'start' or 'end', got {edge!r}")
