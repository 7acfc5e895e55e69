"""Lane (row) resolution for drops into a bay.

A bay is split into ``max_rows`` horizontal lanes. When a drop carries a
pointer position the lane comes from the vertical offset inside the bay's
lane area; otherwise the caller's explicit row is used, defaulting to 0.
The result is always clamped into ``[0, max_rows - 1]``.
"""

import math
from dataclasses import dataclass

DEFAULT_MAX_ROWS = 4


@dataclass(frozen=True)
class DropEvent:
    """What the front end knows at drop time."""

    pointer_y: float | None = None
    container_top: float = 0.0
    row_height_px: float | None = None
    explicit_row: int | None = None

    @property
    def has_pointer(self) -> bool:
        return self.pointer_y is not None and bool(self.row_height_px) and self.row_height_px > 0


def clamp_row(row: int, max_rows: int = DEFAULT_MAX_ROWS) -> int:
    return max(0, min(int(row), max(max_rows, 1) - 1))


def resolve_row(drop: DropEvent | None, max_rows: int = DEFAULT_MAX_ROWS) -> int:
    """Return the lane index for a drop, never outside ``[0, max_rows - 1]``."""
    if drop is None:
        return 0
    if drop.has_pointer:
        relative_y = drop.pointer_y - drop.container_top
        if math.isnan(relative_y) or relative_y < 0:
            return 0
        if math.isinf(relative_y):
            return clamp_row(max_rows - 1, max_rows)
        return clamp_row(math.floor(relative_y / drop.row_height_px), max_rows)
    if drop.explicit_row is not None:
        return clamp_row(drop.explicit_row, max_rows)
    return 0


@dataclass
class DragSession:
    """Per-drag state handed from the pointer-move handler to the drop handler.

    Holds what a drag needs between events (target bay, lane geometry, last
    pointer position) so nothing has to live in process-wide state.
    """

    project_id: int
    bay_id: int | None = None
    container_top: float = 0.0
    row_height_px: float = 60.0
    max_rows: int = DEFAULT_MAX_ROWS
    pointer_y: float | None = None
    schedule_id: int | None = None

    def enter_bay(self, bay_id: int, container_top: float, row_height_px: float | None = None) -> None:
        """Pointer moved over a new bay's lane area."""
        self.bay_id = bay_id
        self.container_top = container_top
        if row_height_px:
            self.row_height_px = row_height_px

    def move(self, pointer_y: float) -> int:
        """Record a pointer move and return the lane it currently points at."""
        self.pointer_y = pointer_y
        return self.current_row

    @property
    def current_row(self) -> int:
        return resolve_row(self.to_drop_event(), self.max_rows)

    def to_drop_event(self) -> DropEvent:
        return DropEvent(
            pointer_y=self.pointer_y,
            container_top=self.container_top,
            row_height_px=self.row_height_px,
        )
