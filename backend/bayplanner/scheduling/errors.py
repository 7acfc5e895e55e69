"""Error taxonomy for the bay scheduling core.

Every rejection carries a machine-readable ``kind`` plus a human-readable
message; the API layer maps kinds to HTTP status codes.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


class SchedulingError(Exception):
    """Base class for all scheduling rejections."""

    kind = "scheduling"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(SchedulingError):
    """Malformed input, rejected before any conflict check or write."""

    kind = "validation"


class NotFoundError(ValidationError):
    """A referenced bay, project or schedule does not exist."""

    kind = "not_found"


class ConflictError(SchedulingError):
    """The target bay is already occupied for part of the requested range."""

    kind = "conflict"

    def __init__(
        self,
        bay_id: int,
        start_date: date,
        end_date: date,
        conflicting_ids: list[int] | None = None,
        row: int | None = None,
    ) -> None:
        self.bay_id = bay_id
        self.start_date = start_date
        self.end_date = end_date
        self.conflicting_ids = list(conflicting_ids or [])
        self.row = row
        lane = f" row {row}" if row is not None else ""
        super().__init__(
            f"Bay {bay_id}{lane} is already scheduled between "
            f"{start_date.isoformat()} and {end_date.isoformat()}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            bay_id=self.bay_id,
            start_date=self.start_date.isoformat(),
            end_date=self.end_date.isoformat(),
            conflicting_schedule_ids=self.conflicting_ids,
        )
        if self.row is not None:
            data["row"] = self.row
        return data


class PersistenceError(SchedulingError):
    """The schedule store rejected or failed the write. Never retried."""

    kind = "persistence"


@dataclass
class SideEffectWarning:
    """A best-effort follow-up (project status promotion) that failed.

    Reported alongside a successful placement; never raised.
    """

    message: str
    project_id: int | None = None
    kind: str = field(default="side_effect", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "project_id": self.project_id}
