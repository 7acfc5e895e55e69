"""Bay utilization and derived bay/project groupings.

A schedule's date range is split into consecutive manufacturing phases by
the project's phase percentages. Only the PRODUCTION, IT and NTC phases load
a bay; a week's utilization is read off the number of distinct projects with
one of those phases overlapping that week.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from bayplanner.scheduling.conflicts import ranges_overlap
from bayplanner.scheduling.dates import start_of_week
from bayplanner.scheduling.types import BayLike, ProjectLike, ScheduleLike

PHASES: tuple[str, ...] = ("fab", "paint", "production", "it", "ntc", "qc")

DEFAULT_PHASE_PERCENTAGES: dict[str, float] = {
    "fab": 27.0,
    "paint": 7.0,
    "production": 60.0,
    "it": 7.0,
    "ntc": 7.0,
    "qc": 7.0,
}

LOADING_PHASES: tuple[str, ...] = ("production", "it", "ntc")

DEFAULT_TEAM = "General"


@dataclass(frozen=True)
class PhaseAlignment:
    project_id: int
    project_number: str
    phase: str
    start_date: date
    end_date: date


@dataclass
class WeeklyUtilization:
    week_start: date
    week_end: date
    bay_id: int
    bay_name: str
    team_name: str
    aligned_phases: list[PhaseAlignment] = field(default_factory=list)
    utilization_percentage: int = 0
    project_count: int = 0

    @property
    def week_key(self) -> str:
        return self.week_start.isoformat()


@dataclass
class TeamGroup:
    team: str
    bays: list[BayLike]

    @property
    def id(self) -> str:
        return f"team-{self.team}"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def phase_percentages(project: object) -> dict[str, float]:
    """Phase split for a project; unset or zero percentages use the defaults."""
    return {
        phase: float(getattr(project, f"{phase}_percentage", None) or DEFAULT_PHASE_PERCENTAGES[phase])
        for phase in PHASES
    }


def phase_dates(
    start_date: date, end_date: date, percentages: dict[str, float] | None = None
) -> dict[str, tuple[date, date]]:
    """Consecutive phase ranges laid end to end from ``start_date``.

    Phase lengths are rounded day counts of the schedule length, so the last
    phase can finish slightly before or after ``end_date``. No phase runs
    past ``date.max``.
    """
    split = {**DEFAULT_PHASE_PERCENTAGES, **(percentages or {})}
    total_days = (end_date - start_date).days
    result: dict[str, tuple[date, date]] = {}
    cursor = start_date
    for phase in PHASES:
        phase_start = cursor
        length = _round_half_up(total_days * split[phase] / 100.0)
        cursor = cursor + timedelta(days=min(length, (date.max - cursor).days))
        result[phase] = (phase_start, cursor)
    return result


def utilization_percentage(project_count: int) -> int:
    """Load step function: 1 project = 50%, 2 = 85%, 3 or more = 115%."""
    if project_count <= 0:
        return 0
    if project_count == 1:
        return 50
    if project_count == 2:
        return 85
    return 115


def phase_alignments_for_week(
    week_start: date,
    week_end: date,
    schedules: Iterable[ScheduleLike],
    projects_by_id: dict[int, ProjectLike],
    bay_id: int,
) -> list[PhaseAlignment]:
    """Loading phases of the bay's projects that overlap the given week."""
    alignments: list[PhaseAlignment] = []
    for schedule in schedules:
        if schedule.bay_id != bay_id:
            continue
        project = projects_by_id.get(schedule.project_id)
        if project is None:
            continue
        phases = phase_dates(schedule.start_date, schedule.end_date, phase_percentages(project))
        for phase in LOADING_PHASES:
            phase_start, phase_end = phases[phase]
            if ranges_overlap(week_start, week_end, phase_start, phase_end):
                alignments.append(
                    PhaseAlignment(
                        project_id=project.id,
                        project_number=project.project_number,
                        phase=phase.upper(),
                        start_date=phase_start,
                        end_date=phase_end,
                    )
                )
    return alignments


def weekly_bay_utilization(
    schedules: Sequence[ScheduleLike],
    projects: Iterable[ProjectLike],
    bays: Iterable[BayLike],
    start_date: date,
    weeks: int = 26,
    excluded_teams: Iterable[str] = ("LIBBY",),
) -> list[WeeklyUtilization]:
    """Utilization per Monday-start week and bay.

    Bays without a team, and bays whose team is excluded, are skipped.
    """
    excluded = {team.upper() for team in excluded_teams}
    counted_bays = sorted(
        (bay for bay in bays if bay.team and bay.team.upper() not in excluded),
        key=lambda b: (b.bay_number, b.id),
    )
    projects_by_id = {p.id: p for p in projects}
    first_week = start_of_week(start_date)

    rows: list[WeeklyUtilization] = []
    for offset in range(weeks):
        week_start = first_week + timedelta(weeks=offset)
        week_end = week_start + timedelta(days=6)
        for bay in counted_bays:
            aligned = phase_alignments_for_week(week_start, week_end, schedules, projects_by_id, bay.id)
            count = len({a.project_id for a in aligned})
            rows.append(
                WeeklyUtilization(
                    week_start=week_start,
                    week_end=week_end,
                    bay_id=bay.id,
                    bay_name=bay.name,
                    team_name=bay.team or "Unknown",
                    aligned_phases=aligned,
                    utilization_percentage=utilization_percentage(count),
                    project_count=count,
                )
            )
    return rows


def team_week_utilization(
    schedules: Sequence[ScheduleLike],
    projects: Iterable[ProjectLike],
    team_bays: Iterable[BayLike],
    today: date,
) -> tuple[int, int, list[PhaseAlignment]]:
    """``(project_count, utilization_percentage, alignments)`` for a team this week."""
    week_start = start_of_week(today)
    week_end = week_start + timedelta(days=6)
    projects_by_id = {p.id: p for p in projects}
    aligned: list[PhaseAlignment] = []
    for bay in team_bays:
        aligned.extend(phase_alignments_for_week(week_start, week_end, schedules, projects_by_id, bay.id))
    count = len({a.project_id for a in aligned})
    return count, utilization_percentage(count), aligned


def group_bays_by_team(bays: Iterable[BayLike]) -> list[TeamGroup]:
    """Bays grouped by team, bays ordered by number, teams by their first bay."""
    groups: dict[str, list[BayLike]] = {}
    for bay in bays:
        groups.setdefault(bay.team or DEFAULT_TEAM, []).append(bay)
    result = [
        TeamGroup(team=team, bays=sorted(members, key=lambda b: b.bay_number))
        for team, members in groups.items()
    ]
    result.sort(key=lambda g: g.bays[0].bay_number)
    return result


def unassigned_projects(
    projects: Iterable[ProjectLike], schedules: Iterable[ScheduleLike]
) -> list[ProjectLike]:
    """Projects with no schedule in any bay."""
    scheduled = {s.project_id for s in schedules}
    return [p for p in projects if p.id not in scheduled]
