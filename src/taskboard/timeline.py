"""Timeline bounds and proportional bar layout for a project's dated tasks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from taskboard.models import Priority, Project, days_between


@dataclass
class TaskBar:
    """Layout of one task on the project timeline.

    Fractions are relative to the whole timeline: ``offset_fraction`` is where
    the bar begins, ``width_fraction`` how much of the span it covers.
    """

    task_id: str
    name: str
    priority: Priority
    start_date: date
    end_date: date
    offset_fraction: float
    width_fraction: float
    row: int


@dataclass
class Timeline:
    start: date
    end: date
    total_days: int
    bars: list[TaskBar]


def compute_timeline(project: Project) -> Timeline | None:
    """Derive the timeline of *project*, or None when nothing can be plotted.

    Only tasks with both a start and an end date take part; the others are
    left out of the layout. Day counts are inclusive of both ends.
    """
    dated = [t for t in project.tasks if t.is_dated]
    if not dated:
        return None

    start = min(t.start_date for t in dated)
    end = max(t.end_date for t in dated)
    total_days = days_between(start, end) + 1

    # Rows stack in start-date order; sorted() keeps task order on ties.
    ordered = sorted(dated, key=lambda t: t.start_date)
    bars = [
        TaskBar(
            task_id=t.id,
            name=t.name,
            priority=t.priority,
            start_date=t.start_date,
            end_date=t.end_date,
            offset_fraction=days_between(start, t.start_date) / total_days,
            width_fraction=(days_between(t.start_date, t.end_date) + 1) / total_days,
            row=row,
        )
        for row, t in enumerate(ordered)
    ]
    return Timeline(start=start, end=end, total_days=total_days, bars=bars)
