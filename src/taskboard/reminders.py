"""Upcoming due-date reminders."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from taskboard.models import Project, days_between

REMINDER_WINDOW_DAYS = 7


@dataclass(frozen=True)
class Reminder:
    project_name: str
    task_name: str
    due_date: date
    days_until_due: int
    project_id: str = ""
    task_id: str = ""


def compute_reminders(
    projects: Iterable[Project],
    now: date | datetime,
    window_days: int = REMINDER_WINDOW_DAYS,
) -> list[Reminder]:
    """List tasks whose end date falls within the next *window_days* days.

    Only strictly upcoming work is reported: a task due today or already
    overdue produces no reminder. Results follow project order, then task
    order.
    """
    reminders: list[Reminder] = []
    for project in projects:
        for task in project.tasks:
            if task.end_date is None:
                continue
            days_left = days_between(now, task.end_date)
            if 0 < days_left <= window_days:
                reminders.append(
                    Reminder(
                        project_name=project.name,
                        task_name=task.name,
                        due_date=task.end_date,
                        days_until_due=days_left,
                        project_id=project.id,
                        task_id=task.id,
                    )
                )
    return reminders
