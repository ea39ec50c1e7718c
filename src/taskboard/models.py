"""Project and task models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime

DEFAULT_TASK_NAME = "New task"

# Labels written by the original browser dashboard.
_LEGACY_PRIORITIES = {"alta": "high", "media": "medium", "bassa": "low"}


class Priority(enum.StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: str) -> Priority:
        key = raw.strip().lower()
        return cls(_LEGACY_PRIORITIES.get(key, key))


def as_day(value: date | datetime | None) -> date | None:
    """Drop any time-of-day component so arithmetic works on calendar days."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from *start* to *end* (negative if end is earlier)."""
    return (as_day(end) - as_day(start)).days


def _date_to_str(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _date_from_str(raw: str | None) -> date | None:
    if not raw:
        return None
    # Browser payloads carry local midnight as a UTC instant
    # ("2024-01-04T23:00:00.000Z" is Jan 5 at UTC+1).
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


@dataclass
class Task:
    """A unit of work inside a project."""

    id: str
    name: str = DEFAULT_TASK_NAME
    priority: Priority = Priority.MEDIUM
    start_date: date | None = None
    end_date: date | None = None
    assigned_to: str = ""
    dependencies: set[str] = field(default_factory=set)

    @property
    def is_dated(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority.value,
            "start_date": _date_to_str(self.start_date),
            "end_date": _date_to_str(self.end_date),
            "assigned_to": self.assigned_to,
            "dependencies": sorted(self.dependencies),
        }

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        return cls(
            id=str(d["id"]),
            name=d.get("name", DEFAULT_TASK_NAME),
            priority=Priority.parse(d.get("priority") or "medium"),
            start_date=_date_from_str(d.get("start_date", d.get("startDate"))),
            end_date=_date_from_str(d.get("end_date", d.get("endDate"))),
            assigned_to=d.get("assigned_to", d.get("assignedTo")) or "",
            dependencies={str(dep) for dep in d.get("dependencies", []) if dep != ""},
        )


@dataclass
class Project:
    """Top-level container owning an ordered list of tasks."""

    id: str
    name: str
    start_date: date | None = None
    end_date: date | None = None
    tasks: list[Task] = field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def task_ids(self) -> set[str]:
        return {t.id for t in self.tasks}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": _date_to_str(self.start_date),
            "end_date": _date_to_str(self.end_date),
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        return cls(
            id=str(d["id"]),
            name=d["name"],
            start_date=_date_from_str(d.get("start_date", d.get("startDate"))),
            end_date=_date_from_str(d.get("end_date", d.get("endDate"))),
            tasks=[Task.from_dict(t) for t in d.get("tasks", [])],
        )
