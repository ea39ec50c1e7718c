"""In-memory entity store for projects and their tasks.

The store is the only mutator of project state. Every mutation either applies
in full or raises (``ValidationError`` / ``NotFoundError``) with the state left
as it was. Derived views (timeline, reminders) are recomputed on each request,
and subscribers are told after every successful change so a presentation
layer can refresh or persist. A subscriber that fails surfaces as
``ListenerError``; the change it was told about stays applied.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from typing import Any

from taskboard.dependencies import validate_dependencies, validate_project
from taskboard.errors import ListenerError, NotFoundError, ValidationError
from taskboard.models import Priority, Project, Task, as_day
from taskboard.reminders import REMINDER_WINDOW_DAYS, Reminder, compute_reminders
from taskboard.timeline import Timeline, compute_timeline

Listener = Callable[["EntityStore"], None]

TASK_FIELDS = ("name", "priority", "start_date", "end_date", "assigned_to", "dependencies")

_FIELD_ALIASES = {
    "startDate": "start_date",
    "endDate": "end_date",
    "assignedTo": "assigned_to",
}


def _next_number(ids: Iterable[str], prefix: str) -> int:
    """Next free N for ids shaped like '<prefix>N'."""
    existing = [
        int(i[len(prefix):]) for i in ids
        if i.startswith(prefix) and i[len(prefix):].isdigit()
    ]
    return max(existing, default=0) + 1


def _clean_name(name: Any, what: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{what} name must not be empty.")
    return name.strip()


def _check_date(value: Any, label: str):
    if value is not None and not isinstance(value, date):
        raise ValidationError(f"{label} must be a date or None, got {value!r}.")
    return as_day(value)


class EntityStore:
    """Holds the project/task graph and enforces its invariants."""

    def __init__(
        self,
        projects: Iterable[Project] | None = None,
        *,
        clock: Callable[[], date] = date.today,
        reminder_days: int = REMINDER_WINDOW_DAYS,
    ):
        self._projects: list[Project] = []
        self._clock = clock
        self.reminder_days = reminder_days
        self._listeners: list[Listener] = []

        for project in projects or []:
            if self._find_project(project.id) is not None:
                raise ValidationError(f"Duplicate project id {project.id}")
            validate_project(project)
            self._projects.append(project)

        self._next_project = _next_number((p.id for p in self._projects), "P-")
        self._next_task = {
            p.id: _next_number(p.task_ids(), "T-") for p in self._projects
        }

    # ---- read accessors ----

    @property
    def projects(self) -> tuple[Project, ...]:
        return tuple(self._projects)

    def _find_project(self, project_id: str) -> Project | None:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def get_project(self, project_id: str) -> Project:
        project = self._find_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project

    def get_task(self, project_id: str, task_id: str) -> Task:
        task = self.get_project(project_id).find_task(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def timeline(self, project_id: str) -> Timeline | None:
        return compute_timeline(self.get_project(project_id))

    def reminders(self, now: date | None = None) -> list[Reminder]:
        if now is None:
            now = self._clock()
        return compute_reminders(self._projects, now, self.reminder_days)

    # ---- change notification ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every successful mutation. Returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        # The mutation is already applied at this point.
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                raise ListenerError(listener, e) from e

    # ---- projects ----

    def create_project(self, name: str) -> Project:
        clean = _clean_name(name, "Project")
        pid = f"P-{self._next_project}"
        self._next_project += 1
        project = Project(id=pid, name=clean)
        self._projects.append(project)
        self._next_task[pid] = 1
        self._changed()
        return project

    def rename_project(self, project_id: str, name: str) -> None:
        project = self.get_project(project_id)
        project.name = _clean_name(name, "Project")
        self._changed()

    def update_project_dates(
        self,
        project_id: str,
        start: date | None,
        end: date | None,
    ) -> None:
        project = self.get_project(project_id)
        start = _check_date(start, "Start date")
        end = _check_date(end, "End date")
        if start is not None and end is not None and start > end:
            raise ValidationError("Project start date must not be after its end date.")
        project.start_date, project.end_date = start, end
        self._changed()

    def delete_project(self, project_id: str) -> None:
        project = self.get_project(project_id)
        self._projects.remove(project)
        self._next_task.pop(project_id, None)
        self._changed()

    # ---- tasks ----

    def create_task(self, project_id: str, name: str | None = None) -> Task:
        project = self.get_project(project_id)
        task_name = _clean_name(name, "Task") if name is not None else None
        tid = f"T-{self._next_task[project_id]}"
        self._next_task[project_id] += 1
        task = Task(id=tid) if task_name is None else Task(id=tid, name=task_name)
        project.tasks.append(task)
        self._changed()
        return task

    def update_field(self, project_id: str, task_id: str, field: str, value: Any) -> None:
        """Replace one field of a task, leaving every other field untouched."""
        project = self.get_project(project_id)
        task = self.get_task(project_id, task_id)
        field = _FIELD_ALIASES.get(field, field)

        if field == "id":
            raise ValidationError("Task ids cannot be changed.")
        if field not in TASK_FIELDS:
            raise ValidationError(f"Unknown task field '{field}'.")

        if field == "name":
            value = _clean_name(value, "Task")
        elif field == "assigned_to":
            if not isinstance(value, str):
                raise ValidationError(f"{field} must be text, got {value!r}.")
        elif field == "priority":
            try:
                value = value if isinstance(value, Priority) else Priority.parse(value)
            except (ValueError, AttributeError):
                raise ValidationError(
                    f"Invalid priority {value!r}. Use: high, medium, low"
                ) from None
        elif field in ("start_date", "end_date"):
            value = _check_date(value, field)
            start = value if field == "start_date" else task.start_date
            end = value if field == "end_date" else task.end_date
            if start is not None and end is not None and start > end:
                raise ValidationError(f"Task {task_id} would start after it ends.")
        elif field == "dependencies":
            value = set(validate_dependencies(project, task_id, value))

        setattr(task, field, value)
        self._changed()

    def delete_task(self, project_id: str, task_id: str) -> None:
        """Delete a task and remove it from every dependency set in the project."""
        project = self.get_project(project_id)
        task = self.get_task(project_id, task_id)
        project.tasks.remove(task)
        for t in project.tasks:
            t.dependencies.discard(task_id)
        self._changed()
