"""Dependency graph checks for tasks within a single project."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import networkx as nx

from taskboard.errors import ValidationError
from taskboard.models import Project


def build_graph(
    project: Project,
    overrides: Mapping[str, Iterable[str]] | None = None,
) -> nx.DiGraph:
    """Directed graph with an edge task -> prerequisite for every dependency.

    *overrides* replaces the stored dependency set of the given task ids, so a
    proposed update can be checked before it is applied.
    """
    overrides = overrides or {}
    G = nx.DiGraph()
    for task in project.tasks:
        G.add_node(task.id, task=task)
    for task in project.tasks:
        for dep in overrides.get(task.id, task.dependencies):
            G.add_edge(task.id, dep)
    return G


def _describe_cycle(G: nx.DiGraph) -> str:
    edges = nx.find_cycle(G)
    path = [u for u, _ in edges] + [edges[-1][1]]
    return " -> ".join(path)


def validate_dependencies(
    project: Project,
    task_id: str,
    proposed: Iterable[str],
) -> frozenset[str]:
    """Check a proposed dependency set for *task_id* and return it unchanged.

    Rejects, in order: a self reference, ids that are not tasks of the
    project, and any set that would close a cycle. Nothing is filtered out;
    the whole update is refused instead.
    """
    if isinstance(proposed, (str, bytes)) or not isinstance(proposed, Iterable):
        raise ValidationError("Dependencies must be a collection of task ids.")
    items = list(proposed)
    bad = [d for d in items if not isinstance(d, str)]
    if bad:
        raise ValidationError(f"Dependency ids must be strings, got {bad!r}.")
    deps = frozenset(items)

    if task_id in deps:
        raise ValidationError("A task cannot depend on itself.")

    known = project.task_ids()
    missing = sorted(deps - known)
    if missing:
        raise ValidationError(
            f"Task {task_id} depends on non-existent task(s) {', '.join(missing)}"
        )

    G = build_graph(project, {task_id: deps})
    if not nx.is_directed_acyclic_graph(G):
        raise ValidationError(f"Circular dependency detected: {_describe_cycle(G)}")
    return deps


def validate_project(project: Project) -> None:
    """Check every invariant of an already-built project (e.g. after loading)."""
    seen: set[str] = set()
    for task in project.tasks:
        if task.id in seen:
            raise ValidationError(f"Duplicate task id {task.id} in project {project.id}")
        seen.add(task.id)

    for task in project.tasks:
        if task.is_dated and task.start_date > task.end_date:
            raise ValidationError(f"Task {task.id} starts after it ends.")
        if task.id in task.dependencies:
            raise ValidationError(f"Task {task.id} depends on itself.")
        missing = sorted(task.dependencies - seen)
        if missing:
            raise ValidationError(
                f"Task {task.id} depends on non-existent task(s) {', '.join(missing)}"
            )

    if project.start_date and project.end_date and project.start_date > project.end_date:
        raise ValidationError(f"Project {project.id} starts after it ends.")

    G = build_graph(project)
    if not nx.is_directed_acyclic_graph(G):
        raise ValidationError(f"Circular dependency detected: {_describe_cycle(G)}")


def dependents(project: Project, task_id: str) -> list[str]:
    """Ids of the tasks that list *task_id* as a prerequisite, in task order."""
    return [t.id for t in project.tasks if task_id in t.dependencies]


def topological_order(project: Project) -> list[str]:
    """Task ids with every prerequisite ahead of the tasks that need it."""
    G = build_graph(project)
    # Edges point at prerequisites, so the reversed graph yields them first.
    # Ties keep the project's task order.
    position = {t.id: i for i, t in enumerate(project.tasks)}
    return list(
        nx.lexicographical_topological_sort(G.reverse(copy=False), key=position.__getitem__)
    )
