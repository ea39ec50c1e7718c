from datetime import date

import pytest

from taskboard.dependencies import (
    build_graph,
    dependents,
    topological_order,
    validate_dependencies,
    validate_project,
)
from taskboard.errors import ValidationError
from taskboard.models import Project, Task


def _project(*tasks: Task) -> Project:
    return Project(id="P-1", name="Demo", tasks=list(tasks))


def test_valid_set_is_returned_unchanged():
    p = _project(Task("T-1"), Task("T-2"), Task("T-3"))
    assert validate_dependencies(p, "T-3", {"T-1", "T-2"}) == {"T-1", "T-2"}
    assert validate_dependencies(p, "T-3", []) == frozenset()


def test_self_dependency_rejected():
    p = _project(Task("T-1"), Task("T-2"))
    with pytest.raises(ValidationError, match="itself"):
        validate_dependencies(p, "T-1", {"T-1", "T-2"})


def test_dangling_reference_rejects_whole_update():
    p = _project(Task("T-1"), Task("T-2"))
    with pytest.raises(ValidationError, match="T-7"):
        validate_dependencies(p, "T-2", {"T-1", "T-7"})


def test_two_task_cycle_rejected():
    p = _project(Task("T-1"), Task("T-2", dependencies={"T-1"}))
    with pytest.raises(ValidationError, match="Circular"):
        validate_dependencies(p, "T-1", {"T-2"})


def test_transitive_cycle_rejected():
    p = _project(
        Task("T-1"),
        Task("T-2", dependencies={"T-1"}),
        Task("T-3", dependencies={"T-2"}),
    )
    with pytest.raises(ValidationError, match="Circular"):
        validate_dependencies(p, "T-1", {"T-3"})


def test_string_instead_of_collection_rejected():
    p = _project(Task("T-1"), Task("T-2"))
    with pytest.raises(ValidationError):
        validate_dependencies(p, "T-2", "T-1")
    with pytest.raises(ValidationError):
        validate_dependencies(p, "T-2", {1})
    with pytest.raises(ValidationError):
        validate_dependencies(p, "T-2", [["T-1"]])


def test_graph_edges_point_at_prerequisites():
    p = _project(Task("T-1"), Task("T-2", dependencies={"T-1"}))
    G = build_graph(p)
    assert list(G.edges) == [("T-2", "T-1")]
    G2 = build_graph(p, {"T-2": set()})
    assert list(G2.edges) == []


def test_validate_project_catches_bad_state():
    validate_project(_project(Task("T-1"), Task("T-2", dependencies={"T-1"})))

    with pytest.raises(ValidationError):
        validate_project(_project(Task("T-1"), Task("T-1")))
    with pytest.raises(ValidationError):
        validate_project(_project(Task("T-1", dependencies={"T-9"})))
    with pytest.raises(ValidationError):
        validate_project(
            _project(Task("T-1", start_date=date(2024, 1, 5), end_date=date(2024, 1, 1)))
        )
    with pytest.raises(ValidationError):
        validate_project(
            _project(Task("T-1", dependencies={"T-2"}), Task("T-2", dependencies={"T-1"}))
        )


def test_dependents_and_topological_order():
    p = _project(
        Task("T-1", dependencies={"T-3"}),
        Task("T-2"),
        Task("T-3"),
        Task("T-4", dependencies={"T-1", "T-2"}),
    )
    assert dependents(p, "T-1") == ["T-4"]
    assert dependents(p, "T-4") == []

    order = topological_order(p)
    assert order.index("T-3") < order.index("T-1") < order.index("T-4")
    assert order.index("T-2") < order.index("T-4")
    assert sorted(order) == ["T-1", "T-2", "T-3", "T-4"]
