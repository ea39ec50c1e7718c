import json
from datetime import date

import pytest

from taskboard.errors import ValidationError
from taskboard.models import Priority
from taskboard.persistence import JsonStore
from taskboard.store import EntityStore


def test_missing_file_loads_empty(tmp_path):
    assert JsonStore(tmp_path / "nope.json").load() == []


def test_round_trip_preserves_state(tmp_path):
    board = EntityStore()
    p1 = board.create_project("Launch")
    p2 = board.create_project("Ops")
    a = board.create_task(p1.id, "Design")
    b = board.create_task(p1.id, "Build")
    board.create_task(p2.id)
    board.update_field(p1.id, b.id, "dependencies", {a.id})
    board.update_field(p1.id, b.id, "priority", Priority.LOW)
    board.update_field(p1.id, a.id, "start_date", date(2024, 1, 1))
    board.update_field(p1.id, a.id, "end_date", date(2024, 1, 4))
    board.update_field(p1.id, a.id, "assigned_to", "ana")
    board.update_project_dates(p2.id, date(2024, 2, 1), None)

    db = JsonStore(tmp_path / "board.json")
    db.save(board.projects)
    loaded = db.load()

    assert loaded == list(board.projects)
    assert [p.id for p in loaded] == [p1.id, p2.id]
    assert [t.id for t in loaded[0].tasks] == [a.id, b.id]
    assert not (tmp_path / "board.json.tmp").exists()


def test_saved_file_layout(tmp_path):
    board = EntityStore()
    p = board.create_project("Launch")
    board.create_task(p.id)
    db = JsonStore(tmp_path / "board.json")
    db.save(board.projects)

    raw = json.loads((tmp_path / "board.json").read_text())
    assert raw["version"] == 1
    assert raw["projects"][0]["tasks"][0] == {
        "id": "T-1",
        "name": "New task",
        "priority": "medium",
        "start_date": None,
        "end_date": None,
        "assigned_to": "",
        "dependencies": [],
    }


def test_loads_browser_export(tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps([
        {
            "id": 1700000000000,
            "name": "Sito web",
            "startDate": None,
            "endDate": None,
            "tasks": [
                {"id": 1700000000001, "name": "Grafica", "dependencies": [], "priority": "media",
                 "startDate": "2024-01-01T00:00:00.000Z", "endDate": "2024-01-05T00:00:00.000Z",
                 "assignedTo": ""},
                {"id": 1700000000002, "name": "Codice", "dependencies": ["1700000000001"],
                 "priority": "alta", "startDate": None, "endDate": None, "assignedTo": "luca"},
            ],
        }
    ]))
    projects = JsonStore(path).load()
    board = EntityStore(projects)
    p = board.projects[0]
    assert p.id == "1700000000000"
    assert p.tasks[1].dependencies == {"1700000000001"}
    assert p.tasks[1].priority == Priority.HIGH
    assert board.timeline(p.id).total_days == 5


def test_newer_format_refused(tmp_path):
    path = tmp_path / "board.json"
    path.write_text(json.dumps({"version": 99, "projects": []}))
    with pytest.raises(ValueError):
        JsonStore(path).load()


@pytest.mark.parametrize(
    "payload",
    [
        "oops",
        42,
        {"version": 1, "projects": "nope"},
        {"version": "one", "projects": []},
        ["not a project"],
        [{"id": "P-1"}],
        [{"id": "P-1", "name": "x", "tasks": [{"id": "T-1", "priority": 3}]}],
        [{"id": "P-1", "name": "x", "tasks": [{"id": "T-1", "endDate": "soon"}]}],
        [{"id": "P-1", "name": "x", "tasks": ["T-1"]}],
    ],
)
def test_malformed_database_raises_validation_error(tmp_path, payload):
    path = tmp_path / "board.json"
    path.write_text(json.dumps(payload))
    with pytest.raises(ValidationError) as exc:
        JsonStore(path).load()
    assert str(path) in str(exc.value)
