from pathlib import Path

from taskboard.config import Settings


def test_defaults(monkeypatch):
    for name in ("TASKBOARD_DB", "TASKBOARD_REMINDER_DAYS", "TASKBOARD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.db_path == Path("taskboard.json")
    assert s.reminder_days == 7
    assert s.log_level == "WARNING"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TASKBOARD_DB", str(tmp_path / "x.json"))
    monkeypatch.setenv("TASKBOARD_REMINDER_DAYS", "14")
    monkeypatch.setenv("TASKBOARD_LOG_LEVEL", "debug")
    s = Settings.from_env()
    assert s.db_path == tmp_path / "x.json"
    assert s.reminder_days == 14
    assert s.log_level == "DEBUG"


def test_malformed_int_falls_back(monkeypatch):
    monkeypatch.setenv("TASKBOARD_REMINDER_DAYS", "soon")
    assert Settings.from_env().reminder_days == 7
