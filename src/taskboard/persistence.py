"""JSON file persistence for projects and tasks."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from taskboard.errors import ValidationError
from taskboard.models import Project

logger = logging.getLogger(__name__)

DEFAULT_DB_FILE = "taskboard.json"
FORMAT_VERSION = 1


class JsonStore:
    """Reads and writes the project database (JSON file)."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_FILE):
        self.db_path = Path(db_path)

    def load(self) -> list[Project]:
        """Return the saved projects in their saved order (empty if no file)."""
        if not self.db_path.exists():
            logger.debug("No database at %s, starting empty", self.db_path)
            return []

        raw = json.loads(self.db_path.read_text(encoding="utf-8"))

        # Current format: {"version": 1, "projects": [...]}
        # Browser export: [...]  (the dashboard's localStorage "projects" value)
        if isinstance(raw, list):
            items = raw
        elif isinstance(raw, dict):
            version = raw.get("version", FORMAT_VERSION)
            if not isinstance(version, int) or version > FORMAT_VERSION:
                raise ValidationError(
                    f"{self.db_path} uses format version {version!r}; "
                    f"this build reads up to {FORMAT_VERSION}"
                )
            items = raw.get("projects", [])
            if not isinstance(items, list):
                raise ValidationError(f"{self.db_path}: 'projects' must be a list")
        else:
            raise ValidationError(f"{self.db_path}: expected a JSON object or list")

        projects: list[Project] = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError(f"{self.db_path}: project #{i} is not an object")
            try:
                projects.append(Project.from_dict(item))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise ValidationError(
                    f"{self.db_path}: project #{i} is malformed ({type(e).__name__}: {e})"
                ) from e
        logger.debug("Loaded %d project(s) from %s", len(projects), self.db_path)
        return projects

    def save(self, projects: Iterable[Project]) -> None:
        """Persist all projects, replacing the file in one step."""
        raw = {
            "version": FORMAT_VERSION,
            "projects": [p.to_dict() for p in projects],
        }
        tmp = self.db_path.with_name(self.db_path.name + ".tmp")
        tmp.write_text(json.dumps(raw, indent=4), encoding="utf-8")
        os.replace(tmp, self.db_path)
        logger.debug("Saved %d project(s) to %s", len(raw["projects"]), self.db_path)
