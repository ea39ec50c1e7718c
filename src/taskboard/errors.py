"""Error types raised by the scheduling core."""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for every failure the core reports."""


class ValidationError(TaskboardError, ValueError):
    """Input is malformed or would break a model invariant."""


class ListenerError(TaskboardError):
    """A change subscriber failed. The change itself was already applied."""

    def __init__(self, listener, error: Exception):
        self.listener = listener
        self.error = error
        super().__init__(f"Change applied, but a subscriber failed: {error}")


class NotFoundError(TaskboardError, LookupError):
    """A project or task id does not exist."""

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind.capitalize()} {ident} not found.")
