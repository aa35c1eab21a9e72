"""
Which session is active, persisted between CLI invocations.

The active session is an explicit value passed to whatever needs it. Only
its persistence is global: a small JSON file in `./.epimem/` when that
directory exists, otherwise in `~/.epimem/`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from epimem.types import DataCorruptionError, NoActiveSessionError

logger = logging.getLogger(__name__)

ACTIVE_SESSION_FILE = "active-session.json"
LOCAL_DIR_NAME = ".epimem"


@dataclass
class ActiveSession:
    session_id: str
    ai_id: str
    objective: str
    started_at: float
    project_id: str
    current_goal_id: str | None = None


class ActiveSessionFile:
    """
    JSON-file handle for the active session.

    Example:
        >>> handle = ActiveSessionFile(Path("/tmp/active-session.json"))
        >>> handle.load() is None
        True
    """

    def __init__(self, path: Path | None = None):
        self.path = path if path is not None else self.default_path()

    @staticmethod
    def default_path(cwd: Path | None = None) -> Path:
        local = (cwd or Path.cwd()) / LOCAL_DIR_NAME
        if local.is_dir():
            return local / ACTIVE_SESSION_FILE
        return Path.home() / LOCAL_DIR_NAME / ACTIVE_SESSION_FILE

    def load(self) -> ActiveSession | None:
        """
        Read the active session.

        Returns:
            ActiveSession, or None when no session is active

        Raises:
            DataCorruptionError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            return ActiveSession(
                session_id=data["session_id"],
                ai_id=data["ai_id"],
                objective=data["objective"],
                started_at=float(data["started_at"]),
                project_id=data["project_id"],
                current_goal_id=data.get("current_goal_id"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise DataCorruptionError(f"Malformed active session file {self.path}: {e}") from e

    def require(self, command: str = "epimem") -> ActiveSession:
        active = self.load()
        if active is None:
            raise NoActiveSessionError(command)
        return active

    def save(self, active: ActiveSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(active), indent=2))
        logger.debug("Saved active session %s to %s", active.session_id, self.path)

    def clear(self) -> bool:
        """Remove the file; returns whether there was one."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
