"""
Configuration management for epimem.

Settings live in `~/.epimem/config.json`. A missing file means defaults.
A project `.env` may set EPIMEM_DB.
Scoring constants (half-lives, thresholds, weights) are not configurable.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

CONFIG_DIR_NAME = ".epimem"
CONFIG_FILE_NAME = "config.json"
DB_FILE_NAME = "sessions.db"
DB_ENV_VAR = "EPIMEM_DB"
ENV_FILE_NAME = ".env"


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_project_env(cwd: Path | None = None) -> bool:
    """
    Load `./.env` into the environment without overriding variables that
    are already set. Returns whether a file was loaded.
    """
    env_file = (cwd or Path.cwd()) / ENV_FILE_NAME
    if not env_file.exists():
        return False
    return load_dotenv(env_file, override=False)


@dataclass
class StorageConfig:
    """Where the database lives; None means auto-detect."""

    db_path: str | None = None


@dataclass
class DecayConfig:
    """How many breadcrumbs session context considers."""

    findings_limit: int = 20
    open_unknowns_limit: int = 10
    resolved_unknowns_limit: int = 10
    dead_ends_limit: int = 10
    # `done` scores against everything the session logged
    session_limit: int = 100


@dataclass
class QueryConfig:
    """Defaults for `epimem query`."""

    threshold: float = 0.3
    limit: int = 50
    pool_size: int = 500


@dataclass
class OracleConfig:
    """git-backed file-change detection."""

    enabled: bool = True
    git_timeout_seconds: float = 5.0
    git_binary: str = "git"


@dataclass
class LoggingConfig:
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: str = "%(levelname)s %(name)s: %(message)s"


@dataclass
class EpimemConfig:
    """Complete epimem configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    decay: DecayConfig = field(default_factory=DecayConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ai_id: str = "claude-code"

    @classmethod
    def load(cls, path: Path | None = None) -> EpimemConfig:
        """Load configuration from file."""
        if path is None:
            path = default_config_path()

        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        try:
            return cls(
                storage=StorageConfig(**data.get("storage", {})),
                decay=DecayConfig(**data.get("decay", {})),
                query=QueryConfig(**data.get("query", {})),
                oracle=OracleConfig(**data.get("oracle", {})),
                logging=LoggingConfig(**data.get("logging", {})),
                ai_id=data.get("ai_id", "claude-code"),
            )
        except TypeError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = default_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

    def resolve_db_path(self, explicit: str | None = None, cwd: Path | None = None) -> str:
        """
        Database path, in order: explicit argument, EPIMEM_DB, configured
        path, `./.epimem/sessions.db` if `./.epimem/` exists, then the home
        directory.
        """
        if explicit:
            return explicit
        env = os.environ.get(DB_ENV_VAR)
        if env:
            return env
        if self.storage.db_path:
            return str(Path(self.storage.db_path).expanduser())
        local = (cwd or Path.cwd()) / CONFIG_DIR_NAME
        if local.is_dir():
            return str(local / DB_FILE_NAME)
        return str(Path.home() / CONFIG_DIR_NAME / DB_FILE_NAME)


# Default configuration instance
default_config = EpimemConfig()
