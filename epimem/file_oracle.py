"""
File-change detection backed by `git hash-object`.

A finding scoped to a file records the file's content hash when it is logged.
Later, the oracle recomputes the hash and reports whether it differs. Every
failure (no git, path missing, non-zero exit, timeout) counts as unchanged.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class GitFileOracle:
    """
    Answers "has this path changed since hash H?".

    Hashes are memoized per instance, so one CLI invocation shells out at most
    once per path. Instances are callable with the `(path, recorded_hash)`
    signature the decay functions expect.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        cwd: str | Path | None = None,
        git_binary: str = "git",
    ):
        self.timeout_seconds = timeout_seconds
        self.cwd = str(cwd) if cwd is not None else None
        self.git_binary = git_binary
        self._hashes: dict[str, str | None] = {}

    def current_hash(self, path: str) -> str | None:
        """Content hash of `path` as git would store it, or None if unavailable."""
        if not path:
            return None
        if path in self._hashes:
            return self._hashes[path]

        digest = self._hash_object(path)
        self._hashes[path] = digest
        return digest

    def has_changed(self, path: str, recorded_hash: str) -> bool:
        if not path or not recorded_hash:
            return False
        current = self.current_hash(path)
        if current is None:
            return False
        return current != recorded_hash.strip()

    __call__ = has_changed

    def _hash_object(self, path: str) -> str | None:
        try:
            result = subprocess.run(
                [self.git_binary, "hash-object", path],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                cwd=self.cwd,
            )
        except subprocess.TimeoutExpired:
            logger.debug("git hash-object timed out after %ss for %s", self.timeout_seconds, path)
            return None
        except OSError as e:
            logger.debug("git hash-object unavailable for %s: %s", path, e)
            return None

        if result.returncode != 0:
            logger.debug(
                "git hash-object exited %d for %s: %s",
                result.returncode,
                path,
                result.stderr.strip(),
            )
            return None

        digest = result.stdout.strip()
        return digest or None
