"""Storage abstraction for session snapshot persistence.

Snapshots are JSON documents holding a full session state, including its
round records and undo history. Files are written with owner-only
permissions (0o600) inside an owner-only directory (0o700).
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

_SNAPSHOT_DIR_MODE = 0o700
_SNAPSHOT_FILE_MODE = 0o600
_SNAPSHOT_SUFFIX = ".json"


class SessionStorage(Protocol):
    """Protocol for persisting session snapshots."""

    def save_snapshot(self, session_id: str, content: str) -> None: ...

    def load_snapshot(self, session_id: str) -> str | None: ...

    def delete_snapshot(self, session_id: str) -> None: ...


class LocalSessionStorage:
    """Writes session snapshots as JSON files on the local filesystem."""

    def __init__(self, snapshot_dir: str | Path) -> None:
        self._snapshot_dir = Path(snapshot_dir).resolve()

    def _snapshot_path(self, session_id: str) -> Path:
        target = (self._snapshot_dir / f"{session_id}{_SNAPSHOT_SUFFIX}").resolve()
        if not target.is_relative_to(self._snapshot_dir):
            raise ValueError(f"Path traversal rejected: '{session_id}' resolves outside snapshot directory")
        return target

    def save_snapshot(self, session_id: str, content: str) -> None:
        """Replace the stored snapshot for a session.

        Creates the directory lazily on first write. Writes atomically via
        temp-file-then-rename so a crash never leaves a half-written snapshot.
        """
        target = self._snapshot_path(session_id)

        self._snapshot_dir.mkdir(mode=_SNAPSHOT_DIR_MODE, parents=True, exist_ok=True)
        self._snapshot_dir.chmod(_SNAPSHOT_DIR_MODE)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._snapshot_dir), suffix=".tmp", prefix=".session_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _SNAPSHOT_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved session snapshot", session_id=session_id, path=str(target))

    def load_snapshot(self, session_id: str) -> str | None:
        """Return the stored snapshot, or None when the session was never saved."""
        target = self._snapshot_path(session_id)
        if not target.exists():
            return None
        return target.read_text(encoding="utf-8")

    def delete_snapshot(self, session_id: str) -> None:
        target = self._snapshot_path(session_id)
        target.unlink(missing_ok=True)
        logger.debug("deleted session snapshot", session_id=session_id)
