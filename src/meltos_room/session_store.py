"""JSON file store for the current room session.

The CLI runs one request per invocation, so the identifiers the server
assigned on ``open`` / ``join`` are written to a small JSON file and read back
by later commands::

    {"room_id": "...", "session_id": "...", "user_id": "owner"}

The file holds a live session credential. It is written with owner-only
permissions where the platform supports them.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from meltos_room.api.models import SessionConfigs

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """Raised when the session file cannot be written or holds no usable session.

    Example::

        try:
            configs = load_session(path)
        except SessionStoreError as exc:
            print(f"{exc} (run 'meltos-room open' or 'meltos-room join' first)")
    """


def save_session(configs: SessionConfigs, path: Path) -> Path:
    """Write ``configs`` to ``path``, creating parent directories as needed.

    The file is created with owner-only permissions, so the credential is
    never readable by others, even briefly.

    Returns:
        The path written.

    Raises:
        SessionStoreError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            if hasattr(os, "fchmod"):
                # An existing file keeps its old mode through O_TRUNC
                os.fchmod(fh.fileno(), 0o600)
            fh.write(json.dumps(configs.to_dict()))
    except OSError as e:
        raise SessionStoreError(f"Cannot write session file {path}: {e}") from e
    logger.debug("Saved session for room %s to %s", configs.room_id, path)
    return path


def load_session(path: Path) -> SessionConfigs:
    """Read a session previously written by :func:`save_session`.

    Raises:
        SessionStoreError: If the file is missing or unreadable, not JSON, or
            lacks string ``room_id`` / ``session_id`` values.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SessionStoreError(f"No session file at {path}") from e
    except OSError as e:
        raise SessionStoreError(f"Cannot read session file {path}: {e}") from e

    try:
        data = json.loads(raw)
        return SessionConfigs.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        raise SessionStoreError(f"Malformed session file {path}: {e}") from e


def clear_session(path: Path) -> bool:
    """Delete the session file. Returns False if there was nothing to delete."""
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
