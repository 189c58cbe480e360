"""Session registry (sessions.json) lookup and session start detection."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..types import RegistryEntry
from .files import read_first_line, read_json
from .timestamps import isoformat_mtime

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """The session registry is unreadable or lacks the workspace session."""


def load_registry_entry(
    registry_path: str | Path,
    workspace_key: str,
    timeout: float = 3.0,
    default_context_window: int = 1_000_000,
) -> RegistryEntry:
    """Return the registry record for *workspace_key*.

    Raises:
        RegistryError: if the file can't be read or decoded, or has no
            entry for the key. A bad ``sessionId`` only leaves
            ``session_id`` as None.
    """
    try:
        sessions = read_json(registry_path, timeout)
    except FileNotFoundError as e:
        raise RegistryError(f"Session registry not found: {registry_path}") from e
    except TimeoutError as e:
        raise RegistryError(f"Timed out reading session registry: {registry_path}") from e
    except (OSError, ValueError) as e:
        raise RegistryError(f"Cannot read session registry {registry_path}: {e}") from e

    ws = sessions.get(workspace_key) if isinstance(sessions, dict) else None
    if not isinstance(ws, dict):
        raise RegistryError("Workspace session not found")

    session_id = ws.get("sessionId")
    if not isinstance(session_id, str) or not session_id or Path(session_id).name != session_id:
        # must name a file inside the sessions directory
        logger.debug("Ignoring unusable sessionId %r", session_id)
        session_id = None

    context_window = ws.get("contextTokens")
    if isinstance(context_window, bool) or not isinstance(context_window, int) or context_window <= 0:
        context_window = default_context_window

    return RegistryEntry(
        session_id=session_id,
        label=ws.get("label") or ws.get("displayName") or "Workspace",
        model=ws.get("model") or "unknown",
        context_window=context_window,
        updated_at=ws.get("updatedAt"),
        raw=ws,
    )


def _creation_time(path: Path) -> str | None:
    try:
        st = os.stat(path)
    except OSError:
        return None
    # st_birthtime exists on macOS/BSD (and Windows on 3.12+); ctime elsewhere
    return isoformat_mtime(getattr(st, "st_birthtime", st.st_ctime))


def read_session_start(log_path: str | Path, timeout: float = 3.0) -> str | int | float | None:
    """When the session began: the first log record's ``timestamp``/``ts``,
    falling back to the log file's creation time."""
    path = Path(log_path)
    if not path.exists():
        return None
    try:
        entry = json.loads(read_first_line(path, timeout))
    except (OSError, ValueError, TimeoutError, RecursionError) as e:
        logger.debug("Session start unreadable from %s: %s", path, e)
        return _creation_time(path)

    if isinstance(entry, dict):
        for key in ("timestamp", "ts"):
            if entry.get(key):
                return entry[key]
    return _creation_time(path)
