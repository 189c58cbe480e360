"""Staleness gate for the live-session side channel.

``scratch/live-session.json`` is written by the agent while it works. A file
left over from an earlier session would show the wrong activity, so it is
only trusted when its ``updatedAt`` is not older than the current session's
start. Stale files are deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .files import read_json
from .timestamps import parse_timestamp

logger = logging.getLogger(__name__)


def is_fresh(snapshot: Mapping, session_start: Any) -> bool:
    """True unless both timestamps parse and ``updatedAt`` predates *session_start*."""
    if not session_start:
        return True
    updated = parse_timestamp(snapshot.get("updatedAt"))
    started = parse_timestamp(session_start)
    if updated is None or started is None:
        return True
    return updated >= started


def _purge(path: Path) -> None:
    try:
        path.unlink()
        logger.info("Removed stale live-session file %s", path)
    except OSError as e:
        logger.debug("Could not remove stale live-session file %s: %s", path, e)


def load_live_session(
    path: str | Path,
    session_start: Any,
    timeout: float = 3.0,
) -> dict | None:
    """Read the live-session snapshot, or None if missing, unreadable or stale."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        data = read_json(path, timeout)
    except (OSError, ValueError, TimeoutError) as e:
        logger.debug("Live session unreadable at %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None

    if not is_fresh(data, session_start):
        _purge(path)
        return None
    return data
