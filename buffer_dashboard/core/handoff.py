"""Parse HANDOFF.md into the sections the dashboard summarizes."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ..types import HandoffState
from .timestamps import isoformat_mtime

logger = logging.getLogger(__name__)

_BULLET_RE = re.compile(r"^[-*]\s*")

MAX_NEXT_STEPS = 3


def parse_sections(text: str) -> dict[str, list[str]]:
    """Map each ``## Heading`` to its non-blank lines, bullets stripped."""
    sections: dict[str, list[str]] = {}
    current: str | None = None
    for line in text.splitlines():
        if line.startswith("## "):
            current = line[3:].strip()
            sections[current] = []
        elif current is not None and line.strip():
            sections[current].append(_BULLET_RE.sub("", line.strip()).strip())
    return sections


def summarize_handoff(text: str, mtime: str | None = None) -> HandoffState:
    sections = parse_sections(text)
    current_work = sections.get("Current Work") or [None]
    stopping_point = sections.get("Stopping Point") or [None]
    return HandoffState(
        current_work=current_work[0] or None,
        stopping_point=stopping_point[0] or None,
        next_steps=sections.get("Next Steps", [])[:MAX_NEXT_STEPS],
        open_questions=len(sections.get("Open Questions", [])),
        size=len(text.encode("utf-8")),
        mtime=mtime,
    )


def read_handoff_document(path: str | Path) -> tuple[str, str] | None:
    """Return ``(content, mtime)`` or None if the file is absent.

    Read errors on an existing file propagate.
    """
    path = Path(path)
    if not path.exists():
        return None
    content = path.read_bytes().decode("utf-8")
    return content, isoformat_mtime(path.stat().st_mtime)


def load_handoff(path: str | Path) -> HandoffState | None:
    try:
        document = read_handoff_document(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Handoff unreadable at %s: %s", path, e)
        return None
    if document is None:
        return None
    content, mtime = document
    return summarize_handoff(content, mtime)
