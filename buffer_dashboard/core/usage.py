"""Recover the latest token usage from a session's JSONL event log.

The log has no fixed schema: usage may sit at the top level, under
``message``, inside a list of content blocks, and so on. The search accepts
any mapping stored under a ``usage`` key that has ``input`` or ``cacheRead``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from ..types import UsageSample
from .files import read_tail_lines

logger = logging.getLogger(__name__)

DEFAULT_TAIL_LINES = 20
DEFAULT_MAX_DEPTH = 32


def _is_usage_shape(value: Any) -> bool:
    return isinstance(value, Mapping) and ("input" in value or "cacheRead" in value)


def _children(value: Any) -> Iterable[Any]:
    if isinstance(value, Mapping):
        return value.values()
    if isinstance(value, list):
        return value
    return ()


def find_usage(record: Any, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> Mapping | None:
    """Depth-first search for the first ``usage`` mapping in *record*.

    Containers nested deeper than *max_depth* are not explored.
    """
    if _depth > max_depth:
        return None
    if isinstance(record, Mapping) and _is_usage_shape(record.get("usage")):
        return record["usage"]
    for child in _children(record):
        if isinstance(child, (Mapping, list)):
            found = find_usage(child, max_depth, _depth + 1)
            if found is not None:
                return found
    return None


def _number(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def to_sample(usage: Mapping) -> UsageSample:
    return UsageSample(
        input=_number(usage.get("input")),
        cache_read=_number(usage.get("cacheRead")),
        cache_write=_number(usage.get("cacheWrite")),
        output=_number(usage.get("output")),
    )


def extract_latest_usage(
    lines: Sequence[str],
    max_lines: int = DEFAULT_TAIL_LINES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> UsageSample | None:
    """Return usage from the newest line that has it, looking at the last *max_lines*.

    *lines* is ordered oldest first. Lines that fail to decode are skipped;
    a torn final write is normal for an append-only log.
    """
    if max_lines <= 0:
        return None
    for line in reversed(lines[-max_lines:]):
        try:
            record = json.loads(line)
        except (TypeError, ValueError, RecursionError):
            continue
        usage = find_usage(record, max_depth)
        if usage is not None:
            return to_sample(usage)
    return None


def latest_usage_from_log(
    path: str | Path,
    max_lines: int = DEFAULT_TAIL_LINES,
    timeout: float = 3.0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> UsageSample | None:
    """Tail the log at *path* and extract usage. Any read failure means None."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        lines = read_tail_lines(path, max_lines, timeout)
    except (OSError, TimeoutError) as e:
        logger.debug("Usage unavailable from %s: %s", path, e)
        return None
    return extract_latest_usage(lines, max_lines, max_depth)
