"""Bounded reads of registry, log and side-channel files.

Every read that can hit a large or stuck file goes through
``run_with_timeout`` so a request never waits longer than the configured
timeout. Callers decide what a failure means; this module only raises.
"""

from __future__ import annotations

import json
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import Any, Callable, TypeVar

T = TypeVar("T")

_pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="buffer-read")

TAIL_BLOCK_SIZE = 8192
TAIL_MAX_BYTES = 4 * 1024 * 1024


def run_with_timeout(fn: Callable[..., T], *args: Any, timeout: float) -> T:
    """Run ``fn(*args)`` on the read pool; raise TimeoutError after *timeout* s."""
    future = _pool.submit(fn, *args)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout as e:
        future.cancel()
        raise TimeoutError(f"read timed out after {timeout}s") from e


def _tail(path: Path, count: int, max_bytes: int) -> list[str]:
    blocks: list[bytes] = []
    newlines = 0
    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        end = f.tell()
        pos = end
        while pos > 0 and newlines <= count and end - pos < max_bytes:
            step = min(TAIL_BLOCK_SIZE, pos)
            pos -= step
            f.seek(pos)
            block = f.read(step)
            blocks.append(block)
            newlines += block.count(b"\n")

    data = b"".join(reversed(blocks))
    lines = data.decode("utf-8", errors="replace").splitlines()
    if pos > 0 and lines:
        lines = lines[1:]  # partial line at the block boundary
    # like tail -n: blank lines take up room in the window
    return [line for line in lines[-count:] if line.strip()]


def read_tail_lines(
    path: str | Path,
    count: int,
    timeout: float,
    max_bytes: int = TAIL_MAX_BYTES,
) -> list[str]:
    """Return the non-blank lines among the last *count* lines of *path*, oldest first."""
    return run_with_timeout(_tail, Path(path), count, max_bytes, timeout=timeout)


def _first_line(path: Path) -> str:
    with open(path, "rb") as f:
        return f.readline(TAIL_MAX_BYTES).decode("utf-8", errors="replace").strip()


def read_first_line(path: str | Path, timeout: float) -> str:
    return run_with_timeout(_first_line, Path(path), timeout=timeout)


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def read_json(path: str | Path, timeout: float) -> Any:
    """Read and decode a JSON file. Raises OSError, ValueError or TimeoutError."""
    return run_with_timeout(_load_json, Path(path), timeout=timeout)
