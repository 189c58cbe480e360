"""Size audit of the context files loaded at session start."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..types import BootConfig, BootFileEntry, BootPayload

logger = logging.getLogger(__name__)


def _file_entries(workspace: Path, config: BootConfig) -> list[BootFileEntry]:
    entries: list[BootFileEntry] = []
    for name in config.files:
        path = workspace / name
        if not path.exists():
            continue
        try:
            size = path.stat().st_size
        except OSError as e:
            logger.debug("stat failed for %s: %s", path, e)
            continue
        limit = config.limits.get(name, config.default_limit)
        entries.append(BootFileEntry(name=name, size=size, limit=limit, over=size > limit))
    return entries


def _memory_stats(memory_dir: Path) -> tuple[int, int]:
    """Return (count, total bytes) of ``*.md`` entries in *memory_dir*."""
    try:
        names = [n for n in os.listdir(memory_dir) if n.endswith(".md")]
    except OSError:
        return 0, 0
    size = 0
    for name in names:
        try:
            size += (memory_dir / name).stat().st_size
        except OSError:
            continue
    return len(names), size


def _skill_count(skill_dirs: list[Path]) -> int:
    count = 0
    for d in skill_dirs:
        try:
            count += sum(1 for n in os.listdir(d) if not n.startswith("."))
        except OSError:
            continue
    return count


def audit_boot_payload(workspace: str | Path, config: BootConfig | None = None) -> BootPayload:
    """Measure tracked boot files, memory notes and installed skills."""
    workspace = Path(workspace)
    config = config or BootConfig(skill_dirs=[workspace / "skills"])

    files = _file_entries(workspace, config)
    memory_files, memory_size = _memory_stats(workspace / config.memory_dir)
    return BootPayload(
        files=files,
        total=sum(f.size for f in files),
        memory_files=memory_files,
        memory_size=memory_size,
        skills=_skill_count(config.skill_dirs),
    )
