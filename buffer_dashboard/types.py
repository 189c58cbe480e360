"""All dataclasses and type aliases for buffer-dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------

@dataclass
class UsageSample:
    """Token usage reported by the newest log record that carries one."""
    input: int | float | None = None
    cache_read: int | float | None = None
    cache_write: int | float | None = None
    output: int | float | None = None

    @property
    def context(self) -> int | float:
        """Tokens occupying the context window (input + both cache buckets)."""
        return (self.input or 0) + (self.cache_read or 0) + (self.cache_write or 0)

    def to_dict(self) -> dict:
        return {
            "context": self.context,
            "input": self.input,
            "cacheRead": self.cache_read,
            "cacheWrite": self.cache_write,
            "output": self.output,
        }


# ---------------------------------------------------------------------------
# Handoff & boot payload
# ---------------------------------------------------------------------------

@dataclass
class HandoffState:
    """Summary of HANDOFF.md for the dashboard header."""
    current_work: str | None = None
    stopping_point: str | None = None
    next_steps: list[str] = field(default_factory=list)
    open_questions: int = 0
    size: int = 0
    mtime: str | None = None

    def to_dict(self) -> dict:
        return {
            "currentWork": self.current_work,
            "stoppingPoint": self.stopping_point,
            "nextSteps": list(self.next_steps),
            "openQuestions": self.open_questions,
            "size": self.size,
            "mtime": self.mtime,
        }


@dataclass
class BootFileEntry:
    name: str
    size: int
    limit: int
    over: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "size": self.size, "limit": self.limit, "over": self.over}


@dataclass
class BootPayload:
    """Size audit of the files loaded at session start."""
    files: list[BootFileEntry] = field(default_factory=list)
    total: int = 0
    memory_files: int = 0
    memory_size: int = 0
    skills: int = 0

    def to_dict(self) -> dict:
        return {
            "files": [f.to_dict() for f in self.files],
            "total": self.total,
            "memoryFiles": self.memory_files,
            "memorySize": self.memory_size,
            "skills": self.skills,
        }


# ---------------------------------------------------------------------------
# Velocity
# ---------------------------------------------------------------------------

@dataclass
class VelocityState:
    last_usage: int | float | None = None
    last_usage_time: float | None = None  # epoch seconds
    velocity_per_min: float = 0.0
    initialized: bool = False  # True once a real sample has seeded the average


# ---------------------------------------------------------------------------
# Registry & snapshot
# ---------------------------------------------------------------------------

@dataclass
class RegistryEntry:
    """The workspace's record in sessions.json."""
    session_id: str | None  # None when the entry names no usable log
    label: str = "Workspace"
    model: str = "unknown"
    context_window: int = 1_000_000
    updated_at: Any = None
    raw: dict = field(default_factory=dict)


@dataclass
class Snapshot:
    """One /api/context response. Built fresh per request."""
    label: str
    model: str
    context_window: int
    updated_at: Any = None
    session_start: Any = None  # ISO string or epoch ms, as found in the log
    usage: UsageSample | None = None
    handoff: HandoffState | None = None
    live: dict | None = None
    boot: BootPayload | None = None
    velocity: int = 0
    minutes_to_wrap: int | None = None

    @property
    def context_used(self) -> int | float | None:
        return self.usage.context if self.usage else None

    @property
    def context_source(self) -> str:
        return "jsonl" if self.usage else "unavailable"

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "model": self.model,
            "contextWindow": self.context_window,
            "updatedAt": self.updated_at,
            "sessionStart": self.session_start,
            "contextUsed": self.context_used,
            "contextSource": self.context_source,
            "usage": self.usage.to_dict() if self.usage else None,
            "handoff": self.handoff.to_dict() if self.handoff else None,
            "live": self.live,
            "boot": self.boot.to_dict() if self.boot else None,
            "velocity": self.velocity,
            "minutesToWrap": self.minutes_to_wrap,
        }


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_BOOT_FILES = [
    "AGENTS.md", "SOUL.md", "USER.md", "MEMORY.md", "HANDOFF.md", "IDENTITY.md",
]

DEFAULT_BOOT_LIMITS = {"AGENTS.md": 4000, "MEMORY.md": 1500, "HANDOFF.md": 2000}

GLOBAL_SKILLS_DIR = "/opt/homebrew/lib/node_modules/openclaw/skills"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8111


@dataclass
class UsageConfig:
    tail_lines: int = 20
    read_timeout: float = 3.0  # seconds, for registry and log reads
    max_depth: int = 32  # recursion guard for the usage search


@dataclass
class VelocityConfig:
    min_interval_minutes: float = 0.1
    smoothing: float = 0.3  # weight of the newest instantaneous sample
    noise_floor: float = 100.0  # tokens/min below which no projection is made
    wrap_ratio: float = 0.5  # fraction of the context window that triggers a wrap


@dataclass
class BootConfig:
    files: list[str] = field(default_factory=lambda: list(DEFAULT_BOOT_FILES))
    limits: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_BOOT_LIMITS))
    default_limit: int = 1500
    memory_dir: str = "memory"
    skill_dirs: list[Path] = field(default_factory=list)


@dataclass
class DashboardConfig:
    """Top-level configuration."""
    workspace: Path
    sessions_dir: Path
    workspace_key: str
    default_context_window: int = 1_000_000
    handoff_file: str = "HANDOFF.md"
    live_session_file: str = "scratch/live-session.json"
    server: ServerConfig = field(default_factory=ServerConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)
    velocity: VelocityConfig = field(default_factory=VelocityConfig)
    boot: BootConfig = field(default_factory=BootConfig)

    @property
    def registry_path(self) -> Path:
        return self.sessions_dir / "sessions.json"

    @property
    def handoff_path(self) -> Path:
        return self.workspace / self.handoff_file

    @property
    def live_session_path(self) -> Path:
        return self.workspace / self.live_session_file

    def session_log_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.jsonl"
