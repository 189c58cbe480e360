"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .types import (
    DEFAULT_BOOT_FILES,
    DEFAULT_BOOT_LIMITS,
    GLOBAL_SKILLS_DIR,
    BootConfig,
    DashboardConfig,
    ServerConfig,
    UsageConfig,
    VelocityConfig,
)

CONFIG_FILENAMES = [
    "buffer-dashboard.yaml",
    "buffer-dashboard.yml",
    "buffer-dashboard.json",
]

DEFAULT_OPENCLAW_HOME = "~/.openclaw"
DEFAULT_AGENT = "main"
DEFAULT_WORKSPACE_KEY = "agent:main:discord:channel:1470820351674945606"


class ConfigError(ValueError):
    """Raised when a config file exists but cannot be used."""


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _path(value: str | Path) -> Path:
    return Path(value).expanduser()


def _build_config(raw: dict[str, Any]) -> DashboardConfig:
    """Build a DashboardConfig from a raw dict."""
    home = _path(raw.get("openclaw_home", DEFAULT_OPENCLAW_HOME))
    agent = raw.get("agent", DEFAULT_AGENT)
    workspace = _path(raw.get("workspace", home / "workspace"))
    sessions_dir = _path(raw.get("sessions_dir", home / "agents" / agent / "sessions"))

    server_raw = raw.get("server", {})
    server = ServerConfig(
        host=server_raw.get("host", "127.0.0.1"),
        port=server_raw.get("port", 8111),
    )

    usage_raw = raw.get("usage", {})
    usage = UsageConfig(
        tail_lines=usage_raw.get("tail_lines", 20),
        read_timeout=usage_raw.get("read_timeout", 3.0),
        max_depth=usage_raw.get("max_depth", 32),
    )

    velocity_raw = raw.get("velocity", {})
    velocity = VelocityConfig(
        min_interval_minutes=velocity_raw.get("min_interval_minutes", 0.1),
        smoothing=velocity_raw.get("smoothing", 0.3),
        noise_floor=velocity_raw.get("noise_floor", 100.0),
        wrap_ratio=velocity_raw.get("wrap_ratio", 0.5),
    )

    # Boot payload: limits given in config are merged over the defaults
    boot_raw = raw.get("boot", {})
    limits = dict(DEFAULT_BOOT_LIMITS)
    limits.update(boot_raw.get("limits", {}) or {})
    skill_dirs = boot_raw.get("skill_dirs")
    if skill_dirs is None:
        skill_dirs = [workspace / "skills", GLOBAL_SKILLS_DIR]
    boot = BootConfig(
        files=list(boot_raw.get("files", DEFAULT_BOOT_FILES)),
        limits=limits,
        default_limit=boot_raw.get("default_limit", 1500),
        memory_dir=boot_raw.get("memory_dir", "memory"),
        skill_dirs=[_path(d) for d in skill_dirs],
    )

    return DashboardConfig(
        workspace=workspace,
        sessions_dir=sessions_dir,
        workspace_key=raw.get("workspace_key", DEFAULT_WORKSPACE_KEY),
        default_context_window=raw.get("default_context_window", 1_000_000),
        handoff_file=raw.get("handoff_file", "HANDOFF.md"),
        live_session_file=raw.get("live_session_file", "scratch/live-session.json"),
        server=server,
        usage=usage,
        velocity=velocity,
        boot=boot,
    )


def validate_config(config: DashboardConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    if not config.workspace_key:
        errors.append("workspace_key must not be empty")

    if not 0 < config.server.port < 65536:
        errors.append(f"server.port ({config.server.port}) must be between 1 and 65535")

    if config.usage.tail_lines < 1:
        errors.append("usage.tail_lines must be >= 1")
    if config.usage.read_timeout <= 0:
        errors.append("usage.read_timeout must be > 0")
    if config.usage.max_depth < 1:
        errors.append("usage.max_depth must be >= 1")

    if not 0 < config.velocity.smoothing <= 1:
        errors.append(f"velocity.smoothing ({config.velocity.smoothing}) must be in (0, 1]")
    if not 0 < config.velocity.wrap_ratio <= 1:
        errors.append(f"velocity.wrap_ratio ({config.velocity.wrap_ratio}) must be in (0, 1]")
    if config.velocity.min_interval_minutes < 0:
        errors.append("velocity.min_interval_minutes must be >= 0")

    if config.default_context_window <= 0:
        errors.append("default_context_window must be > 0")

    if config.boot.default_limit <= 0:
        errors.append("boot.default_limit must be > 0")
    for name, limit in config.boot.limits.items():
        if not isinstance(limit, int) or limit <= 0:
            errors.append(f"boot.limits[{name!r}] must be a positive integer")

    return errors


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> DashboardConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return _build_config(raw)
