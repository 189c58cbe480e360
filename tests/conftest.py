"""Shared fixtures for buffer-dashboard tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from buffer_dashboard.config import load_config
from buffer_dashboard.types import DashboardConfig

WORKSPACE_KEY = "agent:main:test:channel:1"
SESSION_ID = "sess-abc123"


@pytest.fixture
def openclaw_home(tmp_path) -> Path:
    home = tmp_path / ".openclaw"
    (home / "workspace").mkdir(parents=True)
    (home / "agents" / "main" / "sessions").mkdir(parents=True)
    return home


@pytest.fixture
def workspace(openclaw_home) -> Path:
    return openclaw_home / "workspace"


@pytest.fixture
def dashboard_config(openclaw_home, workspace) -> DashboardConfig:
    return load_config(config_dict={
        "openclaw_home": str(openclaw_home),
        "workspace_key": WORKSPACE_KEY,
        "boot": {"skill_dirs": [str(workspace / "skills")]},
    })


@pytest.fixture
def write_registry(dashboard_config):
    """Write sessions.json; ``entry=None`` writes a registry without the workspace key."""
    def _write(entry: dict | None = None, **extra) -> Path:
        sessions = dict(extra)
        if entry is not None:
            sessions[WORKSPACE_KEY] = entry
        path = dashboard_config.registry_path
        path.write_text(json.dumps(sessions))
        return path
    return _write


@pytest.fixture
def write_log(dashboard_config):
    """Write a session JSONL log; dict records are JSON-encoded, strings written raw."""
    def _write(records: list, session_id: str = SESSION_ID) -> Path:
        path = dashboard_config.session_log_path(session_id)
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write


@pytest.fixture
def registry_entry() -> dict:
    return {
        "sessionId": SESSION_ID,
        "label": "#buffer",
        "model": "claude-opus",
        "contextTokens": 200_000,
        "updatedAt": 1768471200000,
    }
