"""buffer-dashboard: health monitor for a long-running agent session."""

from .config import load_config, validate_config
from .core.snapshot import SnapshotAssembler
from .core.velocity import VelocityEstimator
from .types import (
    BootFileEntry,
    BootPayload,
    DashboardConfig,
    HandoffState,
    Snapshot,
    UsageSample,
)

__version__ = "0.1.0"

__all__ = [
    "SnapshotAssembler",
    "VelocityEstimator",
    "load_config",
    "validate_config",
    "BootFileEntry",
    "BootPayload",
    "DashboardConfig",
    "HandoffState",
    "Snapshot",
    "UsageSample",
]
