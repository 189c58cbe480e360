"""SnapshotAssembler: one /api/context response from the on-disk sources."""

from __future__ import annotations

import logging

from ..types import DashboardConfig, Snapshot
from .boot_audit import audit_boot_payload
from .freshness import load_live_session
from .handoff import load_handoff
from .registry import RegistryError, load_registry_entry, read_session_start
from .timestamps import round_half_up
from .usage import latest_usage_from_log
from .velocity import VelocityEstimator, project_minutes_to_wrap

logger = logging.getLogger(__name__)


class SnapshotAssembler:
    """Combine registry, usage, live session, handoff and boot audit.

    The registry is the only hard dependency. Every other source may be
    missing and leaves its field as None. The estimator is updated exactly
    once per ``build()`` and only when usage was found.
    """

    def __init__(
        self,
        config: DashboardConfig,
        estimator: VelocityEstimator | None = None,
    ) -> None:
        self.config = config
        self.estimator = estimator or VelocityEstimator(config.velocity)

    def build(self) -> Snapshot:
        """Build a snapshot. Raises RegistryError on registry failure."""
        cfg = self.config
        timeout = cfg.usage.read_timeout
        entry = load_registry_entry(
            cfg.registry_path,
            cfg.workspace_key,
            timeout=timeout,
            default_context_window=cfg.default_context_window,
        )
        usage = session_start = None
        if entry.session_id is not None:
            log_path = cfg.session_log_path(entry.session_id)
            usage = latest_usage_from_log(
                log_path,
                max_lines=cfg.usage.tail_lines,
                timeout=timeout,
                max_depth=cfg.usage.max_depth,
            )
            session_start = read_session_start(log_path, timeout)
        live = load_live_session(cfg.live_session_path, session_start, timeout)
        handoff = load_handoff(cfg.handoff_path)
        boot = audit_boot_payload(cfg.workspace, cfg.boot)

        velocity = self.estimator.update(usage.context) if usage else 0.0
        minutes_to_wrap = project_minutes_to_wrap(
            usage.context if usage else None,
            velocity,
            entry.context_window,
            wrap_ratio=cfg.velocity.wrap_ratio,
            noise_floor=cfg.velocity.noise_floor,
        )

        return Snapshot(
            label=entry.label,
            model=entry.model,
            context_window=entry.context_window,
            updated_at=entry.updated_at,
            session_start=session_start,
            usage=usage,
            handoff=handoff,
            live=live,
            boot=boot,
            velocity=round_half_up(velocity),
            minutes_to_wrap=minutes_to_wrap,
        )

    def assemble(self) -> dict:
        """Snapshot as a JSON-ready dict, or ``{"error": ...}`` on registry failure."""
        try:
            return self.build().to_dict()
        except RegistryError as e:
            logger.warning("Snapshot unavailable: %s", e)
            return {"error": str(e)}
