"""HTTP server for the buffer dashboard.

Routes:
    GET /api/context   session snapshot (usage, velocity, handoff, boot payload)
    GET /api/handoff   raw HANDOFF.md content
    GET /*             the dashboard page

Usage:
    buffer-dashboard [port]
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..config import load_config
from ..core.handoff import read_handoff_document
from ..core.snapshot import SnapshotAssembler
from ..core.velocity import VelocityEstimator
from ..types import DashboardConfig
from .dashboard import register_dashboard_routes

logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
CONTEXT_HEADERS = {**CORS_HEADERS, "Cache-Control": "no-cache, no-store"}

NO_HANDOFF_MESSAGE = "No HANDOFF.md file found."


def create_app(
    config: DashboardConfig | None = None,
    config_path: str | Path | None = None,
    *,
    estimator: VelocityEstimator | None = None,
) -> FastAPI:
    """Create the FastAPI dashboard application.

    Args:
        config: Ready-made config; loaded from *config_path* (or discovered) if omitted.
        config_path: Path to a buffer-dashboard config file.
        estimator: Velocity estimator to own; a fresh one is created if omitted.
    """
    if config is None:
        config = load_config(config_path)
    estimator = estimator or VelocityEstimator(config.velocity)
    assembler = SnapshotAssembler(config, estimator)

    # No docs/openapi routes: every non-API path belongs to the page
    app = FastAPI(title="buffer dashboard", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.estimator = estimator
    app.state.assembler = assembler

    # Handlers are async and do their file I/O inline, so requests are
    # processed one at a time and the estimator sees a single writer.
    @app.get("/api/context")
    async def api_context():
        try:
            return JSONResponse(assembler.assemble(), headers=CONTEXT_HEADERS)
        except Exception as e:
            logger.error("Context snapshot failed: %s", e, exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500, headers=CONTEXT_HEADERS)

    @app.get("/api/handoff")
    async def api_handoff():
        try:
            document = read_handoff_document(config.handoff_path)
        except Exception as e:
            logger.error("Handoff read failed: %s", e, exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500)
        if document is None:
            return JSONResponse({"content": NO_HANDOFF_MESSAGE}, headers=CORS_HEADERS)
        content, mtime = document
        return JSONResponse({"content": content, "mtime": mtime}, headers=CORS_HEADERS)

    # Registered last: the page route matches every remaining path
    register_dashboard_routes(app)

    logger.info(
        "Dashboard ready: workspace=%s, registry=%s, key=%s",
        config.workspace, config.registry_path, config.workspace_key,
    )
    return app
