"""CLI: buffer-dashboard [port] serves the session health dashboard."""

from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml

from ..config import load_config, validate_config


class _SuppressPollAccess(logging.Filter):
    """Hide the page's own GET /api/context polling from the access log."""
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        if "GET /api/context" in msg and "200" in msg:
            return False
        return True


def cmd_once(config) -> None:
    """Print a single snapshot as JSON and exit."""
    from ..core.snapshot import SnapshotAssembler

    data = SnapshotAssembler(config).assemble()
    print(json.dumps(data, indent=2, default=str))
    if "error" in data:
        sys.exit(1)


def cmd_serve(config, host: str, port: int) -> None:
    """Start the HTTP dashboard."""
    import uvicorn

    from ..web import create_app

    logging.getLogger("uvicorn.access").addFilter(_SuppressPollAccess())

    app = create_app(config)
    print(f"Buffer Dashboard on http://{host}:{port}", flush=True)
    uvicorn.run(app, host=host, port=port, log_level="info")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buffer-dashboard",
        description="Session health dashboard: context usage, velocity, handoff and boot payload",
    )
    parser.add_argument(
        "port", nargs="?", type=int, default=None,
        help="Port to listen on (default: server.port from config, else 8111)",
    )
    parser.add_argument("--host", default=None, help="Bind address (default 127.0.0.1)")
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument(
        "--once", action="store_true",
        help="Print one snapshot as JSON instead of serving",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        print("Config errors:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        sys.exit(1)

    if args.once:
        cmd_once(config)
        return

    host = args.host or config.server.host
    port = args.port or config.server.port
    cmd_serve(config, host, port)


if __name__ == "__main__":
    main()
