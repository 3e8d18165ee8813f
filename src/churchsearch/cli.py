"""CLI entry point for the churchsearch server.

Overrides given on the command line are also exported as ``CHURCHSEARCH_*``
environment variables, because uvicorn workers rebuild their settings from
the environment inside ``create_app()``.
"""

from __future__ import annotations

import argparse
import os
import socket
import sys
from pathlib import Path

from churchsearch.config.settings import Settings
from churchsearch.observability.logging import setup_logging

# argparse dest -> (settings section, field)
_OVERRIDES = {
    "host": ("server", "host"),
    "port": ("server", "port"),
    "workers": ("server", "workers"),
    "backend_url": ("backend", "base_url"),
    "db_schema": ("backend", "db_schema"),
    "log_level": ("observability", "log_level"),
    "log_format": ("observability", "log_format"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="churchsearch",
        description="churchsearch — Geospatial church directory search API",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")

    server = parser.add_argument_group("server")
    server.add_argument("--host", type=str, default=None, help="Server bind address")
    server.add_argument("--port", "-p", type=int, default=None, help="Server port")
    server.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    server.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    backend = parser.add_argument_group("backend")
    backend.add_argument("--backend-url", type=str, default=None, help="PostgREST / Supabase base URL")
    backend.add_argument("--db-schema", type=str, default=None, help="Exposed database schema")

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level",
    )
    logging_group.add_argument("--log-format", type=str, choices=["json", "console"], default=None, help="Log format")

    parser.add_argument("--version", action="version", version=f"churchsearch {_get_version()}")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from ``--config`` (if any) plus command-line overrides.

    Raises:
        FileNotFoundError: If ``--config`` names a missing file.
    """
    if args.config:
        config_path = Path(args.config).resolve()
        settings = Settings.from_yaml(config_path)
        os.environ["CHURCHSEARCH_CONFIG_FILE"] = str(config_path)
    else:
        settings = Settings()

    for dest, (section, field) in _OVERRIDES.items():
        value = getattr(args, dest)
        if value is None:
            continue
        setattr(getattr(settings, section), field, value)
        os.environ[f"CHURCHSEARCH_{section.upper()}__{field.upper()}"] = str(value)
    return settings


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for the churchsearch server."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.observability)

    host, port = settings.server.host, settings.server.port
    if not _port_available(host, port):
        print(f"Error: Port {port} is already in use.", file=sys.stderr)
        print(f"  Run 'lsof -i :{port}' to find the process.", file=sys.stderr)
        sys.exit(1)

    import uvicorn

    uvicorn.run(
        "churchsearch.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        workers=1 if args.reload else settings.server.workers,
        reload=args.reload,
        log_level=settings.observability.log_level.lower(),
    )


def _port_available(host: str, port: int) -> bool:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
    except OSError:
        return False
    finally:
        sock.close()
    return True


def _get_version() -> str:
    from churchsearch import __version__

    return __version__


if __name__ == "__main__":
    main()
