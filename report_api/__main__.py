"""
Run the report server.

Usage:
    python -m report_api
    python -m report_api --port 8080 --log-level DEBUG
"""

import argparse
import dataclasses

import uvicorn

from .config import Settings
from .log import C, header, ok
from .main import create_app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compliance report server")
    parser.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Listen port (default: PORT or 3000)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, env=None) -> Settings:
    """Environment settings with command-line overrides applied."""
    settings = Settings.from_env(env)
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return dataclasses.replace(settings, **overrides)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)

    header(settings.api_title)
    app = create_app(settings)

    display_host = "localhost" if settings.host == "0.0.0.0" else settings.host
    ok(f"Designer available at {C.URL}http://{display_host}:{settings.port}/designer")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
