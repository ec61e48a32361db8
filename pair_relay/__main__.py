"""Command-line entry point: ``python -m pair_relay``."""

from __future__ import annotations

import asyncio
import argparse
import dataclasses

from pair_relay.runtime.logging import configure_logging
from pair_relay.runtime.settings import load_settings
from pair_relay.runtime.dependencies import build_runtime_deps
from pair_relay.server import serve_forever


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pair_relay", description="Asker/helper pairing relay server")
    parser.add_argument("--host", default=None, help="Bind host (default: $WS_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: $WS_PORT or 8080)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if overrides:
        settings = dataclasses.replace(settings, server=dataclasses.replace(settings.server, **overrides))

    asyncio.run(serve_forever(build_runtime_deps(settings)))


if __name__ == "__main__":
    main()
