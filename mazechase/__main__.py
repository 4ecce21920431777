"""Command line entry point: ``python -m mazechase``."""
from __future__ import annotations

import argparse
import dataclasses
from typing import List, Optional

import uvicorn

from .config import ServerSettings
from .server import create_app


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the maze chase game server.")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--simulated-bridge", action="store_true", help="Drive player 1 with random presses")
    args = parser.parse_args(argv)

    settings = ServerSettings.from_env()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.simulated_bridge:
        overrides["simulated_bridge"] = True
    settings = dataclasses.replace(settings, **overrides)
    settings.validate()

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
