"""Entry point for lazybeads."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from . import logging_bridge as log
from .config import ConfigError, load_config
from .data.beads_client import BeadsClient, BeadsError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazybeads",
        description="Terminal UI for the beads (bd) issue tracker.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Run bd list/ready without the UI and report whether they work.",
    )
    parser.add_argument(
        "--config",
        action="store_true",
        help="Print the config file location and custom commands, then exit.",
    )
    parser.add_argument(
        "--bd",
        metavar="PATH",
        default="bd",
        help="bd executable to run (default: bd on PATH).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_config(config) -> None:
    state = "" if config.path and config.path.exists() else " (not found, using defaults)"
    print(f"Config: {config.path}{state}")
    print(f"Poll interval: {config.poll_interval}s")
    if not config.custom_commands:
        print("No custom commands.")
        return
    print("Custom commands:")
    for cmd in config.custom_commands:
        description = f"  # {cmd.description}" if cmd.description else ""
        print(f"  [{cmd.context}] {cmd.key}: {cmd.command}{description}")


def check(client: BeadsClient) -> int:
    """Exercise the bd calls the UI depends on."""
    try:
        issues = client.list("--all", "--limit=0")
        ready = client.ready()
    except BeadsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"OK: {len(issues)} issues, {len(ready)} ready")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    log.init(config.log_level, config.log_file)

    if args.config:
        print_config(config)
        return 0

    client = BeadsClient(executable=args.bd, cwd=Path.cwd())
    if not client.is_initialized():
        print("Error: No .beads directory found. Run 'bd init' first.", file=sys.stderr)
        return 1

    if args.check:
        return check(client)

    from .app import LazyBeadsApp

    log.log(f"Starting lazybeads in {client.cwd}")
    app = LazyBeadsApp(client, config)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
