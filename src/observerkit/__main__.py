"""CLI entrypoint for observerkit."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

from .config import load_config
from .demo import run_demo
from .logging_utils import configure_logging
from .registry import Registry


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="observerkit",
        description="observerkit - in-process publish/notify registry",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config.toml (defaults to ~/.config/observerkit/config.toml)",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("demo", help="Run the weather station demo")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Handle CLI flags and run the requested command."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("observerkit")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"observerkit {version}")
        return 0

    if args.command != "demo":
        parser.print_help()
        return 2

    config = load_config(args.config)
    configure_logging(config["logging"])
    run_demo(Registry.from_config(config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
