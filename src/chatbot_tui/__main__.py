"""CLI entrypoint for chatbot-tui."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Sequence

from .app import ChatbotApp
from .config import ensure_config_dir, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatbot-tui", description="Terminal client for the chat service"
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
        help="Path to a config.toml to use instead of the default location",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override [service].base_url for this run",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("chatbot-tui")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"chatbot-tui {version}")
        return

    ensure_config_dir()
    config = load_config(config_path=args.config)
    if args.base_url:
        config["service"]["base_url"] = str(args.base_url).rstrip("/")
    app = ChatbotApp(config)
    app.run()


if __name__ == "__main__":
    main()
