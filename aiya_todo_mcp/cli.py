"""Command-line entry point for the Aiya Todo MCP server."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from aiya_todo_mcp.config import Settings, load_settings
from aiya_todo_mcp.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aiya-todo-mcp",
        description="MCP server for managing todos with dependencies and execution tracking (stdio transport).",
    )
    parser.add_argument("--file", type=Path, default=None, help="Path of the JSON todo file (env: AIYA_TODO_FILE)")
    parser.add_argument("--log-level", default=None, help="Console log level (env: AIYA_TODO_LOG_LEVEL)")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write DEBUG logs here (env: AIYA_TODO_LOG_FILE)")
    parser.add_argument(
        "--strict-durability",
        action="store_true",
        default=None,
        help="Fail operations whose snapshot write fails (env: AIYA_TODO_STRICT_DURABILITY)",
    )
    return parser


def resolve_settings(argv: list[str] | None = None) -> Settings:
    """Environment settings with command-line overrides applied."""
    args = build_parser().parse_args(argv)
    return load_settings().with_overrides(
        todo_file=args.file,
        log_level=args.log_level.upper() if args.log_level else None,
        log_file=args.log_file,
        strict_durability=args.strict_durability,
    )


def main(argv: list[str] | None = None) -> None:
    settings = resolve_settings(argv)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    from aiya_todo_mcp.server import configure, run

    configure(settings)
    logger.info("Starting aiya-todo-mcp with %s", settings.todo_file)
    run()


if __name__ == "__main__":
    main()
