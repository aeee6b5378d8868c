"""Entry point for the zeek CLI, called from the zsh widgets in ``zeek.zsh``.

The widgets run ``zeek <command> "$LBUFFER" "$RBUFFER" </dev/tty 3>&1 1>&2``:
the popup draws on the terminal and the result goes to file descriptor 3,
which the widget captures.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Mapping

RESULT_FD = 3

COMMANDS = ("history", "dir-history", "file-search", "cmd-search", "store-dir", "help")

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zeek",
        description="zeek: searchable command and directory palette for zsh",
        epilog='This tool is meant to be called from the "zeek.zsh" widgets.',
    )
    parser.add_argument("command", nargs="?", default="help", help=f"one of: {', '.join(COMMANDS)}")
    parser.add_argument("lbuffer", nargs="?", default="", help="command line left of the cursor")
    parser.add_argument("rbuffer", nargs="?", default="", help="command line right of the cursor")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser


def configure_logging(level: str, environ: Mapping[str, str] | None = None) -> None:
    """Log to ``$ZEEK_LOG_FILE`` if set; the terminal belongs to the popup."""
    env = os.environ if environ is None else environ
    log_file = env.get("ZEEK_LOG_FILE")
    if not log_file:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def emit_result(line: str | None) -> None:
    """Write *line* to the result descriptor, or stdout when it is not open."""
    if not line:
        return
    try:
        with os.fdopen(RESULT_FD, "w", encoding="utf-8", closefd=True) as out:
            out.write(line)
    except OSError:
        logger.debug("fd %d not open, writing result to stdout", RESULT_FD)
        sys.stdout.write(line)
        sys.stdout.flush()


def run_command(command: str, lbuffer: str, rbuffer: str) -> str | None:
    from zeek import popups
    from zeek.config import load_settings

    settings = load_settings()

    if command == "history":
        return popups.history_popup(lbuffer, rbuffer, settings)
    if command == "dir-history":
        return popups.dir_history_popup(lbuffer, rbuffer, settings)
    if command == "file-search":
        return popups.file_search_popup(lbuffer, rbuffer, settings)
    if command == "cmd-search":
        return popups.cmd_search_popup(lbuffer, rbuffer, settings)
    if command == "store-dir":
        popups.store_dir(settings, lbuffer or None)
        return None
    raise ValueError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "help":
        parser.print_help()
        return 0
    if args.command not in COMMANDS:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 2

    logger.debug("Running %s", args.command)
    try:
        line = run_command(args.command, args.lbuffer, args.rbuffer)
    except Exception as e:
        logger.exception("%s failed", args.command)
        print(f"zeek {args.command}: {e}", file=sys.stderr)
        return 1

    emit_result(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
