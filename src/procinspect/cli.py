"""Command line entry point for procinspect."""

import argparse
import logging
import os
import sys

import psutil
from textual.logging import TextualHandler

from procinspect.app import InspectorApp
from procinspect.inspector import MAX_LINES, ProcessInspector, ReadMethod
from procinspect.logging_config import DEFAULT_LEVEL, setup_logging
from procinspect.models import EXIT_OK
from procinspect.procfs import CHUNK_SIZE, CMDLINE_LIMIT, PROCFS_ROOT

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="procinspect",
        description="Inspect processes and system status through procfs.",
    )
    parser.add_argument(
        "--root",
        default=PROCFS_ROOT,
        help="procfs mount point (default: %(default)s)",
    )
    parser.add_argument(
        "--lines",
        type=int,
        default=MAX_LINES,
        help="lines per system info section (default: %(default)s)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=CHUNK_SIZE,
        help="bytes per unbuffered read call (default: %(default)s)",
    )
    parser.add_argument(
        "--cmdline-limit",
        type=int,
        default=CMDLINE_LIMIT,
        help="maximum bytes captured from a command line (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("PROCINSPECT_LOG_LEVEL", DEFAULT_LEVEL).upper(),
        help="diagnostic log level (env: PROCINSPECT_LOG_LEVEL)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="list process directories")
    info = commands.add_parser("info", help="show status and command line of a process")
    info.add_argument("pid")
    commands.add_parser("sysinfo", help="show the start of cpuinfo and meminfo")
    compare = commands.add_parser("compare", help="read a file with both read methods")
    compare.add_argument("path", nargs="?", help="file to read (default: <root>/version)")
    cat = commands.add_parser("cat", help="print a file with one read method")
    cat.add_argument("path")
    cat.add_argument(
        "--method",
        choices=[method.value for method in ReadMethod],
        default=ReadMethod.SYSCALLS.value,
    )
    commands.add_parser("tui", help="browse processes interactively")
    return parser


def _operands(args: argparse.Namespace) -> list[str]:
    if args.command == "info":
        return [args.pid]
    if args.command == "cat":
        return [args.path, args.method]
    if args.command == "compare" and args.path:
        return [args.path]
    return []


def main(argv: list[str] | None = None) -> int:
    """Run one procinspect command and return the process exit status."""
    args = build_parser().parse_args(argv)

    if args.command == "tui":
        setup_logging(args.log_level, handler=TextualHandler())
    else:
        setup_logging(args.log_level)

    if not psutil.LINUX and args.root == PROCFS_ROOT:
        logger.warning("procfs layout is only known on Linux, %s may be missing", args.root)

    options = {
        "root": args.root,
        "max_lines": args.lines,
        "chunk_size": args.chunk_size,
        "cmdline_limit": args.cmdline_limit,
    }

    if args.command == "tui":
        InspectorApp(**options).run()
        return 0

    status = ProcessInspector(**options).run(args.command, *_operands(args))
    return 0 if status == EXIT_OK else 1


if __name__ == "__main__":
    sys.exit(main())
