"""domstack — command-line entry point.

    domstack program.html [--root-id code] [--level DEBUG] [--no-store]
    domstack program.json [--settings settings.ini] [--strict]

Exit status: 0 run completed, 1 run aborted, 2 program could not be loaded.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from domstack.core.constants import (
    EXIT_ABORTED, EXIT_OK, EXIT_SOURCE_ERROR, LOG_LEVELS,
)
from domstack.core.log_sink import ConsoleLogSink
from domstack.core.runner import ProgramRunner
from domstack.core.settings_manager import SettingsManager
from domstack.core.tree_builder import ProgramSourceError, load_program_file

BASE_DIR = Path(__file__).parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domstack",
        description="Run a LET/FREE/ADD/SUB/LOG/REF program stored as an HTML or JSON tree.",
    )
    parser.add_argument("program", type=Path, help="HTML document or .json program")
    parser.add_argument("--settings", type=Path, default=BASE_DIR / "settings.ini",
                        help="settings file (default: settings.ini next to this script)")
    parser.add_argument("--root-id", help="id of the program root element")
    parser.add_argument("--level", choices=LOG_LEVELS, type=str.upper,
                        help="lowest log level to print")
    parser.add_argument("--no-store", action="store_true",
                        help="do not log the final variable store")
    parser.add_argument("--strict", action="store_true",
                        help="LET never binds bare text")
    return parser


def apply_overrides(settings: SettingsManager, args: argparse.Namespace) -> None:
    """Command-line flags win over the settings file."""
    if args.root_id:
        settings.set("PROGRAM", "root_id", args.root_id)
    if args.level:
        settings.set("LOG", "level", args.level)
    if args.no_store:
        settings.set("LOG", "show_store", "false")
    if args.strict:
        settings.set("EVALUATOR", "literal_fallback", "false")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = SettingsManager(args.settings)
    apply_overrides(settings, args)
    log = ConsoleLogSink(min_level=settings.log_level, color=settings.color)

    try:
        root = load_program_file(args.program, settings.root_id)
    except ProgramSourceError as exc:
        log("ERROR", str(exc))
        return EXIT_SOURCE_ERROR

    result = ProgramRunner(settings=settings, log_fn=log).run(root)
    return EXIT_OK if result.completed else EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
