#!/usr/bin/env python3
"""
Command-line interface for memwatch.
"""
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from memwatch.config.monitor_config import (
    DEFAULT_CHECK_INTERVAL_MS,
    DEFAULT_THRESHOLD_ABSOLUTE_KIB,
    DEFAULT_THRESHOLD_RELATIVE,
)

CONFIG_KEYS = (
    "out",
    "threshold_absolute",
    "threshold_relative",
    "check_interval",
    "report_every_nth",
    "show_free",
    "show_command",
)


def build_monitor_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="memwatch",
        description="Run a command and monitor the memory usage of its whole process tree. "
                    "When a new high water mark is reached, the process tree and its memory "
                    "usage are written to the output.",
        epilog="""Examples:
  memwatch make -j8
  memwatch -a 4096 -r 0.1 -o mem.log -- pytest -x tests/
  memwatch -n 20 -c -f python3 train.py --epochs 3""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("-o", "--out", type=str, default=None,
                    help="Output file, appended to and created if missing. - or absent for stderr")
    ap.add_argument("-a", "--threshold-absolute", type=int, default=None, metavar="KIB",
                    help=f"Minimum increase, in KiB, over the high water mark required to report "
                         f"(default: {DEFAULT_THRESHOLD_ABSOLUTE_KIB})")
    ap.add_argument("-r", "--threshold-relative", type=float, default=None, metavar="FRACTION",
                    help=f"Minimum increase, as a fraction of the high water mark, required to report "
                         f"(default: {DEFAULT_THRESHOLD_RELATIVE})")
    ap.add_argument("-i", "--check-interval", type=int, default=None, metavar="MS",
                    help=f"How often, in milliseconds, to sample memory (default: {DEFAULT_CHECK_INTERVAL_MS})")
    ap.add_argument("-n", "--report-every-nth", type=int, default=None, metavar="N",
                    help="Also report every Nth sample regardless of thresholds (1-255, 0 disables)")
    ap.add_argument("-f", "--show-free", action="store_true", default=None,
                    help="Show system-wide total, used, free and available memory, like free(1)")
    ap.add_argument("-c", "--show-command", action="store_true", default=None,
                    help="Show the command line of each process")
    ap.add_argument("--config", type=Path, default=None,
                    help="YAML file with default values for the options above")
    ap.add_argument("--env", type=str, default=None,
                    help="Environment name for configuration override (e.g., 'ci'). "
                         "Loads <config>_<env>.yaml in addition to the --config file.")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Enable debug logging")
    ap.add_argument("command", nargs=argparse.REMAINDER,
                    help="Command to run and monitor, with its arguments")
    return ap


def validate_monitor_args(parser: argparse.ArgumentParser, args: argparse.Namespace):
    if args.command and args.command[0] == "--":
        args.command = args.command[1:]
    if not args.command:
        parser.error("a command to run is required")


def parse_monitor_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_monitor_parser()
    args = parser.parse_args(argv)
    validate_monitor_args(parser, args)
    return args


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Options given explicitly on the command line, keyed like the config file."""
    return {key: getattr(args, key) for key in CONFIG_KEYS if getattr(args, key) is not None}
