from __future__ import annotations

"""
Command line entry point.

Parses arguments, sets up logging, runs one scan and prints the two
rankings (or hands them to the desktop viewer).
"""

import argparse
import json
import logging
import platform
import sys
import time
from typing import List, Optional

from .config import DEFAULT_EXCLUDED_PATHS, DEFAULT_TOP_N, ScanConfig
from .drives import filesystem_usage, pseudo_mount_points
from .logs import LoggingConfig, configure_logging
from .report import render_report, render_runtime, result_to_dict
from .scanner import scan_paths
from .utils import format_bytes

APP_NAME = "find-heavy-dirs"
VERSION = "3.1.0"

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"requires a numeric value, got {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Find the subdirectories with the largest total size "
                    "and the most files.",
    )
    p.add_argument(
        "--path",
        dest="paths",
        nargs="+",
        metavar="PATH",
        default=None,
        help="One or more paths to search. Default is the current directory.",
    )
    p.add_argument(
        "--maxdepth",
        dest="max_depth",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="Limit the search to N levels deep. Default is unlimited.",
    )
    p.add_argument(
        "--top",
        dest="top_n",
        type=_non_negative_int,
        default=DEFAULT_TOP_N,
        metavar="N",
        help=f"Display the top N entries. Default is {DEFAULT_TOP_N}.",
    )
    p.add_argument(
        "--exclude",
        dest="exclude",
        action="append",
        default=[],
        metavar="PATH",
        help="Absolute path to skip, in addition to "
             f"{', '.join(DEFAULT_EXCLUDED_PATHS)}. Repeatable.",
    )
    p.add_argument(
        "--auto-exclude-mounts",
        action="store_true",
        help="Also skip every pseudo filesystem mount point (proc, sysfs, ...).",
    )

    p.add_argument("--verbose", action="store_true", help="Show detailed progress information.")
    p.add_argument("--debug", action="store_true", help="Show debug diagnostics, implies --verbose.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Also write diagnostics to this file.")
    p.add_argument("--display-runtime", action="store_true", help="Show total execution time.")

    out = p.add_mutually_exclusive_group()
    out.add_argument("--json", dest="json_output", action="store_true", help="Print the results as JSON.")
    out.add_argument("--gui", action="store_true", help="Show the results in a desktop window.")

    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION} ({platform.system().lower()}/{platform.machine().lower()})",
    )
    return p


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    excluded = list(DEFAULT_EXCLUDED_PATHS) + list(args.exclude or [])
    if args.auto_exclude_mounts:
        excluded.extend(pseudo_mount_points())
    return ScanConfig(
        roots=tuple(args.paths or (".",)),
        max_depth=args.max_depth,
        excluded_paths=frozenset(excluded),
        top_n=args.top_n,
        verbose=bool(args.verbose or args.debug),
    )


def _log_progress(cur: str, files: int, dirs: int, bytes_scanned: int):
    logger.debug("Scanning %s | %d files, %d dirs, %s", cur, files, dirs, format_bytes(bytes_scanned))


def main(argv: Optional[List[str]] = None) -> int:
    t0 = time.time()
    args = build_parser().parse_args(argv)

    if args.debug:
        level = "DEBUG"
    elif args.verbose:
        level = "INFO"
    else:
        level = "ERROR"
    configure_logging(LoggingConfig(level=level, log_file=args.log_file))

    cfg = config_from_args(args)
    logger.info("Starting scan (Ver: %s)...", VERSION)

    if args.gui:
        from .app import run
        return run(cfg)

    try:
        result = scan_paths(config=cfg, progress=_log_progress if args.debug else None)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.critical("Scan failed: %s", e, exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    usage = [u for u in (filesystem_usage(r) for r in result.roots) if u]
    for u in usage:
        logger.info("Filesystem at %s: %s used of %s (%.0f%%)",
                    u["path"], format_bytes(u["used"]), format_bytes(u["total"]), u["percent"])

    if args.json_output:
        print(json.dumps(result_to_dict(result, usage), ensure_ascii=False, indent=2))
    else:
        print(render_report(result))

    if args.display_runtime:
        print(render_runtime(time.time() - t0))
    return 0


if __name__ == "__main__":
    sys.exit(main())
