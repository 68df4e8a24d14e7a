from __future__ import annotations

"""
Logging setup for the CLI and the viewer.

Diagnostics (unreadable roots, per-entry access errors, progress) go through
the standard `logging` hierarchy under `heavydirs.*`. This module only decides
where they end up and at which level.
"""

import logging
import os
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Dict, List, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_HANDLER_TAG = "_heavydirs_handler"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging settings.

    Attributes:
        level: Minimum severity level to emit.
        console: Write records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size of one log file before rotation.
        backup_count: Number of rotated files to keep.
    """
    level: str = "ERROR"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def configure_logging(cfg: LoggingConfig) -> logging.Logger:
    """
    Configure the root logger, replacing handlers from a previous call.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)
    _remove_our_handlers(root)

    handlers: List[logging.Handler] = []
    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(cfg.console_fmt))
        handlers.append(sh)

    if cfg.log_file:
        try:
            log_dir = os.path.dirname(os.path.abspath(cfg.log_file))
            os.makedirs(log_dir, exist_ok=True)
            fh = RotatingFileHandler(
                cfg.log_file,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            # The scan still runs; the console keeps working.
            sys.stderr.write(f"WARNING | Could not open log file {cfg.log_file}: {e}\n")
        else:
            fh.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
            handlers.append(fh)

    for h in handlers:
        h.setLevel(level_int)
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)
    return root


def _parse_level(level: str) -> int:
    if not level:
        return logging.ERROR
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.ERROR)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()
