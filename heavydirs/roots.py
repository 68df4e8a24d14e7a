from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterable, List

from .models import RootSet

logger = logging.getLogger(__name__)


def path_depth(path: str) -> int:
    """Number of path components; "/" is 1, "/a/b" is 3."""
    return len(Path(path).parts)


def is_fs_root(path: str) -> bool:
    return os.path.dirname(path) == path


def is_subpath(path: str, parent: str) -> bool:
    """True if `path` lies strictly below `parent` (component-aware)."""
    if path == parent:
        return False
    if is_fs_root(parent):
        return path.startswith(parent)
    return path.startswith(parent + os.sep)


def is_within(path: str, roots: Iterable[str]) -> bool:
    return any(path == r or is_subpath(path, r) for r in roots)


def _resolve(raw: str) -> str:
    p = Path(raw).expanduser().resolve(strict=True)
    if not p.is_dir():
        raise NotADirectoryError(f"not a directory: {p}")
    return str(p)


def normalize_roots(paths: Iterable[str], verbose: bool = False) -> RootSet:
    """Resolve, sort and dedupe `paths`; unresolvable ones are dropped."""
    raw = [p for p in paths if p] or ["."]

    resolved: List[str] = []
    for p in raw:
        try:
            resolved.append(_resolve(p))
        except (OSError, RuntimeError) as e:
            logger.log(logging.WARNING if verbose else logging.DEBUG,
                       "Could not resolve path %s: %s", p, e)

    # Sorting on components keeps each subtree contiguous ("/a", "/a/b",
    # "/a b"), so one sweep against the last accepted root is enough.
    resolved.sort(key=lambda p: Path(p).parts)
    clean: List[str] = []
    for p in resolved:
        if clean:
            last = clean[-1]
            if p == last or is_subpath(p, last):
                logger.debug("Dropping %s, already covered by %s", p, last)
                continue
        clean.append(p)
    return tuple(clean)
