from __future__ import annotations
import logging
import os
import time
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from .aggregate import aggregate_stats, select_top
from .config import ScanConfig
from .models import DirectoryStat, RootSet, ScanResult, VisitedEntry
from .roots import normalize_roots

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str, int, int, int], None]  # (current_dir, files, dirs, bytes_scanned)


def _diag(verbose: bool, msg: str, *args):
    logger.log(logging.WARNING if verbose else logging.DEBUG, msg, *args)


def _list_dir(dir_path: str) -> List[os.DirEntry]:
    with os.scandir(dir_path) as it:
        return list(it)


def walk_entries(root: str,
                 max_depth: Optional[int] = None,
                 excluded: FrozenSet[str] = frozenset(),
                 verbose: bool = False) -> Iterator[VisitedEntry]:
    """Yield every non-pruned entry under `root`, root first.

    Directories deeper than `max_depth` and paths in `excluded` are neither
    yielded nor descended into. Files are yielded whenever their parent was
    visited. Raises OSError only when `root` itself cannot be listed; other
    access errors are skipped and reported as warnings when `verbose`.
    """
    stack: List[Tuple[str, int]] = [(root, 0)]
    while stack:
        dir_path, depth = stack.pop()
        try:
            entries = _list_dir(dir_path)
        except OSError as e:
            if depth == 0:
                raise
            _diag(verbose, "Access denied or error at %s: %s", dir_path, e)
            continue
        if depth == 0:
            yield VisitedEntry(path=root, parent=os.path.dirname(root), is_dir=True, depth=0)

        child_depth = depth + 1
        for entry in entries:
            path = entry.path
            if path in excluded:
                logger.debug("Pruned excluded path %s", path)
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                _diag(verbose, "Access denied or error at %s: %s", path, e)
                continue

            if is_dir:
                if max_depth is not None and child_depth > max_depth:
                    continue
                yield VisitedEntry(path=path, parent=dir_path, is_dir=True, depth=child_depth)
                stack.append((path, child_depth))
            else:
                try:
                    st = entry.stat(follow_symlinks=False)
                except OSError as e:
                    _diag(verbose, "Access denied or error at %s: %s", path, e)
                    continue
                yield VisitedEntry(path=path, parent=dir_path, is_dir=False,
                                   depth=child_depth, size=int(st.st_size))


class ScanSession:
    """Owns the per-directory stats of a single run."""

    def __init__(self,
                 max_depth: Optional[int] = None,
                 excluded: FrozenSet[str] = frozenset(),
                 progress: Optional[ProgressCb] = None,
                 verbose: bool = False):
        self.max_depth = max_depth
        self.excluded = excluded
        self.progress = progress
        self.verbose = verbose
        self.stats: Dict[str, DirectoryStat] = {}
        self.files = 0
        self.dirs = 0
        self.bytes_scanned = 0
        self._aggregated = False
        self._last_emit = 0.0

    def _emit(self, cur: str):
        if not self.progress:
            return
        now = time.time()
        if now - self._last_emit >= 0.10:
            self._last_emit = now
            self.progress(cur, self.files, self.dirs, self.bytes_scanned)

    def get_stat(self, path: str) -> DirectoryStat:
        s = self.stats.get(path)
        if s is None:
            s = self.stats[path] = DirectoryStat(path=path)
        return s

    def record_root(self, root: str) -> int:
        """Walk one root and record its entries; returns files recorded."""
        self._aggregated = False
        if root in self.excluded:
            logger.info("Skipping excluded root %s", root)
            return 0

        count = 0
        try:
            for e in walk_entries(root, self.max_depth, self.excluded, self.verbose):
                if e.is_dir:
                    self.get_stat(e.path)
                    self.dirs += 1
                    self._emit(e.path)
                    continue
                s = self.get_stat(e.parent)
                s.direct_size += e.size
                s.direct_files += 1
                count += 1
                self.files += 1
                self.bytes_scanned += e.size
        except OSError as e:
            _diag(self.verbose, "Error walking path %s: %s", root, e)
            return 0
        return count

    def aggregate(self):
        aggregate_stats(self.stats)
        self._aggregated = True

    def select(self, roots: Sequence[str], top_n: int) -> Tuple[List[DirectoryStat], List[DirectoryStat]]:
        if not self._aggregated:
            raise RuntimeError("aggregate() must run before results are selected")
        return select_top(self.stats.values(), roots, top_n)


def scan_paths(paths: Optional[Sequence[str]] = None,
               config: Optional[ScanConfig] = None,
               progress: Optional[ProgressCb] = None) -> ScanResult:
    cfg = config or ScanConfig()
    t0 = time.time()

    roots: RootSet = normalize_roots(cfg.roots if paths is None else paths, verbose=cfg.verbose)
    logger.info("Targets: %s", list(roots))
    if cfg.max_depth is not None:
        logger.info("Max Depth: %d", cfg.max_depth)

    session = ScanSession(max_depth=cfg.max_depth, excluded=cfg.excluded_paths,
                          progress=progress, verbose=cfg.verbose)
    total = 0
    for root in roots:
        total += session.record_root(root)

    logger.info("Scan complete. Found %d files. Aggregating data...", total)
    session.aggregate()
    by_size, by_count = session.select(roots, cfg.top_n)

    return ScanResult(
        roots=list(roots),
        top_n=cfg.top_n,
        by_size=by_size,
        by_count=by_count,
        files=total,
        dirs=session.dirs,
        bytes_scanned=session.bytes_scanned,
        elapsed_sec=time.time() - t0,
    )
