from __future__ import annotations
import heapq
import os
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import DirectoryStat
from .roots import is_within, path_depth


def aggregate_stats(stats: Dict[str, DirectoryStat]) -> None:
    """Fold every directory's totals into its parent, deepest first.

    Ordering is by component depth, so by the time a directory is added to
    its parent all of its own descendants have been added to it. Running it
    twice gives the same totals.
    """
    for s in stats.values():
        s.total_size = s.direct_size
        s.total_files = s.direct_files

    for path in sorted(stats, key=path_depth, reverse=True):
        parent = os.path.dirname(path)
        if parent == path:
            continue
        ps = stats.get(parent)
        if ps is None:
            continue
        child = stats[path]
        ps.total_size += child.total_size
        ps.total_files += child.total_files


def select_top(stats: Iterable[DirectoryStat],
               roots: Sequence[str],
               top_n: int) -> Tuple[List[DirectoryStat], List[DirectoryStat]]:
    """Return (by_size, by_count), each limited to `top_n` entries under `roots`."""
    if top_n <= 0:
        return [], []
    items = [s for s in stats if is_within(s.path, roots)]
    by_size = heapq.nsmallest(top_n, items, key=lambda s: (-s.total_size, s.path))
    by_count = heapq.nsmallest(top_n, items, key=lambda s: (-s.total_files, s.path))
    return by_size, by_count
