from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .drives import filesystem_usage
from .models import DirectoryStat, ScanResult
from .utils import format_bytes, printable_path, shorten_path

PATH_WIDTH = 80


def render_table(title: str, stats: List[DirectoryStat], by_size: bool) -> str:
    lines = ["", f"--- {title} ---",
             f"{'Metric':<15} | {'Path':<50}",
             "-" * 70]
    for s in stats:
        val = format_bytes(s.total_size) if by_size else f"{s.total_files} Files"
        lines.append(f"{val:<15} | {shorten_path(s.path, PATH_WIDTH)}")
    return "\n".join(lines)


def render_report(result: ScanResult) -> str:
    n = result.top_n
    parts = [
        render_table(f"Top {n} Largest Subdirectories by Size", result.by_size, True),
        render_table(f"Top {n} Subdirectories by File Count", result.by_count, False),
    ]
    return "\n".join(parts)


def render_runtime(elapsed_sec: float) -> str:
    return f"\nProcessed in {elapsed_sec:.2f} second(s)"


def result_to_dict(result: ScanResult, usage: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    data = asdict(result)
    data["roots"] = [printable_path(r) for r in result.roots]
    for view in ("by_size", "by_count"):
        for entry in data[view]:
            entry["path"] = printable_path(entry["path"])
    if usage is None:
        usage = [u for u in (filesystem_usage(r) for r in result.roots) if u]
    data["filesystems"] = [dict(u, path=printable_path(str(u["path"]))) for u in usage]
    return data
