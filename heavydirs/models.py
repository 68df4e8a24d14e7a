from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

# Normalized, deduplicated roots; built once per run.
RootSet = Tuple[str, ...]

@dataclass
class DirectoryStat:
    path: str
    direct_files: int = 0
    direct_size: int = 0
    # filled by aggregate_stats()
    total_files: int = 0
    total_size: int = 0

@dataclass
class VisitedEntry:
    path: str
    parent: str
    is_dir: bool
    depth: int
    size: int = 0

@dataclass
class ScanResult:
    roots: List[str]
    top_n: int
    by_size: List[DirectoryStat] = field(default_factory=list)
    by_count: List[DirectoryStat] = field(default_factory=list)
    files: int = 0
    dirs: int = 0
    bytes_scanned: int = 0
    elapsed_sec: float = 0.0
