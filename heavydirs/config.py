from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

DEFAULT_TOP_N = 20
# Pseudo filesystems that never hold user data.
DEFAULT_EXCLUDED_PATHS: Tuple[str, ...] = ("/proc", "/dev", "/sys", "/run")


def normalize_excludes(paths: Iterable[str]) -> FrozenSet[str]:
    # Same canonical form as the roots, so entry paths built from a
    # resolved root compare equal.
    return frozenset(os.path.realpath(p) for p in paths if p)


@dataclass(frozen=True)
class ScanConfig:
    """Settings for one run.

    max_depth=None means unlimited. excluded_paths are matched against
    absolute entry paths exactly, so they are canonicalized on construction.
    verbose=False keeps traversal diagnostics at DEBUG level.
    """
    roots: Tuple[str, ...] = (".",)
    max_depth: Optional[int] = None
    excluded_paths: FrozenSet[str] = field(
        default_factory=lambda: normalize_excludes(DEFAULT_EXCLUDED_PATHS))
    top_n: int = DEFAULT_TOP_N
    verbose: bool = False

    def __post_init__(self):
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {self.top_n}")
        object.__setattr__(self, "roots", tuple(self.roots))
        object.__setattr__(self, "excluded_paths", normalize_excludes(self.excluded_paths))
