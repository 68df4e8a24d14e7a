from __future__ import annotations

"""
Shared pytest configuration.

Puts the project root on sys.path and keeps logging configuration made by
CLI tests from leaking into other tests.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, int]], Path]:
    """
    Build a directory tree under tmp_path/"root".

    Keys are relative paths; a trailing "/" creates an empty directory,
    anything else a file holding that many bytes.
    """
    def _make(spec: Dict[str, int]) -> Path:
        root = tmp_path / "root"
        root.mkdir(exist_ok=True)
        for rel, size in spec.items():
            target = root / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"x" * size)
        return root.resolve()
    return _make
