from __future__ import annotations

"""
Tests for the traversal recorder and the full scan pipeline.

Trees are built in tmp_path with known file sizes so totals can be checked
exactly.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict
from unittest.mock import patch

import pytest

from heavydirs.config import ScanConfig
from heavydirs.scanner import ScanSession, scan_paths, walk_entries


def _scan(root: Path, **kw) -> ScanSession:
    session = ScanSession(**kw)
    session.record_root(str(root))
    session.aggregate()
    return session


def test_files_are_recorded_on_immediate_parent_only(make_tree) -> None:
    root = make_tree({"a/f1": 100, "b/c/f2": 50})
    session = ScanSession()

    n = session.record_root(str(root))

    assert n == 2
    st = session.stats
    assert st[str(root / "a")].direct_size == 100
    assert st[str(root / "b" / "c")].direct_size == 50
    assert st[str(root / "b")].direct_size == 0
    assert st[str(root)].direct_files == 0


def test_scenario_totals(make_tree) -> None:
    root = make_tree({"a/f1": 100, "b/c/f2": 50})
    st = _scan(root).stats

    assert st[str(root)].total_size == 150
    assert st[str(root)].total_files == 2
    assert st[str(root / "b")].total_size == 50
    assert st[str(root / "b")].total_files == 1


def test_conservation_on_unbalanced_tree(make_tree) -> None:
    spec: Dict[str, int] = {"top.bin": 7}
    deep = "d1/d2/d3/d4/d5/d6/d7/d8"
    for i, part in enumerate(deep.split("/")):
        prefix = "/".join(deep.split("/")[: i + 1])
        spec[f"{prefix}/f{i}"] = 10 * (i + 1)
    spec["wide_name_but_shallow_directory/x"] = 1000
    spec["w/y/z"] = 3
    root = make_tree(spec)

    st = _scan(root).stats

    for path, s in st.items():
        subtree = [o for p, o in st.items() if p == path or p.startswith(path + os.sep)]
        assert s.total_size == sum(o.direct_size for o in subtree)
        assert s.total_files == sum(o.direct_files for o in subtree)
    assert st[str(root)].total_size == sum(spec.values())
    assert st[str(root)].total_files == len(spec)


def test_empty_directories_get_zero_entries(make_tree) -> None:
    root = make_tree({"empty/": 0, "full/f": 10})
    st = _scan(root).stats

    assert st[str(root / "empty")].total_size == 0
    assert st[str(root / "empty")].total_files == 0


def test_max_depth_zero_counts_only_root_files(make_tree) -> None:
    root = make_tree({"r.txt": 5, "sub/s.txt": 7, "sub/deeper/d.txt": 9})
    st = _scan(root, max_depth=0).stats

    assert list(st) == [str(root)]
    assert st[str(root)].total_size == 5
    assert st[str(root)].total_files == 1


def test_max_depth_prunes_whole_subtree(make_tree) -> None:
    root = make_tree({"a/f": 1, "a/b/f": 2, "a/b/c/f": 4})
    st = _scan(root, max_depth=2).stats

    assert str(root / "a" / "b") in st
    assert str(root / "a" / "b" / "c") not in st
    # files directly in a visited directory count even at the boundary
    assert st[str(root / "a" / "b")].direct_size == 2
    assert st[str(root)].total_size == 3


def test_excluded_directory_contributes_nothing(make_tree) -> None:
    root = make_tree({"keep/f": 10, "skip/f": 1000, "skip/inner/g": 1000})
    excluded = frozenset({str(root / "skip")})
    st = _scan(root, excluded=excluded).stats

    assert str(root / "skip") not in st
    assert str(root / "skip" / "inner") not in st
    assert st[str(root)].total_size == 10


def test_excluded_root_is_skipped(make_tree) -> None:
    root = make_tree({"f": 10})
    session = ScanSession(excluded=frozenset({str(root)}))
    assert session.record_root(str(root)) == 0
    assert session.stats == {}


def test_excluded_root_after_aggregate_requires_new_aggregate(make_tree) -> None:
    root = make_tree({"a/f": 10, "b/f": 20})
    session = ScanSession(excluded=frozenset({str(root / "b")}))
    session.record_root(str(root / "a"))
    session.aggregate()

    assert session.record_root(str(root / "b")) == 0
    with pytest.raises(RuntimeError):
        session.select([str(root / "a")], 5)


@pytest.mark.skipif(not hasattr(os, "symlink") or sys.platform.startswith("win"), reason="symlinks")
def test_exclusion_applies_under_symlinked_root(make_tree, tmp_path: Path) -> None:
    root = make_tree({"keep/f": 10, "cache/f": 1000})
    link = tmp_path / "link"
    os.symlink(str(root), str(link))
    cfg = ScanConfig(excluded_paths=frozenset({str(link / "cache")}), top_n=5)

    res = scan_paths([str(link)], cfg)

    assert res.roots == [str(root)]
    assert res.by_size[0].path == str(root)
    assert res.by_size[0].total_size == 10
    assert all(s.path != str(root / "cache") for s in res.by_size)


@pytest.mark.skipif(not hasattr(os, "symlink") or sys.platform.startswith("win"), reason="symlinks")
def test_symlinks_are_not_followed(make_tree) -> None:
    root = make_tree({"real/big": 5000, "inside/": 0})
    os.symlink(str(root / "real"), str(root / "inside" / "link"))

    st = _scan(root).stats

    assert str(root / "inside" / "link") not in st
    assert st[str(root / "inside")].direct_files == 1
    assert st[str(root)].total_size < 2 * 5000


def test_unreadable_root_contributes_nothing(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="heavydirs.scanner")
    session = ScanSession(verbose=True)

    assert session.record_root(str(tmp_path / "gone")) == 0
    assert session.stats == {}
    assert "Error walking path" in caplog.text


def test_unreadable_subdirectory_is_skipped(make_tree, caplog: pytest.LogCaptureFixture) -> None:
    root = make_tree({"ok/f": 10, "locked/f": 20})
    locked = str(root / "locked")
    real_scandir = os.scandir

    def fake_scandir(path):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", path)
        return real_scandir(path)

    caplog.set_level(logging.WARNING, logger="heavydirs.scanner")
    with patch("heavydirs.scanner.os.scandir", side_effect=fake_scandir):
        session = _scan(root, verbose=True)

    st = session.stats
    assert st[locked].total_size == 0
    assert st[str(root)].total_size == 10
    assert "locked" in caplog.text


def test_quiet_scan_keeps_access_errors_at_debug(make_tree, caplog: pytest.LogCaptureFixture) -> None:
    root = make_tree({"ok/f": 10, "locked/f": 20})
    locked = str(root / "locked")
    real_scandir = os.scandir

    def fake_scandir(path):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", path)
        return real_scandir(path)

    caplog.set_level(logging.DEBUG, logger="heavydirs.scanner")
    with patch("heavydirs.scanner.os.scandir", side_effect=fake_scandir):
        session = _scan(root)
    session.record_root(str(root.parent / "gone"))

    assert "locked" in caplog.text
    assert "Error walking path" in caplog.text
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_vanished_file_is_skipped(make_tree) -> None:
    root = make_tree({"a/keep": 3, "a/gone": 4})
    real_scandir = os.scandir

    class _Vanished:
        def __init__(self, entry):
            self._entry = entry
            self.path = entry.path
            self.name = entry.name

        def is_dir(self, follow_symlinks=True):
            return False

        def stat(self, follow_symlinks=True):
            raise FileNotFoundError(2, "No such file", self.path)

    class _Listing:
        def __init__(self, path):
            self._it = real_scandir(path)

        def __enter__(self):
            return [e if e.name != "gone" else _Vanished(e) for e in self._it]

        def __exit__(self, *exc):
            self._it.close()

    with patch("heavydirs.scanner.os.scandir", side_effect=_Listing):
        session = _scan(root)

    assert session.stats[str(root / "a")].direct_files == 1
    assert session.stats[str(root)].total_size == 3


def test_walk_entries_yields_root_first_and_prunes(make_tree) -> None:
    root = make_tree({"a/f": 1, "a/b/g": 2})
    entries = list(walk_entries(str(root), max_depth=1))

    assert entries[0].path == str(root)
    assert entries[0].depth == 0
    paths = {e.path for e in entries}
    assert str(root / "a") in paths
    assert str(root / "a" / "f") in paths
    assert str(root / "a" / "b") not in paths
    assert str(root / "a" / "b" / "g") not in paths


def test_select_before_aggregate_raises(make_tree) -> None:
    root = make_tree({"f": 1})
    session = ScanSession()
    session.record_root(str(root))
    with pytest.raises(RuntimeError):
        session.select([str(root)], 5)


def test_sessions_are_isolated(make_tree) -> None:
    root = make_tree({"f": 1})
    s1 = _scan(root)
    s2 = _scan(root)
    assert s1.stats is not s2.stats
    assert s2.stats[str(root)].total_size == 1


def test_progress_callback_is_called(make_tree) -> None:
    root = make_tree({"a/f": 1})
    calls = []
    session = ScanSession(progress=lambda *a: calls.append(a))
    session.record_root(str(root))
    assert calls
    cur, files, dirs, bytes_scanned = calls[0]
    assert cur == str(root)


def test_scan_paths_end_to_end(make_tree) -> None:
    root = make_tree({"a/f1": 100, "b/c/f2": 50, "b/many1": 1, "b/many2": 1, "b/many3": 1})
    cfg = ScanConfig(roots=(str(root),), top_n=2)

    res = scan_paths(config=cfg)

    assert res.roots == [str(root)]
    assert res.files == 5
    assert [s.path for s in res.by_size] == [str(root), str(root / "a")]
    assert [s.path for s in res.by_count] == [str(root), str(root / "b")]
    assert res.bytes_scanned == 153


def test_scan_paths_overlapping_roots_count_once(make_tree) -> None:
    root = make_tree({"a/f": 10, "a/b/g": 20})
    res = scan_paths([str(root), str(root / "a"), str(root / "a" / "b")], ScanConfig(top_n=10))

    assert res.roots == [str(root)]
    assert res.files == 2
    assert res.by_size[0].total_size == 30


def test_scan_paths_multiple_disjoint_roots(tmp_path: Path) -> None:
    base = tmp_path.resolve()
    for name, size in (("one", 5), ("two", 9)):
        (base / name).mkdir()
        (base / name / "f").write_bytes(b"x" * size)

    res = scan_paths([str(base / "one"), str(base / "two")], ScanConfig(top_n=10))

    assert {s.path for s in res.by_size} == {str(base / "one"), str(base / "two")}
    assert str(base) not in {s.path for s in res.by_size}
    assert res.files == 2


def test_scan_paths_all_invalid_is_empty(tmp_path: Path) -> None:
    res = scan_paths([str(tmp_path / "missing")])
    assert res.roots == []
    assert res.by_size == []
    assert res.by_count == []
    assert res.files == 0


def test_scan_paths_top_zero(make_tree) -> None:
    root = make_tree({"a/f": 1})
    res = scan_paths([str(root)], ScanConfig(top_n=0))
    assert res.by_size == [] and res.by_count == []
    assert res.files == 1
