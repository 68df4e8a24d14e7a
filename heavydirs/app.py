from __future__ import annotations

import sys
from typing import List, Optional

from PySide6.QtCore import QThread, Signal
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QLabel, QTabWidget,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView
)

from .config import ScanConfig
from .drives import filesystem_usage
from .models import DirectoryStat, ScanResult
from .scanner import scan_paths
from .utils import format_bytes, printable_path, shorten_path

APP_NAME = "find-heavy-dirs"

DARK_QSS = r"""
* { font-size: 12px; }
QMainWindow { background: #0f1220; }
QWidget { color: #dbe6ff; }
QTableWidget {
    background: #121826;
    border: 1px solid #25314a;
    border-radius: 10px;
    gridline-color: #1e2a40;
    alternate-background-color: #0f1526;
}
QTableWidget::item:selected { background: rgba(47, 107, 255, 0.35); }
QHeaderView::section {
    background: #0e1320;
    color: #9fb6ea;
    padding: 7px 8px;
    border: none;
}
QTabBar::tab {
    background: #101624;
    border: 1px solid #26334d;
    padding: 8px 14px;
    color: #bcd0ff;
}
QTabBar::tab:selected { background: #121a2d; color: #ffffff; }
"""


class ScanThread(QThread):
    progress = Signal(str, int, int, object)  # dir, files, dirs, bytes_scanned (may exceed int32)
    done = Signal(object)                      # ScanResult
    error = Signal(str)

    def __init__(self, config: ScanConfig):
        super().__init__()
        self.config = config

    def run(self):
        try:
            def prog(cur: str, files: int, dirs: int, bytes_scanned: int):
                self.progress.emit(cur, files, dirs, bytes_scanned)
            res = scan_paths(config=self.config, progress=prog)
            self.done.emit(res)
        except Exception as e:
            self.error.emit(str(e))


def fill_table(t: QTableWidget, stats: List[DirectoryStat], by_size: bool):
    t.setRowCount(0)
    for s in stats:
        r = t.rowCount()
        t.insertRow(r)
        val = format_bytes(s.total_size) if by_size else f"{s.total_files} Files"
        path = printable_path(s.path)
        it1 = QTableWidgetItem(path)
        it1.setToolTip(path)
        t.setItem(r, 0, QTableWidgetItem(val))
        t.setItem(r, 1, it1)


class ResultsWindow(QMainWindow):
    def __init__(self, config: ScanConfig):
        super().__init__()
        self.config = config
        self.scan_thread: Optional[ScanThread] = None
        self.result: Optional[ScanResult] = None

        self.setWindowTitle(f"{APP_NAME} - {', '.join(printable_path(r) for r in config.roots)}")
        self.resize(1100, 720)

        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        self.summary = QLabel("Ready.")
        root.addWidget(self.summary)

        self.tabs = QTabWidget()
        self.size_table = QTableWidget(0, 2)
        self.size_table.setHorizontalHeaderLabels(["Size", "Path"])
        self.count_table = QTableWidget(0, 2)
        self.count_table.setHorizontalHeaderLabels(["Files", "Path"])
        for t in (self.size_table, self.count_table):
            self._init_table(t)
        self.tabs.addTab(self.size_table, f"Top {config.top_n} by size")
        self.tabs.addTab(self.count_table, f"Top {config.top_n} by file count")
        root.addWidget(self.tabs, 1)

    def _init_table(self, t: QTableWidget):
        t.verticalHeader().setVisible(False)
        t.setShowGrid(False)
        t.setAlternatingRowColors(True)
        t.setEditTriggers(QAbstractItemView.NoEditTriggers)
        t.setSelectionBehavior(QAbstractItemView.SelectRows)
        t.setSelectionMode(QAbstractItemView.SingleSelection)
        t.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeToContents)
        t.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)

    def start_scan(self):
        self.summary.setText("Scanning…")
        self.statusBar().showMessage("Scan started…")
        self.scan_thread = ScanThread(self.config)
        self.scan_thread.progress.connect(self.on_scan_progress)
        self.scan_thread.done.connect(self.on_scan_done)
        self.scan_thread.error.connect(self.on_scan_error)
        self.scan_thread.start()

    def on_scan_progress(self, cur: str, files: int, dirs: int, bytes_scanned):
        bs = int(bytes_scanned or 0)
        self.summary.setText(
            f"Files: {files} | Dirs: {dirs} | Scanned: {format_bytes(bs)} | Now: {shorten_path(cur, 100)}"
        )

    def on_scan_done(self, result: ScanResult):
        self.result = result
        fill_table(self.size_table, result.by_size, True)
        fill_table(self.count_table, result.by_count, False)
        self.summary.setText(
            f"Done. Files: {result.files} | Dirs: {result.dirs} | "
            f"Size: {format_bytes(result.bytes_scanned)} | Time: {result.elapsed_sec:.2f} s"
        )
        if not result.roots:
            self.statusBar().showMessage("No readable roots.")
            return
        usage = [u for u in (filesystem_usage(r) for r in result.roots) if u]
        disk = "; ".join(f"{printable_path(u['path'])}: {u['percent']:.0f}% used" for u in usage)
        self.statusBar().showMessage(f"Scan finished. {disk}" if disk else "Scan finished.")

    def on_scan_error(self, msg: str):
        self.summary.setText(f"Error: {msg}")
        self.statusBar().showMessage("Error.")


def run(config: ScanConfig) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(DARK_QSS)
    w = ResultsWindow(config)
    w.show()
    w.start_scan()
    return app.exec()
