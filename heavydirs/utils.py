from __future__ import annotations
import os

def format_bytes(num: int) -> str:
    if num < 1024:
        return f"{num} B"
    units = ["KB", "MB", "GB", "TB", "PB", "EB"]
    x = float(num)
    for u in units:
        x /= 1024.0
        if x < 1024.0 or u == units[-1]:
            break
    return f"{x:.1f} {u}"

def printable_path(path: str) -> str:
    # Names that are not valid UTF-8 come back from scandir with surrogate
    # escapes, which no text stream can encode; show the raw bytes instead.
    return os.fsencode(path).decode("utf-8", "backslashreplace")

def shorten_path(path: str, width: int = 80) -> str:
    path = printable_path(path)
    if len(path) <= width:
        return path
    return "..." + path[-(width - 3):]
