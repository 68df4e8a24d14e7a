from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional

import psutil

logger = logging.getLogger(__name__)

# Kernel/virtual filesystems; their mount points hold no real data.
PSEUDO_FSTYPES = {
    "proc", "sysfs", "devtmpfs", "devpts", "cgroup", "cgroup2", "securityfs",
    "debugfs", "tracefs", "pstore", "bpf", "configfs", "fusectl", "mqueue",
    "hugetlbfs", "autofs", "binfmt_misc", "efivarfs", "nsfs", "rpc_pipefs",
}

def pseudo_mount_points() -> List[str]:
    out = []
    seen = set()
    try:
        parts = psutil.disk_partitions(all=True)
    except (OSError, psutil.Error) as e:
        logger.warning("Could not list mount points: %s", e)
        return out
    for p in parts:
        mp = p.mountpoint
        if not mp or p.fstype not in PSEUDO_FSTYPES:
            continue
        mp_norm = os.path.normpath(os.path.abspath(mp))
        if mp_norm in seen:
            continue
        seen.add(mp_norm)
        out.append(mp_norm)
    out.sort()
    return out

def filesystem_usage(path: str) -> Optional[Dict[str, object]]:
    try:
        u = psutil.disk_usage(path)
    except (OSError, psutil.Error) as e:
        logger.debug("No usage data for %s: %s", path, e)
        return None
    return {
        "path": path,
        "total": int(u.total),
        "used": int(u.used),
        "free": int(u.free),
        "percent": float(u.percent),
    }
