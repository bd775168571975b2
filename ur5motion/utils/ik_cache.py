"""
Seed cache for IK warm starts.

Stores previously solved (end-effector position -> joint configuration) pairs
and hands back the configuration whose stored position is nearest a new
target. Orientation is ignored when choosing a seed. Lookups are a linear
scan, which is fine for the few hundred entries a cell accumulates; a much
larger cache would want a k-d tree or grid index instead.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ur5motion.config import TRACE

logger = logging.getLogger(__name__)


class ConfigurationCache:
    """
    Append-only position -> configuration store.

    Appends are serialized with a lock; readers work on a snapshot of the
    entry lists so they never observe a half-written entry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._positions: list[NDArray[np.float64]] = []
        self._configurations: list[NDArray[np.float64]] = []
        self._n: int | None = None

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self):
        return f"ConfigurationCache(entries={len(self)}, n={self._n})"

    def record(self, position: ArrayLike, configuration: ArrayLike) -> None:
        """Append an entry. Duplicate positions are kept, never merged."""
        p = np.asarray(position, dtype=float).reshape(-1)
        q = np.asarray(configuration, dtype=float).reshape(-1)
        if p.shape[0] != 3:
            raise ValueError(f"position must have 3 elements, got {p.shape[0]}")
        with self._lock:
            if self._n is None:
                self._n = int(q.shape[0])
            elif q.shape[0] != self._n:
                raise ValueError(f"configuration must have {self._n} joints, got {q.shape[0]}")
            # Configuration first so a concurrent reader never sees a position without one
            self._configurations.append(q.copy())
            self._positions.append(p.copy())
        logger.log(TRACE, "cached_seed position=%s", p)

    def entries(self) -> list[tuple[NDArray[np.float64], NDArray[np.float64]]]:
        """Snapshot of (position, configuration) pairs in insertion order."""
        with self._lock:
            return [(p.copy(), q.copy()) for p, q in zip(self._positions, self._configurations)]

    def lookup(self, position: ArrayLike, default: ArrayLike | None = None) -> NDArray[np.float64] | None:
        """
        Configuration stored at the position nearest to ``position``.

        Ties go to the earliest entry. An empty cache returns ``default``
        (callers usually pass the robot's home configuration).
        """
        target = np.asarray(position, dtype=float).reshape(-1)
        if target.shape[0] != 3:
            raise ValueError(f"position must have 3 elements, got {target.shape[0]}")
        count = len(self._positions)
        if count == 0:
            return None if default is None else np.asarray(default, dtype=float).copy()
        positions = np.vstack(self._positions[:count])
        dist = np.linalg.norm(positions - target, axis=1)
        idx = int(np.argmin(dist))
        return self._configurations[idx].copy()

    def save(self, path: str | Path) -> None:
        """Write the cache to a JSON file, creating parent directories."""
        data = {
            "entries": [
                {"position": p.tolist(), "q": q.tolist()} for p, q in self.entries()
            ]
        }
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(data))
        logger.info(f"Saved {len(data['entries'])} cached seeds to {out}")

    @classmethod
    def load(cls, path: str | Path) -> "ConfigurationCache":
        """Read a cache written by save(). A missing file yields an empty cache."""
        cache = cls()
        src = Path(path)
        if not src.exists():
            logger.info(f"No seed cache at {src}; starting empty")
            return cache
        data = json.loads(src.read_text())
        for entry in data.get("entries", []):
            cache.record(entry["position"], entry["q"])
        logger.info(f"Loaded {len(cache)} cached seeds from {src}")
        return cache
