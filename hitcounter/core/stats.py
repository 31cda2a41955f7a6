"""Server statistics and recently-hit target tracking.

In-memory observation only. Counts returned to clients always come from the
store, never from here. No framework dependencies.
"""

from __future__ import annotations

import threading
import time


class ServerStats:
    """Thread-safe server statistics.

    A target is "active" if it was successfully hit within
    ``active_window_seconds`` (default 120s).
    """

    def __init__(self, active_window_seconds: float = 120.0) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._active_window = active_window_seconds

        # Counters
        self.hits_served: int = 0
        self.connection_unavailable: int = 0
        self.query_failed: int = 0

        # target → time.monotonic() of last successful hit
        self._targets: dict[str, float] = {}

    def record_hit(self, target: str) -> None:
        """Record a successful increment for ``target``."""
        now = time.monotonic()
        with self._lock:
            self.hits_served += 1
            self._targets[target] = now
            self._prune_stale_targets(now)

    def record_store_error(self, kind: str) -> None:
        """Record a failed increment by ``StoreError.kind``."""
        with self._lock:
            if kind == "connection_unavailable":
                self.connection_unavailable += 1
            else:
                self.query_failed += 1

    def _prune_stale_targets(self, now: float) -> None:
        """Remove targets not hit within the active window. Caller holds lock."""
        cutoff = now - self._active_window
        stale = [t for t, seen in self._targets.items() if seen < cutoff]
        for t in stale:
            del self._targets[t]

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        now_mono = time.monotonic()
        with self._lock:
            self._prune_stale_targets(now_mono)
            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "hits_served": self.hits_served,
                "store_errors": {
                    "connection_unavailable": self.connection_unavailable,
                    "query_failed": self.query_failed,
                },
                "active_targets": {
                    "total": len(self._targets),
                    "window_seconds": self._active_window,
                },
            }
