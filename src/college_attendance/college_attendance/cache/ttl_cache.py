from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from ..app_logger import get_logger
from ..core.constants import DEFAULT_CACHE_TTL_SECONDS

logger = get_logger("cache")

Clock = Callable[[], float]


class TTLCache:
    """In-memory key/value store with per-key time-to-live.

    Expired entries are dropped lazily on read and by `cleanup()`, which the
    optional background sweeper calls periodically. The clock is injectable so
    tests can move time deterministically.
    """

    def __init__(self, *, default_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Clock = time.monotonic):
        self._default_ttl = float(default_ttl_seconds)
        self._clock = clock
        self._values: dict[str, Any] = {}
        self._expires_at: dict[str, float] = {}
        # Guards the dicts only; callers may still recompute the same key concurrently.
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def get(self, key: str) -> Any:
        with self._lock:
            if key not in self._values:
                return None
            if self._clock() > self._expires_at[key]:
                self._drop(key)
                return None
            return self._values[key]

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            self._values[key] = value
            self._expires_at[key] = self._clock() + ttl

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        with self._lock:
            self._drop(key)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._expires_at.clear()

    def cleanup(self) -> int:
        """Purge every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, exp in self._expires_at.items() if now > exp]
            for key in expired:
                self._drop(key)
        if expired:
            logger.debug("cache sweep removed %d expired entries", len(expired))
        return len(expired)

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return self.size()

    def start_sweeper(self, interval_seconds: float) -> None:
        if self._sweeper is not None or interval_seconds <= 0:
            return

        def _run() -> None:
            while not self._stop.wait(interval_seconds):
                self.cleanup()

        self._sweeper = threading.Thread(target=_run, name="ttl-cache-sweeper", daemon=True)
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=1)
            self._sweeper = None
        self._stop = threading.Event()

    def _drop(self, key: str) -> None:
        self._values.pop(key, None)
        self._expires_at.pop(key, None)
