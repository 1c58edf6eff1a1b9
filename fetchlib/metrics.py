import threading
import time
from dataclasses import dataclass


@dataclass
class FetchTotals:
    fetches: int = 0
    errors: int = 0
    bytes: int = 0
    truncated: int = 0
    fetch_ms_sum: float = 0.0


class FetchMetrics:
    def __init__(self):
        self._totals = FetchTotals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_fetch(self, ok: bool, bytes_read: int, fetch_ms: float, truncated: bool = False) -> None:
        with self._lock:
            self._totals.fetches += 1
            self._totals.bytes += max(0, bytes_read)
            if not ok:
                self._totals.errors += 1
            if truncated:
                self._totals.truncated += 1
            self._totals.fetch_ms_sum += fetch_ms

    def snapshot(self) -> tuple[FetchTotals, float]:
        with self._lock:
            t = FetchTotals(
                fetches=self._totals.fetches,
                errors=self._totals.errors,
                bytes=self._totals.bytes,
                truncated=self._totals.truncated,
                fetch_ms_sum=self._totals.fetch_ms_sum,
            )
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed


class StatsLogger(threading.Thread):
    daemon = True

    def __init__(self, metrics: FetchMetrics, interval_s: float, log_fn):
        super().__init__(name="stats-logger")
        self._metrics = metrics
        self._interval = max(0.5, interval_s)
        self._log = log_fn
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._stop_event.wait(self._interval)
            if self._stop_event.is_set():
                break
            totals, elapsed = self._metrics.snapshot()
            self._log(
                "Perf: fetches=%d, errors=%d, truncated=%d, MB=%.2f, avg_fetch_ms=%.1f, fetches/sec=%.2f",
                totals.fetches,
                totals.errors,
                totals.truncated,
                totals.bytes / (1024 * 1024),
                totals.fetch_ms_sum / max(1, totals.fetches),
                totals.fetches / elapsed,
            )

    def stop(self) -> None:
        self._stop_event.set()
