import threading
import time
from dataclasses import dataclass, replace


@dataclass
class Totals:
    fetches: int = 0
    bytes: int = 0
    errors: int = 0
    fetch_ms_sum: float = 0.0
    retries: int = 0
    redirects: int = 0
    admitted: int = 0
    dropped: int = 0
    pages_ok: int = 0
    tasks_failed: int = 0


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_fetch(self, ok: bool, bytes_read: int, fetch_ms: float) -> None:
        with self._lock:
            self._totals.fetches += 1
            self._totals.bytes += max(0, bytes_read)
            if not ok:
                self._totals.errors += 1
            self._totals.fetch_ms_sum += fetch_ms

    def record_retry(self) -> None:
        with self._lock:
            self._totals.retries += 1

    def record_redirect(self) -> None:
        with self._lock:
            self._totals.redirects += 1

    def record_admission(self, admitted: bool) -> None:
        with self._lock:
            if admitted:
                self._totals.admitted += 1
            else:
                self._totals.dropped += 1

    def record_task(self, ok: bool) -> None:
        with self._lock:
            if ok:
                self._totals.pages_ok += 1
            else:
                self._totals.tasks_failed += 1

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = replace(self._totals)
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed


class StatsLogger(threading.Thread):
    daemon = True

    def __init__(self, metrics: Metrics, interval_s: float, log_fn):
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
            mb = totals.bytes / (1024 * 1024)
            avg_ms = totals.fetch_ms_sum / max(1, totals.fetches)
            self._log(
                "Perf: fetches=%d, pages=%d, errors=%d, retries=%d, admitted=%d, MB=%.2f, avg_fetch_ms=%.1f, fetches/sec=%.2f",
                totals.fetches,
                totals.pages_ok,
                totals.errors,
                totals.retries,
                totals.admitted,
                mb,
                avg_ms,
                totals.fetches / elapsed,
            )

    def stop(self) -> None:
        self._stop_event.set()
