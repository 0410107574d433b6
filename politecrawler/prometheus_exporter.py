import logging
import threading
from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from .frontier import Frontier
from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, frontier: Frontier | None = None, port: int = 8000, registry: CollectorRegistry | None = None) -> None:
        self.metrics = metrics
        self.frontier = frontier
        self.port = port
        self.registry = registry or CollectorRegistry()
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.fetches_total = Counter('crawler_fetches_total', 'Total number of HTTP fetch attempts', registry=self.registry)
        self.bytes_total = Counter('crawler_bytes_total', 'Total number of bytes downloaded', registry=self.registry)
        self.errors_total = Counter('crawler_errors_total', 'Total number of failed fetch attempts', registry=self.registry)
        self.retries_total = Counter('crawler_retries_total', 'Total number of retried fetch attempts', registry=self.registry)
        self.redirects_total = Counter('crawler_redirects_total', 'Total number of redirect responses re-enqueued', registry=self.registry)
        self.admitted_total = Counter('crawler_admitted_urls_total', 'Total number of URLs admitted to the frontier', registry=self.registry)
        self.pending_urls = Gauge('crawler_pending_urls', 'Tasks waiting in the frontier', registry=self.registry)
        self.fetches_per_second = Gauge('crawler_fetches_per_second', 'Average fetch rate since start', registry=self.registry)
        self.avg_fetch_duration_seconds = Gauge('crawler_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=self.registry)

        self._last = {}

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update_metrics()
            self._stop_event.wait(5.0)

    def _inc(self, counter: Counter, name: str, value: float) -> None:
        delta = value - self._last.get(name, 0)
        if delta > 0:
            counter.inc(delta)
        self._last[name] = value

    def update_metrics(self) -> None:
        totals, elapsed = self.metrics.snapshot()

        self._inc(self.fetches_total, "fetches", totals.fetches)
        self._inc(self.bytes_total, "bytes", totals.bytes)
        self._inc(self.errors_total, "errors", totals.errors)
        self._inc(self.retries_total, "retries", totals.retries)
        self._inc(self.redirects_total, "redirects", totals.redirects)
        self._inc(self.admitted_total, "admitted", totals.admitted)

        if self.frontier is not None:
            self.pending_urls.set(len(self.frontier))
        if elapsed > 0:
            self.fetches_per_second.set(totals.fetches / elapsed)
        if totals.fetches > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.fetches / 1000.0)

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
