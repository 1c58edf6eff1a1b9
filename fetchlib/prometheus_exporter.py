import logging
import threading
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import FetchMetrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: FetchMetrics, port: int = 8000, registry: Optional[CollectorRegistry] = None) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry or CollectorRegistry()
        self._updater_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.fetches_total = Counter('fetcher_fetches_total', 'Total number of fetch attempts', registry=self.registry)
        self.errors_total = Counter('fetcher_errors_total', 'Total number of failed fetches', registry=self.registry)
        self.bytes_total = Counter('fetcher_bytes_total', 'Total number of payload bytes kept', registry=self.registry)
        self.truncated_total = Counter(
            'fetcher_truncated_total', 'Total number of responses cut at the size limit', registry=self.registry
        )
        self.fetches_per_second = Gauge(
            'fetcher_fetches_per_second', 'Current fetch rate in fetches per second', registry=self.registry
        )
        self.avg_fetch_duration_seconds = Gauge(
            'fetcher_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=self.registry
        )

        self._last = None

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._updater_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True,
        )
        self._updater_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update_metrics()
            self._stop_event.wait(5.0)

    def update_metrics(self) -> None:
        totals, elapsed = self.metrics.snapshot()
        last = self._last

        for counter, current, previous in (
            (self.fetches_total, totals.fetches, last.fetches if last else 0),
            (self.errors_total, totals.errors, last.errors if last else 0),
            (self.bytes_total, totals.bytes, last.bytes if last else 0),
            (self.truncated_total, totals.truncated, last.truncated if last else 0),
        ):
            if current > previous:
                counter.inc(current - previous)

        self.fetches_per_second.set(totals.fetches / elapsed)
        if totals.fetches > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.fetches / 1000.0)

        self._last = totals

    def stop(self) -> None:
        self._stop_event.set()
        if self._updater_thread:
            self._updater_thread.join(timeout=2.0)
            # push whatever arrived since the last tick
            self.update_metrics()
