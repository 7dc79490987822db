"""Thread-safe forwarding metrics and periodic reporting."""

import logging
import threading
from collections import Counter

logger = logging.getLogger(__name__)

COUNTERS = ("forwarded", "dropped", "failed", "retries")


class Metrics:
    """Event counters plus delivery latency samples, safe to share across threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: Counter = Counter()
        self._latencies: list[float] = []

    def _bump(self, counter: str):
        with self._lock:
            self._counts[counter] += 1

    def record_forwarded(self, latency_ms: float):
        with self._lock:
            self._counts["forwarded"] += 1
            self._latencies.append(latency_ms)

    def record_dropped(self):
        """Count a record that was filtered out or could not be parsed."""
        self._bump("dropped")

    def record_failed(self):
        self._bump("failed")

    def record_retry(self):
        self._bump("retries")

    def snapshot_and_reset(self) -> dict:
        """Return every counter and latency summary, then start over from zero."""
        with self._lock:
            counts, self._counts = self._counts, Counter()
            latencies, self._latencies = self._latencies, []

        snapshot = {name: counts[name] for name in COUNTERS}
        snapshot["avg_latency_ms"] = sum(latencies) / len(latencies) if latencies else 0.0
        snapshot["max_latency_ms"] = max(latencies, default=0.0)
        return snapshot


class MetricsReporter:
    """Daemon thread logging a metrics summary every *interval* seconds until shutdown."""

    def __init__(self, metrics: Metrics, interval: float, shutdown_event: threading.Event):
        self._metrics = metrics
        self._interval = interval
        self._shutdown = shutdown_event
        self._thread: threading.Thread | None = None

    def start(self):
        self._thread = threading.Thread(target=self._report_loop, daemon=True)
        self._thread.start()

    def stop(self):
        if self._thread:
            self._thread.join(timeout=5)

    def _report_loop(self):
        # Event.wait returns True once shutdown is requested
        while not self._shutdown.wait(self._interval):
            s = self._metrics.snapshot_and_reset()
            logger.info(
                "forwarded=%d dropped=%d failed=%d retries=%d "
                "avg_latency=%.1fms max_latency=%.1fms",
                s["forwarded"], s["dropped"], s["failed"], s["retries"],
                s["avg_latency_ms"], s["max_latency_ms"],
            )
