"""Per-record processing: enrich, build an envelope, deliver."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from loggregator_forwarder.envelope import build_envelope
from loggregator_forwarder.ingress import DeliveryError, IngressClient
from loggregator_forwarder.metrics import Metrics
from loggregator_forwarder.source_filter import SourceIDFilter

logger = logging.getLogger(__name__)


class LogForwarder:
    """Processes records one at a time, in the order they are received.

    Errors from owner resolution and delivery are not caught here; they end
    processing and propagate to the caller.
    """

    def __init__(
        self,
        source_filter: SourceIDFilter,
        ingress: IngressClient,
        metrics: Metrics | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._filter = source_filter
        self._ingress = ingress
        self._metrics = metrics or Metrics()
        self._clock = clock

    @property
    def metrics(self) -> Metrics:
        return self._metrics

    def process(self, record: dict, observed_time: float | None = None) -> bool:
        """Forward one record. Returns False if it was dropped by the filter."""
        if observed_time is None:
            observed_time = self._clock()

        enriched = self._filter.process(record)
        if enriched is None:
            self._metrics.record_dropped()
            return False

        envelope = build_envelope(enriched, observed_time)
        t0 = time.monotonic()
        try:
            self._ingress.send(envelope)
        except DeliveryError:
            self._metrics.record_failed()
            raise
        self._metrics.record_forwarded((time.monotonic() - t0) * 1000)
        return True

    def run(self, records: Iterable[dict]) -> int:
        """Forward every record in order. Returns the number delivered."""
        delivered = 0
        for record in records:
            if self.process(record):
                delivered += 1
        logger.info("Forwarded %d record(s)", delivered)
        return delivered
