"""Entry point for the Loggregator log forwarder."""

import logging
import signal
import sys
import threading

from loggregator_forwarder.config import load_config
from loggregator_forwarder.forwarder import LogForwarder
from loggregator_forwarder.ingress import DeliveryError, IngressClient
from loggregator_forwarder.kube_client import KubernetesAPIError, KubernetesClient
from loggregator_forwarder.metrics import Metrics, MetricsReporter
from loggregator_forwarder.models import UnsupportedKindError
from loggregator_forwarder.owner import OwnerCache, OwnerResolver
from loggregator_forwarder.reader import RecordTailer, read_batch
from loggregator_forwarder.source_filter import SourceIDFilter

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_config(argv)
    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(
        "Starting forwarder: namespace=%s, target=%s, file=%s, mode=%s",
        config.eirini_namespace, config.loggregator_target, config.log_file,
        "follow" if config.follow else "batch",
    )

    metrics = Metrics()
    kube = None
    ingress = None
    reporter = None

    try:
        kube = KubernetesClient.from_config(config)
        resolver = OwnerResolver(kube, OwnerCache(config.owner_cache_size))
        ingress = IngressClient.from_config(config, metrics=metrics)
        forwarder = LogForwarder(SourceIDFilter(resolver, config.eirini_namespace), ingress, metrics)

        if config.metrics_interval > 0:
            reporter = MetricsReporter(metrics, config.metrics_interval, shutdown_event)
            reporter.start()

        if config.follow:
            tailer = RecordTailer(
                config.log_file,
                shutdown_event,
                callback=forwarder.process,
                poll_interval=config.poll_interval,
                on_invalid=lambda line: metrics.record_dropped(),
            )
            tailer.run()
        else:
            forwarder.run(read_batch(config.log_file))
    except (DeliveryError, KubernetesAPIError, UnsupportedKindError, OSError) as e:
        logger.error("Forwarding stopped: %s", e)
        return 1
    finally:
        shutdown_event.set()
        if reporter:
            reporter.stop()
        if ingress is not None:
            ingress.close()
        if kube is not None:
            kube.close()
        logger.info("Forwarder stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
