"""Deliver envelopes to the Loggregator agent over mutual-TLS gRPC."""

from __future__ import annotations

import logging
import time
from typing import Callable

import grpc

from loggregator_forwarder.config import Config
from loggregator_forwarder.metrics import Metrics
from loggregator_forwarder.tls_context import read_pem_files
from loggregator_forwarder.wire import INGRESS_SEND_METHOD, Envelope, EnvelopeBatch, SendResponse

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when an envelope could not be delivered."""

    def __init__(self, message: str, code: grpc.StatusCode | None = None):
        super().__init__(message)
        self.code = code


def load_credentials(ca_file: str, cert_file: str, key_file: str) -> grpc.ChannelCredentials:
    """Build mTLS channel credentials from PEM files on disk."""
    ca, cert, key = read_pem_files(ca_file, cert_file, key_file)
    return grpc.ssl_channel_credentials(
        root_certificates=ca, private_key=key, certificate_chain=cert,
    )


def create_channel(config: Config) -> grpc.Channel:
    credentials = load_credentials(
        config.loggregator_ca_file,
        config.loggregator_cert_file,
        config.loggregator_key_file,
    )
    logger.info("Opening gRPC channel to %s", config.loggregator_target)
    return grpc.secure_channel(config.loggregator_target, credentials)


class IngressClient:
    """Sends one envelope per call, retrying while the agent is UNAVAILABLE."""

    def __init__(
        self,
        channel: grpc.Channel,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        metrics: Metrics | None = None,
    ):
        self._channel = channel
        self._send = channel.unary_unary(
            INGRESS_SEND_METHOD,
            request_serializer=EnvelopeBatch.SerializeToString,
            response_deserializer=SendResponse.FromString,
        )
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._timeout = timeout or None
        self._sleep = sleep
        self._metrics = metrics

    @classmethod
    def from_config(cls, config: Config, metrics: Metrics | None = None) -> IngressClient:
        return cls(
            create_channel(config),
            max_attempts=config.send_attempts,
            retry_delay=config.retry_delay,
            timeout=config.send_timeout,
            metrics=metrics,
        )

    def send(self, envelope: Envelope):
        """Send *envelope* as a batch of one.

        Raises:
            DeliveryError: On a non-retryable status, or once every attempt
                has failed with UNAVAILABLE.
        """
        batch = EnvelopeBatch()
        batch.batch.append(envelope)

        for attempt in range(1, self._max_attempts + 1):
            try:
                self._send(batch, timeout=self._timeout)
                return
            except grpc.RpcError as exc:
                code = exc.code()
                if code != grpc.StatusCode.UNAVAILABLE:
                    raise DeliveryError(f"Send failed with {code}: {exc}", code=code) from exc
                if attempt == self._max_attempts:
                    logger.error("Send failed after %d attempts: %s", attempt, code)
                    raise DeliveryError(
                        f"Ingress unavailable after {attempt} attempts", code=code,
                    ) from exc
                logger.warning(
                    "Ingress unavailable (attempt %d/%d), retrying in %.1fs",
                    attempt, self._max_attempts, self._retry_delay,
                )
                if self._metrics:
                    self._metrics.record_retry()
                self._sleep(self._retry_delay)

    def close(self):
        self._channel.close()
