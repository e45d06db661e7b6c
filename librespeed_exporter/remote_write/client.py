"""HTTP delivery of remote write requests with retry and backoff."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

import httpx

from librespeed_exporter import __version__
from librespeed_exporter.exceptions import (
    DeliveryError,
    EmptyBatchError,
    EncodingError,
    RemoteRejectionError,
    TransmissionError,
    TransportError,
)
from librespeed_exporter.logging_config import get_logger
from librespeed_exporter.remote_write.backoff import DelayFunc, compute_backoff
from librespeed_exporter.remote_write.protocol import PrometheusRemoteWrite
from librespeed_exporter.remote_write.types import TimeSeries, get_label_value

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass
class DeliveryAttempt:
    """Record of one delivery attempt."""

    number: int
    outcome: AttemptOutcome
    error: Optional[TransmissionError] = None
    delay_seconds: Optional[float] = None  # wait before the next attempt


class RemoteWriteClient:
    """Sends time series to a Prometheus remote write endpoint.

    Requests use HTTP basic auth and a bounded timeout. send() makes a single
    attempt; send_with_retry() retries transient failures with exponential
    backoff, stopping early on 400, 401, 403 and 404 responses.

    Example:
        with RemoteWriteClient(url, username, password) as client:
            attempts = client.send_with_retry(batch)
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay_func: DelayFunc = compute_backoff,
        sleep: Callable[[float], None] = time.sleep,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")

        self.url = url
        self.max_retries = max_retries
        self.delay_func = delay_func
        self.sleep = sleep
        self.protocol = PrometheusRemoteWrite()
        self.attempts: list[DeliveryAttempt] = []
        self._client = httpx.Client(
            auth=httpx.BasicAuth(username, password),
            timeout=timeout,
            headers={"User-Agent": f"librespeed-exporter/{__version__}"},
            transport=transport,
        )

    def __enter__(self) -> "RemoteWriteClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def send(self, series: Sequence[TimeSeries]) -> None:
        """Make one delivery attempt.

        Raises:
            EmptyBatchError: If series is empty; no request is made
            EncodingError: If the batch cannot be encoded
            TransportError: If the request could not be completed
            RemoteRejectionError: If the endpoint answers with status >= 300
        """
        if not series:
            raise EmptyBatchError()

        logger.info("sending_metrics", count=len(series), url=self.url)
        for ts in series:
            logger.debug(
                "sending_metric",
                metric=ts.name,
                server_url=get_label_value(ts.labels, "server_url"),
                instance=get_label_value(ts.labels, "instance"),
                value=ts.sample.value,
                timestamp=ts.sample.timestamp,
            )

        body = self.protocol.encode_write_request(series)

        start = time.monotonic()
        try:
            response = self._client.post(
                self.url, content=body, headers=self.protocol.headers()
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(
                "http_request_failed",
                error=str(e),
                duration_seconds=round(time.monotonic() - start, 3),
            )
            raise TransportError(self.url, str(e)) from e

        logger.info(
            "received_response",
            status_code=response.status_code,
            duration_seconds=round(time.monotonic() - start, 3),
        )

        if response.status_code >= 300:
            logger.error("remote_write_rejected", body=response.text)
            raise RemoteRejectionError(
                response.status_code, response.reason_phrase, response.text
            )

        logger.info("metrics_sent")

    def send_with_retry(self, series: Sequence[TimeSeries]) -> int:
        """Deliver series, retrying transient failures.

        Returns:
            int: Number of attempts made (1 when the first attempt succeeds)

        Raises:
            EmptyBatchError: If series is empty
            EncodingError: If the batch cannot be encoded
            DeliveryError: If a non-retryable failure occurs or all
                ``max_retries + 1`` attempts fail
        """
        self.attempts = []
        last_error: Optional[TransmissionError] = None
        max_attempts = self.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.delay_func(attempt - 1)
                self.attempts[-1].delay_seconds = delay
                logger.info(
                    "retrying",
                    delay_seconds=round(delay, 3),
                    attempt=attempt,
                    max_attempts=max_attempts,
                )
                self.sleep(delay)

            try:
                self.send(series)
            except (EmptyBatchError, EncodingError):
                raise
            except TransmissionError as e:
                last_error = e
                outcome = (
                    AttemptOutcome.RETRYABLE if e.retryable else AttemptOutcome.TERMINAL
                )
                self.attempts.append(DeliveryAttempt(attempt, outcome, error=e))
                logger.warning("attempt_failed", attempt=attempt, error=str(e))

                if not e.retryable:
                    logger.error("non_retryable_error", error=str(e))
                    break
                continue

            self.attempts.append(DeliveryAttempt(attempt, AttemptOutcome.SUCCESS))
            if attempt > 1:
                logger.info("metrics_sent_after_retries", retries=attempt - 1)
            return attempt

        assert last_error is not None
        self.attempts[-1].outcome = AttemptOutcome.TERMINAL
        raise DeliveryError(len(self.attempts), last_error) from last_error
