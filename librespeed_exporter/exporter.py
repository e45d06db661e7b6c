"""Exporter pipeline: run a speed test and push the results."""

import socket
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlparse

from librespeed_exporter.config import Settings
from librespeed_exporter.exceptions import ConfigurationError
from librespeed_exporter.logging_config import get_logger, log_operation
from librespeed_exporter.remote_write import (
    RemoteWriteClient,
    build_batch,
    current_timestamp_ms,
)
from librespeed_exporter.speedtest import (
    CommandRunner,
    MeasurementResult,
    SubprocessRunner,
    resolve_cli_path,
    run_librespeed,
)

logger = get_logger(__name__)

UNKNOWN_INSTANCE = "unknown"


@dataclass
class ExportSummary:
    result: MeasurementResult
    instance: str
    timestamp_ms: int
    series_count: int
    attempts: int
    duration_seconds: float


def validate_configuration(settings: Settings) -> None:
    """Check that the remote write target and credentials are usable.

    Raises:
        ConfigurationError: If the URL, username or password is missing or
            the URL is not an absolute http(s) URL
    """
    if not settings.remote_write_url:
        raise ConfigurationError("Remote write URL is required")
    if not settings.remote_write_username:
        raise ConfigurationError("Username is required")
    if not settings.remote_write_password:
        raise ConfigurationError("Password is required")

    parsed = urlparse(settings.remote_write_url)
    if parsed.scheme not in ("http", "https"):
        raise ConfigurationError(
            "Remote write URL must use http or https scheme",
            url=settings.remote_write_url,
        )
    if not parsed.netloc:
        raise ConfigurationError(
            "Remote write URL must include a host", url=settings.remote_write_url
        )

    logger.info(
        "configuration_validated",
        url=settings.remote_write_url,
        username=settings.remote_write_username,
    )


def resolve_instance(
    configured: Optional[str] = None,
    hostname_func: Callable[[], str] = socket.gethostname,
) -> str:
    """Instance label value: configured name, else hostname, else "unknown"."""
    if configured:
        return configured
    try:
        hostname = hostname_func()
    except OSError as e:
        logger.warning("hostname_lookup_failed", error=str(e), fallback=UNKNOWN_INSTANCE)
        return UNKNOWN_INSTANCE
    return hostname or UNKNOWN_INSTANCE


class Exporter:
    """Runs one measurement and delivers it as a single remote write batch.

    The runner and client are created from settings unless given, which is
    how tests substitute fakes for the process and the HTTP endpoint.
    """

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        client: Optional[RemoteWriteClient] = None,
        hostname_func: Callable[[], str] = socket.gethostname,
    ):
        self.settings = settings
        self.runner = runner or SubprocessRunner(timeout=settings.librespeed_timeout_seconds)
        self.client = client
        self.hostname_func = hostname_func

    def _create_client(self) -> RemoteWriteClient:
        return RemoteWriteClient(
            url=self.settings.remote_write_url or "",
            username=self.settings.remote_write_username or "",
            password=self.settings.remote_write_password or "",
            timeout=self.settings.remote_write_timeout_seconds,
            max_retries=self.settings.max_retries,
        )

    def measure(self) -> MeasurementResult:
        cli_path = resolve_cli_path(self.settings.librespeed_cli_path)
        return run_librespeed(
            self.runner,
            cli_path,
            local_json=self.settings.librespeed_local_json,
            server_id=self.settings.librespeed_server_id,
        )

    def run(self) -> ExportSummary:
        """Validate configuration, measure, build the batch and deliver it."""
        start = time.monotonic()
        validate_configuration(self.settings)

        result = self.measure()

        instance = resolve_instance(self.settings.instance, self.hostname_func)
        logger.info("instance_resolved", instance=instance)

        timestamp_ms = current_timestamp_ms()
        batch = build_batch(result, timestamp_ms, instance)

        client = self.client or self._create_client()
        try:
            attempts = client.send_with_retry(batch)
        finally:
            if self.client is None:
                client.close()

        summary = ExportSummary(
            result=result,
            instance=instance,
            timestamp_ms=timestamp_ms,
            series_count=len(batch),
            attempts=attempts,
            duration_seconds=time.monotonic() - start,
        )
        log_operation(
            logger,
            "export",
            series=summary.series_count,
            attempts=summary.attempts,
            duration_seconds=round(summary.duration_seconds, 3),
        )
        return summary
