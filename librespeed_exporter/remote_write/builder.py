"""Conversion of speed test results into remote write time series."""

import time

from librespeed_exporter.remote_write.types import (
    METRIC_NAME_LABEL,
    Batch,
    Label,
    Sample,
    TimeSeries,
)
from librespeed_exporter.speedtest.models import MeasurementResult

DOWNLOAD_METRIC = "librespeed_download_mbps"
UPLOAD_METRIC = "librespeed_upload_mbps"
PING_METRIC = "librespeed_ping_ms"
JITTER_METRIC = "librespeed_jitter_ms"

SERVER_URL_LABEL = "server_url"
INSTANCE_LABEL = "instance"


def current_timestamp_ms() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def create_time_series(
    metric: str,
    value: float,
    timestamp_ms: int,
    server_url: str,
    instance: str,
) -> TimeSeries:
    """Build a single-sample series labelled with name, server and instance."""
    return TimeSeries(
        labels=(
            Label(METRIC_NAME_LABEL, metric),
            Label(SERVER_URL_LABEL, server_url),
            Label(INSTANCE_LABEL, instance),
        ),
        sample=Sample(value=value, timestamp=timestamp_ms),
    )


def build_batch(result: MeasurementResult, timestamp_ms: int, instance: str) -> Batch:
    """Build the download, upload, ping and jitter series for one result.

    All four series share timestamp_ms. Values are passed through as reported.
    """
    measurements = (
        (DOWNLOAD_METRIC, result.download),
        (UPLOAD_METRIC, result.upload),
        (PING_METRIC, result.ping),
        (JITTER_METRIC, result.jitter),
    )
    return [
        create_time_series(metric, value, timestamp_ms, result.server_url, instance)
        for metric, value in measurements
    ]
