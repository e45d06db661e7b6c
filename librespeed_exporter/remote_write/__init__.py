"""Prometheus remote write support.

Builds labelled time series from speed test results, encodes them as
Snappy-compressed Protobuf and delivers them over HTTP with retries.
"""

from librespeed_exporter.remote_write.builder import (
    build_batch,
    create_time_series,
    current_timestamp_ms,
)
from librespeed_exporter.remote_write.client import (
    AttemptOutcome,
    DeliveryAttempt,
    RemoteWriteClient,
)
from librespeed_exporter.remote_write.protocol import PrometheusRemoteWrite
from librespeed_exporter.remote_write.types import (
    Batch,
    Label,
    Sample,
    TimeSeries,
    get_label_value,
)

__all__ = [
    "build_batch",
    "create_time_series",
    "current_timestamp_ms",
    "AttemptOutcome",
    "DeliveryAttempt",
    "RemoteWriteClient",
    "PrometheusRemoteWrite",
    "Batch",
    "Label",
    "Sample",
    "TimeSeries",
    "get_label_value",
]
