"""Prometheus remote write protocol encoder.

This module builds Prometheus remote write request bodies: a Protobuf
WriteRequest message compressed with Snappy block format.
"""

import logging
from typing import Sequence

import snappy
from google.protobuf.message import EncodeError

from librespeed_exporter.exceptions import EmptyBatchError, EncodingError
from librespeed_exporter.remote_write import prompb
from librespeed_exporter.remote_write.types import Label, Sample, TimeSeries

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/x-protobuf"
CONTENT_ENCODING = "snappy"
REMOTE_WRITE_VERSION = "0.1.0"


class PrometheusRemoteWrite:
    """Encoder for the Prometheus remote write protocol.

    Protocol details:
    - Content-Type: application/x-protobuf
    - Content-Encoding: snappy
    - X-Prometheus-Remote-Write-Version: 0.1.0
    - Body: Snappy-compressed Protobuf WriteRequest message

    Example:
        handler = PrometheusRemoteWrite()

        body = handler.encode_write_request(batch)

        series = handler.extract_time_series(handler.decode_write_request(body))
    """

    @staticmethod
    def headers() -> dict[str, str]:
        """HTTP headers required on every remote write request."""
        return {
            "Content-Encoding": CONTENT_ENCODING,
            "Content-Type": CONTENT_TYPE,
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
        }

    @staticmethod
    def build_write_request(series: Sequence[TimeSeries]) -> prompb.WriteRequest:
        """Convert time series into a WriteRequest message.

        Labels keep their order; each series carries its single sample.
        """
        write_request = prompb.WriteRequest()
        for ts in series:
            message = write_request.timeseries.add()
            for label in ts.labels:
                message.labels.add(name=label.name, value=label.value)
            message.samples.add(value=ts.sample.value, timestamp=ts.sample.timestamp)
        return write_request

    @staticmethod
    def encode_write_request(series: Sequence[TimeSeries]) -> bytes:
        """Serialize and compress time series into a request body.

        Args:
            series: Non-empty batch of time series

        Returns:
            bytes: Snappy-compressed Protobuf WriteRequest

        Raises:
            EmptyBatchError: If series is empty
            EncodingError: If serialization or compression fails
        """
        if not series:
            raise EmptyBatchError()

        try:
            write_request = PrometheusRemoteWrite.build_write_request(series)
            data = write_request.SerializeToString()
            compressed = snappy.compress(data)
        except (EncodeError, TypeError, ValueError) as e:
            logger.error(f"Failed to encode write request: {e}")
            raise EncodingError(str(e)) from e

        logger.debug(
            f"Payload size: {len(data)} bytes (compressed: {len(compressed)} bytes)"
        )
        return compressed

    @staticmethod
    def decode_write_request(compressed_data: bytes) -> prompb.WriteRequest:
        """Decode a Snappy-compressed Protobuf WriteRequest.

        Raises:
            ValueError: If decompression or decoding fails
        """
        try:
            decompressed = snappy.decompress(compressed_data)

            write_request = prompb.WriteRequest()
            write_request.ParseFromString(decompressed)
            return write_request

        except snappy.UncompressError as e:
            logger.error(f"Failed to decompress Snappy data: {e}")
            raise ValueError(f"Failed to decompress write request: {e}") from e
        except Exception as e:
            logger.error(f"Failed to decode write request: {e}")
            raise ValueError(f"Failed to decode write request: {e}") from e

    @staticmethod
    def extract_time_series(write_request: prompb.WriteRequest) -> list[TimeSeries]:
        """Convert a WriteRequest back into time series, one per sample."""
        series = []
        for ts in write_request.timeseries:
            labels = tuple(Label(label.name, label.value) for label in ts.labels)
            for sample in ts.samples:
                series.append(
                    TimeSeries(
                        labels=labels,
                        sample=Sample(value=sample.value, timestamp=sample.timestamp),
                    )
                )
        return series
