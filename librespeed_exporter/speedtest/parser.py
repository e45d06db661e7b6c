"""Parsing of librespeed-cli JSON output."""

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr, ValidationError

from librespeed_exporter.exceptions import EmptyResultError, ParseError
from librespeed_exporter.logging_config import get_logger
from librespeed_exporter.speedtest.models import MeasurementResult

logger = get_logger(__name__)


class ServerInfo(BaseModel):
    """Server block of a librespeed-cli result."""

    model_config = ConfigDict(extra="ignore")

    url: StrictStr = ""
    id: Optional[int] = None
    name: Optional[str] = None


class LibrespeedPayload(BaseModel):
    """One element of the `librespeed-cli --json` output array.

    Absent measurements read as zero and an absent server block as an empty
    one. Values must be JSON numbers; numeric strings are rejected.
    """

    model_config = ConfigDict(extra="ignore")

    download: StrictFloat = 0.0
    upload: StrictFloat = 0.0
    ping: StrictFloat = 0.0
    jitter: StrictFloat = 0.0
    server: ServerInfo = Field(default_factory=ServerInfo)

    def to_result(self) -> MeasurementResult:
        return MeasurementResult(
            download=self.download,
            upload=self.upload,
            ping=self.ping,
            jitter=self.jitter,
            server_url=self.server.url,
            server_id=self.server.id,
            server_name=self.server.name,
        )


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}"


def parse_results(raw: bytes) -> MeasurementResult:
    """Parse librespeed-cli output into a MeasurementResult.

    The tool prints a JSON array with one object per tested server. Only the
    first element is used; any further elements are ignored without being
    validated.

    Args:
        raw: Captured standard output of librespeed-cli

    Returns:
        MeasurementResult: The first result in the array

    Raises:
        ParseError: If the output is not a JSON array or a field of the first
            element has the wrong type
        EmptyResultError: If the array is empty
    """
    logger.debug("librespeed_raw_output", output=raw.decode("utf-8", errors="replace"))

    try:
        data: Any = json.loads(raw)
    except ValueError as e:
        logger.error("librespeed_output_not_json", error=str(e))
        raise ParseError(str(e)) from e

    if not isinstance(data, list):
        raise ParseError(f"expected a JSON array, got {type(data).__name__}")

    if not data:
        logger.error("librespeed_no_results")
        raise EmptyResultError()

    if len(data) > 1:
        logger.debug("librespeed_extra_results_ignored", ignored=len(data) - 1)

    try:
        payload = LibrespeedPayload.model_validate(data[0])
    except ValidationError as e:
        raise ParseError(_first_error(e)) from e

    result = payload.to_result()
    logger.info(
        "speedtest_result",
        download_mbps=round(result.download, 2),
        upload_mbps=round(result.upload, 2),
        ping_ms=round(result.ping, 2),
        jitter_ms=round(result.jitter, 2),
        server_url=result.server_url,
    )
    return result
