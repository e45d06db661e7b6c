"""Speed test result model."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MeasurementResult:
    """One librespeed-cli result.

    Throughput is in megabits per second, latency in milliseconds.
    """

    download: float
    upload: float
    ping: float
    jitter: float
    server_url: str
    server_id: Optional[int] = None
    server_name: Optional[str] = None
