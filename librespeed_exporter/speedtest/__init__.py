"""librespeed-cli invocation and result parsing."""

from librespeed_exporter.speedtest.models import MeasurementResult
from librespeed_exporter.speedtest.parser import parse_results
from librespeed_exporter.speedtest.runner import (
    CommandRunner,
    SubprocessRunner,
    build_librespeed_args,
    resolve_cli_path,
    run_librespeed,
)

__all__ = [
    "MeasurementResult",
    "parse_results",
    "CommandRunner",
    "SubprocessRunner",
    "build_librespeed_args",
    "resolve_cli_path",
    "run_librespeed",
]
