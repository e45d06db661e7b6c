"""librespeed-cli process execution.

The pipeline only needs a way to run a program and get its standard output
back, expressed by the CommandRunner protocol. SubprocessRunner is the real
implementation; tests substitute their own.
"""

import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional, Protocol, Sequence

from librespeed_exporter.exceptions import ConfigurationError, ExecutionError
from librespeed_exporter.logging_config import get_logger
from librespeed_exporter.speedtest.models import MeasurementResult
from librespeed_exporter.speedtest.parser import parse_results

logger = get_logger(__name__)

BASE_ARGS = ("--telemetry-level", "basic", "--json", "--verbose")


class CommandRunner(Protocol):
    """Runs a program and returns its captured standard output."""

    def run(self, name: str, args: Sequence[str]) -> bytes: ...


class SubprocessRunner:
    """CommandRunner backed by subprocess.run."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def run(self, name: str, args: Sequence[str]) -> bytes:
        command = [name, *args]
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(name, f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise ExecutionError(name, str(e)) from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            logger.error(
                "command_failed",
                command=name,
                returncode=completed.returncode,
                stderr=stderr,
            )
            raise ExecutionError(
                name,
                f"exit status {completed.returncode}",
                returncode=completed.returncode,
                stderr=stderr,
            )

        return completed.stdout


def build_librespeed_args(
    local_json: Optional[Path | str] = None,
    server_id: Optional[int] = None,
) -> list[str]:
    """Build librespeed-cli arguments.

    The server ID only selects from a local server list, so it is passed
    along only when local_json is given.
    """
    args = list(BASE_ARGS)
    if local_json:
        args += ["--local-json", str(local_json)]
        if server_id is not None:
            args += ["--server", str(server_id)]
    return args


def resolve_cli_path(configured: str | Path) -> str:
    """Resolve the librespeed-cli executable.

    An existing file path is used as is, anything else is looked up on PATH.

    Raises:
        ConfigurationError: If the executable cannot be found
    """
    candidate = Path(configured).expanduser()
    if candidate.is_file():
        logger.debug("librespeed_cli_found", path=str(candidate))
        return str(candidate)

    found = shutil.which(str(configured))
    if found is None:
        raise ConfigurationError(
            f"librespeed-cli not found: {configured}", cli_path=str(configured)
        )
    logger.debug("librespeed_cli_found", path=found)
    return found


def run_librespeed(
    runner: CommandRunner,
    cli_path: str,
    local_json: Optional[Path | str] = None,
    server_id: Optional[int] = None,
) -> MeasurementResult:
    """Run one speed test and parse its result.

    ExecutionError from the runner propagates unchanged.
    """
    args = build_librespeed_args(local_json, server_id)
    logger.info("running_librespeed", command=" ".join([cli_path, *args]))

    start = time.monotonic()
    try:
        output = runner.run(cli_path, args)
    except ExecutionError:
        logger.error(
            "librespeed_failed", duration_seconds=round(time.monotonic() - start, 3)
        )
        raise

    logger.info(
        "librespeed_completed", duration_seconds=round(time.monotonic() - start, 3)
    )
    return parse_results(output)
