"""Shared pytest fixtures."""

import pytest

import librespeed_exporter.config
from librespeed_exporter.remote_write import build_batch
from librespeed_exporter.speedtest import MeasurementResult

SETTINGS_ENV_VARS = [
    "REMOTE_WRITE_URL",
    "REMOTE_WRITE_USERNAME",
    "REMOTE_WRITE_PASSWORD",
    "REMOTE_WRITE_TIMEOUT_SECONDS",
    "MAX_RETRIES",
    "LIBRESPEED_CLI_PATH",
    "LIBRESPEED_LOCAL_JSON",
    "LIBRESPEED_SERVER_ID",
    "LIBRESPEED_TIMEOUT_SECONDS",
    "INSTANCE",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
]


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep user config files, .env and environment out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    librespeed_exporter.config.reset_settings()
    yield home
    librespeed_exporter.config.reset_settings()


@pytest.fixture
def measurement():
    """Scenario result from librespeed-cli."""
    return MeasurementResult(
        download=100.5,
        upload=50.2,
        ping=10.1,
        jitter=1.2,
        server_url="http://example.com",
    )


@pytest.fixture
def batch(measurement):
    """Four-series batch built from the scenario result."""
    return build_batch(measurement, 1690000000000, "host1")


class FakeRunner:
    """CommandRunner returning canned output or raising a canned error."""

    def __init__(self, output: bytes = b"", error: Exception | None = None):
        self.output = output
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    def run(self, name, args):
        self.calls.append((name, list(args)))
        if self.error is not None:
            raise self.error
        return self.output

    @property
    def last_args(self) -> list[str]:
        return self.calls[-1][1]


@pytest.fixture
def fake_runner_factory():
    """Build FakeRunner instances."""
    return FakeRunner
