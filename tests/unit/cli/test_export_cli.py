"""Tests for the run and check CLI commands."""

import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from librespeed_exporter.cli.main import app
from librespeed_exporter.exceptions import ConfigurationError, DeliveryError, RemoteRejectionError
from librespeed_exporter.exporter import ExportSummary
from librespeed_exporter.speedtest import MeasurementResult

runner = CliRunner()

REQUIRED_ARGS = [
    "--url",
    "https://metrics.test/api/prom/push",
    "--username",
    "123456",
    "--password",
    "secret",
]


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def summary():
    return ExportSummary(
        result=MeasurementResult(100.5, 50.2, 10.1, 1.2, "http://example.com"),
        instance="host1",
        timestamp_ms=1690000000000,
        series_count=4,
        attempts=1,
        duration_seconds=12.5,
    )


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "librespeed-exporter version" in result.stdout


class TestRun:
    """Tests for the run command."""

    def test_run_success(self, summary):
        """Test a successful export prints the results."""
        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(app, ["run", *REQUIRED_ARGS])

        assert result.exit_code == 0
        assert "100.50" in result.stdout
        assert "host1" in result.stdout
        assert "Exporter completed" in result.stdout

        settings = mock_exporter_class.call_args[0][0]
        assert settings.remote_write_url == "https://metrics.test/api/prom/push"
        assert settings.remote_write_username == "123456"
        assert settings.remote_write_password == "secret"

    def test_flags_override_settings(self, summary, tmp_path):
        """Test optional flags reach the settings."""
        servers = tmp_path / "servers.json"
        servers.write_text("[]")

        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(
                app,
                [
                    "run",
                    *REQUIRED_ARGS,
                    "--local-json",
                    str(servers),
                    "--server-id",
                    "3",
                    "--max-retries",
                    "1",
                    "--timeout",
                    "5",
                    "--instance",
                    "office",
                    "--cli-path",
                    "/opt/librespeed-cli",
                ],
            )

        assert result.exit_code == 0
        settings = mock_exporter_class.call_args[0][0]
        assert settings.librespeed_local_json == servers
        assert settings.librespeed_server_id == 3
        assert settings.max_retries == 1
        assert settings.remote_write_timeout_seconds == 5.0
        assert settings.instance == "office"
        assert settings.librespeed_cli_path == "/opt/librespeed-cli"

    def test_flag_paths_expand_home(self, summary, isolated_settings):
        """Test ~ in --local-json and --logfile expands like config values."""
        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(
                app,
                [
                    "run",
                    *REQUIRED_ARGS,
                    "--local-json",
                    "~/servers.json",
                    "--logfile",
                    "~/exporter.log",
                ],
            )

        assert result.exit_code == 0
        settings = mock_exporter_class.call_args[0][0]
        assert settings.librespeed_local_json == isolated_settings / "servers.json"
        assert settings.log_file == isolated_settings / "exporter.log"

    def test_missing_url(self):
        """Test that a missing URL exits non-zero before measuring."""
        with patch("librespeed_exporter.exporter.run_librespeed") as mock_run:
            result = runner.invoke(app, ["run", "--username", "u", "--password", "p"])

        assert result.exit_code == 1
        mock_run.assert_not_called()

    def test_missing_password(self):
        with patch("librespeed_exporter.exporter.run_librespeed") as mock_run:
            result = runner.invoke(
                app, ["run", "--url", "https://metrics.test/push", "--username", "u"]
            )

        assert result.exit_code == 1
        mock_run.assert_not_called()

    def test_delivery_failure_exit_code(self):
        """Test that a terminal delivery failure exits with status 1."""
        error = DeliveryError(1, RemoteRejectionError(403, "Forbidden", ""))

        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.side_effect = error

            result = runner.invoke(app, ["run", *REQUIRED_ARGS])

        assert result.exit_code == 1

    def test_logfile_in_missing_directory(self, tmp_path):
        """Test that an unusable log path is rejected."""
        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            result = runner.invoke(
                app,
                ["run", *REQUIRED_ARGS, "--logfile", str(tmp_path / "nope" / "x.log")],
            )

        assert result.exit_code == 1
        mock_exporter_class.assert_not_called()

    def test_logfile_written(self, summary, tmp_path):
        log_file = tmp_path / "librespeed_exporter.log"

        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(app, ["run", *REQUIRED_ARGS, "--logfile", str(log_file)])

        assert result.exit_code == 0
        assert log_file.exists()

    def test_config_file(self, summary, tmp_path):
        """Test values from --config are used."""
        config = tmp_path / "config.yaml"
        config.write_text(
            "remote_write:\n"
            "  url: https://yaml.test/push\n"
            "  username: yaml-user\n"
            "  password: yaml-pass\n"
        )

        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(app, ["--config", str(config), "run"])

        assert result.exit_code == 0
        settings = mock_exporter_class.call_args[0][0]
        assert settings.remote_write_url == "https://yaml.test/push"
        assert settings.remote_write_username == "yaml-user"

    def test_verbose_sets_debug(self, summary):
        with patch("librespeed_exporter.cli.export.Exporter") as mock_exporter_class:
            mock_exporter_class.return_value.run.return_value = summary

            result = runner.invoke(app, ["--verbose", "run", *REQUIRED_ARGS])

        assert result.exit_code == 0
        assert mock_exporter_class.call_args[0][0].log_level == "DEBUG"


class TestCheck:
    """Tests for the check command."""

    def test_check_success(self):
        with patch(
            "librespeed_exporter.cli.export.resolve_cli_path",
            return_value="/usr/bin/librespeed-cli",
        ):
            result = runner.invoke(app, ["check", *REQUIRED_ARGS])

        assert result.exit_code == 0
        assert "/usr/bin/librespeed-cli" in result.stdout
        assert "secret" not in result.stdout
        assert "Configuration is valid" in result.stdout

    def test_check_cli_missing(self):
        with patch(
            "librespeed_exporter.cli.export.resolve_cli_path",
            side_effect=ConfigurationError("librespeed-cli not found: librespeed-cli"),
        ):
            result = runner.invoke(app, ["check", *REQUIRED_ARGS])

        assert result.exit_code == 1

    def test_check_invalid_url(self):
        result = runner.invoke(
            app, ["check", "--url", "ftp://x", "--username", "u", "--password", "p"]
        )

        assert result.exit_code == 1
