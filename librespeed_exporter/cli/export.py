"""Speed test export commands.

`run` measures and pushes one batch; `check` validates configuration and
locates librespeed-cli without measuring anything.
"""

from pathlib import Path
from typing import Any, Optional

import typer

from librespeed_exporter.cli.output import print_dict, print_error, print_success
from librespeed_exporter.config import Settings, get_settings
from librespeed_exporter.exceptions import ExporterError
from librespeed_exporter.exporter import Exporter, validate_configuration
from librespeed_exporter.logging_config import get_logger, log_error, setup_logging
from librespeed_exporter.speedtest import resolve_cli_path

logger = get_logger(__name__)


def _load_settings(ctx: typer.Context, **overrides: Any) -> Settings:
    """Load settings and apply command line overrides that were given."""
    config_path = ctx.obj.config_path if ctx.obj else None
    settings = get_settings(config_path, reload=True)

    values = {key: value for key, value in overrides.items() if value is not None}
    if ctx.obj and ctx.obj.verbose:
        values["log_level"] = "DEBUG"
    if values:
        # Overrides pass through the field validators like config values
        settings = Settings.model_validate({**settings.model_dump(), **values})
    return settings


def _fail(error: ExporterError, operation: str) -> None:
    log_error(logger, error, operation)
    print_error(error.message)
    raise typer.Exit(1)


def run(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None, "--url", help="Prometheus remote write URL (e.g. Grafana Cloud)"
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="Basic auth username / instance ID"
    ),
    password: Optional[str] = typer.Option(
        None, "--password", "-p", help="Basic auth password / API key"
    ),
    logfile: Optional[Path] = typer.Option(
        None, "--logfile", "-l", help="Append logs to this file"
    ),
    local_json: Optional[Path] = typer.Option(
        None, "--local-json", help="JSON file with the librespeed server list"
    ),
    server_id: Optional[int] = typer.Option(
        None, "--server-id", help="ID of the server to use from --local-json"
    ),
    cli_path: Optional[str] = typer.Option(
        None, "--cli-path", help="Path to the librespeed-cli executable"
    ),
    instance: Optional[str] = typer.Option(
        None, "--instance", help="Instance label value (default: hostname)"
    ),
    max_retries: Optional[int] = typer.Option(
        None, "--max-retries", min=0, help="Retries after a failed delivery"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.1, help="HTTP request timeout in seconds"
    ),
) -> None:
    """
    Run one speed test and push the results.

    Examples:
        librespeed-exporter run --url https://prometheus.example/api/prom/push \\
            --username 123456 --password $API_KEY

        librespeed-exporter run --local-json servers.json --server-id 3 \\
            --logfile /var/log/librespeed_exporter.log
    """
    settings = _load_settings(
        ctx,
        remote_write_url=url,
        remote_write_username=username,
        remote_write_password=password,
        log_file=logfile,
        librespeed_local_json=local_json,
        librespeed_server_id=server_id,
        librespeed_cli_path=cli_path,
        instance=instance,
        max_retries=max_retries,
        remote_write_timeout_seconds=timeout,
    )

    try:
        setup_logging(settings)
        logger.info("exporter_starting", log_file=str(settings.log_file or ""))
        summary = Exporter(settings).run()
    except ExporterError as e:
        _fail(e, "export")

    print_dict(
        {
            "download_mbps": f"{summary.result.download:.2f}",
            "upload_mbps": f"{summary.result.upload:.2f}",
            "ping_ms": f"{summary.result.ping:.2f}",
            "jitter_ms": f"{summary.result.jitter:.2f}",
            "server_url": summary.result.server_url,
            "instance": summary.instance,
            "attempts": summary.attempts,
        },
        title="Speed test exported",
    )
    print_success(f"Exporter completed in {summary.duration_seconds:.2f}s")


def check(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="Prometheus remote write URL"),
    username: Optional[str] = typer.Option(None, "--username", "-u"),
    password: Optional[str] = typer.Option(None, "--password", "-p"),
    cli_path: Optional[str] = typer.Option(None, "--cli-path"),
) -> None:
    """
    Validate configuration and locate librespeed-cli.
    """
    settings = _load_settings(
        ctx,
        remote_write_url=url,
        remote_write_username=username,
        remote_write_password=password,
        librespeed_cli_path=cli_path,
    )

    try:
        setup_logging(settings)
        validate_configuration(settings)
        resolved = resolve_cli_path(settings.librespeed_cli_path)
    except ExporterError as e:
        _fail(e, "check")

    print_dict(
        {
            "remote_write_url": settings.remote_write_url,
            "remote_write_username": settings.remote_write_username,
            "remote_write_password": "***REDACTED***",
            "remote_write_timeout_seconds": settings.remote_write_timeout_seconds,
            "max_retries": settings.max_retries,
            "librespeed_cli_path": resolved,
            "librespeed_local_json": settings.librespeed_local_json,
            "librespeed_server_id": settings.librespeed_server_id,
            "instance": settings.instance,
            "log_file": settings.log_file,
        },
        title="Configuration",
    )
    print_success("Configuration is valid")
