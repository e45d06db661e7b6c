"""Main CLI entry point for librespeed-exporter."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from librespeed_exporter import __version__
from librespeed_exporter.exceptions import ExporterError

app = typer.Typer(
    name="librespeed-exporter",
    help="Run librespeed-cli and push the results via Prometheus remote write",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
console_err = Console(stderr=True)


class CLIState:
    """Global CLI state."""

    verbose: bool = False
    config_path: Optional[Path] = None


state = CLIState()


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"librespeed-exporter version: {__version__}")
        console.print(f"Python: {sys.version.split()[0]}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    librespeed-exporter

    Measures download, upload, ping and jitter with librespeed-cli and sends
    them as four time series to a Prometheus remote write endpoint.
    """
    state.verbose = verbose
    state.config_path = config

    ctx.obj = state


def handle_error(error: Exception) -> None:
    """Handle CLI errors with user-friendly messages.

    Args:
        error: Exception to handle
    """
    if isinstance(error, ExporterError):
        console_err.print(f"\n[red]Error:[/red] {error.message}")

        if state.verbose and error.context:
            console_err.print("\n[yellow]Context:[/yellow]")
            for key, value in error.context.items():
                console_err.print(f"  {key}: {value}")
    else:
        console_err.print(f"\n[red]Unexpected Error:[/red] {str(error)}")

        if state.verbose:
            import traceback

            console_err.print("\n[yellow]Traceback:[/yellow]")
            console_err.print(traceback.format_exc())

    sys.exit(1)


from librespeed_exporter.cli import export  # noqa: E402

app.command("run")(export.run)
app.command("check")(export.check)


def main_cli() -> None:
    """Entry point for CLI application with error handling."""
    try:
        app()
    except ExporterError as e:
        handle_error(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        handle_error(e)


if __name__ == "__main__":
    main_cli()
