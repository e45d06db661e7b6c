"""CLI module for librespeed-exporter."""

from librespeed_exporter.cli import export
from librespeed_exporter.cli.main import app, main_cli

__all__ = ["app", "main_cli", "export"]
