"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# (yaml section, yaml key) -> settings field
_YAML_FIELDS: dict[tuple[str, str], str] = {
    ("remote_write", "url"): "remote_write_url",
    ("remote_write", "username"): "remote_write_username",
    ("remote_write", "password"): "remote_write_password",
    ("remote_write", "timeout_seconds"): "remote_write_timeout_seconds",
    ("remote_write", "max_retries"): "max_retries",
    ("librespeed", "cli_path"): "librespeed_cli_path",
    ("librespeed", "local_json"): "librespeed_local_json",
    ("librespeed", "server_id"): "librespeed_server_id",
    ("librespeed", "timeout_seconds"): "librespeed_timeout_seconds",
    ("logging", "level"): "log_level",
    ("logging", "format"): "log_format",
    ("logging", "file"): "log_file",
}


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.librespeed-exporter/config.yaml (default location)
    3. Empty dict if no file exists

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = Path.home() / ".librespeed-exporter" / "config.yaml"

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        for (section, key), field_name in _YAML_FIELDS.items():
            values = yaml_data.get(section) or {}
            if key in values:
                flattened[field_name] = values[key]

        if "instance" in yaml_data:
            flattened["instance"] = yaml_data["instance"]

        return flattened

    except Exception as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that loads configuration from YAML file.

    This allows YAML config to be loaded with proper priority in the settings chain.
    """

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        return load_yaml_config(_config_path)


class Settings(BaseSettings):
    """
    Exporter configuration settings.

    Configuration priority (highest to lowest):
    1. Explicit keyword arguments (CLI flags)
    2. Environment variables (e.g., REMOTE_WRITE_URL=https://...)
    3. YAML configuration file (~/.librespeed-exporter/config.yaml)
    4. .env file
    5. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    remote_write_url: str | None = Field(
        default=None, description="Prometheus remote write endpoint"
    )
    remote_write_username: str | None = Field(
        default=None, description="Basic auth username (e.g. Grafana Cloud instance ID)"
    )
    remote_write_password: str | None = Field(
        default=None, description="Basic auth password (e.g. Grafana Cloud API key)"
    )
    remote_write_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP request timeout"
    )
    max_retries: int = Field(
        default=3, ge=0, description="Retries after the first failed delivery"
    )

    librespeed_cli_path: str = Field(
        default="librespeed-cli",
        description="Path to, or name on PATH of, the librespeed-cli executable",
    )
    librespeed_local_json: Path | None = Field(
        default=None, description="Local JSON server list passed to librespeed-cli"
    )
    librespeed_server_id: int | None = Field(
        default=None, description="Server ID to select from the local server list"
    )
    librespeed_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Speed test process timeout"
    )

    instance: str | None = Field(
        default=None, description="Instance label value (defaults to hostname)"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text", description="Log format"
    )
    log_file: Path | None = Field(
        default=None, description="Append log output to this file"
    )

    @field_validator("librespeed_local_json", "log_file")
    @classmethod
    def validate_paths(cls, v: Path | None) -> Path | None:
        """Expand ~ in optional paths."""
        if v is not None:
            v = v.expanduser()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - CLI overrides and tests
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Args:
        config_path: Optional path to YAML config file
            (defaults to ~/.librespeed-exporter/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings, _config_path
    _settings = None
    _config_path = None
