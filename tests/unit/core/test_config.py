"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from librespeed_exporter.config import Settings, get_settings, load_yaml_config, reset_settings

YAML_CONFIG = """
remote_write:
  url: https://yaml.test/push
  username: "42"
  password: from-yaml
  timeout_seconds: 10
  max_retries: 5
librespeed:
  cli_path: /usr/local/bin/librespeed-cli
  local_json: servers.json
  server_id: 3
logging:
  level: debug
  format: json
instance: office-nuc
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML_CONFIG)
    return path


class TestLoadYamlConfig:
    """Test YAML flattening."""

    def test_flattens_sections(self, config_file):
        data = load_yaml_config(config_file)

        assert data == {
            "remote_write_url": "https://yaml.test/push",
            "remote_write_username": "42",
            "remote_write_password": "from-yaml",
            "remote_write_timeout_seconds": 10,
            "max_retries": 5,
            "librespeed_cli_path": "/usr/local/bin/librespeed-cli",
            "librespeed_local_json": "servers.json",
            "librespeed_server_id": 3,
            "log_level": "debug",
            "log_format": "json",
            "instance": "office-nuc",
        }

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(tmp_path / "absent.yaml") == {}

    def test_default_location(self, isolated_settings):
        """Test ~/.librespeed-exporter/config.yaml is read by default."""
        config_dir = isolated_settings / ".librespeed-exporter"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("instance: home-box\n")

        assert load_yaml_config() == {"instance": "home-box"}

    def test_invalid_yaml_warns(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("remote_write: [unclosed")

        with pytest.warns(UserWarning, match="Failed to load config"):
            assert load_yaml_config(path) == {}


class TestSettings:
    """Test Settings sources and validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.remote_write_url is None
        assert settings.remote_write_timeout_seconds == 30.0
        assert settings.max_retries == 3
        assert settings.librespeed_cli_path == "librespeed-cli"
        assert settings.librespeed_timeout_seconds == 30.0
        assert settings.librespeed_server_id is None
        assert settings.log_level == "INFO"
        assert settings.remote_write_password is None

    def test_yaml_source(self, config_file):
        settings = get_settings(config_file, reload=True)

        assert settings.remote_write_url == "https://yaml.test/push"
        assert settings.max_retries == 5
        assert settings.librespeed_local_json == Path("servers.json")
        assert settings.log_level == "DEBUG"
        assert settings.instance == "office-nuc"
        assert settings.remote_write_username == "42"
        assert settings.remote_write_password == "from-yaml"

    def test_environment_overrides_yaml(self, config_file, monkeypatch):
        monkeypatch.setenv("REMOTE_WRITE_PASSWORD", "from-env")
        monkeypatch.setenv("MAX_RETRIES", "1")

        settings = get_settings(config_file, reload=True)

        assert settings.remote_write_password == "from-env"
        assert settings.max_retries == 1

    def test_init_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("REMOTE_WRITE_URL", "https://env.test/push")

        settings = Settings(remote_write_url="https://flag.test/push")

        assert settings.remote_write_url == "https://flag.test/push"

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            Settings(max_retries=-1)

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(remote_write_timeout_seconds=0)

    def test_log_file_expanded(self, isolated_settings):
        settings = Settings(log_file="~/exporter.log")

        assert settings.log_file == isolated_settings / "exporter.log"

    def test_get_settings_cached(self):
        first = get_settings()

        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
