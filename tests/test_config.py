"""Tests for configuration loading module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from garage_cli.config import (
    ConfigError,
    load_env_file,
    load_from_env,
    load_settings,
)

VALID_ENV = {
    "S3_ENDPOINT": "http://localhost:3900",
    "S3_ACCESS_KEY": "GKtest",
    "S3_SECRET_KEY": "secret",
}


class TestLoadFromEnv:
    """Tests for load_from_env function."""

    def test_valid_env(self):
        """Build settings from the required variables and defaults."""
        with patch.dict(os.environ, VALID_ENV, clear=True):
            settings = load_from_env()

        assert settings.endpoint_url == "http://localhost:3900"
        assert settings.access_key == "GKtest"
        assert settings.secret_key == "secret"
        assert settings.region_name == "garage"
        assert settings.addressing_style == "path"

    def test_optional_overrides(self):
        env = {**VALID_ENV, "S3_REGION": "eu-west-1", "S3_ADDRESSING_STYLE": "virtual"}
        with patch.dict(os.environ, env, clear=True):
            settings = load_from_env()

        assert settings.region_name == "eu-west-1"
        assert settings.addressing_style == "virtual"

    @pytest.mark.parametrize("missing", ["S3_ENDPOINT", "S3_ACCESS_KEY", "S3_SECRET_KEY"])
    def test_missing_required_variable(self, missing):
        """Raise ConfigError naming the missing variable."""
        env = {k: v for k, v in VALID_ENV.items() if k != missing}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError, match=missing):
                load_from_env()

    def test_empty_variable_counts_as_missing(self):
        env = {**VALID_ENV, "S3_SECRET_KEY": ""}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError, match="S3_SECRET_KEY"):
                load_from_env()

    def test_invalid_addressing_style(self):
        env = {**VALID_ENV, "S3_ADDRESSING_STYLE": "sideways"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError, match="S3_ADDRESSING_STYLE"):
                load_from_env()


class TestLoadEnvFile:
    """Tests for dotenv loading."""

    def test_explicit_file_loaded(self, tmp_path: Path):
        env_file = tmp_path / "garage.env"
        env_file.write_text("S3_ENDPOINT=http://from-file:3900\n")

        with patch.dict(os.environ, {}, clear=True):
            assert load_env_file(str(env_file)) is True
            assert os.environ["S3_ENDPOINT"] == "http://from-file:3900"

    def test_environment_wins_over_file(self, tmp_path: Path):
        """Variables already set are not overridden by the file."""
        env_file = tmp_path / "garage.env"
        env_file.write_text("S3_ENDPOINT=http://from-file:3900\n")

        with patch.dict(os.environ, {"S3_ENDPOINT": "http://from-env:3900"}, clear=True):
            load_env_file(str(env_file))
            assert os.environ["S3_ENDPOINT"] == "http://from-env:3900"

    def test_missing_explicit_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Env file not found"):
            load_env_file(str(tmp_path / "nope.env"))

    def test_missing_default_file_is_fine(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_env_file() is False

    def test_default_file_in_cwd(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".env").write_text("S3_REGION=from-dotenv\n")
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {}, clear=True):
            assert load_env_file() is True
            assert os.environ["S3_REGION"] == "from-dotenv"


class TestLoadSettings:
    def test_reads_file_then_env(self, tmp_path: Path):
        env_file = tmp_path / "garage.env"
        env_file.write_text(
            "S3_ENDPOINT=http://garage:3900\n"
            "S3_ACCESS_KEY=GKfile\n"
            "S3_SECRET_KEY=file-secret\n"
        )

        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(str(env_file))

        assert settings.endpoint_url == "http://garage:3900"
        assert settings.access_key == "GKfile"

    def test_no_configuration_raises(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigError, match="Missing environment variable"):
                load_settings()
