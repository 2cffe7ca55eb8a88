"""Tests for configuration loading module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from obscli.config import (
    ACCESS_KEY_ENV,
    REGION_ENV,
    SECRET_KEY_ENV,
    build_config,
    load_from_json,
    resolve_credentials,
    resolve_region,
)
from obscli.errors import ConfigurationError
from obscli.models import DEFAULT_ENDPOINT_TEMPLATE

NO_ENV = {ACCESS_KEY_ENV: "", SECRET_KEY_ENV: "", REGION_ENV: ""}


class TestLoadFromJson:
    """Tests for load_from_json function."""

    def test_valid_config(self, tmp_path: Path):
        """Load a config file with every supported field."""
        config_data = {
            "access_key": "file-ak",
            "secret_key": "file-sk",
            "region": "la-south-2",
            "endpoint_template": "obs.{region}.example.com",
            "timeout": 30,
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        assert load_from_json(str(config_file)) == config_data

    def test_missing_file_returns_empty(self, tmp_path: Path):
        """A missing config file is not an error; other sources may apply."""
        assert load_from_json(str(tmp_path / "nonexistent.json")) == {}

    def test_malformed_json_raises_error(self, tmp_path: Path):
        """Raise ConfigurationError when config file contains invalid JSON."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_from_json(str(config_file))

    def test_non_object_raises_error(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_from_json(str(config_file))


class TestResolveCredentials:
    """Tests for credential precedence: flags, environment, file."""

    FILE_SETTINGS = {"access_key": "file-ak", "secret_key": "file-sk"}

    def test_flags_win(self):
        with patch.dict(os.environ, {ACCESS_KEY_ENV: "env-ak", SECRET_KEY_ENV: "env-sk"}):
            credentials = resolve_credentials("flag-ak", "flag-sk", self.FILE_SETTINGS)

        assert credentials.access_key == "flag-ak"
        assert credentials.secret_key == "flag-sk"

    def test_environment_before_file(self):
        with patch.dict(os.environ, {ACCESS_KEY_ENV: "env-ak", SECRET_KEY_ENV: "env-sk"}):
            credentials = resolve_credentials(None, None, self.FILE_SETTINGS)

        assert credentials.access_key == "env-ak"

    def test_file_used_last(self):
        with patch.dict(os.environ, NO_ENV):
            credentials = resolve_credentials(None, None, self.FILE_SETTINGS)

        assert credentials.access_key == "file-ak"
        assert credentials.secret_key == "file-sk"

    def test_partial_flags_fall_through(self):
        """A lone --ak is not enough; the pair comes from the next source."""
        with patch.dict(os.environ, {ACCESS_KEY_ENV: "env-ak", SECRET_KEY_ENV: "env-sk"}):
            credentials = resolve_credentials("flag-ak", None, {})

        assert credentials.access_key == "env-ak"

    def test_missing_everywhere(self):
        with patch.dict(os.environ, NO_ENV):
            with pytest.raises(ConfigurationError) as exc_info:
                resolve_credentials(None, None, {})

        message = str(exc_info.value)
        assert "--ak" in message
        assert ACCESS_KEY_ENV in message
        assert "config file" in message

    def test_secret_not_in_repr(self):
        credentials = resolve_credentials("flag-ak", "very-secret", {})
        assert "very-secret" not in repr(credentials)


class TestResolveRegion:
    def test_flag_wins(self):
        with patch.dict(os.environ, {REGION_ENV: "env-region"}):
            assert resolve_region("flag-region", {"region": "file-region"}) == "flag-region"

    def test_environment_before_file(self):
        with patch.dict(os.environ, {REGION_ENV: "env-region"}):
            assert resolve_region(None, {"region": "file-region"}) == "env-region"

    def test_file(self):
        with patch.dict(os.environ, NO_ENV):
            assert resolve_region(None, {"region": "file-region"}) == "file-region"

    def test_missing(self):
        with patch.dict(os.environ, NO_ENV):
            with pytest.raises(ConfigurationError, match="Missing region"):
                resolve_region(None, {})


class TestBuildConfig:
    def test_defaults(self):
        config = build_config("la-south-2")

        assert config.region == "la-south-2"
        assert config.endpoint_template == DEFAULT_ENDPOINT_TEMPLATE
        assert config.scheme == "http"
        assert config.timeout == 60.0
        assert config.abort_on_failure is True
        assert config.service_host == "obs.la-south-2.myhuaweicloud.com"

    def test_file_settings(self):
        config = build_config(
            "eu-west-0",
            {"endpoint_template": "obs.{region}.example.com", "timeout": "15", "scheme": "https"},
        )

        assert config.service_host == "obs.eu-west-0.example.com"
        assert config.timeout == 15.0
        assert config.scheme == "https"

    def test_https_flag(self):
        assert build_config("r", {"scheme": "http"}, https=True).scheme == "https"

    def test_abort_flag(self):
        assert build_config("r", abort_on_failure=False).abort_on_failure is False

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError, match="timeout"):
            build_config("r", {"timeout": "soon"})

    def test_invalid_scheme(self):
        with pytest.raises(ConfigurationError, match="scheme"):
            build_config("r", {"scheme": "ftp"})
