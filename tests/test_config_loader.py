"""Tests for configuration loader and validator."""

from pathlib import Path

import pytest
import yaml

from swift_artifact.utils.config_loader import (
    ConfigError,
    get_config_example,
    load_config,
    validate_config,
)


class TestConfigLoader:
    """Tests for load_config function."""

    def test_load_valid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "upload.yaml"
        config_file.write_text(
            """
version: "1.0"
container: releases
source: dist/**
strip-prefix: dist/
exclude:
  - dist/**/*.map
"""
        )

        config = load_config(config_file)

        assert config["version"] == "1.0"
        assert config["container"] == "releases"
        assert config["strip_prefix"] == "dist/"
        assert config["exclude"] == ["dist/**/*.map"]

    def test_load_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_load_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_config(config_file)

    def test_load_non_mapping(self, tmp_path: Path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(config_file)

    def test_load_invalid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text(
            """
container: releases
exclude: [unclosed bracket
"""
        )

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)

    def test_load_directory_raises_error(self, tmp_path: Path):
        with pytest.raises(ValueError, match="not a file"):
            load_config(tmp_path)

    def test_example_is_valid(self, tmp_path: Path):
        config_file = tmp_path / "example.yaml"
        config_file.write_text(get_config_example())

        assert validate_config(load_config(config_file)) == []


class TestConfigValidation:
    """Tests for validate_config function."""

    def test_valid_config(self):
        config = {
            "version": "1.0",
            "endpoint": "https://auth",
            "auth_version": 2,
            "region": "RegionOne",
            "tenant": "ci",
            "exclude": ["*.map"],
            "dry_run": True,
        }
        assert validate_config(config) == []

    def test_unsupported_version(self):
        errors = validate_config({"version": "2.0"})
        assert len(errors) == 1
        assert errors[0].field == "version"

    def test_unknown_setting(self):
        errors = validate_config({"bucket": "releases"})
        assert [e.field for e in errors] == ["bucket"]

    def test_string_fields_must_be_strings(self):
        errors = validate_config({"container": 42})
        assert errors[0].field == "container"
        assert errors[0].value == "int"

    def test_bool_fields_must_be_bools(self):
        errors = validate_config({"dry_run": "yes"})
        assert errors[0].field == "dry_run"

    @pytest.mark.parametrize("value", ["2", True, 4])
    def test_invalid_auth_version(self, value):
        errors = validate_config({"auth_version": value})
        assert [e.field for e in errors] == ["auth_version"]

    def test_exclude_accepts_comma_string(self):
        assert validate_config({"exclude": "*.map,*.tmp"}) == []

    def test_exclude_must_be_list(self):
        errors = validate_config({"exclude": {"a": 1}})
        assert errors[0].field == "exclude"

    def test_exclude_entries_must_be_strings(self):
        errors = validate_config({"exclude": ["*.map", 3, ""]})
        assert [e.field for e in errors] == ["exclude[1]", "exclude[2]"]


class TestConfigError:
    """Tests for ConfigError formatting."""

    def test_str_with_value(self):
        assert str(ConfigError("auth_version", "Must be 1, 2 or 3", 4)) == (
            "auth_version: Must be 1, 2 or 3 (got: 4)"
        )

    def test_str_without_value(self):
        assert str(ConfigError("bucket", "Unknown setting")) == "bucket: Unknown setting"
