"""
Configuration file loader and validator.

Loads YAML files holding upload settings so a pipeline can keep its upload
description in the repository instead of spelling every flag out. Keys match
the CLI flags (dashes or underscores).

Example config file (.swift-artifact.yaml):
    ```yaml
    version: "1.0"
    endpoint: https://auth.cloud.example.com/v2.0
    auth_version: 2
    region: RegionOne
    tenant: ci
    container: releases
    source: dist/**
    exclude:
      - dist/**/*.map
    target: /builds/app
    strip_prefix: dist/
    ```

Usage:
    >>> from swift_artifact.utils.config_loader import load_config, validate_config
    >>> config = load_config(".swift-artifact.yaml")
    >>> errors = validate_config(config)
    >>> if not errors:
    ...     print(f"Uploading {config['source']}")
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from swift_artifact.utils.config import UploadRequest
from swift_artifact.utils.logging import get_logger

logger = get_logger(__name__)


SUPPORTED_VERSIONS = ["1.0"]

STRING_FIELDS = [
    "endpoint",
    "access_key",
    "secret_key",
    "container",
    "source",
    "target",
    "strip_prefix",
    "region",
    "tenant",
    "timeout",
    "metrics_file",
]

BOOL_FIELDS = ["recursive", "dry_run", "continue_on_error", "allow_empty"]


@dataclass
class ConfigError:
    """Validation error in configuration file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Keys are normalized to underscores so ``strip-prefix`` and
    ``strip_prefix`` are equivalent.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the path is not a file, or the file is empty or not a mapping
        yaml.YAMLError: If YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading configuration from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Configuration path is not a file: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration must be a mapping, got {type(config).__name__}"
        )

    normalized = {str(key).replace("-", "_"): value for key, value in config.items()}
    logger.info(f"Configuration loaded: {len(normalized)} settings")
    return normalized


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate configuration against the expected schema.

    Only types are checked here; whether required settings are present is
    decided after environment variables and flags have been merged in (see
    ``UploadRequest.validate``).

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ConfigError] = []
    known = {f.name for f in fields(UploadRequest)} | {"version"}

    if "version" in config and str(config["version"]) not in SUPPORTED_VERSIONS:
        errors.append(
            ConfigError(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    for key in config:
        if key not in known:
            errors.append(ConfigError(key, "Unknown setting"))

    for name in STRING_FIELDS:
        value = config.get(name)
        if value is not None and not isinstance(value, str):
            errors.append(ConfigError(name, "Must be a string", type(value).__name__))

    for name in BOOL_FIELDS:
        value = config.get(name)
        if value is not None and not isinstance(value, bool):
            errors.append(ConfigError(name, "Must be true or false", value))

    if "auth_version" in config:
        auth_version = config["auth_version"]
        if isinstance(auth_version, bool) or not isinstance(auth_version, int):
            errors.append(ConfigError("auth_version", "Must be an integer", auth_version))
        elif auth_version not in (1, 2, 3):
            errors.append(ConfigError("auth_version", "Must be 1, 2 or 3", auth_version))

    if "exclude" in config:
        exclude = config["exclude"]
        # a single comma separated string is accepted, like PLUGIN_EXCLUDE
        if not isinstance(exclude, (list, str)):
            errors.append(ConfigError("exclude", "Must be a list", type(exclude).__name__))
        elif isinstance(exclude, list):
            for i, pattern in enumerate(exclude):
                if not isinstance(pattern, str) or not pattern:
                    errors.append(
                        ConfigError(f"exclude[{i}]", "Must be a non-empty string", pattern)
                    )

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")
    else:
        logger.info("Configuration validation passed")

    return errors


def get_config_example() -> str:
    """Return an example configuration file."""
    return """version: "1.0"
endpoint: https://auth.cloud.example.com/v2.0
auth_version: 2
region: RegionOne
tenant: ci
container: releases
source: dist/**
exclude:
  - dist/**/*.map
target: /builds/app
strip_prefix: dist/
dry_run: false
"""
