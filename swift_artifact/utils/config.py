"""
Plugin configuration for swift-artifact.

Loads the upload request from PLUGIN_* environment variables (the convention
CI plugin runners use to pass settings), from a ``.env`` file, or from a plain
dictionary produced by the YAML config loader or the CLI.
"""

import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from swift_artifact.utils.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "PLUGIN_"

TRUE_VALUES = ("1", "true", "yes", "on")

# Go time.ParseDuration units, in seconds
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Optional[str]) -> Optional[float]:
    """
    Parse a Go-style duration string into seconds.

    Accepts values such as ``"30s"``, ``"1m30s"``, ``"1.5h"`` or ``"500ms"``.
    A bare ``"0"`` is zero. Anything else, including None and the empty
    string, yields None so callers can fall back to "no timeout".

    Example:
        >>> parse_duration("1m30s")
        90.0
        >>> parse_duration("soon") is None
        True
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            return None
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0:
        return None
    return sign * total


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def _parse_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value if str(item)]


@dataclass
class UploadRequest:
    """
    Settings for one upload run.

    Attributes:
        endpoint: Swift auth URL
        access_key: Swift user name
        secret_key: Swift API key (never shown in repr)
        container: Destination container
        source: Glob pattern selecting local files
        target: Remote path prefix
        strip_prefix: Literal prefix removed from local paths
        exclude: Glob patterns removed from the source matches
        auth_version: Swift auth version; >1 requires region and tenant
        region: Keystone region (auth_version > 1)
        tenant: Keystone tenant (auth_version > 1)
        timeout: Duration string bounding the auth/connection phase
        recursive: Walk directory matches instead of skipping them
        dry_run: Resolve, classify and log without writing
        continue_on_error: Log per-file failures and keep going
        allow_empty: Treat "no files matched" as success
        metrics_file: Write Prometheus metrics here after the run
    """

    endpoint: str = ""
    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    container: str = ""
    source: str = ""
    target: str = ""
    strip_prefix: str = ""
    exclude: List[str] = field(default_factory=list)
    auth_version: int = 1
    region: str = ""
    tenant: str = ""
    timeout: Optional[str] = None
    recursive: bool = False
    dry_run: bool = False
    continue_on_error: bool = False
    allow_empty: bool = False
    metrics_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.auth_version < 1:
            self.auth_version = 1

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Parsed timeout, or None when unset or malformed."""
        seconds = parse_duration(self.timeout)
        if self.timeout and seconds is None:
            logger.warning(f"Ignoring malformed timeout: {self.timeout!r}")
        return seconds

    def validate(self) -> List[str]:
        """
        Report missing required settings.

        Returns:
            List of human-readable problems (empty if the request is usable)
        """
        problems = []
        for name in ("endpoint", "access_key", "secret_key", "container", "source"):
            if not getattr(self, name):
                problems.append(f"{name} is required")
        if self.auth_version > 1:
            for name in ("region", "tenant"):
                if not getattr(self, name):
                    problems.append(
                        f"{name} is required when auth_version > 1"
                    )
        return problems

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "UploadRequest":
        """
        Build a request from a mapping, ignoring unknown and None values.

        Keys may use dashes or underscores (``strip-prefix`` or
        ``strip_prefix``).
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = key.replace("-", "_")
            if name not in known:
                logger.debug(f"Ignoring unknown setting: {key}")
                continue
            if value is None:
                continue
            kwargs[name] = value

        for name in ("recursive", "dry_run", "continue_on_error", "allow_empty"):
            if name in kwargs:
                kwargs[name] = _parse_bool(kwargs[name])
        if "exclude" in kwargs:
            kwargs["exclude"] = _parse_list(kwargs["exclude"])
        if "auth_version" in kwargs:
            kwargs["auth_version"] = int(kwargs["auth_version"] or 1)
        for name in (
            "endpoint", "access_key", "secret_key", "container", "source",
            "target", "strip_prefix", "region", "tenant", "timeout", "metrics_file",
        ):
            if name in kwargs:
                kwargs[name] = str(kwargs[name])

        return cls(**kwargs)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "UploadRequest":
        """
        Load the request from PLUGIN_* environment variables.

        A ``.env`` file in the working directory (or ``env_file``) is loaded
        first; variables already set in the environment win.

        Raises:
            ValueError: If PLUGIN_AUTH_VERSION is not an integer
        """
        load_dotenv(env_file or os.path.join(os.getcwd(), ".env"))
        return cls.from_dict(env_settings())


def env_settings(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Collect PLUGIN_* variables as request settings.

    Example:
        >>> env_settings({"PLUGIN_STRIP_PREFIX": "dist/"})
        {'strip_prefix': 'dist/'}
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(UploadRequest)}
    settings: Dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in known and value != "":
            settings[name] = value
    return settings
