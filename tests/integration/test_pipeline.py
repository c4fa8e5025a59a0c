"""Integration tests for end-to-end upload runs.

These tests drive the CLI entry point with a YAML config file, PLUGIN_*
environment variables and a ``.env`` file, with swiftclient's Connection
replaced by a recording fake:
- Config-driven tree uploads
- Exclusion and prefix stripping across a nested build directory
- Dry runs that authenticate but write nothing
"""

import os
from pathlib import Path
from typing import Dict, Generator, Tuple
from unittest.mock import patch

import pytest
import yaml

from swift_artifact.cli import main


class RecordingConnection:
    """Stand-in for swiftclient.client.Connection keeping objects in memory."""

    instances: list = []

    def __init__(self, **options):
        self.options = options
        self.objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}
        RecordingConnection.instances.append(self)

    def get_auth(self):
        return "https://swift.example.com/v1/AUTH_ci", "token"

    def put_object(self, container, obj, contents=None, content_length=None,
                   content_type=None, **kwargs):
        body = contents.read()
        assert len(body) == content_length
        self.objects[(container, obj)] = (body, content_type)
        return "etag"


@pytest.fixture
def swift() -> Generator[type, None, None]:
    RecordingConnection.instances = []
    with patch("swiftclient.client.Connection", RecordingConnection):
        yield RecordingConnection


@pytest.fixture
def workspace(monkeypatch, tmp_path: Path) -> Path:
    """Build directory laid out like a typical CI checkout."""
    for key in list(os.environ):
        if key.startswith("PLUGIN_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)

    build = tmp_path / "build"
    (build / "assets" / "img").mkdir(parents=True)
    (build / "index.html").write_text("<html></html>")
    (build / "app.js").write_text("console.log(1)")
    (build / "app.js.map").write_text("{}")
    (build / "assets" / "img" / "logo.png").write_bytes(
        b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
    )
    return tmp_path


def write_config(workspace: Path, **overrides) -> Path:
    build = workspace / "build"
    settings = {
        "version": "1.0",
        "endpoint": "https://auth.example.com/v2.0",
        "auth-version": 2,
        "region": "RegionOne",
        "tenant": "ci",
        "container": "site",
        "source": str(build / "**"),
        "strip-prefix": f"{build}/",
        "target": "/preview/42",
        "exclude": [str(build / "**" / "*.map")],
    }
    settings.update(overrides)
    config_file = workspace / ".swift-artifact.yaml"
    config_file.write_text(yaml.safe_dump(settings))
    return config_file


def test_config_driven_tree_upload(workspace: Path, swift, monkeypatch):
    config_file = write_config(workspace)
    # credentials come from the environment, everything else from the file
    (workspace / ".env").write_text("PLUGIN_ACCESS_KEY=ci\nPLUGIN_SECRET_KEY=secret\n")
    monkeypatch.setenv("PLUGIN_ACCESS_KEY", "placeholder")
    monkeypatch.delenv("PLUGIN_ACCESS_KEY")
    monkeypatch.setenv("PLUGIN_SECRET_KEY", "placeholder")
    monkeypatch.delenv("PLUGIN_SECRET_KEY")

    assert main(["--config", str(config_file)]) == 0

    assert len(swift.instances) == 1
    connection = swift.instances[0]
    assert connection.options["auth_version"] == "2"
    assert connection.options["os_options"]["region_name"] == "RegionOne"
    assert connection.options["user"] == "ci"

    assert set(connection.objects) == {
        ("site", "preview/42/index.html"),
        ("site", "preview/42/app.js"),
        ("site", "preview/42/assets/img/logo.png"),
    }
    assert connection.objects[("site", "preview/42/index.html")] == (
        b"<html></html>",
        "text/html",
    )
    assert connection.objects[("site", "preview/42/assets/img/logo.png")][1] == "image/png"


def test_dry_run_touches_no_objects(workspace: Path, swift):
    config_file = write_config(workspace)

    exit_code = main(
        [
            "--config", str(config_file),
            "--access-key", "ci",
            "--secret-key", "secret",
            "--dry-run",
        ]
    )

    assert exit_code == 0
    assert len(swift.instances) == 1
    assert swift.instances[0].objects == {}


def test_recursive_directory_match(workspace: Path, swift):
    config_file = write_config(
        workspace, source=str(workspace / "build" / "assets"), recursive=True
    )

    exit_code = main(
        ["--config", str(config_file), "--access-key", "ci", "--secret-key", "secret"]
    )

    assert exit_code == 0
    assert set(swift.instances[0].objects) == {("site", "preview/42/assets/img/logo.png")}
