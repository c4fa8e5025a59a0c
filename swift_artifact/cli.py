"""
Command-line entry point for swift-artifact.

Every flag has a PLUGIN_* environment equivalent so the plugin can be driven
by CI runners that pass settings through the environment. Settings are merged
in this order, later sources winning: YAML config file, environment
(including a ``.env`` file), command-line flags.

Usage:
    swift-artifact --source "dist/**" --container releases --target /app/1.0
    swift-artifact --config .swift-artifact.yaml --dry-run
    PLUGIN_SOURCE="dist/*.tar.gz" PLUGIN_CONTAINER=releases swift-artifact
"""

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from swift_artifact import __version__
from swift_artifact.uploader import StorageError, UploadError, Uploader
from swift_artifact.utils.config import UploadRequest, env_settings
from swift_artifact.utils.config_loader import load_config, validate_config
from swift_artifact.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

# argparse dest names that map onto UploadRequest fields
REQUEST_FLAGS = [
    "endpoint",
    "access_key",
    "secret_key",
    "container",
    "auth_version",
    "region",
    "tenant",
    "timeout",
    "source",
    "exclude",
    "target",
    "strip_prefix",
    "recursive",
    "dry_run",
    "continue_on_error",
    "allow_empty",
    "metrics_file",
]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="swift-artifact",
        description="Upload build artifacts to an OpenStack Swift container",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload every tarball in dist/ under releases/app/
  %(prog)s --source "dist/*.tar.gz" --container releases --target /app

  # Upload a tree, dropping the local prefix and source maps
  %(prog)s --source "dist/**" --strip-prefix dist/ --exclude "dist/**/*.map"

  # Show what would be uploaded
  %(prog)s --config .swift-artifact.yaml --dry-run
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    auth = parser.add_argument_group("authentication")
    auth.add_argument("--endpoint", help="Swift auth URL [PLUGIN_ENDPOINT]")
    auth.add_argument("--access-key", help="Swift user name [PLUGIN_ACCESS_KEY]")
    auth.add_argument("--secret-key", help="Swift API key [PLUGIN_SECRET_KEY]")
    auth.add_argument(
        "--auth-version", type=int, help="Swift auth version [PLUGIN_AUTH_VERSION]"
    )
    auth.add_argument("--region", help="Swift region, auth version > 1 [PLUGIN_REGION]")
    auth.add_argument("--tenant", help="Swift tenant, auth version > 1 [PLUGIN_TENANT]")
    auth.add_argument(
        "--timeout", help="Connection timeout, e.g. 30s or 1m [PLUGIN_TIMEOUT]"
    )

    upload = parser.add_argument_group("upload")
    upload.add_argument("--container", help="Swift container [PLUGIN_CONTAINER]")
    upload.add_argument(
        "--source", help="Glob selecting files to upload [PLUGIN_SOURCE]"
    )
    upload.add_argument(
        "--exclude",
        action="append",
        help="Glob of files to skip; repeatable [PLUGIN_EXCLUDE, comma separated]",
    )
    upload.add_argument("--target", help="Remote path prefix [PLUGIN_TARGET]")
    upload.add_argument(
        "--strip-prefix",
        help="Local prefix removed from object names [PLUGIN_STRIP_PREFIX]",
    )
    upload.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Upload the files inside matched directories [PLUGIN_RECURSIVE]",
    )
    upload.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Log what would be uploaded without writing [PLUGIN_DRY_RUN]",
    )
    upload.add_argument(
        "--continue-on-error",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep uploading after a file fails [PLUGIN_CONTINUE_ON_ERROR]",
    )
    upload.add_argument(
        "--allow-empty",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Succeed when no file matches [PLUGIN_ALLOW_EMPTY]",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=os.getenv("PLUGIN_CONFIG"),
        help="YAML file with upload settings [PLUGIN_CONFIG]",
    )
    parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this file [PLUGIN_METRICS_FILE]",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO) [LOG_LEVEL]",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug output",
    )

    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> UploadRequest:
    """
    Merge config file, environment and flags into an UploadRequest.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the config file or a setting is invalid
        yaml.YAMLError: If the config file is malformed
    """
    settings: Dict[str, Any] = {}

    if args.config:
        file_settings = load_config(args.config)
        errors = validate_config(file_settings)
        if errors:
            raise ValueError(
                f"invalid config file {args.config}: "
                + "; ".join(str(error) for error in errors)
            )
        file_settings.pop("version", None)
        settings.update(file_settings)

    settings.update(env_settings())

    for name in REQUEST_FLAGS:
        value = getattr(args, name)
        if value is not None:
            settings[name] = value

    return UploadRequest.from_dict(settings)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the upload CLI."""
    load_dotenv(os.path.join(os.getcwd(), ".env"))
    args = parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else args.log_level)

    try:
        request = build_request(args)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    problems = request.validate()
    if problems:
        for problem in problems:
            logger.error(f"Configuration error: {problem}")
        return 1

    if request.dry_run:
        logger.info("Dry run: no objects will be written")

    try:
        summary = Uploader(request).run()
    except KeyboardInterrupt:
        logger.warning("Upload cancelled by user")
        return 130
    except (StorageError, UploadError, FileNotFoundError, ValueError) as e:
        logger.error(f"Upload failed: {e}")
        return 1

    if summary.failed:
        logger.error(f"{summary.failed} file(s) failed to upload")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
