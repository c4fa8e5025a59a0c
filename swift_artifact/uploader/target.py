"""
Object path construction.

Object names are derived from local paths: the strip prefix is removed
literally and the rest is joined onto the configured target.
"""

import os
import posixpath

from swift_artifact.utils.logging import log_function_call


def normalize_target(target: str) -> str:
    """
    Remove one leading "/" from a configured target.

    Example:
        >>> normalize_target("/releases")
        'releases'
    """
    if target.startswith("/"):
        return target[1:]
    return target


def strip_prefix(local_path: str, prefix: str) -> str:
    """
    Remove ``prefix`` from the start of ``local_path`` if present.

    This is a plain string match: "/data/s" strips "/data/sub/a.txt" down to
    "ub/a.txt".
    """
    if prefix and local_path.startswith(prefix):
        return local_path[len(prefix):]
    return local_path


@log_function_call
def build_target(local_path: str, target: str, prefix: str = "") -> str:
    """
    Derive the object name for a local file.

    Joins ``target`` and the stripped local path with "/", collapsing
    duplicate separators and cleaning "." and ".." segments. ``target`` is
    expected to be normalized already (see normalize_target).

    Args:
        local_path: Path of the file on disk
        target: Remote prefix
        prefix: Literal prefix removed from local_path

    Returns:
        Object name inside the container

    Example:
        >>> build_target("/data/sub/a.txt", "releases", "/data/")
        'releases/sub/a.txt'
    """
    relative = strip_prefix(local_path, prefix)
    if os.sep != "/":
        relative = relative.replace(os.sep, "/")

    parts = [part for part in (target, relative) if part]
    if not parts:
        return ""
    joined = posixpath.normpath("/".join(parts))
    # normpath keeps a leading "//"
    if joined.startswith("//"):
        joined = "/" + joined.lstrip("/")
    return joined
