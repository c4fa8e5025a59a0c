"""
Glob resolution for upload sources.

Expands the source pattern, removes every path matched by the exclude
patterns, and returns the remaining candidates in a stable order.

Supported patterns:
    /path/to/file
    /path/to/*.txt
    /path/to/*/*.txt
    /path/to/**
"""

import glob
import os
from typing import Iterable, List

from swift_artifact.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


class PatternError(ValueError):
    """Raised when a glob pattern cannot be expanded."""


class NoMatchError(FileNotFoundError):
    """Raised when no file is left to upload after exclusion."""

    def __init__(self, include: str, excludes: Iterable[str] = ()) -> None:
        self.include = include
        self.excludes = list(excludes)
        message = f"no files match source pattern {include!r}"
        if self.excludes:
            message += f" after excluding {self.excludes!r}"
        super().__init__(message)


def expand(pattern: str) -> List[str]:
    """
    Expand a single glob pattern.

    ``*`` matches within one path segment and ``**`` matches zero or more
    segments. Names starting with "." match like any other name. The
    trailing separator that ``**`` leaves on directory matches is removed
    so results compare by plain string equality.

    Args:
        pattern: Glob pattern to expand

    Returns:
        Sorted list of matching paths (files and directories)

    Raises:
        PatternError: If the pattern is empty
    """
    if not pattern:
        raise PatternError("glob pattern must not be empty")

    matches = []
    for match in glob.glob(pattern, recursive=True, include_hidden=True):
        if len(match) > 1 and match.endswith(os.sep):
            match = match.rstrip(os.sep) or os.sep
        matches.append(match)
    return sorted(set(matches))


@log_function_call
def resolve(
    include: str,
    excludes: Iterable[str] = (),
    allow_empty: bool = False,
) -> List[str]:
    """
    Resolve upload candidates.

    Every exclude pattern is expanded on its own and the union of their
    matches is subtracted from the include matches, keeping include order.

    Args:
        include: Source glob pattern
        excludes: Glob patterns whose matches are removed
        allow_empty: Return an empty list instead of raising NoMatchError

    Returns:
        Candidate paths, possibly including directories

    Raises:
        PatternError: If a pattern is empty
        NoMatchError: If nothing is left and allow_empty is False

    Example:
        >>> resolve("/data/*.txt", ["/data/b.*"])
        ['/data/a.txt']
    """
    excludes = [pattern for pattern in excludes if pattern]
    matches = expand(include)

    if excludes:
        excluded = set()
        for pattern in excludes:
            excluded.update(expand(pattern))
        included = [path for path in matches if path not in excluded]
        logger.debug(
            f"Excluded {len(matches) - len(included)} of {len(matches)} matches"
        )
    else:
        included = matches

    if not included and not allow_empty:
        raise NoMatchError(include, excludes)
    return included
