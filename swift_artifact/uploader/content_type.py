"""Content type detection for uploaded objects."""

import mimetypes

import filetype

from swift_artifact.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def classify(path: str) -> str:
    """
    Return the MIME type Swift should store for ``path``.

    The leading bytes are sniffed first; when no signature matches, or the
    file cannot be read, the extension is looked up instead. Unknown files
    get application/octet-stream. Never raises.

    Example:
        >>> classify("logo.png")
        'image/png'
    """
    try:
        kind = filetype.guess(path)
    except (OSError, TypeError, ValueError) as e:
        logger.debug(f"Content sniffing failed for {path}: {e}")
        kind = None

    if kind is not None and kind.mime:
        return kind.mime

    content_type, _ = mimetypes.guess_type(path, strict=False)
    if content_type:
        return content_type
    return DEFAULT_CONTENT_TYPE
