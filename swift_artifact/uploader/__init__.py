"""
OpenStack Swift uploader module.

Resolves local files from glob patterns, detects their content types,
derives object names, and writes them to a Swift container.
"""

from .content_type import DEFAULT_CONTENT_TYPE, classify
from .matcher import NoMatchError, PatternError, expand, resolve
from .storage import (
    AuthenticationError,
    ObjectCreateError,
    ObjectStorage,
    StorageError,
    SwiftObjectWriter,
    SwiftStorage,
)
from .target import build_target, normalize_target, strip_prefix
from .uploader import (
    UploadError,
    Uploader,
    UploadResult,
    UploadState,
    UploadStatus,
    UploadSummary,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "classify",
    "NoMatchError",
    "PatternError",
    "expand",
    "resolve",
    "AuthenticationError",
    "ObjectCreateError",
    "ObjectStorage",
    "StorageError",
    "SwiftObjectWriter",
    "SwiftStorage",
    "build_target",
    "normalize_target",
    "strip_prefix",
    "UploadError",
    "Uploader",
    "UploadResult",
    "UploadState",
    "UploadStatus",
    "UploadSummary",
]
