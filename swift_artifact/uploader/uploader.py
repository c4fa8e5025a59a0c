"""
Swift artifact uploader implementation.

Authenticates once, resolves the source pattern, and uploads every
candidate file in order. Each file is classified, given an object name, and
logged before anything is written, so a dry run produces the same log as a
real one.

Failure policy:
    By default the first failing file aborts the run with UploadError and an
    empty match raises NoMatchError. ``continue_on_error`` logs per-file
    failures and keeps going; ``allow_empty`` turns an empty match into a
    run with zero uploads.

Example usage:
    >>> from swift_artifact.uploader import Uploader
    >>> from swift_artifact.utils.config import UploadRequest
    >>> request = UploadRequest(
    ...     endpoint="https://auth.cloud.example.com/v1.0",
    ...     access_key="ci",
    ...     secret_key="secret",
    ...     container="releases",
    ...     source="dist/**",
    ...     target="/app/1.0",
    ...     strip_prefix="dist/",
    ... )
    >>> summary = Uploader(request).run()
    >>> print(f"{summary.uploaded} files, {summary.total_bytes} bytes")
"""

import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Iterator, List, Optional

from swift_artifact.uploader.content_type import classify
from swift_artifact.uploader.matcher import resolve
from swift_artifact.uploader.storage import (
    AuthenticationError,
    ObjectStorage,
    ObjectWriter,
    StorageError,
    SwiftStorage,
)
from swift_artifact.uploader.target import build_target, normalize_target
from swift_artifact.utils.config import UploadRequest
from swift_artifact.utils.logging import get_logger
from swift_artifact.utils.metrics import UploadMetrics

logger = get_logger(__name__)

# Read size used when copying a file into an object writer
CHUNK_SIZE = 64 * 1024


class UploadState(Enum):
    """Lifecycle of an upload run."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    RESOLVING = "resolving"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


class UploadStatus(str, Enum):
    UPLOADED = "uploaded"
    DRY_RUN = "dry_run"
    SKIPPED = "skipped"
    FAILED = "failed"


class UploadError(Exception):
    """
    Raised when a file cannot be uploaded.

    Attributes:
        source: Local file path
        container: Destination container
        target: Object name
        cause: Underlying exception
    """

    def __init__(
        self, source: str, container: str, target: str, cause: Exception
    ) -> None:
        self.source = source
        self.container = container
        self.target = target
        self.cause = cause
        super().__init__(
            f"failed to upload {source} to {container}/{target}: {cause}"
        )


@dataclass
class UploadResult:
    """
    Outcome for one candidate path.

    Attributes:
        source: Local path
        target: Object name (empty for skipped directories)
        content_type: Detected MIME type (empty for skipped directories)
        status: uploaded, dry_run, skipped or failed
        size_bytes: Bytes written to Swift
        duration_seconds: Time spent on the write
        error_message: Failure description (None unless failed)
    """

    source: str
    target: str
    content_type: str
    status: UploadStatus
    size_bytes: int = 0
    duration_seconds: float = 0.0
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status != UploadStatus.FAILED


@dataclass
class UploadSummary:
    """Ordered results of a run."""

    results: List[UploadResult] = field(default_factory=list)

    def _count(self, status: UploadStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def uploaded(self) -> int:
        return self._count(UploadStatus.UPLOADED)

    @property
    def dry_run(self) -> int:
        return self._count(UploadStatus.DRY_RUN)

    @property
    def skipped(self) -> int:
        return self._count(UploadStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(UploadStatus.FAILED)

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.results)


def copy_to_writer(reader: BinaryIO, writer: ObjectWriter) -> int:
    """Copy ``reader`` into ``writer`` in CHUNK_SIZE pieces; return bytes copied."""
    copied = 0
    for chunk in iter(lambda: reader.read(CHUNK_SIZE), b""):
        writer.write(chunk)
        copied += len(chunk)
    return copied


class Uploader:
    """
    Drives one upload run.

    Args:
        request: Run configuration
        storage: Object storage; a SwiftStorage built from ``request`` if None
        metrics: Metrics collectors; a fresh UploadMetrics if None

    Attributes:
        state: Current UploadState
    """

    def __init__(
        self,
        request: UploadRequest,
        storage: Optional[ObjectStorage] = None,
        metrics: Optional[UploadMetrics] = None,
    ) -> None:
        self.request = request
        self.storage = storage if storage is not None else SwiftStorage.from_request(request)
        self.metrics = metrics if metrics is not None else UploadMetrics()
        self.target_prefix = normalize_target(request.target)
        self.state = UploadState.UNAUTHENTICATED

    def run(self) -> UploadSummary:
        """
        Authenticate, resolve and upload.

        Returns:
            UploadSummary with one result per processed path

        Raises:
            AuthenticationError: If the handshake fails
            NoMatchError: If nothing matches and allow_empty is off
            PatternError: If the source pattern is empty
            UploadError: On the first failing file unless continue_on_error
        """
        summary = UploadSummary()
        try:
            self._authenticate()

            self.state = UploadState.RESOLVING
            candidates = self._resolve()

            self.state = UploadState.UPLOADING
            for candidate in candidates:
                for path in self._expand(candidate):
                    summary.results.append(self.upload_file(path))

            self.state = UploadState.DONE
        except BaseException:
            self.state = UploadState.FAILED
            raise
        finally:
            if self.request.metrics_file:
                self._write_metrics(self.request.metrics_file)

        logger.info(
            f"Upload complete: {summary.uploaded} uploaded, "
            f"{summary.dry_run} dry-run, {summary.skipped} skipped, "
            f"{summary.failed} failed, {summary.total_bytes} bytes",
            extra={
                "container": self.request.container,
                "uploaded": summary.uploaded,
                "failed": summary.failed,
                "total_bytes": summary.total_bytes,
            },
        )
        return summary

    def _write_metrics(self, path: str) -> None:
        try:
            self.metrics.write(path)
        except OSError as e:
            logger.warning(
                f"Could not write metrics to {path}: {e}",
                extra={"metrics_file": path, "error_type": type(e).__name__},
            )

    def _authenticate(self) -> None:
        request = self.request
        try:
            self.storage.authenticate()
        except AuthenticationError as e:
            self.metrics.record_swift_error("auth", type(e.__cause__ or e).__name__)
            logger.error(
                f"Authentication failed: {e}",
                extra={
                    "endpoint": request.endpoint,
                    "auth_version": request.auth_version,
                    "region": request.region,
                },
            )
            raise
        self.state = UploadState.AUTHENTICATED

        logger.info(
            f"Attempting to upload to {request.container}/{self.target_prefix}",
            extra={
                "region": request.region,
                "endpoint": request.endpoint,
                "container": request.container,
                "path": self.target_prefix,
            },
        )

    def _resolve(self) -> List[str]:
        request = self.request
        try:
            candidates = resolve(
                request.source, request.exclude, allow_empty=request.allow_empty
            )
        except (FileNotFoundError, ValueError) as e:
            logger.error(
                f"Cannot resolve source: {e}",
                extra={"source": request.source, "exclude": request.exclude},
            )
            raise

        if not candidates:
            logger.warning(f"No files match {request.source!r}; nothing to upload")
        return candidates

    def _expand(self, candidate: str) -> Iterator[str]:
        """Yield the candidate, or the files below it when walking directories."""
        if not (self.request.recursive and os.path.isdir(candidate)):
            yield candidate
            return
        for root, dirs, files in os.walk(candidate):
            dirs.sort()
            for name in sorted(files):
                yield os.path.join(root, name)

    def upload_file(self, source: str) -> UploadResult:
        """
        Classify, name, log and (unless dry-run) write one path.

        Directories are skipped.

        Raises:
            UploadError: If the write fails and continue_on_error is off
        """
        request = self.request

        if os.path.isdir(source):
            logger.debug(f"Skipping directory: {source}")
            self.metrics.record_upload(UploadStatus.SKIPPED.value)
            return UploadResult(
                source=source, target="", content_type="", status=UploadStatus.SKIPPED
            )

        content_type = classify(source)
        target = build_target(source, self.target_prefix, request.strip_prefix)

        logger.info(
            f"Uploading file {source} -> {request.container}/{target} ({content_type})",
            extra={
                "source": source,
                "container": request.container,
                "target": target,
                "content_type": content_type,
            },
        )

        if request.dry_run:
            self.metrics.record_upload(UploadStatus.DRY_RUN.value)
            return UploadResult(
                source=source,
                target=target,
                content_type=content_type,
                status=UploadStatus.DRY_RUN,
            )

        start_time = time.time()
        try:
            size = self._write(source, target, content_type)
        except (OSError, StorageError) as e:
            return self._handle_failure(source, target, content_type, e, start_time)

        duration = time.time() - start_time
        self.metrics.record_upload(UploadStatus.UPLOADED.value, bytes_uploaded=size)
        logger.debug(f"Uploaded {size} bytes in {duration:.2f}s: {target}")
        return UploadResult(
            source=source,
            target=target,
            content_type=content_type,
            status=UploadStatus.UPLOADED,
            size_bytes=size,
            duration_seconds=duration,
        )

    def _write(self, source: str, target: str, content_type: str) -> int:
        with open(source, "rb") as reader:
            writer = self.storage.create_object(
                self.request.container, target, content_type
            )
            try:
                with self.metrics.track_upload():
                    size = copy_to_writer(reader, writer)
                    writer.close()
            except BaseException:
                writer.abort()
                raise
        return size

    def _handle_failure(
        self,
        source: str,
        target: str,
        content_type: str,
        error: Exception,
        start_time: float,
    ) -> UploadResult:
        request = self.request
        self.metrics.record_upload(UploadStatus.FAILED.value)
        if isinstance(error, StorageError):
            self.metrics.record_swift_error(
                "put_object", type(error.__cause__ or error).__name__
            )

        logger.error(
            f"Upload failed for {source}: {error}",
            extra={
                "source": source,
                "container": request.container,
                "target": target,
                "error_type": type(error).__name__,
            },
        )

        if not request.continue_on_error:
            raise UploadError(source, request.container, target, error) from error

        return UploadResult(
            source=source,
            target=target,
            content_type=content_type,
            status=UploadStatus.FAILED,
            duration_seconds=time.time() - start_time,
            error_message=str(error),
        )
