"""
Prometheus metrics for upload runs.

CI jobs are short-lived, so metrics are collected on a private registry and
written once per run in the Prometheus text format, ready for a node
exporter textfile collector or a push step later in the pipeline.

Metrics Provided:
    - swift_artifact_uploads_total: Counter of processed files by status
    - swift_artifact_upload_bytes_total: Counter of uploaded bytes
    - swift_artifact_upload_duration_seconds: Histogram of per-file upload time
    - swift_artifact_swift_errors_total: Counter of Swift errors by operation

Usage:
    >>> from swift_artifact.utils.metrics import UploadMetrics
    >>> metrics = UploadMetrics()
    >>> with metrics.track_upload():
    ...     writer.close()
    >>> metrics.record_upload("uploaded", bytes_uploaded=1024)
    >>> metrics.write("/var/lib/node_exporter/swift_artifact.prom")
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)

from swift_artifact.utils.logging import get_logger

logger = get_logger(__name__)

UPLOAD_STATUSES = ("uploaded", "dry_run", "skipped", "failed")


class UploadMetrics:
    """
    Collectors for one upload run.

    Each instance owns its registry, so several runs in one process (tests,
    embedding) never clash on metric names.

    Example:
        >>> metrics = UploadMetrics()
        >>> metrics.record_upload("uploaded", bytes_uploaded=2048)
        >>> metrics.registry.get_sample_value(
        ...     "swift_artifact_uploads_total", {"status": "uploaded"}
        ... )
        1.0
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.uploads = Counter(
            name="swift_artifact_uploads_total",
            documentation="Files processed by the uploader",
            labelnames=["status"],
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="swift_artifact_upload_bytes_total",
            documentation="Bytes written to Swift",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="swift_artifact_upload_duration_seconds",
            documentation="Time spent writing a single object",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry,
        )

        self.swift_errors = Counter(
            name="swift_artifact_swift_errors_total",
            documentation="Errors returned by Swift",
            labelnames=["operation", "error_type"],
            registry=self.registry,
        )

        # Pre-create label sets so zero counts are exported
        for status in UPLOAD_STATUSES:
            self.uploads.labels(status=status)

    def track_upload(self):
        """
        Context manager timing a single object write.

        Example:
            >>> with metrics.track_upload():
            ...     upload(path)
        """
        return self.upload_duration.time()

    def record_upload(self, status: str, bytes_uploaded: int = 0) -> None:
        """
        Record one processed file.

        Args:
            status: One of uploaded, dry_run, skipped, failed
            bytes_uploaded: Size of the object written (uploaded only)
        """
        self.uploads.labels(status=status).inc()
        if status == "uploaded" and bytes_uploaded > 0:
            self.upload_bytes.inc(bytes_uploaded)

    def record_swift_error(self, operation: str, error_type: str) -> None:
        """
        Record Swift API error.

        Args:
            operation: Swift operation (auth, put_object)
            error_type: Exception class name
        """
        self.swift_errors.labels(operation=operation, error_type=error_type).inc()

    def render(self) -> bytes:
        """Return the registry in Prometheus text format."""
        return generate_latest(self.registry)

    def write(self, path: str) -> None:
        """
        Write the registry to ``path`` in Prometheus text format.

        Args:
            path: Destination file; written atomically by prometheus_client
        """
        logger.info(f"Writing metrics to {path}")
        write_to_textfile(path, self.registry)
