"""
OpenStack Swift storage client.

Wraps python-swiftclient behind the two calls the uploader needs:
authenticate once, then create objects through a writer that is filled
sequentially and finalized on close.

Example usage:
    >>> storage = SwiftStorage(
    ...     endpoint="https://auth.cloud.example.com/v2.0",
    ...     username="ci",
    ...     api_key="secret",
    ...     auth_version=2,
    ...     region="RegionOne",
    ...     tenant="builds",
    ... )
    >>> storage.authenticate()
    >>> with storage.create_object("releases", "app/1.0.tar.gz", "application/gzip") as writer:
    ...     writer.write(b"...")
"""

import tempfile
from typing import Any, Callable, Dict, Optional, Protocol

from swiftclient import client as swift_client
from swiftclient.exceptions import ClientException

from swift_artifact.utils.config import UploadRequest
from swift_artifact.utils.logging import get_logger

logger = get_logger(__name__)

# Bodies up to this size stay in memory before spilling to a temp file
SPOOL_MAX_BYTES = 8 * 1024 * 1024


class StorageError(Exception):
    """Base class for storage failures."""


class AuthenticationError(StorageError):
    """Raised when the auth handshake fails or is misconfigured."""


class ObjectCreateError(StorageError):
    """Raised when an object cannot be created in a container."""


class ObjectWriter(Protocol):
    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...

    def abort(self) -> None: ...


class ObjectStorage(Protocol):
    """Capability consumed by the uploader."""

    def authenticate(self) -> None: ...

    def create_object(
        self, container: str, path: str, content_type: str
    ) -> ObjectWriter: ...


class SwiftObjectWriter:
    """
    Write stream for a single Swift object.

    Bytes are spooled locally and sent with one PUT when the writer is
    closed; the object does not exist in Swift until close() returns.
    """

    def __init__(
        self,
        connection: swift_client.Connection,
        container: str,
        path: str,
        content_type: str,
    ) -> None:
        self.container = container
        self.path = path
        self.content_type = content_type
        self.bytes_written = 0
        self.closed = False
        self._connection = connection
        self._buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_BYTES)

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed object writer")
        written = self._buffer.write(data)
        self.bytes_written += written
        return written

    def close(self) -> None:
        """Send the object to Swift; the writer cannot be reused."""
        if self.closed:
            return
        self.closed = True
        try:
            self._buffer.seek(0)
            etag = self._connection.put_object(
                self.container,
                self.path,
                contents=self._buffer,
                content_length=self.bytes_written,
                content_type=self.content_type,
            )
            logger.debug(f"Stored {self.container}/{self.path} (etag {etag})")
        except (ClientException, OSError) as e:
            raise ObjectCreateError(
                f"failed to store {self.container}/{self.path}: {e}"
            ) from e
        finally:
            self._buffer.close()

    def abort(self) -> None:
        """Discard buffered bytes without writing the object."""
        self.closed = True
        self._buffer.close()

    def __enter__(self) -> "SwiftObjectWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()


class SwiftStorage:
    """
    Swift connection shared by every upload in a run.

    Attributes:
        endpoint: Auth URL
        username: Swift user (access key)
        auth_version: 1, 2 or 3
        region: Region forwarded when auth_version > 1
        tenant: Tenant/project forwarded when auth_version > 1
        timeout: Connection timeout in seconds, None for no timeout
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        api_key: str,
        auth_version: int = 1,
        region: str = "",
        tenant: str = "",
        timeout: Optional[float] = None,
        connection_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.endpoint = endpoint
        self.username = username
        self.auth_version = auth_version
        self.region = region
        self.tenant = tenant
        self.timeout = timeout
        self._api_key = api_key
        self._connection_factory = connection_factory or swift_client.Connection
        self._connection: Optional[swift_client.Connection] = None

    @classmethod
    def from_request(cls, request: UploadRequest) -> "SwiftStorage":
        return cls(
            endpoint=request.endpoint,
            username=request.access_key,
            api_key=request.secret_key,
            auth_version=request.auth_version,
            region=request.region,
            tenant=request.tenant,
            timeout=request.timeout_seconds,
        )

    @property
    def authenticated(self) -> bool:
        return self._connection is not None

    def connection_options(self) -> Dict[str, Any]:
        """
        Keyword arguments for swiftclient.client.Connection.

        Region and tenant are attached only for auth versions above 1.
        """
        options: Dict[str, Any] = {
            "authurl": self.endpoint,
            "user": self.username,
            "key": self._api_key,
            "auth_version": str(self.auth_version),
            # failures surface immediately; there is no retry policy
            "retries": 0,
        }
        if self.auth_version > 1:
            options["tenant_name"] = self.tenant
            options["os_options"] = {
                "region_name": self.region,
                "tenant_name": self.tenant,
                "project_name": self.tenant,
            }
        if self.timeout is not None:
            options["timeout"] = self.timeout
        return options

    def authenticate(self) -> None:
        """
        Perform the auth handshake.

        Raises:
            AuthenticationError: If region/tenant are missing for
                auth_version > 1, or Swift rejects the credentials
        """
        if self.auth_version > 1:
            missing = [
                name for name in ("region", "tenant") if not getattr(self, name)
            ]
            if missing:
                raise AuthenticationError(
                    f"auth version {self.auth_version} requires "
                    f"{' and '.join(missing)}"
                )

        connection = self._connection_factory(**self.connection_options())
        try:
            storage_url, _ = connection.get_auth()
        except (ClientException, OSError) as e:
            raise AuthenticationError(
                f"authentication against {self.endpoint} failed: {e}"
            ) from e

        self._connection = connection
        logger.debug(f"Authenticated against {self.endpoint}, storage URL {storage_url}")

    def create_object(
        self, container: str, path: str, content_type: str
    ) -> SwiftObjectWriter:
        """
        Open a writer for ``container``/``path``.

        Raises:
            ObjectCreateError: If called before authenticate()
        """
        if self._connection is None:
            raise ObjectCreateError("storage connection is not authenticated")
        return SwiftObjectWriter(self._connection, container, path, content_type)
