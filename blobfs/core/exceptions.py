from __future__ import annotations

from typing import Optional


class BlobfsError(Exception):
    """Base class for all blobfs exceptions."""


class ConfigError(BlobfsError):
    """Raised for missing/malformed storage configuration."""


class BlobStorageError(BlobfsError, RuntimeError):
    """
    Raised when a remote blob operation fails and the failure is not swallowed.

    Carries the context needed to diagnose the remote failure alongside the
    formatted message. The original SDK exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        container: Optional[str] = None,
        key: Optional[str] = None,
        code: Optional[str] = None,
        kind: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.container = container
        self.key = key
        self.code = code
        self.kind = kind
        self.status_code = status_code


class ContainerError(BlobStorageError):
    """Raised when a container cannot be created or deleted."""


class BlobListingError(BlobStorageError):
    """Raised when the keys of a container cannot be listed."""


class BlobMetadataError(BlobStorageError):
    """Raised when blob metadata cannot be read or written."""


__all__ = [
    "BlobfsError",
    "ConfigError",
    "BlobStorageError",
    "ContainerError",
    "BlobListingError",
    "BlobMetadataError",
]
