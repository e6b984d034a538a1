# blobfs/adapters/storage/azure_blob.py
from __future__ import annotations
"""
Azure Blob Storage adapter for the generic key/content/metadata interface.

Every operation maps onto a single remote call (two for rename) against the
container fixed at construction. Failures follow two conventions:

- read, write, exists, delete, rename, mtime swallow service errors and return
  ``False``; the cause is kept in ``last_failure``.
- create_container, delete_container, keys, get_metadata, set_metadata raise a
  BlobStorageError subclass, except for the idempotent container codes.

Design notes:
- The BlobServiceClient is created lazily through the injected factory, once
  per adapter, and reused for the adapter's lifetime.
- rename is copy-then-delete and is not atomic: when the delete fails the
  content exists under both keys and rename still reports ``False``. A copy
  the service reports as pending leaves the source in place and reports ``False``.
- exists cannot tell "missing" apart from any other failure.
"""

import threading
from typing import Any, Dict, List, Literal, Optional, Type, Union

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobClient, BlobServiceClient, ContentSettings
from loguru import logger

from blobfs.adapters.storage.base import Adapter, Content, MetadataSupporter
from blobfs.adapters.storage.errors import (
    ERROR_CONTAINER_ALREADY_EXISTS,
    ERROR_CONTAINER_NOT_FOUND,
    BlobFailure,
    ErrorKind,
    classify,
    describe,
    error_code_from,
    error_text,
)
from blobfs.adapters.storage.factory import BlobServiceClientFactory
from blobfs.core.exceptions import (
    BlobListingError,
    BlobMetadataError,
    BlobStorageError,
    ContainerError,
)
from blobfs.utils.mime import detect_content_type

__all__ = ["AzureBlobStorage"]


class AzureBlobStorage(Adapter, MetadataSupporter):
    """Microsoft Azure Blob Storage adapter."""

    ERROR_CONTAINER_ALREADY_EXISTS = ERROR_CONTAINER_ALREADY_EXISTS
    ERROR_CONTAINER_NOT_FOUND = ERROR_CONTAINER_NOT_FOUND

    def __init__(
        self,
        client_factory: BlobServiceClientFactory,
        container_name: str,
        create: bool = False,
        detect_content_type: bool = True,
    ) -> None:
        """
        Args:
            client_factory (BlobServiceClientFactory): Produces the connected service client.
            container_name (str): The container every blob operation targets.
            create (bool): Create the container now; an existing container is fine.
            detect_content_type (bool): Sniff and set the content type on write.
        """
        self._client_factory = client_factory
        self._container_name = container_name
        self.detect_content_type = detect_content_type
        self._service: Optional[BlobServiceClient] = None
        self._lock = threading.Lock()
        self.last_failure: Optional[BlobFailure] = None

        if create:
            self.create_container(container_name)

    @property
    def container_name(self) -> str:
        return self._container_name

    # --------------------------
    # Container lifecycle
    # --------------------------

    def create_container(self, container_name: str, **options: Any) -> None:
        """
        Creates a container; one that already exists is left untouched.

        Args:
            container_name (str): The container to create.
            **options: Forwarded to ``BlobServiceClient.create_container``
                (e.g. ``metadata``, ``public_access``).

        Raises:
            ContainerError: If the container cannot be created.
        """
        service = self._init()
        try:
            service.create_container(container_name, **options)
        except AzureError as e:
            code = error_code_from(e)
            if code == ERROR_CONTAINER_ALREADY_EXISTS:
                logger.debug("Container {} already exists", container_name)
                return
            raise self._fatal(
                ContainerError,
                'Failed to create the configured container "{}": {} ({}).'.format(
                    container_name, error_text(e), code
                ),
                e,
                code,
                container=container_name,
            ) from e
        logger.info("Created container {}", container_name)

    def delete_container(self, container_name: str, **options: Any) -> None:
        """
        Deletes a container; one that does not exist is treated as deleted.

        Raises:
            ContainerError: If the container cannot be deleted.
        """
        service = self._init()
        try:
            service.delete_container(container_name, **options)
        except AzureError as e:
            code = error_code_from(e)
            if code == ERROR_CONTAINER_NOT_FOUND:
                logger.debug("Container {} does not exist", container_name)
                return
            raise self._fatal(
                ContainerError,
                'Failed to delete the configured container "{}": {} ({}).'.format(
                    container_name, error_text(e), code
                ),
                e,
                code,
                container=container_name,
            ) from e
        logger.info("Deleted container {}", container_name)

    # --------------------------
    # Adapter
    # --------------------------

    def read(self, key: str) -> Union[bytes, Literal[False]]:
        blob = self._blob(key)
        self.last_failure = None
        try:
            downloader = blob.download_blob()
            return b"".join(downloader.chunks())
        except AzureError as e:
            return self._swallow(e, "read", key)

    def write(self, key: str, content: Content) -> Union[int, Literal[False]]:
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        blob = self._blob(key)
        self.last_failure = None

        content_settings = None
        if self.detect_content_type:
            content_settings = ContentSettings(content_type=detect_content_type(data))

        try:
            blob.upload_blob(data, overwrite=True, content_settings=content_settings)
        except AzureError as e:
            return self._swallow(e, "write", key)
        return len(data)

    def exists(self, key: str) -> bool:
        blob = self._blob(key)
        self.last_failure = None
        try:
            blob.get_blob_properties()
        except AzureError as e:
            return self._swallow(e, "exists", key)
        return True

    def keys(self) -> List[str]:
        """
        Lists every blob name in the container.

        Raises:
            BlobListingError: If the container cannot be listed.
        """
        service = self._init()
        try:
            container = service.get_container_client(self._container_name)
            return [blob.name for blob in container.list_blobs()]
        except AzureError as e:
            code = error_code_from(e)
            raise self._fatal(
                BlobListingError,
                'Failed to list keys for the container "{}": {} ({}).'.format(
                    self._container_name, error_text(e), code
                ),
                e,
                code,
            ) from e

    def mtime(self, key: str) -> Union[int, Literal[False]]:
        blob = self._blob(key)
        self.last_failure = None
        try:
            properties = blob.get_blob_properties()
        except AzureError as e:
            return self._swallow(e, "mtime", key)
        return int(properties.last_modified.timestamp())

    def delete(self, key: str) -> bool:
        blob = self._blob(key)
        self.last_failure = None
        try:
            blob.delete_blob()
        except AzureError as e:
            return self._swallow(e, "delete", key)
        return True

    def rename(self, source_key: str, target_key: str) -> bool:
        source = self._blob(source_key)
        target = self._blob(target_key)
        self.last_failure = None
        try:
            copy = target.start_copy_from_url(source.url)
            status = (copy or {}).get("copy_status")
            if status != "success":
                # the source must outlive a copy the service has not finished
                return self._record(
                    BlobFailure(
                        operation="rename",
                        key=source_key,
                        kind=ErrorKind.TRANSIENT,
                        code="CopyNotCompleted",
                        message=f"copy to {target_key} is {status or 'unknown'}",
                    )
                )
            source.delete_blob()
        except AzureError as e:
            return self._swallow(e, "rename", source_key)
        return True

    def is_directory(self, key: str) -> bool:
        return self.exists(key + "/")

    # --------------------------
    # MetadataSupporter
    # --------------------------

    def set_metadata(self, key: str, metadata: Dict[str, str]) -> None:
        blob = self._blob(key)
        try:
            blob.set_blob_metadata(metadata)
        except AzureError as e:
            code = error_code_from(e)
            raise self._fatal(
                BlobMetadataError,
                'Failed to set metadata for blob "{}" in container "{}": {} ({}).'.format(
                    key, self._container_name, error_text(e), code
                ),
                e,
                code,
                key=key,
            ) from e

    def get_metadata(self, key: str) -> Dict[str, str]:
        blob = self._blob(key)
        try:
            properties = blob.get_blob_properties()
        except AzureError as e:
            code = error_code_from(e)
            raise self._fatal(
                BlobMetadataError,
                'Failed to get metadata for blob "{}" in container "{}": {} ({}).'.format(
                    key, self._container_name, error_text(e), code
                ),
                e,
                code,
                key=key,
            ) from e
        return dict(properties.metadata or {})

    # --------------------------
    # Internal helpers
    # --------------------------

    def _init(self) -> BlobServiceClient:
        """Returns the service client, creating it through the factory on first use."""
        if self._service is None:
            with self._lock:
                if self._service is None:
                    self._service = self._client_factory.create()
                    logger.debug("Blob service client ready for {}", self._container_name)
        return self._service

    def _blob(self, key: str) -> BlobClient:
        return self._init().get_blob_client(self._container_name, key)

    def _swallow(self, exc: AzureError, operation: str, key: str) -> Literal[False]:
        return self._record(describe(exc, operation, key))

    def _record(self, failure: BlobFailure) -> Literal[False]:
        self.last_failure = failure
        logger.warning(
            "{} failed for {}/{}: {} ({}, {})",
            failure.operation,
            self._container_name,
            failure.key,
            failure.message,
            failure.code,
            failure.kind.value,
        )
        return False

    def _fatal(
        self,
        error_cls: Type[BlobStorageError],
        message: str,
        exc: AzureError,
        code: str,
        *,
        container: Optional[str] = None,
        key: Optional[str] = None,
    ) -> BlobStorageError:
        logger.error(message)
        return error_cls(
            message,
            container=container or self._container_name,
            key=key,
            code=code,
            kind=classify(exc).value,
            status_code=getattr(exc, "status_code", None),
        )
