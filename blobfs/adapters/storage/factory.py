"""Factories producing connected BlobServiceClient instances."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient
from loguru import logger

from blobfs.core.exceptions import ConfigError
from blobfs.settings import BlobSettings, get_blob_settings

if TYPE_CHECKING:  # pragma: no cover
    from blobfs.adapters.storage.azure_blob import AzureBlobStorage


class BlobServiceClientFactory(Protocol):
    """Anything able to produce a connected BlobServiceClient."""

    def create(self) -> BlobServiceClient:  # pragma: no cover - protocol
        ...


class SettingsBlobServiceClientFactory:
    """
    Builds a BlobServiceClient from BlobSettings.

    Configuration precedence: connection string -> account/key -> DefaultAzureCredential.
    """

    def __init__(self, settings: Optional[BlobSettings] = None) -> None:
        self.settings = settings or get_blob_settings()

    def create(self) -> BlobServiceClient:
        settings = self.settings

        if settings.connection_string:
            logger.debug("Connecting to blob storage with a connection string")
            return BlobServiceClient.from_connection_string(settings.connection_string)

        endpoint = settings.endpoint
        if not endpoint:
            raise ConfigError(
                "Azure storage not configured: set AZURE_STORAGE_CONNECTION_STRING "
                "or AZURE_STORAGE_ACCOUNT (with AZURE_STORAGE_ACCOUNT_KEY or a managed identity)."
            )

        if settings.account_key:
            logger.debug("Connecting to {} with a shared key", endpoint)
            return BlobServiceClient(endpoint, credential=settings.account_key)

        logger.debug("Connecting to {} with DefaultAzureCredential", endpoint)
        return BlobServiceClient(endpoint, credential=DefaultAzureCredential())


def build_blob_adapter(
    settings: Optional[BlobSettings] = None,
    *,
    factory: Optional[BlobServiceClientFactory] = None,
) -> "AzureBlobStorage":
    """Create an AzureBlobStorage adapter for the configured container."""
    from blobfs.adapters.storage.azure_blob import AzureBlobStorage

    settings = settings or get_blob_settings()
    if not settings.container:
        raise ConfigError("AZURE_STORAGE_CONTAINER_NAME is not configured")

    return AzureBlobStorage(
        factory or SettingsBlobServiceClientFactory(settings),
        settings.container,
        create=settings.create_container,
        detect_content_type=settings.detect_content_type,
    )


__all__ = [
    "BlobServiceClientFactory",
    "SettingsBlobServiceClientFactory",
    "build_blob_adapter",
]
