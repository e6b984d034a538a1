from __future__ import annotations

import os
import types
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from dotenv import load_dotenv
from loguru import logger

from blobfs.adapters.storage.azure_blob import AzureBlobStorage
from blobfs.logging_utils import setup_test_logging

os.environ.setdefault("ENV", "test")

_ENDPOINT = "https://fake.blob.core.windows.net"


# -------------------------------
# Fake Azure Blob service
# -------------------------------
class _FakeResponse:
    def __init__(self, status_code: int, reason: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    def text(self, encoding=None) -> str:
        return self._body


def service_error(
    cls: type[HttpResponseError],
    status_code: int,
    code: str,
    reason: str = "Error",
    body: Optional[str] = None,
) -> HttpResponseError:
    """Build an SDK error shaped like the ones azure-storage-blob raises."""
    if body is None:
        body = (
            '\ufeff<?xml version="1.0" encoding="utf-8"?>'
            f"<Error><Code>{code}</Code><Message>{reason}</Message></Error>"
        )
    exc = cls(message=f"{reason}\nRequestId:00000000\nErrorCode:{code}")
    exc.status_code = status_code
    exc.reason = reason
    exc.response = _FakeResponse(status_code, reason, body)
    return exc


class _FakeDownloader:
    def __init__(self, data: bytes, chunk_size: int = 4):
        self._data = data
        self._chunk_size = chunk_size

    def chunks(self):
        for i in range(0, len(self._data), self._chunk_size):
            yield self._data[i : i + self._chunk_size]

    def readall(self) -> bytes:
        return self._data


class _StoredBlob:
    def __init__(self, data: bytes, content_type: Optional[str], modified: datetime):
        self.data = data
        self.content_type = content_type
        self.last_modified = modified
        self.metadata: Dict[str, str] = {}


class _FakeBlobClient:
    def __init__(self, service: "FakeBlobService", container: str, name: str):
        self._service = service
        self.container_name = container
        self.blob_name = name
        self.url = f"{_ENDPOINT}/{container}/{name}"

    def _blobs(self) -> Dict[str, _StoredBlob]:
        return self._service._blobs_of(self.container_name)

    def _stored(self) -> _StoredBlob:
        blob = self._blobs().get(self.blob_name)
        if blob is None:
            # HEAD on a missing blob carries no XML body
            raise service_error(
                ResourceNotFoundError,
                404,
                "BlobNotFound",
                "The specified blob does not exist.",
                body="",
            )
        return blob

    def download_blob(self, **kwargs) -> _FakeDownloader:
        self._service._maybe_fail("download_blob")
        return _FakeDownloader(self._stored().data)

    def upload_blob(self, data, overwrite=False, content_settings=None, **kwargs):
        self._service._maybe_fail("upload_blob")
        blobs = self._blobs()
        if not overwrite and self.blob_name in blobs:
            raise service_error(ResourceExistsError, 409, "BlobAlreadyExists")
        content_type = getattr(content_settings, "content_type", None)
        blobs[self.blob_name] = _StoredBlob(bytes(data), content_type, self._service.now())
        return {"etag": "0x1"}

    def get_blob_properties(self, **kwargs):
        self._service._maybe_fail("get_blob_properties")
        blob = self._stored()
        return types.SimpleNamespace(
            name=self.blob_name,
            size=len(blob.data),
            last_modified=blob.last_modified,
            metadata=dict(blob.metadata),
            content_settings=types.SimpleNamespace(content_type=blob.content_type),
        )

    def delete_blob(self, **kwargs) -> None:
        self._service._maybe_fail("delete_blob")
        self._stored()
        del self._blobs()[self.blob_name]

    def start_copy_from_url(self, source_url: str, **kwargs):
        self._service._maybe_fail("start_copy_from_url")
        container, _, name = source_url[len(_ENDPOINT) + 1 :].partition("/")
        source = _FakeBlobClient(self._service, container, name)._stored()
        copied = _StoredBlob(source.data, source.content_type, self._service.now())
        copied.metadata = dict(source.metadata)
        self._blobs()[self.blob_name] = copied
        return {"copy_status": self._service.copy_status, "copy_id": "copy-1"}

    def set_blob_metadata(self, metadata=None, **kwargs):
        self._service._maybe_fail("set_blob_metadata")
        self._stored().metadata = dict(metadata or {})
        return {"etag": "0x2"}


class _FakeContainerClient:
    def __init__(self, service: "FakeBlobService", name: str):
        self._service = service
        self.container_name = name

    def list_blobs(self, **kwargs):
        self._service._maybe_fail("list_blobs")
        blobs = self._service._blobs_of(self.container_name)
        return iter([types.SimpleNamespace(name=k) for k in sorted(blobs)])


class FakeBlobService:
    """In-memory stand-in for azure.storage.blob.BlobServiceClient."""

    def __init__(self):
        self.containers: Dict[str, Dict[str, _StoredBlob]] = {}
        self.failures: Dict[str, Exception] = {}
        self.clock: Optional[datetime] = None
        self.copy_status = "success"

    def now(self) -> datetime:
        return self.clock or datetime.now(timezone.utc)

    def fail(self, operation: str, exc: Exception) -> None:
        """Make every call to ``operation`` raise ``exc``."""
        self.failures[operation] = exc

    def _maybe_fail(self, operation: str) -> None:
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    def _blobs_of(self, container: str) -> Dict[str, _StoredBlob]:
        if container not in self.containers:
            raise service_error(
                ResourceNotFoundError,
                404,
                "ContainerNotFound",
                "The specified container does not exist.",
            )
        return self.containers[container]

    def create_container(self, name: str, **kwargs):
        self._maybe_fail("create_container")
        if name in self.containers:
            raise service_error(
                ResourceExistsError,
                409,
                "ContainerAlreadyExists",
                "The specified container already exists.",
            )
        self.containers[name] = {}
        return _FakeContainerClient(self, name)

    def delete_container(self, name: str, **kwargs) -> None:
        self._maybe_fail("delete_container")
        self._blobs_of(name)
        del self.containers[name]

    def get_container_client(self, container: str) -> _FakeContainerClient:
        return _FakeContainerClient(self, container)

    def get_blob_client(self, container: str, blob: str, **kwargs) -> _FakeBlobClient:
        return _FakeBlobClient(self, container, blob)


class CountingFactory:
    def __init__(self, service: FakeBlobService):
        self.service = service
        self.calls = 0

    def create(self) -> FakeBlobService:
        self.calls += 1
        return self.service


# -------------------------------
# Fixtures
# -------------------------------
@pytest.fixture(scope="session", autouse=True)
def load_env():
    load_dotenv(override=False)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    setup_test_logging(Path("blobfs-logs") / "pytest.log", level="DEBUG")
    yield


@pytest.fixture
def blob_service() -> FakeBlobService:
    return FakeBlobService()


@pytest.fixture
def client_factory(blob_service) -> CountingFactory:
    return CountingFactory(blob_service)


@pytest.fixture
def adapter(client_factory) -> AzureBlobStorage:
    return AzureBlobStorage(client_factory, "utest", create=True, detect_content_type=False)


@pytest.fixture
def make_service_error() -> Callable[..., HttpResponseError]:
    return service_error


@pytest.fixture
def log_records():
    """Capture Loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
