"""Translation of Azure SDK errors into blobfs error conventions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from xml.etree import ElementTree

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)

ERROR_CONTAINER_ALREADY_EXISTS = "ContainerAlreadyExists"
ERROR_CONTAINER_NOT_FOUND = "ContainerNotFound"

_TRANSIENT_STATUS = {408, 429, 500, 502, 503, 504}


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION = "permission"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BlobFailure:
    """Details of a remote failure that an operation reported as a sentinel."""

    operation: str
    key: Optional[str]
    kind: ErrorKind
    code: str
    message: str
    status_code: Optional[int] = None


def _response_body(exc: AzureError) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return ""
    try:
        body = response.text()
    except (AzureError, AttributeError, TypeError, UnicodeDecodeError, ValueError):
        return ""
    return body or ""


def error_reason(exc: AzureError) -> str:
    """
    Returns the machine-readable reason payload of a service error.

    This is the raw response body (an XML ``<Error>`` document for the Blob
    service) when one was received, otherwise the error's reason phrase or message.
    """
    body = _response_body(exc)
    if body.strip():
        return body
    return getattr(exc, "reason", None) or error_text(exc)


def error_text(exc: AzureError) -> str:
    """Human readable description of a service error."""
    text = getattr(exc, "message", None) or str(exc)
    return text.strip().splitlines()[0] if text.strip() else type(exc).__name__


def error_code_from(exc: AzureError) -> str:
    """
    Extracts the error code from a service error.

    Args:
        exc (AzureError): The error raised by the blob client.

    Returns:
        str: The text of the ``Code`` element of the XML reason payload, or the
        raw reason verbatim when it is not XML or carries no ``Code``.
    """
    reason = error_reason(exc)
    try:
        root = ElementTree.fromstring(reason.lstrip("\ufeff").strip())
    except ElementTree.ParseError:
        return reason
    code = root.findtext("Code")
    if code is None:
        return reason
    return code.strip()


def classify(exc: AzureError) -> ErrorKind:
    """Maps a service error onto the coarse ErrorKind buckets."""
    if isinstance(exc, ResourceNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, ResourceExistsError):
        return ErrorKind.ALREADY_EXISTS
    if isinstance(exc, ClientAuthenticationError):
        return ErrorKind.PERMISSION
    if isinstance(exc, (ServiceRequestError, ServiceResponseError)):
        return ErrorKind.TRANSIENT

    status = getattr(exc, "status_code", None)
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 409:
        return ErrorKind.ALREADY_EXISTS
    if status in (401, 403):
        return ErrorKind.PERMISSION
    if status in _TRANSIENT_STATUS:
        return ErrorKind.TRANSIENT
    return ErrorKind.UNKNOWN


def describe(exc: AzureError, operation: str, key: Optional[str] = None) -> BlobFailure:
    return BlobFailure(
        operation=operation,
        key=key,
        kind=classify(exc),
        code=error_code_from(exc),
        message=error_text(exc),
        status_code=getattr(exc, "status_code", None),
    )


__all__ = [
    "ERROR_CONTAINER_ALREADY_EXISTS",
    "ERROR_CONTAINER_NOT_FOUND",
    "ErrorKind",
    "BlobFailure",
    "error_reason",
    "error_text",
    "error_code_from",
    "classify",
    "describe",
]
