"""Abstract storage contracts implemented by blob adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Literal, Union

Content = Union[bytes, str]


class Adapter(ABC):
    """
    Generic filesystem-like interface keyed by string.

    Read-style operations report failure with ``False`` instead of raising.
    """

    @abstractmethod
    def read(self, key: str) -> Union[bytes, Literal[False]]:
        """Return the content stored under key, or False on failure."""

    @abstractmethod
    def write(self, key: str, content: Content) -> Union[int, Literal[False]]:
        """Store content under key and return the number of bytes written, or False."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether key can be fetched."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All keys in the backing store."""

    @abstractmethod
    def mtime(self, key: str) -> Union[int, Literal[False]]:
        """Last modified time as seconds since the epoch, or False."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key; False when the removal failed."""

    @abstractmethod
    def rename(self, source_key: str, target_key: str) -> bool:
        """Move content from source_key to target_key."""

    @abstractmethod
    def is_directory(self, key: str) -> bool:
        """Whether key names a directory in the backing store."""


class MetadataSupporter(ABC):
    """Adapters that keep a string mapping alongside each key."""

    @abstractmethod
    def set_metadata(self, key: str, metadata: Dict[str, str]) -> None:
        """Replace the metadata stored for key."""

    @abstractmethod
    def get_metadata(self, key: str) -> Dict[str, str]:
        """Return the metadata stored for key."""


__all__ = ["Adapter", "MetadataSupporter", "Content"]
