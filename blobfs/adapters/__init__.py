"""Outbound adapters package for blobfs.

- storage: blob storage adapters (Azure Blob Storage)

This module avoids eager imports so the Azure SDK is only loaded when used.
"""

__all__ = [
    "storage",
]
