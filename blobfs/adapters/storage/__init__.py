# blobfs/adapters/storage/__init__.py
"""Lazy export surface for storage adapters."""

_EXPORTS = {
    "AzureBlobStorage": "azure_blob",
    "Adapter": "base",
    "MetadataSupporter": "base",
    "BlobFailure": "errors",
    "ErrorKind": "errors",
    "error_code_from": "errors",
    "BlobServiceClientFactory": "factory",
    "SettingsBlobServiceClientFactory": "factory",
    "build_blob_adapter": "factory",
}

__all__ = list(_EXPORTS)


def __getattr__(name: str):
    module = _EXPORTS.get(name)
    if module is not None:
        from importlib import import_module

        impl = import_module(f"{__name__}.{module}")  # local import = lazy load
        return getattr(impl, name)
    raise AttributeError(name)
