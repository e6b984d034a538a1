#!/usr/bin/env python3
"""
Quick verification helper for Azure Blob configuration.

Usage:
    blobfs-check                        # inspect the current environment
    blobfs-check --env-file .env.local  # merge values from an env file first
    blobfs-check --probe                # also connect and list the container

Exits with a non-zero status when blob operations are likely to fail.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from blobfs.adapters.storage.factory import BlobServiceClientFactory, build_blob_adapter
from blobfs.core.exceptions import BlobfsError
from blobfs.logging_utils import setup_logging
from blobfs.settings import BlobSettings


def _has_value(value: str | None) -> bool:
    return bool((value or "").strip())


def summarize_env(settings: BlobSettings) -> Dict[str, bool]:
    return {
        "AZURE_STORAGE_CONNECTION_STRING": _has_value(settings.connection_string),
        "AZURE_STORAGE_ACCOUNT": _has_value(settings.account_name or settings.account_url),
        "AZURE_STORAGE_ACCOUNT_KEY": _has_value(settings.account_key),
        "AZURE_STORAGE_CONTAINER_NAME": _has_value(settings.container),
    }


def missing_required(settings: BlobSettings) -> List[str]:
    """Names that must be set before the adapter can be built."""
    missing = []
    if not settings.container:
        missing.append("AZURE_STORAGE_CONTAINER_NAME")
    if not settings.configured:
        missing.append("AZURE_STORAGE_CONNECTION_STRING or AZURE_STORAGE_ACCOUNT")
    return missing


def probe(
    settings: BlobSettings, factory: Optional[BlobServiceClientFactory] = None
) -> int:
    """Build the adapter and list the container; returns the number of keys."""
    adapter = build_blob_adapter(settings, factory=factory)
    return len(adapter.keys())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check Azure Blob storage configuration.")
    parser.add_argument("--env-file", type=Path, help="Env file merged over the environment.")
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Connect and list the configured container.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file, override=True)
    setup_logging(level=os.getenv("LOG_LEVEL", "WARNING"))

    settings = BlobSettings()
    status = summarize_env(settings)
    print("Azure Blob configuration check:\n")
    for key, present in status.items():
        flag = "OK" if present else "MISSING"
        print(f"  - {key}: {flag}")

    missing = missing_required(settings)
    if missing:
        print("\nOne or more required values are missing:")
        for key in missing:
            print(f"  * {key}")
        return 1

    if status["AZURE_STORAGE_CONNECTION_STRING"]:
        print("\nConnection string detected; account/key checks are optional.")
    elif not status["AZURE_STORAGE_ACCOUNT_KEY"]:
        print("\nNo account key; DefaultAzureCredential (managed identity) will be used.")

    if args.probe:
        try:
            count = probe(settings)
        except BlobfsError as e:
            print(f"\nConnection check failed: {e}")
            return 2
        print(f"\nConnection OK: container '{settings.container}' holds {count} blobs.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
