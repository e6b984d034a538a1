from __future__ import annotations

from loguru import logger

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# libmagic only needs the leading bytes to identify a format
_SNIFF_BYTES = 2048


def detect_content_type(content: bytes) -> str:
    """Sniff the MIME type of a byte buffer, e.g. ``image/png`` or ``text/plain``."""
    if not content:
        return DEFAULT_CONTENT_TYPE

    try:
        import magic  # lazy: libmagic is only loaded when sniffing
    except ImportError as e:
        logger.warning("libmagic unavailable, using {}: {}", DEFAULT_CONTENT_TYPE, e)
        return DEFAULT_CONTENT_TYPE

    try:
        detected = magic.from_buffer(content[:_SNIFF_BYTES], mime=True)
    except magic.MagicException as e:
        logger.warning("Could not detect content type: {}", e)
        return DEFAULT_CONTENT_TYPE
    return detected or DEFAULT_CONTENT_TYPE


__all__ = ["DEFAULT_CONTENT_TYPE", "detect_content_type"]
