import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

__version__ = "0.3.1"

# Load environment variables early so storage credentials are available for local/dev runs
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


def _detect_build_version() -> str:
    explicit = os.getenv("APP_VERSION")
    if explicit:
        return explicit
    build_file = Path(__file__).resolve().parents[1] / "_build_version.txt"
    if build_file.exists():
        try:
            return build_file.read_text(encoding="utf-8").strip()
        except OSError:
            logging.getLogger(__name__).warning("Unreadable build version file: %s", build_file)
    return __version__


APP_VERSION = _detect_build_version()

logger.debug("blobfs {} loaded", APP_VERSION)
