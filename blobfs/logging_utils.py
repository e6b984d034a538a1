"""Loguru configuration helpers for consistent structured logging."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from blobfs import APP_VERSION

PathLikeArg = Union[str, PathLike]

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "req={extra[request_id]} | env={extra[environment]} | "
    "ver={extra[service_version]} | sha={extra[git_sha]} | "
    "{name}:{function}:{line} | {message}"
)

_ctx_request_id: ContextVar[str] = ContextVar("log_request_id", default="-")
_ctx_environment: ContextVar[str] = ContextVar("log_environment", default="local")
_ctx_service_version: ContextVar[str] = ContextVar(
    "log_service_version", default=APP_VERSION
)
_ctx_git_sha: ContextVar[str] = ContextVar("log_git_sha", default="unknown")

_CONTEXT_VARS: Dict[str, ContextVar[str]] = {
    "request_id": _ctx_request_id,
    "environment": _ctx_environment,
    "service_version": _ctx_service_version,
    "git_sha": _ctx_git_sha,
}


def _inject_context(record: Dict[str, Any]) -> None:
    extra = record["extra"]
    for key, ctx in _CONTEXT_VARS.items():
        extra.setdefault(key, ctx.get())


def _std_logging_sink(message) -> None:
    """Forward a Loguru message to the stdlib root logger with its extra fields."""
    record = message.record
    exc = record["exception"]
    exc_info = (exc.type, exc.value, exc.traceback) if exc else None

    log_record = logging.LogRecord(
        name=record["name"],
        level=record["level"].no,
        pathname=record["file"].path,
        lineno=record["line"],
        msg=record["message"],
        args=(),
        exc_info=exc_info,
        func=record["function"],
    )
    for k, v in record["extra"].items():
        setattr(log_record, k, v)

    logging.getLogger().handle(log_record)


def setup_logging(*, force: bool = False, level: str | None = None) -> None:
    """Configure Loguru sinks, bridge to stdlib, and attach contextual metadata."""
    if not force and getattr(setup_logging, "_configured", False):
        return

    logger.remove()

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    environment = os.getenv("ENV", "local")
    git_sha = (
        os.getenv("GIT_SHA")
        or os.getenv("COMMIT_SHA")
        or os.getenv("SOURCE_VERSION")
        or "unknown"
    )

    _ctx_environment.set(environment)
    _ctx_service_version.set(APP_VERSION)
    _ctx_git_sha.set(git_sha)

    logger.configure(patcher=_inject_context)

    logger.add(
        sys.stdout,
        level=log_level,
        format=_LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        _std_logging_sink,
        level=log_level,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )

    std_level = getattr(logging, log_level, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(std_level)
    # without a handler, stdlib's last resort would echo bridged warnings to stderr
    if not any(isinstance(h, logging.NullHandler) for h in root_logger.handlers):
        root_logger.addHandler(logging.NullHandler())
    # The Azure SDK logs every HTTP request at INFO.
    logging.getLogger("azure").setLevel(max(std_level, logging.WARNING))
    setup_logging._configured = True  # type: ignore[attr-defined]


def setup_test_logging(
    target: Optional[PathLikeArg] = None,
    *,
    level: Optional[str] = None,
    filename: str = "pytest.log",
) -> None:
    """
    Lightweight logging setup for tests.

    When ``target`` is a directory, logs are also written to ``<target>/<filename>``;
    when it is a file path they are written there directly.
    """
    effective_level = (level or os.getenv("PYTEST_LOGLEVEL") or "INFO").upper()
    setup_logging(force=True, level=effective_level)

    if target is None:
        return

    path = Path(target)
    if path.is_dir() or str(target).endswith(os.sep):
        path.mkdir(parents=True, exist_ok=True)
        path = path / filename
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(path),
        level=effective_level,
        format=_LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )


@contextmanager
def logging_context(**values: str):
    """Context manager to set structured logging fields (e.g., request_id)."""
    tokens = []
    for key, value in values.items():
        ctx = _CONTEXT_VARS.get(key)
        if ctx is not None:
            tokens.append((ctx, ctx.set(value or "-")))
    try:
        with logger.contextualize(**values):
            yield
    finally:
        for ctx, token in reversed(tokens):
            ctx.reset(token)


__all__ = ["setup_logging", "setup_test_logging", "logging_context"]
