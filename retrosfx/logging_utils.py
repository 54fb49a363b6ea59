"""Logging for retrosfx.

The ``retrosfx`` logger writes to stderr (stdout belongs to the MCP stdio
transport) and appends to ``retrosfx.log`` under ``RETROSFX_LOG_DIR``.
Failures that reach a boundary are dumped with their traceback to the same
file by ``log_exception``.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .settings import parse_flag

_LOGGER = logging.getLogger("retrosfx.logging")

PACKAGE_LOGGER = "retrosfx"
LOG_DIR_ENV = "RETROSFX_LOG_DIR"
DEBUG_ENV = "RETROSFX_DEBUG"
LOG_FILE_NAME = "retrosfx.log"

_CONSOLE_FORMAT = "retrosfx %(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_installed: list[logging.Handler] = []
_configured = False


def debug_enabled() -> bool:
    """Same rule as ``Settings.debug``: only 1/true/yes/on switch debug on."""
    return parse_flag(os.environ.get(DEBUG_ENV))


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV, "").strip()
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "retrosfx" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / LOG_FILE_NAME


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.__stderr__)
    handler.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("File logging disabled, cannot open %s: %s", path, exc)
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def configure_logging(*, force: bool = False) -> None:
    """Attach the package handlers once.

    ``force`` swaps out the handlers installed by an earlier call and re-reads
    the environment. The stderr handler is skipped when the root logger
    already has handlers, unless forced.
    """
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed:
        stale = _installed.pop()
        logger.removeHandler(stale)
        stale.close()

    logger.setLevel(logging.DEBUG)
    handlers: list[logging.Handler] = []
    if force or not logging.getLogger().handlers:
        handlers.append(_console_handler())
    file_handler = _file_handler(get_log_path())
    if file_handler is not None:
        handlers.append(file_handler)
    for handler in handlers:
        logger.addHandler(handler)
        _installed.append(handler)
    _configured = True


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` and its traceback to the log file; returns the file written."""
    path = get_log_path()
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    stamp = datetime.now().isoformat(timespec="seconds")
    entry = f"[{stamp}] {context} failed: {type(exc).__name__}: {exc}\n{trace}\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(entry)
    except OSError as write_exc:
        _LOGGER.warning("Could not append to %s: %s", path, write_exc)
        return None
    return path
