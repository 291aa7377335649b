"""
Append-only log file for the archiver.

Every line is ``[YYYY-MM-DD HH:MM:SS +ZZZZ] message`` in local time. Warnings
and errors carry a ``LEVEL: `` prefix. Dict and list payloads are
pretty-printed as JSON, and continuation lines of any multi-line message
(including tracebacks) are indented by two spaces so one event stays visually
one entry.

Usage:
    configure_logging(config)
    logger.info({"session_id": "abc", "files": 3})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any

from vault_lib.config import VaultConfig

LOGGER_NAMES = ("vault_lib", "vault_hooks", "vault_scripts")
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"

# Marker attribute so reconfiguration replaces only our own handlers
_HANDLER_MARK = "_vault_handler"


def _json_serializer(obj: Any) -> str:
    return str(obj)


def indent_multiline(text: str) -> str:
    lines = text.splitlines()
    return "\n".join(line if i == 0 else f"  {line}" for i, line in enumerate(lines))


def format_log_message(message: Any) -> str:
    if isinstance(message, (dict, list)):
        return json.dumps(message, indent=2, ensure_ascii=False, default=_json_serializer)
    return str(message)


class VaultLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone().strftime(LOG_TIME_FORMAT)

        if isinstance(record.msg, (dict, list)) and not record.args:
            message = format_log_message(record.msg)
        else:
            message = record.getMessage()

        if record.levelno != logging.INFO:
            message = f"{record.levelname}: {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"[{stamp}] {indent_multiline(message)}"


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    return handler


def configure_logging(config: VaultConfig, level: int = logging.INFO) -> None:
    """Attach the log-file and stderr handlers to the package loggers.

    Safe to call more than once: previously attached handlers are replaced.
    """
    handlers: list[logging.Handler] = []

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handlers.append(_mark(stderr_handler))

    file_error: OSError | None = None
    try:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_path, mode="a", encoding="utf-8")
    except OSError as e:
        file_error = e
    else:
        file_handler.setLevel(level)
        file_handler.setFormatter(VaultLogFormatter())
        handlers.append(_mark(file_handler))

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if getattr(existing, _HANDLER_MARK, False):
                logger.removeHandler(existing)
                existing.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)

    if file_error is not None:
        logging.getLogger(__name__).warning(
            f"Failed to open log file {config.log_path}: {file_error}"
        )
