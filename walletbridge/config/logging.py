"""Logging setup for WalletBridge hosts."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from logging import Handler
from logging.config import dictConfig
from logging.handlers import SysLogHandler
from pathlib import Path
from typing import Any

import msgspec

from .const import LOG_STREAM_ENV, SYSLOG_SOCKET
from .model import RuntimeConfig

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_LOG_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "asctime",
    "message",
}


def _serialise_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (bytes, bytearray)):
        # Binary stays binary: [DE AD BE EF]
        return f"[{' '.join(f'{b:02X}' for b in value)}]"
    if isinstance(value, (list, tuple)):
        return [_serialise_value(item) for item in value]
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per line, logger names relative to the package."""

    PREFIX = "walletbridge."

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(self.PREFIX)
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": name,
            "message": record.getMessage(),
        }

        extras = {
            key: _serialise_value(value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_KEYS and not key.startswith("_")
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return msgspec.json.encode(payload).decode("utf-8")


def _build_handler() -> Handler:
    socket_path = Path(SYSLOG_SOCKET)
    if os.environ.get(LOG_STREAM_ENV) or not socket_path.exists():
        return logging.StreamHandler()

    handler = SysLogHandler(address=str(socket_path), facility=SysLogHandler.LOG_USER)
    handler.ident = "walletbridge "
    return handler


def configure_logging(config: RuntimeConfig) -> None:
    """Install the structured handler on the root logger."""

    level_name = "DEBUG" if config.debug_logging else "INFO"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {"()": StructuredLogFormatter},
            },
            "handlers": {
                "walletbridge": {
                    "()": _build_handler,
                    "level": level_name,
                    "formatter": "structured",
                }
            },
            "root": {"level": level_name, "handlers": ["walletbridge"]},
        }
    )
    logging.getLogger("walletbridge").info("Logging configured at level %s", level_name)


__all__ = ["StructuredLogFormatter", "configure_logging"]
