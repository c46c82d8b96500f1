"""Logging JSON estruturado do cliente Twikey.

Campos em todo log: timestamp, level, logger, message, correlation_id,
service, client; `feed` durante um walk de feed.
"""

from twikey.config.logging.config import configure_logging, get_logger
from twikey.config.logging.filters import LogContextFilter
from twikey.config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "LogContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
]
