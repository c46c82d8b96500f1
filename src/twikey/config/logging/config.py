"""Configuração centralizada de logging.

Uso:
    from twikey.config.logging import configure_logging

    # Na inicialização da aplicação que usa o cliente
    configure_logging(level="INFO", service_name="billing_sync")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from twikey.config.logging.filters import LogContextFilter
from twikey.config.logging.formatters import create_json_formatter
from twikey.observability import current_log_context

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "twikey_client"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    context_getter: Callable[[], Mapping[str, str]] | None = None,
) -> None:
    """Configura logging JSON estruturado no logger raiz.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        context_getter: Fonte de correlation_id/feed. Padrão: contexto de
            walk de twikey.observability.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(LogContextFilter(service_name, context_getter or current_log_context))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
