"""Formatter JSON dos logs do cliente.

Cada linha traz timestamp (UTC, ISO-8601), level, logger, message,
correlation_id, service e o identificador do cliente; campos de `extra`
(feed, status_code, error_code, ...) entram como chaves adicionais.
Nunca registrar api key, chave privada ou bearer token.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

from twikey.config.settings.client import DEFAULT_USER_AGENT

REQUIRED_LOG_FIELDS = (
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter(client_id: str = DEFAULT_USER_AGENT) -> JsonFormatter:
    """Cria o formatter JSON.

    Args:
        client_id: Valor do campo estático `client` (padrão: User-Agent)
    """
    return JsonFormatter(
        " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS),
        rename_fields=FIELD_RENAME_MAP,
        static_fields={"client": client_id},
        timestamp=True,
        json_ensure_ascii=False,
    )
