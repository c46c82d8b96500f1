"""Filter que injeta o contexto do cliente nos records de log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


class LogContextFilter(logging.Filter):
    """Completa cada record com service, correlation_id e feed do walk ativo.

    Valores passados explicitamente via `extra` têm precedência sobre o
    contexto (ex.: `iter_feed` já informa `feed`).
    """

    def __init__(
        self,
        service_name: str,
        context_getter: Callable[[], Mapping[str, str]] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_context = context_getter or dict

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self._get_context().items():
            if not getattr(record, key, None):
                setattr(record, key, value)
        if not getattr(record, "correlation_id", None):
            record.correlation_id = ""
        record.service = self._service_name
        return True
