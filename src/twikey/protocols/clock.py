"""Protocolo de fonte de tempo.

A sessão depende deste contrato em vez do relógio do sistema, para que a
expiração do token seja testável sem sleep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime


class ClockProtocol(Protocol):
    """Contrato mínimo: retorna o instante atual (datetime aware, UTC)."""

    def now(self) -> datetime: ...
