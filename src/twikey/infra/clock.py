"""Relógio do sistema (implementação concreta de ClockProtocol)."""

from __future__ import annotations

from datetime import UTC, datetime


class SystemClock:
    """Relógio de parede em UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)
