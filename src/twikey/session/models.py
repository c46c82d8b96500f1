"""Estado de sessão (bearer token + último login).

Snapshot imutável: o manager troca a referência inteira, então leitores
nunca observam token e timestamp de logins diferentes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot da sessão.

    Atributos:
        token: Bearer token opaco (vazio = não autenticado)
        last_login: Instante do último login bem-sucedido (EPOCH se nenhum)
    """

    token: str = ""
    last_login: datetime = EPOCH

    @classmethod
    def empty(cls) -> SessionState:
        return cls()

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        """True se há token e ele ainda está dentro da janela de validade."""
        return bool(self.token) and now - self.last_login < ttl

    def __repr__(self) -> str:
        # Nunca expor o token em logs/tracebacks
        masked = "***" if self.token else ""
        return f"SessionState(token={masked!r}, last_login={self.last_login.isoformat()})"
