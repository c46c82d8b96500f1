"""Exceções de domínio do cliente Twikey.

Hierarquia:
    TwikeyError
    ├── TwikeyApiError (envelope {code, message, extra} + status HTTP)
    │   ├── TwikeyUserError   (4xx, corrigível pelo chamador)
    │   └── TwikeySystemError (5xx, resposta malformada, transporte)
    ├── DecodeError            (twikey.crypto.errors)
    └── InvalidSignatureError  (twikey.crypto.errors)

Chamadores distinguem erros pela classe ou por `is_user_error`,
nunca pelo texto da mensagem (que depende do Accept-Language).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from twikey.connectors.api_errors import ErrorEnvelope

SYSTEM_ERROR_CODE = "system_error"


class TwikeyError(Exception):
    """Base para todas as falhas do cliente Twikey."""


class TwikeyApiError(TwikeyError):
    """Falha classificada de uma chamada à API.

    Args:
        envelope: Envelope estruturado (code, message, extra)
        status_code: Status HTTP observado (None para falhas de transporte)
    """

    def __init__(self, envelope: ErrorEnvelope, status_code: int | None = None) -> None:
        super().__init__(envelope.message or envelope.code)
        self.envelope = envelope
        self.status_code = status_code

    @property
    def code(self) -> str:
        return self.envelope.code

    @property
    def message(self) -> str:
        return self.envelope.message

    @property
    def extra(self) -> str | None:
        return self.envelope.extra

    @property
    def is_user_error(self) -> bool:
        """True se o status pertence à classe 4xx."""
        return self.status_code is not None and 400 <= self.status_code < 500

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class TwikeyUserError(TwikeyApiError):
    """Erro 4xx: parâmetro inválido, campo obrigatório ausente, mandato inexistente."""

    @property
    def is_user_error(self) -> bool:
        return True


class TwikeySystemError(TwikeyApiError):
    """Erro 5xx, resposta mal-formada, falha de decode ou de transporte."""

    @property
    def is_user_error(self) -> bool:
        return False
