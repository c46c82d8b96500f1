"""Settings do cliente Twikey.

Configuração imutável após construção; pertence exclusivamente à sessão.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING

from twikey.crypto.errors import DecodeError
from twikey.crypto.otp import DEFAULT_SALT, decode_private_key
from twikey.infra.clock import SystemClock

if TYPE_CHECKING:
    from twikey.protocols.clock import ClockProtocol

DEFAULT_BASE_URL = "https://api.twikey.com"
DEFAULT_USER_AGENT = "twikey-api/python-0.1.0"
DEFAULT_TIMEOUT_SECONDS = 60.0
# Janela suave: o servidor expira o token em ~24h
DEFAULT_TOKEN_TTL_SECONDS = 23 * 3600


@dataclass(frozen=True)
class ClientSettings:
    """Configurações do cliente.

    Attributes:
        api_key: API key do credor (apiToken)
        base_url: URL base da API (produção ou beta)
        private_key: Chave privada hex para OTP (vazio = sem OTP)
        salt: Salt do OTP
        user_agent: User-Agent dedicado (permite contato em caso de abuso)
        timeout_seconds: Timeout HTTP por requisição
        token_ttl_seconds: Validade local do token antes de reautenticar
        clock: Fonte de tempo (injetável para testes)
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    private_key: str = field(default="", repr=False)
    salt: str = DEFAULT_SALT
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    clock: ClockProtocol = field(default_factory=SystemClock, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def uses_otp(self) -> bool:
        """Retorna True se a autenticação envia OTP."""
        return bool(self.private_key)

    def validate(self) -> list[str]:
        """Valida configurações.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []

        if not self.api_key:
            errors.append("TWIKEY_API_KEY não pode ser vazio")

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"TWIKEY_URL inválida: {self.base_url}")

        if self.private_key:
            try:
                decode_private_key(self.private_key)
            except DecodeError:
                errors.append("TWIKEY_PRIVATE_KEY deve ser hexadecimal")

        if self.timeout_seconds <= 0:
            errors.append("TWIKEY_TIMEOUT_SECONDS deve ser > 0")

        if self.token_ttl_seconds <= 0:
            errors.append("TWIKEY_TOKEN_TTL_SECONDS deve ser > 0")

        return errors


def load_client_settings_from_env() -> ClientSettings:
    """Carrega ClientSettings de variáveis de ambiente."""
    return ClientSettings(
        api_key=os.getenv("TWIKEY_API_KEY", ""),
        base_url=os.getenv("TWIKEY_URL", DEFAULT_BASE_URL),
        private_key=os.getenv("TWIKEY_PRIVATE_KEY", ""),
        salt=os.getenv("TWIKEY_SALT", DEFAULT_SALT),
        user_agent=os.getenv("TWIKEY_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=float(os.getenv("TWIKEY_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))),
        token_ttl_seconds=int(
            os.getenv("TWIKEY_TOKEN_TTL_SECONDS", str(DEFAULT_TOKEN_TTL_SECONDS))
        ),
    )


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    """Retorna instância cacheada de ClientSettings."""
    return load_client_settings_from_env()
