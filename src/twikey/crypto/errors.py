"""Erros criptográficos (OTP e assinatura de webhook)."""

from twikey.utils.errors import TwikeyError


class DecodeError(TwikeyError, ValueError):
    """Configuração mal-formada (ex.: chave privada que não é hex)."""


class InvalidSignatureError(TwikeyError):
    """Assinatura de webhook não confere."""
