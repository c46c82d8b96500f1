"""Validação de assinatura HMAC-SHA256 para webhooks da Twikey."""

from __future__ import annotations

import hashlib
import hmac

from .errors import InvalidSignatureError


def _as_bytes(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_webhook_signature(payload: bytes | str, api_key: str) -> str:
    """Calcula a assinatura esperada (hex em maiúsculas).

    Args:
        payload: Corpo bruto da requisição (query string do webhook)
        api_key: API key do credor
    """
    digest = hmac.new(_as_bytes(api_key), _as_bytes(payload), hashlib.sha256)
    return digest.hexdigest().upper()


def is_valid_webhook_signature(signature: str, payload: bytes | str, api_key: str) -> bool:
    """Valida assinatura do header X-Signature.

    Args:
        signature: Valor do header de assinatura
        payload: Corpo bruto da requisição
        api_key: API key do credor

    Returns:
        True se assinatura válida
    """
    if not signature:
        return False

    expected = compute_webhook_signature(payload, api_key)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def verify_webhook_signature(signature: str, payload: bytes | str, api_key: str) -> None:
    """Como `is_valid_webhook_signature`, mas levanta em caso de divergência.

    Raises:
        InvalidSignatureError: Se a assinatura não conferir
    """
    if not is_valid_webhook_signature(signature, payload, api_key):
        raise InvalidSignatureError("invalid_signature")
