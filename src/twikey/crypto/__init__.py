"""Primitivas criptográficas do cliente Twikey.

- OTP (segundo fator) usado na autenticação
- Assinatura HMAC-SHA256 de webhooks

Sem IO e sem estado: podem ser usadas fora do cliente (ex.: handler de webhook).
"""

from .errors import DecodeError, InvalidSignatureError
from .otp import DEFAULT_SALT, OTP_MODULUS, OTP_STEP_SECONDS, generate_otp
from .signature import (
    compute_webhook_signature,
    is_valid_webhook_signature,
    verify_webhook_signature,
)

__all__ = [
    "DEFAULT_SALT",
    "OTP_MODULUS",
    "OTP_STEP_SECONDS",
    "DecodeError",
    "InvalidSignatureError",
    "compute_webhook_signature",
    "generate_otp",
    "is_valid_webhook_signature",
    "verify_webhook_signature",
]
