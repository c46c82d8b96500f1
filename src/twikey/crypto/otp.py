"""Geração de OTP (segundo fator) para autenticação na Twikey.

Esquema semelhante ao TOTP, mas com HMAC-SHA256 e chave composta:

    key     = salt_bytes + bytes.fromhex(private_key)
    counter = floor(unix_seconds / 30)  (uint64 big-endian)
    digest  = HMAC-SHA256(key, counter)
    offset  = digest[-1] & 0x0F
    otp     = (uint31 big-endian de digest[offset:offset+4]) % 100_000_000
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import math
import struct
from datetime import datetime

from .errors import DecodeError

OTP_STEP_SECONDS = 30
OTP_MODULUS = 100_000_000
DEFAULT_SALT = "own"


def decode_private_key(private_key_hex: str) -> bytes:
    """Decodifica a chave privada hex.

    Raises:
        DecodeError: Se a chave não for hex válido
    """
    try:
        return binascii.unhexlify(private_key_hex.strip())
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("private key is not valid hex") from exc


def time_step(at: datetime | float, step_seconds: int = OTP_STEP_SECONDS) -> int:
    """Retorna o contador de janela (floor(unix / step))."""
    seconds = at.timestamp() if isinstance(at, datetime) else float(at)
    return math.floor(seconds / step_seconds)


def generate_otp(salt: str, private_key_hex: str, at: datetime | float) -> int:
    """Gera o OTP de 8 dígitos (sem zero-padding) para o instante `at`.

    Args:
        salt: Salt configurado (padrão "own")
        private_key_hex: Chave privada em hex
        at: Instante de referência (datetime aware ou unix timestamp)

    Returns:
        Inteiro positivo < 100_000_000, estável dentro da janela de 30s

    Raises:
        DecodeError: Se a chave privada não for hex válido
    """
    key = salt.encode("utf-8") + decode_private_key(private_key_hex)
    counter = struct.pack(">Q", time_step(at))

    digest = hmac.new(key, counter, hashlib.sha256).digest()
    offset = digest[-1] & 0x0F
    value = int.from_bytes(digest[offset : offset + 4], "big") & 0x7FFFFFFF
    return value % OTP_MODULUS
