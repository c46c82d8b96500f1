"""Exceções compartilhadas do cliente."""

from .exceptions import (
    SYSTEM_ERROR_CODE,
    TwikeyApiError,
    TwikeyError,
    TwikeySystemError,
    TwikeyUserError,
)

__all__ = [
    "SYSTEM_ERROR_CODE",
    "TwikeyApiError",
    "TwikeyError",
    "TwikeySystemError",
    "TwikeyUserError",
]
