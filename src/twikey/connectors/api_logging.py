"""Helpers de logging para a API Twikey (sem tokens ou chaves)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from twikey.utils.errors import TwikeyApiError

logger = logging.getLogger(__name__)


def log_api_error(error: TwikeyApiError, method: str, path: str) -> None:
    """Loga erro classificado da API sem expor dados sensíveis."""
    logger.warning(
        "twikey_api_error",
        extra={
            "method": method,
            "path": path,
            "status_code": error.status_code,
            "error_code": error.code,
            "is_user_error": error.is_user_error,
        },
    )


def log_success(method: str, path: str, status_code: int) -> None:
    logger.debug(
        "twikey_api_success",
        extra={
            "method": method,
            "path": path,
            "status_code": status_code,
        },
    )
