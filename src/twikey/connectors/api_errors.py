"""Envelope de erro da API Twikey e classificação de respostas com falha.

O corpo de erro da Twikey tem o formato:
    {"code": "err_invalid_mandatenumber", "message": "...", "extra": "..."}

`message` é traduzida conforme Accept-Language; use sempre `code`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from twikey.connectors.headers import API_ERROR_HEADER
from twikey.utils.errors import (
    SYSTEM_ERROR_CODE,
    TwikeyApiError,
    TwikeySystemError,
    TwikeyUserError,
)

if TYPE_CHECKING:
    import httpx


NO_LOGIN_ERROR_CODE = "err_no_login"


class ErrorEnvelope(BaseModel):
    """Erro estruturado retornado pela API (imutável)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str
    message: str = ""
    extra: str | None = None

    @field_validator("extra", mode="before")
    @classmethod
    def _stringify_extra(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class RawStatus:
    """Fallback quando o corpo não contém envelope: apenas a status line."""

    status_code: int
    reason_phrase: str

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason_phrase}".strip()


def parse_error_envelope(body: bytes) -> ErrorEnvelope | None:
    """Tenta decodificar o envelope de erro do corpo.

    Returns:
        ErrorEnvelope se o corpo for um objeto JSON com `code`, senão None
    """
    if not body:
        return None
    try:
        return ErrorEnvelope.model_validate_json(body)
    except ValidationError:
        return None


def parse_error_response(response: httpx.Response) -> ErrorEnvelope | RawStatus:
    """Extrai o erro de uma resposta não-2xx.

    Ordem: envelope JSON do corpo, depois header `Apierror`, depois status line.
    """
    envelope = parse_error_envelope(response.content)
    if envelope is not None:
        return envelope

    header_code = response.headers.get(API_ERROR_HEADER)
    if header_code:
        return ErrorEnvelope(code=header_code, message=header_code)

    return RawStatus(status_code=response.status_code, reason_phrase=response.reason_phrase)


def build_api_error(parsed: ErrorEnvelope | RawStatus, status_code: int) -> TwikeyApiError:
    """Converte o resultado do parse na exceção classificada."""
    if isinstance(parsed, RawStatus):
        envelope = ErrorEnvelope(code=SYSTEM_ERROR_CODE, message=parsed.status_line)
        return TwikeySystemError(envelope, status_code=status_code)

    if 400 <= status_code < 500:
        return TwikeyUserError(parsed, status_code=status_code)
    return TwikeySystemError(parsed, status_code=status_code)


def error_from_response(response: httpx.Response) -> TwikeyApiError:
    """Classifica uma resposta com falha em TwikeyUserError/TwikeySystemError."""
    return build_api_error(parse_error_response(response), response.status_code)


def system_error(message: str, *, status_code: int | None = None) -> TwikeySystemError:
    """Cria TwikeySystemError genérico (transporte, decode)."""
    envelope = ErrorEnvelope(code=SYSTEM_ERROR_CODE, message=message)
    return TwikeySystemError(envelope, status_code=status_code)


def is_no_login(response: httpx.Response, error: TwikeyApiError | None = None) -> bool:
    """True se o servidor rejeitou o bearer token (err_no_login)."""
    if response.headers.get(API_ERROR_HEADER) == NO_LOGIN_ERROR_CODE:
        return True
    return error is not None and error.code == NO_LOGIN_ERROR_CODE
