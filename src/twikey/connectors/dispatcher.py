"""Dispatcher de requisições autenticadas para a API Twikey.

Toda operação de recurso passa por aqui:
1. garante sessão fresca (SessionManager)
2. aplica headers padrão (Content-Type, Accept, User-Agent, Authorization)
3. executa a chamada e classifica a resposta

Sem retry automático: `err_no_login` apenas invalida o token para que a
*próxima* chamada reautentique; o erro atual é propagado ao chamador.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from twikey.connectors.api_errors import error_from_response, is_no_login, system_error
from twikey.connectors.api_logging import log_api_error, log_success
from twikey.connectors.headers import (
    AUTHORIZATION_HEADER,
    FORM_CONTENT_TYPE,
    IDEMPOTENCY_HEADER,
    JSON_CONTENT_TYPE,
)

if TYPE_CHECKING:
    from twikey.config.settings import ClientSettings
    from twikey.session.manager import SessionManager

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, str] | Sequence[tuple[str, str]]


@dataclass(frozen=True)
class ApiRequest:
    """Requisição preparada (sem token).

    Attributes:
        method: Verbo HTTP
        path: Caminho relativo à base_url (ou URL absoluta)
        params: Query string
        form: Corpo form-urlencoded (padrão da maioria das operações)
        json_body: Corpo JSON (ex.: criação de fatura)
        content: Corpo bruto (ex.: fatura UBL em XML) com `content_type`
        content_type: Content-Type explícito para `content`
        headers: Headers extras, repassados sem alteração
        idempotency_key: Valor de Idempotency-Key (nunca gerado aqui)
        decode: Se False, respostas 2xx não são decodificadas
    """

    method: str
    path: str
    params: QueryParams | None = None
    form: Mapping[str, str] | None = None
    json_body: Any = None
    content: bytes | str | None = None
    content_type: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    idempotency_key: str | None = None
    decode: bool = True

    def resolved_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        if self.json_body is not None:
            return JSON_CONTENT_TYPE
        return FORM_CONTENT_TYPE


class RequestDispatcher:
    """Executa ApiRequest com autenticação garantida e erros classificados."""

    def __init__(
        self,
        settings: ClientSettings,
        session: SessionManager,
        http_client: httpx.AsyncClient,
    ) -> None:
        self._settings = settings
        self._session = session
        self._http = http_client

    @property
    def session(self) -> SessionManager:
        return self._session

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._settings.base_url}{path}"

    def _build_headers(self, request: ApiRequest, token: str) -> httpx.Headers:
        headers = httpx.Headers(request.headers)
        headers["Content-Type"] = request.resolved_content_type()
        headers["Accept"] = JSON_CONTENT_TYPE
        headers["User-Agent"] = self._settings.user_agent
        headers[AUTHORIZATION_HEADER] = token
        if request.idempotency_key:
            headers[IDEMPOTENCY_HEADER] = request.idempotency_key
        return headers

    async def send(
        self,
        request: ApiRequest,
        response_model: type[BaseModel] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Executa a requisição.

        Args:
            request: Requisição preparada
            response_model: Modelo pydantic para validar o JSON (opcional)
            timeout: Deadline (s) cobrindo autenticação e chamada

        Returns:
            None se `request.decode` for False; senão o JSON decodificado
            (ou instância de `response_model`)

        Raises:
            TwikeyUserError: Resposta 4xx
            TwikeySystemError: 5xx, transporte, JSON inválido
            TimeoutError: Deadline excedido (chamada em andamento cancelada)
        """
        return await asyncio.wait_for(self._send(request, response_model), timeout)

    async def _send(self, request: ApiRequest, response_model: type[BaseModel] | None) -> Any:
        token = await self._session.ensure_authenticated()
        response = await self._execute(request, token)

        if not response.is_success:
            error = error_from_response(response)
            if is_no_login(response, error):
                self._session.invalidate(token)
            log_api_error(error, request.method, request.path)
            raise error

        log_success(request.method, request.path, response.status_code)
        if not request.decode:
            return None
        return self._decode(response, response_model)

    async def _execute(self, request: ApiRequest, token: str) -> httpx.Response:
        try:
            return await self._http.request(
                request.method,
                self._url(request.path),
                params=request.params,
                data=request.form,
                json=request.json_body,
                content=request.content,
                headers=self._build_headers(request, token),
                timeout=self._settings.timeout_seconds,
            )
        except httpx.RequestError as exc:
            logger.warning(
                "twikey_request_error",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "error_type": type(exc).__name__,
                },
            )
            raise system_error(f"request failed: {type(exc).__name__}") from exc

    @staticmethod
    def _decode(response: httpx.Response, response_model: type[BaseModel] | None) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise system_error("invalid JSON response", status_code=response.status_code) from exc

        if response_model is None:
            return payload
        try:
            return response_model.model_validate(payload)
        except ValidationError as exc:
            raise system_error(
                f"unexpected response shape for {response_model.__name__}",
                status_code=response.status_code,
            ) from exc
