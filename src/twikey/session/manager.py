"""Gerenciador de sessão da API Twikey.

Responsável pelo bearer token e sua expiração:
- `ensure_authenticated()` é idempotente e chamado antes de toda operação
- refresh single-flight: uma única task de login em andamento, aguardada
  por todos os chamadores (mesmo token ou mesma exceção)
- qualquer falha de autenticação zera o estado (token vazio, last_login=EPOCH)
- cancelamento durante o login não altera o estado; a task só é cancelada
  quando o último chamador à espera desiste
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx

from twikey.connectors.api_errors import ErrorEnvelope, error_from_response, system_error
from twikey.connectors.api_logging import log_api_error
from twikey.connectors.headers import (
    API_ERROR_HEADER,
    AUTHORIZATION_HEADER,
    FORM_CONTENT_TYPE,
)
from twikey.crypto.errors import DecodeError
from twikey.crypto.otp import generate_otp
from twikey.session.models import SessionState
from twikey.utils.errors import TwikeyApiError, TwikeyUserError

if TYPE_CHECKING:
    from twikey.config.settings import ClientSettings

logger = logging.getLogger(__name__)

AUTH_PATH = "/creditor"
NO_TOKEN_ERROR_CODE = "err_no_token"


class _InflightLogin:
    """Login em andamento e quantos chamadores o aguardam."""

    __slots__ = ("task", "waiters")

    def __init__(self, task: asyncio.Task[str]) -> None:
        self.task = task
        self.waiters = 0


class SessionManager:
    """Dono exclusivo do estado de sessão de um cliente.

    O estado é um SessionState imutável trocado atomicamente. Chamadas com
    token fresco não esperam; as demais compartilham a task de login em
    andamento.
    """

    __slots__ = ("_http", "_inflight", "_settings", "_state", "_ttl")

    def __init__(self, settings: ClientSettings, http_client: httpx.AsyncClient) -> None:
        """Inicializa o manager.

        Args:
            settings: Configuração do cliente (inclui o clock)
            http_client: Cliente HTTP compartilhado com o dispatcher
        """
        self._settings = settings
        self._http = http_client
        self._ttl = timedelta(seconds=settings.token_ttl_seconds)
        self._state = SessionState.empty()
        self._inflight: _InflightLogin | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def auth_url(self) -> str:
        return f"{self._settings.base_url}{AUTH_PATH}"

    def is_authenticated(self) -> bool:
        """True se o token atual pode ser usado sem reautenticar."""
        return self._state.is_fresh(self._settings.clock.now(), self._ttl)

    async def ensure_authenticated(self, *, timeout: float | None = None) -> str:
        """Garante um token fresco e o retorna.

        Args:
            timeout: Deadline (s) para o login, quando necessário

        Returns:
            Bearer token válido

        Raises:
            TwikeyUserError: Credenciais rejeitadas
            TwikeySystemError: Falha de servidor ou transporte
            DecodeError: Chave privada inválida
            TimeoutError: Deadline excedido (estado preservado)
        """
        state = self._state
        if state.is_fresh(self._settings.clock.now(), self._ttl):
            return state.token
        return await asyncio.wait_for(self._refresh(), timeout)

    async def _refresh(self) -> str:
        # Login compartilhado pode ter terminado antes deste chamador rodar
        state = self._state
        if state.is_fresh(self._settings.clock.now(), self._ttl):
            return state.token

        inflight = self._inflight
        if inflight is None or inflight.task.done():
            inflight = _InflightLogin(asyncio.create_task(self._authenticate()))
            inflight.task.add_done_callback(self._clear_inflight)
            self._inflight = inflight

        inflight.waiters += 1
        try:
            return await asyncio.shield(inflight.task)
        except asyncio.CancelledError:
            if inflight.waiters == 1 and not inflight.task.done():
                # Ninguém mais aguarda: abandona o login sem tocar no estado
                inflight.task.cancel()
                if self._inflight is inflight:
                    self._inflight = None
            raise
        finally:
            inflight.waiters -= 1

    def _clear_inflight(self, task: asyncio.Task[str]) -> None:
        if self._inflight is not None and self._inflight.task is task:
            self._inflight = None
        if not task.cancelled():
            # Marca a exceção como consumida mesmo sem chamadores restantes
            task.exception()

    async def _authenticate(self) -> str:
        settings = self._settings
        form = {"apiToken": settings.api_key}
        if settings.uses_otp:
            try:
                otp = generate_otp(settings.salt, settings.private_key, settings.clock.now())
            except DecodeError:
                self._reset()
                logger.error("twikey_otp_invalid_private_key")
                raise
            form["otp"] = str(otp)

        headers = {
            "User-Agent": settings.user_agent,
            "Content-Type": FORM_CONTENT_TYPE,
        }
        logger.debug(
            "twikey_authenticating",
            extra={"base_url": settings.base_url, "with_otp": settings.uses_otp},
        )

        try:
            response = await self._http.post(
                self.auth_url,
                data=form,
                headers=headers,
                timeout=settings.timeout_seconds,
            )
        except httpx.RequestError as exc:
            self._reset()
            logger.warning(
                "twikey_auth_request_error",
                extra={"error_type": type(exc).__name__},
            )
            raise system_error(f"authentication request failed: {type(exc).__name__}") from exc

        token = response.headers.get(AUTHORIZATION_HEADER)
        if response.status_code == 200 and token:
            self._state = SessionState(token=token, last_login=settings.clock.now())
            logger.info("twikey_authenticated", extra={"base_url": settings.base_url})
            return token

        self._reset()
        error = self._authentication_error(response)
        log_api_error(error, "POST", AUTH_PATH)
        raise error

    @staticmethod
    def _authentication_error(response: httpx.Response) -> TwikeyApiError:
        if response.status_code == 200:
            # 200 sem Authorization: apiToken recusado
            code = response.headers.get(API_ERROR_HEADER) or NO_TOKEN_ERROR_CODE
            envelope = ErrorEnvelope(code=code, message="Invalid apiToken")
            return TwikeyUserError(envelope, status_code=response.status_code)
        return error_from_response(response)

    def invalidate(self, rejected_token: str | None = None) -> bool:
        """Força reautenticação na próxima chamada.

        Args:
            rejected_token: Token recusado pelo servidor. Se informado, só
                invalida quando ainda é o token atual (um refresh concorrente
                já pode ter trocado o token).

        Returns:
            True se o estado foi zerado
        """
        if rejected_token is not None and self._state.token != rejected_token:
            return False
        self._reset()
        logger.info("twikey_session_invalidated")
        return True

    def _reset(self) -> None:
        self._state = SessionState.empty()

    async def logout(self, *, timeout: float | None = None) -> None:
        """Encerra a sessão no servidor (best-effort).

        Erros são logados e nunca propagados; o estado local é zerado.
        """
        token = self._state.token
        if not token:
            return

        headers = {
            "User-Agent": self._settings.user_agent,
            "Content-Type": FORM_CONTENT_TYPE,
            AUTHORIZATION_HEADER: token,
        }
        try:
            response = await asyncio.wait_for(
                self._http.get(
                    self.auth_url,
                    headers=headers,
                    timeout=self._settings.timeout_seconds,
                ),
                timeout,
            )
        except (httpx.RequestError, TimeoutError) as exc:
            logger.warning("twikey_logout_error", extra={"error_type": type(exc).__name__})
        else:
            if response.status_code != 200:
                logger.warning(
                    "twikey_logout_failed",
                    extra={"status_code": response.status_code},
                )

        self.invalidate(token)
