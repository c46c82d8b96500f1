"""Cliente da API Twikey (fachada).

Compõe SessionManager + RequestDispatcher sobre um único httpx.AsyncClient
e expõe ping/logout, verificação de webhook e leitura de feeds.

Uso:
    async with create_client() as client:
        await client.ping()
        async for transaction in client.transaction_feed():
            ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from twikey.connectors.dispatcher import RequestDispatcher
from twikey.connectors.feed import FeedOptions, consume_feed, iter_feed
from twikey.crypto.signature import verify_webhook_signature
from twikey.feeds import (
    DOCUMENT_FEED,
    INVOICE_FEED,
    PAYLINK_FEED,
    REFUND_FEED,
    TRANSACTION_FEED,
)
from twikey.observability import walk_context
from twikey.session.manager import SessionManager

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable
    from types import TracebackType

    from pydantic import BaseModel

    from twikey.config.settings import ClientSettings
    from twikey.connectors.dispatcher import ApiRequest
    from twikey.connectors.feed import FeedEndpoint, FeedEntry

logger = logging.getLogger(__name__)


class TwikeyClient:
    """Cliente assíncrono da API Twikey.

    Um cliente = uma sessão. Chamadas concorrentes compartilham o token e
    disparam no máximo um login por expiração.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Inicializa o cliente.

        Args:
            settings: Configuração (api key, chave privada, clock, ...)
            http_client: Cliente HTTP injetado; se None, o cliente cria e
                fecha o seu próprio
        """
        self._settings = settings
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._session = SessionManager(settings, self._http)
        self._dispatcher = RequestDispatcher(settings, self._session, self._http)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    async def __aenter__(self) -> TwikeyClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Libera o cliente HTTP (apenas se criado aqui)."""
        if self._owns_http:
            await self._http.aclose()

    async def ping(self, *, timeout: float | None = None) -> None:
        """Sucesso sse a autenticação for bem-sucedida."""
        await self._session.ensure_authenticated(timeout=timeout)

    async def logout(self, *, timeout: float | None = None) -> None:
        await self._session.logout(timeout=timeout)

    def verify_webhook(self, signature: str, payload: bytes | str) -> None:
        """Valida o header de assinatura de um webhook recebido.

        Raises:
            InvalidSignatureError: Se a assinatura não conferir
        """
        verify_webhook_signature(signature, payload, self._settings.api_key)

    async def send(
        self,
        request: ApiRequest,
        response_model: type[BaseModel] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Executa uma requisição arbitrária pelo dispatcher."""
        return await self._dispatcher.send(request, response_model, timeout=timeout)

    def feed(
        self,
        endpoint: FeedEndpoint,
        options: FeedOptions | None = None,
        *,
        page_timeout: float | None = None,
    ) -> AsyncIterator[FeedEntry]:
        return iter_feed(self._dispatcher, endpoint, options, page_timeout=page_timeout)

    async def consume(
        self,
        endpoint: FeedEndpoint,
        callback: Callable[[FeedEntry], Awaitable[None] | None],
        options: FeedOptions | None = None,
        *,
        correlation_id: str | None = None,
    ) -> int:
        """Consome um feed em estilo callback; retorna o total entregue.

        Todos os logs do walk (login, páginas, erros) carregam o mesmo
        correlation_id (gerado se não informado) e o nome do feed.
        """
        with walk_context(endpoint.name, correlation_id):
            delivered = await consume_feed(self.feed(endpoint, options), callback)
            logger.info("twikey_feed_consumed", extra={"entries": delivered})
        return delivered

    def document_feed(self, options: FeedOptions | None = None) -> AsyncIterator[FeedEntry]:
        return self.feed(DOCUMENT_FEED, options)

    def transaction_feed(self, options: FeedOptions | None = None) -> AsyncIterator[FeedEntry]:
        return self.feed(TRANSACTION_FEED, options)

    def invoice_feed(self, options: FeedOptions | None = None) -> AsyncIterator[FeedEntry]:
        return self.feed(INVOICE_FEED, options)

    def paylink_feed(self, options: FeedOptions | None = None) -> AsyncIterator[FeedEntry]:
        return self.feed(PAYLINK_FEED, options)

    def refund_feed(self, options: FeedOptions | None = None) -> AsyncIterator[FeedEntry]:
        return self.feed(REFUND_FEED, options)


def create_client(
    settings: ClientSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> TwikeyClient:
    """Factory para criar cliente com settings validadas.

    Args:
        settings: ClientSettings opcional. Se None, carrega do ambiente.
        http_client: Cliente HTTP opcional

    Raises:
        ValueError: Se as settings forem inválidas
    """
    # Import local para evitar dependência circular
    from twikey.config.settings import get_client_settings

    resolved = settings or get_client_settings()
    errors = resolved.validate()
    if errors:
        logger.error("twikey_invalid_settings", extra={"errors": errors})
        raise ValueError("Configuração Twikey inválida: " + "; ".join(errors))
    return TwikeyClient(resolved, http_client=http_client)
