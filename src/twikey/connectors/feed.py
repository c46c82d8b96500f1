"""Leitura de feeds "mudanças desde a última posição".

O servidor mantém a posição de consumo por credor: cada GET devolve a
próxima página e o walk termina exatamente na primeira página vazia.

- `iter_feed` é um async generator (pull-based, lazy)
- `X-RESUME-AFTER` só é enviado na primeira página do walk
- cada página passa pelo dispatcher (reautentica se expirar no meio)
- não há limite de páginas: o walk depende do servidor devolver uma
  página vazia
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from twikey.connectors.api_errors import system_error
from twikey.connectors.dispatcher import ApiRequest
from twikey.connectors.headers import RESUME_AFTER_HEADER

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from twikey.connectors.dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)

FeedEntry = dict[str, Any]


@dataclass(frozen=True)
class FeedEndpoint:
    """Descritor de um feed.

    Attributes:
        name: Nome lógico (para logs)
        path: Caminho do endpoint
        entries_key: Chave da lista de entradas na página JSON
    """

    name: str
    path: str
    entries_key: str


@dataclass(frozen=True)
class FeedOptions:
    """Opções de um walk.

    Attributes:
        start: Posição (sequence) após a qual retomar; None = desde o início
            do histórico retido / posição atual do servidor
        includes: Sideloads enviados como `include=` repetido
    """

    start: int | None = None
    includes: tuple[str, ...] = ()


def _page_entries(page: Any, endpoint: FeedEndpoint) -> list[FeedEntry]:
    if not isinstance(page, dict):
        raise system_error(f"malformed {endpoint.name} feed page")
    entries = page.get(endpoint.entries_key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise system_error(f"malformed {endpoint.name} feed entries")
    return entries


async def iter_feed(
    dispatcher: RequestDispatcher,
    endpoint: FeedEndpoint,
    options: FeedOptions | None = None,
    *,
    page_timeout: float | None = None,
) -> AsyncIterator[FeedEntry]:
    """Itera as entradas do feed até a primeira página vazia.

    Args:
        dispatcher: Dispatcher autenticado
        endpoint: Feed a consumir
        options: Cursor de retomada e sideloads
        page_timeout: Deadline (s) por página

    Yields:
        Entradas do feed, na ordem do servidor

    Raises:
        TwikeyApiError: Falha em qualquer página (entradas já entregues
            não são desfeitas)
    """
    opts = options or FeedOptions()
    params = [("include", include) for include in opts.includes]
    resume_after = opts.start
    pages = 0

    while True:
        headers: dict[str, str] = {}
        if resume_after is not None:
            headers[RESUME_AFTER_HEADER] = str(resume_after)
            resume_after = None

        page = await dispatcher.send(
            ApiRequest(method="GET", path=endpoint.path, params=params, headers=headers),
            timeout=page_timeout,
        )
        entries = _page_entries(page, endpoint)
        pages += 1
        logger.debug(
            "twikey_feed_page",
            extra={"feed": endpoint.name, "page": pages, "entries": len(entries)},
        )
        if not entries:
            return

        for entry in entries:
            yield entry


async def consume_feed(
    entries: AsyncIterator[FeedEntry],
    callback: Callable[[FeedEntry], Awaitable[None] | None],
) -> int:
    """Adapta o iterador para estilo callback.

    Args:
        entries: Iterador retornado por `iter_feed`
        callback: Função (sync ou async) chamada por entrada

    Returns:
        Quantidade de entradas entregues
    """
    delivered = 0
    async for entry in entries:
        result = callback(entry)
        if inspect.isawaitable(result):
            await result
        delivered += 1
    return delivered
