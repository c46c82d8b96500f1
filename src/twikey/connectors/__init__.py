"""Conectores HTTP da API Twikey: dispatcher, classificação de erros, feeds."""

from .api_errors import ErrorEnvelope, RawStatus, error_from_response, parse_error_response
from .dispatcher import ApiRequest, RequestDispatcher
from .feed import FeedEndpoint, FeedOptions, consume_feed, iter_feed

__all__ = [
    "ApiRequest",
    "ErrorEnvelope",
    "FeedEndpoint",
    "FeedOptions",
    "RawStatus",
    "RequestDispatcher",
    "consume_feed",
    "error_from_response",
    "iter_feed",
    "parse_error_response",
]
