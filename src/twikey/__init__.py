"""Cliente Python da API Twikey (credor).

Sessão com token de curta duração e OTP, dispatcher com classificação de
erros, verificação de webhooks e leitura de feeds.
"""

from twikey.client import TwikeyClient, create_client
from twikey.config.settings import ClientSettings
from twikey.connectors import ApiRequest, ErrorEnvelope, FeedEndpoint, FeedOptions
from twikey.crypto import (
    DecodeError,
    InvalidSignatureError,
    compute_webhook_signature,
    generate_otp,
    verify_webhook_signature,
)
from twikey.utils.errors import (
    TwikeyApiError,
    TwikeyError,
    TwikeySystemError,
    TwikeyUserError,
)

__version__ = "0.1.0"

__all__ = [
    "ApiRequest",
    "ClientSettings",
    "DecodeError",
    "ErrorEnvelope",
    "FeedEndpoint",
    "FeedOptions",
    "InvalidSignatureError",
    "TwikeyApiError",
    "TwikeyClient",
    "TwikeyError",
    "TwikeySystemError",
    "TwikeyUserError",
    "__version__",
    "compute_webhook_signature",
    "create_client",
    "generate_otp",
    "verify_webhook_signature",
]
