"""Settings do cliente Twikey.

Uso:
    from twikey.config.settings import get_client_settings

    settings = get_client_settings()
    errors = settings.validate()
"""

from twikey.config.settings.client import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_TTL_SECONDS,
    DEFAULT_USER_AGENT,
    ClientSettings,
    get_client_settings,
    load_client_settings_from_env,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_TOKEN_TTL_SECONDS",
    "DEFAULT_USER_AGENT",
    "ClientSettings",
    "get_client_settings",
    "load_client_settings_from_env",
]
