"""Sessão autenticada com a API Twikey."""

from twikey.session.manager import AUTH_PATH, SessionManager
from twikey.session.models import EPOCH, SessionState

__all__ = [
    "AUTH_PATH",
    "EPOCH",
    "SessionManager",
    "SessionState",
]
