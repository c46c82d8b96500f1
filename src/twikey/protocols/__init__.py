"""Protocolos (contratos) usados pelo cliente."""

from .clock import ClockProtocol

__all__ = ["ClockProtocol"]
