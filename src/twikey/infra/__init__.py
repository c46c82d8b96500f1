"""Implementações concretas de IO/tempo."""

from .clock import SystemClock

__all__ = ["SystemClock"]
