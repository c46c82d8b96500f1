"""Configuração (settings e logging) do cliente Twikey."""
