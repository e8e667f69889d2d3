from __future__ import annotations


class InvalidInputError(Exception):
    """Raised when a completion request carries unusable text (e.g. blank content)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientNotReadyError(Exception):
    """Raised when the provider client was never configured (missing API key)."""

    def __init__(self, message: str = "LLM provider client is not initialized"):
        super().__init__(message)
        self.message = message
