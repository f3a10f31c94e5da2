from __future__ import annotations

from typing import Optional


class WorkbenchError(Exception):
    """Base class for every failure raised by the automation pipeline."""


class ProviderUnavailable(WorkbenchError):
    """The local inference daemon could not be reached (connection refused)."""


class AuthError(WorkbenchError):
    """A credential was rejected: bad API key or expired/revoked OAuth grant."""


class ParseError(WorkbenchError):
    """Model output could not be recovered as JSON."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class GenerationError(WorkbenchError):
    """Any other provider failure, including unparseable JSON replies."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class NoProviderAvailable(WorkbenchError):
    """Raised by the selector in strict mode when no real provider is usable."""
