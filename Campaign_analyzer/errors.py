"""Exception types raised by the campaign analyzer."""

from __future__ import annotations

from typing import Optional


class AnalyzerError(RuntimeError):
    """Base class for user-facing analyzer failures."""


class InputError(AnalyzerError):
    """Raised when required user input is missing or malformed."""


class CampaignError(AnalyzerError):
    """Raised when campaign data cannot be located, fetched or parsed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CompletionError(AnalyzerError):
    """Raised when the completion endpoint rejects or fails a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
