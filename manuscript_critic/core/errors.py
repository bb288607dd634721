"""
Error taxonomy for the critique pipeline.

Validation errors are raised before any model call. Provider errors surface
after the gateway has spent its attempts. Extraction failures are never raised;
see core.extraction.ExtractionFailure.
"""

from typing import Optional


class CritiqueError(Exception):
    """Base class for pipeline errors."""


class ValidationError(CritiqueError):
    """The request or manuscript was rejected before calling the model."""


class ProviderError(CritiqueError):
    """The completion provider could not produce a reply."""

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        retryable: bool = True,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.retryable = retryable
        self.cause = cause


class ProviderTimeout(ProviderError):
    """The last attempt exceeded the per-attempt deadline."""


class ProviderUnavailable(ProviderError):
    """Attempts were exhausted, or the provider rejected the call outright."""


class AnalysisCancelled(CritiqueError):
    """The caller cancelled the run; nothing was persisted."""


class PersistenceError(CritiqueError):
    """The analysis store failed to read or write."""
