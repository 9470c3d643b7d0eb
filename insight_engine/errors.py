"""Exception hierarchy for the insight pipeline.

Only :class:`ProviderFailure` and :class:`ConfigurationError` are meant to reach
callers of the pipeline; every inference failure ends in fallback output.
"""
from __future__ import annotations


class InsightEngineError(Exception):
    """Base class for all pipeline errors."""


class TransientExternalFailure(InsightEngineError):
    """A single call to the inference service failed and may be retried."""


class FailureExhausted(InsightEngineError):
    """Every retry attempt failed; the caller should run its fallback."""

    def __init__(self, attempts: int, last_error: BaseException | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"all {attempts} attempts failed: {last_error}")


class MalformedResponse(InsightEngineError):
    """The inference service answered, but the content could not be decoded."""


class ProviderFailure(InsightEngineError):
    """The record window could not be fetched."""


class ConfigurationError(InsightEngineError):
    """A required setting or credential is missing or invalid."""
