"""Resilience - Reintentos del lado del llamador."""

from .retry import RECOVERABLE_ERRORS, AsyncRetryExecutor, RetryConfig

__all__ = ["RECOVERABLE_ERRORS", "AsyncRetryExecutor", "RetryConfig"]
