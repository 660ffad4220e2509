"""
ERRORS MODULE
=============

Exceptions raised by the key pool and the completion service. The HTTP layer
(fitness_chat.main) catches CompletionError and turns it into a JSON response;
nothing above the service needs to know about HTTP status codes from OpenRouter.

  CompletionError           - base class for everything below.
  NoCredentialsConfigured   - no usable API key (empty pool or attempt budget <= 0).
  PoolEmpty                 - raised by KeyPool.take_next() on an empty pool.
  RateLimited               - one attempt hit 429 / 402 / rate_limit_exceeded. Retried.
  UpstreamExhausted         - every attempt in the budget was rate limited.
  UpstreamError             - any other upstream failure. Not retried.
"""

from typing import Any, Optional


class CompletionError(Exception):
    """Base class for failures of a single logical chat request."""

    def details(self) -> Any:
        """Debug payload echoed to the client in development mode only."""
        return str(self)


class NoCredentialsConfigured(CompletionError):
    def __init__(self, message: str = "No API keys configured"):
        super().__init__(message)


class PoolEmpty(NoCredentialsConfigured):
    pass


class RateLimited(CompletionError):
    """Upstream said slow down (HTTP 429), out of credit (HTTP 402), or sent a rate limit error code."""

    def __init__(self, status_code: Optional[int], body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Rate limited by upstream (status {status_code})")

    def details(self) -> Any:
        return self.body if self.body is not None else str(self)


class UpstreamExhausted(CompletionError):
    """All attempts were rate limited. Carries the last RateLimited seen."""

    def __init__(self, last_error: RateLimited, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"All {attempts} attempt(s) were rate limited: {last_error}")

    def details(self) -> Any:
        return self.last_error.details()


class UpstreamError(CompletionError):
    """Network error, timeout, malformed response, or a non rate-limit HTTP error."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def details(self) -> Any:
        return self.body if self.body is not None else str(self)
