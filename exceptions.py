"""
Exception types for the news script service.

Key rotation failures are split by whether the caller can retry later
(every key cooling down, retry budget spent) or whether the service
should never have started (no keys configured).
"""

from typing import Optional


class ConfigurationError(Exception):
    """Raised at startup when the service is missing required configuration."""


class AllCredentialsExhaustedError(Exception):
    """Every API key is rate limited and none has finished its cooldown."""

    def __init__(self, message: str = "All API keys are currently rate limited"):
        super().__init__(message)


class RetryBudgetExhaustedError(Exception):
    """Rate limit errors kept coming until the retry budget ran out."""

    def __init__(self, last_error: Exception, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Rate limited on {attempts} attempts, giving up: {last_error}"
        )


class NewsNotFoundError(LookupError):
    """No stored news document matches the given id."""

    def __init__(self, news_id: Optional[str]):
        self.news_id = news_id
        super().__init__(f"News not found: {news_id}")
