"""
Scrape error taxonomy.

Every stage raises a ScrapeError subclass carrying a normalized ScrapeSignal so
the orchestrator can treat failures uniformly across sites. Only
ExhaustedRetries ever reaches the caller.
"""

from enum import Enum
from typing import List, Optional


class ScrapeSignal(Enum):
    """Normalized failure signals."""

    CAPTCHA = "captcha"  # gate persisted after evasion
    TRANSIENT = "transient"  # temporary failure, worth another attempt
    FATAL = "fatal"  # unrecoverable, surfaced to the caller


class ScrapeError(Exception):
    """Base class for stage-level failures."""

    signal = ScrapeSignal.TRANSIENT
    retryable = True

    def __init__(self, message: str = ""):
        super().__init__(message or self.signal.value)


class NavigationError(ScrapeError):
    """Target unreachable or not loaded within the navigation timeout."""


class PersistentGateError(ScrapeError):
    """Gate still present after the evasion rounds were exhausted."""

    signal = ScrapeSignal.CAPTCHA


class ResultsNotReadyError(ScrapeError):
    """Results landmark never appeared within the wait budget."""


class AttemptTimeoutError(ScrapeError):
    """The attempt exceeded its wall-clock budget."""


class SessionError(ScrapeError):
    """A browsing session could not be provisioned."""


class ExhaustedRetries(ScrapeError):
    """All attempts failed. Carries the last underlying error."""

    signal = ScrapeSignal.FATAL
    retryable = False

    def __init__(self, last_error: Optional[BaseException], attempts: Optional[List] = None):
        self.last_error = last_error
        self.attempts = list(attempts or [])
        super().__init__(
            f"All {len(self.attempts)} attempts failed. Last error: {last_error!r}"
        )
