"""Exception hierarchy for web page text extraction."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for all extraction errors."""

    pass


class NavigationError(ExtractionError):
    """Raised for navigation failures (timeout, connection, DNS)."""

    pass


class ContentQualityError(ExtractionError):
    """Raised when extracted content fails quality validation."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Content quality check failed: {reason}")


class ChallengePersistentError(ContentQualityError):
    """Raised when content fails validation after a challenge page never cleared."""

    def __init__(self, reason: str, budget_ms: int) -> None:
        self.budget_ms = budget_ms
        super().__init__(
            f"{reason} (challenge page did not clear within {budget_ms / 1000:.0f}s)"
        )


class SelectorEvaluationError(ExtractionError):
    """Raised when a single DOM query or cleanup rule fails.

    Never propagated out of the pruner or selector; recorded per rule.
    """

    def __init__(self, selector: str, cause: Exception) -> None:
        self.selector = selector
        self.cause = cause
        super().__init__(f"Selector '{selector}' failed: {cause}")


class BrowserLaunchError(ExtractionError):
    """Raised when the browser engine cannot be started."""

    pass


class BrowserInstallError(ExtractionError):
    """Raised when the browser binaries cannot be installed."""

    pass


class ExhaustedRetriesError(ExtractionError):
    """Raised after every extraction attempt has failed.

    Carries the reason of the last attempt (and of every attempt in
    ``reasons``); the underlying error is chained as ``__cause__``.
    """

    def __init__(
        self,
        url: str,
        attempts: int,
        last_reason: str,
        reasons: list[str] | None = None,
    ) -> None:
        self.url = url
        self.attempts = attempts
        self.last_reason = last_reason
        self.reasons = reasons if reasons is not None else [last_reason]
        super().__init__(
            f"Failed to extract {url} after {attempts} attempt(s): {last_reason}"
        )
