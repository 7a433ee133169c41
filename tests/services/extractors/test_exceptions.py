"""Tests for the extraction exception hierarchy."""

from __future__ import annotations

import pytest

from webtext.services.extractors.exceptions import (
    BrowserInstallError,
    BrowserLaunchError,
    ChallengePersistentError,
    ContentQualityError,
    ExhaustedRetriesError,
    ExtractionError,
    NavigationError,
    SelectorEvaluationError,
)


class TestExceptionHierarchy:
    """Test suite for exception types."""

    @pytest.mark.parametrize(
        "exc",
        [
            NavigationError("x"),
            ContentQualityError("x"),
            ChallengePersistentError("x", 30_000),
            SelectorEvaluationError("nav", RuntimeError("x")),
            BrowserLaunchError("x"),
            BrowserInstallError("x"),
            ExhaustedRetriesError("https://example.com", 1, "x"),
        ],
    )
    def test_all_are_extraction_errors(self, exc: Exception) -> None:
        assert isinstance(exc, ExtractionError)

    def test_content_quality_error_message(self) -> None:
        error = ContentQualityError("content too short: 3 chars (minimum: 50)")

        assert str(error) == (
            "Content quality check failed: content too short: 3 chars (minimum: 50)"
        )
        assert error.reason.startswith("content too short")

    def test_challenge_persistent_is_quality_error(self) -> None:
        error = ChallengePersistentError("content too short", 30_000)

        assert isinstance(error, ContentQualityError)
        assert error.budget_ms == 30_000
        assert "did not clear within 30s" in str(error)

    def test_selector_error_keeps_cause(self) -> None:
        cause = RuntimeError("invalid selector")
        error = SelectorEvaluationError("[class*='ad']", cause)

        assert error.selector == "[class*='ad']"
        assert error.cause is cause
        assert "[class*='ad']" in str(error)

    def test_exhausted_retries_message(self) -> None:
        error = ExhaustedRetriesError(
            "https://example.com", 3, "timeout", reasons=["a", "b", "timeout"]
        )

        assert str(error) == (
            "Failed to extract https://example.com after 3 attempt(s): timeout"
        )
        assert error.reasons == ["a", "b", "timeout"]
        assert error.last_reason == "timeout"

    def test_exhausted_retries_default_reasons(self) -> None:
        error = ExhaustedRetriesError("https://example.com", 1, "boom")
        assert error.reasons == ["boom"]
