"""Tests for the content quality gate."""

from __future__ import annotations

import pytest

from webtext.services.extractors.base import ExtractionConfig
from webtext.services.extractors.quality import QualityValidator

LONG_PARAGRAPH = (
    "Residents gathered at the town hall on Tuesday evening to hear the "
    "council present its plans for the new library and the park renovation"
)


@pytest.fixture()
def validator() -> QualityValidator:
    return QualityValidator()


class TestQualityValidator:
    """Test suite for QualityValidator."""

    def test_short_content_rejected(self, validator: QualityValidator) -> None:
        """Content under the minimum length is rejected with its size."""
        reason = validator.check("Some title", "short text")
        assert reason == "content too short: 10 chars (minimum: 50)"
        assert validator.is_valid("Some title", "short text") is False

    def test_empty_content_rejected(self, validator: QualityValidator) -> None:
        """None and empty content are too short."""
        assert validator.check("Title", None).startswith("content too short: 0 chars")
        assert validator.check("Title", "").startswith("content too short")

    def test_challenge_title_rejected(self, validator: QualityValidator) -> None:
        """A challenge title fails even with long content."""
        reason = validator.check("Just a moment - Cloudflare", LONG_PARAGRAPH)
        assert reason is not None
        assert "challenge" in reason

    def test_latin_paragraph_accepted(self, validator: QualityValidator) -> None:
        """A long paragraph of letters and spaces passes."""
        assert validator.check("Daily news", LONG_PARAGRAPH) is None
        assert validator.is_valid("Daily news", LONG_PARAGRAPH) is True

    def test_cjk_run_accepted(self, validator: QualityValidator) -> None:
        """Twenty or more consecutive CJK characters pass."""
        content = "本市今日召开新闻发布会介绍今年城市建设和公共服务的最新进展情况。" * 2
        assert validator.check("新闻", content) is None

    def test_digits_accepted(self, validator: QualityValidator) -> None:
        """Tabular content with digits passes."""
        content = "| 1 | 2 | 3 |\n" * 6
        assert validator.check("Table", content) is None

    def test_punctuation_only_rejected(self, validator: QualityValidator) -> None:
        """Long content without letters, CJK text or digits is rejected."""
        content = "-=*#!?.,;:" * 10
        assert validator.check("Symbols", content) == "content has no meaningful text"

    def test_short_latin_runs_rejected(self, validator: QualityValidator) -> None:
        """Fragmented Latin text never reaching the run length is rejected."""
        content = "|".join(["word"] * 30)
        assert validator.check("Fragments", content) == "content has no meaningful text"

    def test_thresholds_configurable(self) -> None:
        """The minimum length comes from the config."""
        validator = QualityValidator(ExtractionConfig(min_content_length=5))
        assert validator.check("Title", "short text") is not None  # no 50-char run
        relaxed = QualityValidator(
            ExtractionConfig(min_content_length=5, latin_run_length=5)
        )
        assert relaxed.check("Title", "short text") is None
