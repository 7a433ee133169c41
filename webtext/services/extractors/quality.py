"""Quality gate for extracted content.

Catches interstitial and placeholder pages that slipped past the challenge
detector. The language heuristics are deliberately loose; their thresholds
live on ExtractionConfig.
"""

from __future__ import annotations

import re

from webtext.services.extractors.base import ExtractionConfig
from webtext.services.extractors.challenge import contains_challenge_phrase

# CJK ideographs, CJK punctuation and full-width forms
_CJK_CLASS = r"[\u3000-\u303f\u3400-\u4dbf\u4e00-\u9fff\uff00-\uffef]"
_LATIN_CLASS = r"[A-Za-z\s]"
_DIGIT = re.compile(r"\d")


class QualityValidator:
    """Decide whether extracted content looks like a real page."""

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self._cjk_run = re.compile(f"{_CJK_CLASS}{{{self.config.cjk_run_length},}}")
        self._latin_run = re.compile(
            f"{_LATIN_CLASS}{{{self.config.latin_run_length},}}"
        )

    def check(self, title: str | None, content: str | None) -> str | None:
        """Validate title and content.

        Returns:
            None when the content is acceptable, otherwise the rejection reason.
        """
        content = content or ""
        if len(content) < self.config.min_content_length:
            return (
                f"content too short: {len(content)} chars "
                f"(minimum: {self.config.min_content_length})"
            )

        if contains_challenge_phrase(title):
            return f"title looks like a challenge page: {title!r}"

        if not (
            self._cjk_run.search(content)
            or self._latin_run.search(content)
            or _DIGIT.search(content)
        ):
            return "content has no meaningful text"

        return None

    def is_valid(self, title: str | None, content: str | None) -> bool:
        return self.check(title, content) is None
