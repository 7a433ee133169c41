"""Detection of anti-bot interstitial ("checking your browser") pages."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from webtext.services.extractors.base import ExtractionConfig, read_timeout

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

# Lower-case phrases that only appear on interstitials, never compared
# against anything but lower-cased title/body text.
CHALLENGE_PHRASES: tuple[str, ...] = (
    "just a moment",
    "checking your browser",
    "checking if the site connection is secure",
    "ddos protection",
    "verifying you are human",
    "verify you are human",
    "security check",
    "attention required",
    "please wait while we verify",
    "enable javascript and cookies to continue",
)


def contains_challenge_phrase(*texts: str | None) -> bool:
    """Return True if any text contains a known interstitial phrase."""
    for text in texts:
        if not text:
            continue
        lowered = text.lower()
        if any(phrase in lowered for phrase in CHALLENGE_PHRASES):
            return True
    return False


class ChallengeDetector:
    """Classify rendered pages as anti-bot interstitials and wait them out."""

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()

    async def is_challenge(self, page: Page, timeout_ms: float | None = None) -> bool:
        """Check title and body text for interstitial phrases.

        Read failures (page navigating away, detached frame, no body within
        ``timeout_ms``) yield False.
        """
        try:
            title = await page.title()
            body = await page.inner_text("body", timeout=read_timeout(timeout_ms))
        except Exception as e:
            logger.debug("Challenge check could not read page: %s", e)
            return False
        return contains_challenge_phrase(title, body)

    async def wait_for_clearance(self, page: Page, remaining_ms: float) -> bool:
        """Poll until the interstitial clears or the budget runs out.

        The budget is ``challenge_budget_ms`` capped by ``remaining_ms`` so
        the wait never outlives the request timeout. After clearing, a short
        settle delay lets the real page finish rendering.

        Returns:
            True if the challenge cleared, False if the budget was exhausted.
        """
        budget_ms = max(0.0, min(self.config.challenge_budget_ms, remaining_ms))
        interval_s = self.config.challenge_poll_interval_ms / 1000
        deadline = time.monotonic() + budget_ms / 1000
        waited_ms = 0

        logger.info(
            "Challenge page detected on %s, waiting up to %.0fs for it to clear",
            page.url,
            budget_ms / 1000,
        )

        while waited_ms + self.config.challenge_poll_interval_ms <= budget_ms:
            if time.monotonic() >= deadline:
                break
            await asyncio.sleep(interval_s)
            waited_ms += self.config.challenge_poll_interval_ms

            remaining_budget_ms = (deadline - time.monotonic()) * 1000
            if not await self.is_challenge(page, remaining_budget_ms):
                logger.info("Challenge cleared after %.0fs", waited_ms / 1000)
                settle_ms = min(
                    self.config.challenge_settle_ms,
                    max(0.0, remaining_ms - waited_ms),
                )
                if settle_ms > 0:
                    await asyncio.sleep(settle_ms / 1000)
                return True

        logger.warning(
            "Challenge page did not clear within %.0fs on %s",
            budget_ms / 1000,
            page.url,
        )
        return False
