"""Fetch orchestrator: render a URL and return its cleaned main text.

Each attempt runs, in order: navigate, wait for readiness, detect (and wait
out) a challenge page, prune boilerplate, select main content, validate.
Attempts are strictly sequential and each one uses its own browsing
context; between attempts the loop backs off with jitter.

Usage:
    async with WebPageTextExtractor() as extractor:
        text = await extractor.extract("https://example.com")
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import TYPE_CHECKING

from webtext.services.extractors.base import (
    AttemptOutcome,
    ExtractionConfig,
    ExtractionResult,
    Fatal,
    FetchRequest,
    Retryable,
    Success,
)
from webtext.services.extractors.challenge import (
    ChallengeDetector,
    contains_challenge_phrase,
)
from webtext.services.extractors.content import BoilerplatePruner, ContentSelector
from webtext.services.extractors.exceptions import (
    BrowserLaunchError,
    ChallengePersistentError,
    ContentQualityError,
    ExhaustedRetriesError,
    ExtractionError,
    NavigationError,
)
from webtext.services.extractors.normalizer import normalize_text
from webtext.services.extractors.quality import QualityValidator
from webtext.services.extractors.session import BrowserSession

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


class WebPageTextExtractor:
    """Resilient headless-browser text extractor.

    The browser session is passed in (or created) once and shared by every
    call; ``dispose()`` releases it.

    Attributes:
        config: Extraction configuration shared by all components.
        session: Browser session providing per-attempt contexts.
    """

    def __init__(
        self,
        session: BrowserSession | None = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        if config is None:
            config = session.config if session is not None else ExtractionConfig()
        self.config = config
        self.session = session or BrowserSession(config)
        self.detector = ChallengeDetector(config)
        self.pruner = BoilerplatePruner(config)
        self.selector = ContentSelector(config)
        self.validator = QualityValidator(config)

    async def initialize(self) -> None:
        """Start the shared browser. Idempotent."""
        await self.session.initialize()

    async def dispose(self) -> None:
        """Close the shared browser. Safe to call multiple times."""
        await self.session.release()

    async def extract(
        self,
        url: str,
        timeout_ms: int | None = None,
        max_attempts: int | None = None,
    ) -> str:
        """Extract the page's main text as a labelled text blob.

        Raises:
            ValueError: If the request parameters are invalid.
            ExhaustedRetriesError: If every attempt failed.
        """
        result = await self.extract_result(url, timeout_ms, max_attempts)
        return result.text

    async def extract_result(
        self,
        url: str,
        timeout_ms: int | None = None,
        max_attempts: int | None = None,
    ) -> ExtractionResult:
        """Extract the page's main text with attempt metadata.

        Args:
            url: Page to render.
            timeout_ms: Per-attempt ceiling for navigation and every wait.
            max_attempts: Attempts before giving up (>= 1).

        Returns:
            ExtractionResult with normalized content.

        Raises:
            ValueError: If the request parameters are invalid.
            ExhaustedRetriesError: If every attempt failed; chained to the
                last attempt's underlying error.
        """
        request = FetchRequest(
            url=(url or "").strip(),
            timeout_ms=timeout_ms if timeout_ms is not None else self.config.timeout_ms,
            max_attempts=(
                max_attempts if max_attempts is not None else self.config.max_attempts
            ),
        )
        start_time = time.perf_counter()
        reasons: list[str] = []
        outcome: AttemptOutcome | None = None
        attempt = 0

        while attempt < request.max_attempts:
            if attempt > 0:
                await self._backoff(attempt)
            attempt += 1

            logger.info(
                "Extracting %s (attempt %d/%d)", request.url, attempt, request.max_attempts
            )
            outcome = await self._attempt(request)

            if isinstance(outcome, Success):
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                logger.info(
                    "Extracted %d chars from %s in %.0fms (attempt %d)",
                    len(outcome.content),
                    request.url,
                    elapsed_ms,
                    attempt,
                )
                return ExtractionResult(
                    url=request.url,
                    title=outcome.title,
                    content=outcome.content,
                    attempts=attempt,
                    extraction_time_ms=elapsed_ms,
                    warnings=list(outcome.warnings),
                    show_title=not contains_challenge_phrase(outcome.title),
                )

            reasons.append(outcome.reason)
            if isinstance(outcome, Fatal):
                logger.error(
                    "Attempt %d for %s failed fatally: %s",
                    attempt,
                    request.url,
                    outcome.reason,
                )
                break

            logger.warning(
                "Attempt %d/%d for %s failed: %s",
                attempt,
                request.max_attempts,
                request.url,
                outcome.reason,
            )

        logger.error(
            "Giving up on %s after %d attempt(s): %s", request.url, attempt, reasons[-1]
        )
        raise ExhaustedRetriesError(
            request.url, attempt, reasons[-1], reasons=reasons
        ) from outcome.error

    async def _backoff(self, failed_attempt: int) -> None:
        """Sleep random(min, max) * attempt index before the next attempt."""
        delay_ms = (
            random.uniform(self.config.backoff_min_ms, self.config.backoff_max_ms)
            * failed_attempt
        )
        logger.info("Retrying in %.1fs", delay_ms / 1000)
        await asyncio.sleep(delay_ms / 1000)

    async def _attempt(self, request: FetchRequest) -> AttemptOutcome:
        """Run one attempt in a fresh browsing context.

        Exceptions never escape; they are mapped to outcomes here.
        """
        try:
            async with self.session.acquire_context() as page:
                # Browser launch and install time is not charged to the request
                deadline = time.monotonic() + request.timeout_ms / 1000
                return await self._run(page, request, deadline)
        except BrowserLaunchError as e:
            return Fatal(str(e), e)
        except ExtractionError as e:
            return Retryable(str(e), e)
        except Exception as e:
            logger.debug("Unexpected attempt failure", exc_info=True)
            return Retryable(f"{type(e).__name__}: {e}", e)

    async def _run(
        self, page: Page, request: FetchRequest, deadline: float
    ) -> AttemptOutcome:
        warnings: list[str] = []
        page.set_default_timeout(request.timeout_ms)

        # Navigating
        try:
            response = await page.goto(
                request.url, wait_until="domcontentloaded", timeout=request.timeout_ms
            )
        except Exception as e:
            raise NavigationError(f"Navigation to {request.url} failed: {e}") from e

        if response is not None and not 200 <= response.status < 400:
            logger.warning("HTTP %d from %s, continuing", response.status, request.url)
            warnings.append(f"HTTP {response.status}")

        # AwaitingReady
        await self._wait_until_ready(page, deadline)

        # DetectingChallenge / BypassWaiting
        challenge_cleared = True
        if await self.detector.is_challenge(page, self._remaining_ms(deadline)):
            challenge_cleared = await self.detector.wait_for_clearance(
                page, self._remaining_ms(deadline)
            )
            if not challenge_cleared:
                warnings.append("challenge page did not clear")

        # Pruning
        await self.pruner.prune(page)

        # Extracting
        raw_content = await self.selector.extract(page, self._remaining_ms(deadline))
        content = normalize_text(raw_content, strict=self.config.strict_normalization)
        title = await self._read_title(page)

        # Validating
        reason = self.validator.check(title, content)
        if reason is not None:
            if challenge_cleared:
                error = ContentQualityError(reason)
            else:
                error = ChallengePersistentError(reason, self.config.challenge_budget_ms)
            return Retryable(str(error), error)

        return Success(title=title, content=content, warnings=tuple(warnings))

    async def _wait_until_ready(self, page: Page, deadline: float) -> None:
        """Best-effort wait for the root element; proceeds on timeout."""
        timeout = min(self.config.ready_timeout_ms, self._remaining_ms(deadline))
        if timeout <= 0:
            return
        try:
            await page.wait_for_selector("body", state="attached", timeout=timeout)
        except Exception as e:
            logger.debug("Readiness wait ended early on %s: %s", page.url, e)

        if not self.config.wait_for_network_idle:
            return
        timeout = min(self.config.ready_timeout_ms, self._remaining_ms(deadline))
        if timeout <= 0:
            return
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout)
        except Exception as e:
            logger.debug("Network idle wait ended early on %s: %s", page.url, e)

    @staticmethod
    async def _read_title(page: Page) -> str:
        try:
            return (await page.title() or "").strip()
        except Exception as e:
            logger.debug("Could not read page title: %s", e)
            return ""

    @staticmethod
    def _remaining_ms(deadline: float) -> float:
        return max(0.0, (deadline - time.monotonic()) * 1000)

    async def __aenter__(self) -> WebPageTextExtractor:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - ensures cleanup."""
        await self.dispose()
