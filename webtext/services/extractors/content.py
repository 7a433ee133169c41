"""Boilerplate pruning and main-content selection on a rendered page.

Both operate rule by rule: a failing selector is recorded and skipped, it
never aborts the remaining rules.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from webtext.services.extractors.base import (
    ExtractionCandidate,
    ExtractionConfig,
    read_timeout,
)
from webtext.services.extractors.exceptions import SelectorEvaluationError

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

# Always removed
UNCONDITIONAL_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
)

# Class/id tokens for ads and UI chrome; matches are removed only when small
CHROME_TOKENS: tuple[str, ...] = (
    "ad",
    "banner",
    "sidebar",
    "menu",
    "popup",
    "comment",
    "social",
    "share",
    "cookie",
    "modal",
    "overlay",
)

GUARDED_SELECTORS: tuple[str, ...] = tuple(
    f"[{attr}*='{token}']" for token in CHROME_TOKENS for attr in ("class", "id")
)

# Ordered by priority: semantic tags, structural classes, generic containers
CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    "[role='main']",
    "[itemprop='articleBody']",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".article",
    ".post",
    ".entry",
    "#content",
    ".content",
    ".main-content",
    "#main",
    ".container",
    ".wrapper",
)

# "ad" as a whole class/id token (ad, ads, ad-slot, top_ad, advert...),
# not a substring of an unrelated word such as "header" or "loading".
_AD_TOKEN = re.compile(r"(^|[\s_-])(ads?|advert\w*)([\s_-]|$)", re.IGNORECASE)

_REMOVE_ALL_JS = """
(selector) => {
    const elements = document.querySelectorAll(selector);
    elements.forEach(el => el.remove());
    return elements.length;
}
"""

_DESCRIBE_JS = """
(selector) => Array.from(document.querySelectorAll(selector)).map(el => ({
    height: el.getBoundingClientRect().height,
    textLength: (el.innerText || '').trim().length,
    marker: `${el.getAttribute('class') || ''} ${el.id || ''}`.trim(),
}))
"""

_REMOVE_INDEXES_JS = """
({selector, indexes}) => {
    const elements = document.querySelectorAll(selector);
    let removed = 0;
    for (const i of indexes) {
        if (elements[i]) {
            elements[i].remove();
            removed++;
        }
    }
    return removed;
}
"""


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return read_timeout((deadline - time.monotonic()) * 1000)


@dataclass(frozen=True)
class RegionInfo:
    """Rendered geometry and text size of one matched element."""

    height: float
    text_length: int
    marker: str = ""  # class and id attributes


@dataclass(frozen=True)
class PruneRuleOutcome:
    """Result of applying one cleanup selector."""

    selector: str
    removed: int = 0
    error: SelectorEvaluationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoilerplatePruner:
    """Remove scripts, navigation, ads and other low-value regions in place."""

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()

    def should_remove(self, region: RegionInfo) -> bool:
        """Guard for ad/chrome selector matches.

        Large, text-heavy blocks survive even when a CSS token overlaps,
        unless their class or id names an ad outright.
        """
        if region.height < self.config.prune_max_height_px:
            return True
        if region.text_length < self.config.prune_min_text_length:
            return True
        return bool(_AD_TOKEN.search(region.marker))

    async def prune(self, page: Page) -> list[PruneRuleOutcome]:
        """Apply every cleanup rule to the page.

        Returns:
            One outcome per selector, in application order.
        """
        outcomes = []
        for selector in UNCONDITIONAL_SELECTORS:
            outcomes.append(await self._remove_all(page, selector))
        for selector in GUARDED_SELECTORS:
            outcomes.append(await self._remove_guarded(page, selector))

        removed = sum(o.removed for o in outcomes)
        failed = [o.selector for o in outcomes if not o.ok]
        logger.debug(
            "Pruned %d elements (%d rules failed: %s)", removed, len(failed), failed
        )
        return outcomes

    async def _remove_all(self, page: Page, selector: str) -> PruneRuleOutcome:
        try:
            removed = await page.evaluate(_REMOVE_ALL_JS, selector)
        except Exception as e:
            return self._failed(selector, e)
        return PruneRuleOutcome(selector=selector, removed=int(removed or 0))

    async def _remove_guarded(self, page: Page, selector: str) -> PruneRuleOutcome:
        try:
            described = await page.evaluate(_DESCRIBE_JS, selector) or []
            indexes = [
                i
                for i, item in enumerate(described)
                if self.should_remove(
                    RegionInfo(
                        height=float(item.get("height") or 0),
                        text_length=int(item.get("textLength") or 0),
                        marker=item.get("marker") or "",
                    )
                )
            ]
            removed = 0
            if indexes:
                removed = await page.evaluate(
                    _REMOVE_INDEXES_JS, {"selector": selector, "indexes": indexes}
                )
        except Exception as e:
            return self._failed(selector, e)
        return PruneRuleOutcome(selector=selector, removed=int(removed or 0))

    @staticmethod
    def _failed(selector: str, e: Exception) -> PruneRuleOutcome:
        error = SelectorEvaluationError(selector, e)
        logger.debug("Skipping cleanup rule: %s", error)
        return PruneRuleOutcome(selector=selector, error=error)


class ContentSelector:
    """Pick the main content block among prioritized selectors."""

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        selectors: tuple[str, ...] = CONTENT_SELECTORS,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.selectors = selectors

    async def best_candidate(self, page: Page) -> ExtractionCandidate | None:
        """Return the first selector, in priority order, whose longest match
        clears the length floor.

        Priority decides between selectors; length only breaks ties between
        elements of the same selector.
        """
        for selector in self.selectors:
            candidate = await self._longest_match(page, selector)
            if candidate is None:
                continue
            if candidate.length > self.config.min_candidate_length:
                logger.debug(
                    "Selected '%s' (%d chars)", candidate.selector, candidate.length
                )
                return candidate
            logger.debug(
                "Selector '%s' below floor (%d chars)", selector, candidate.length
            )
        return None

    async def extract(self, page: Page, timeout_ms: float | None = None) -> str:
        """Main content text, falling back to the whole body, then to "".

        ``timeout_ms`` bounds the body reads together; a page without a body
        never waits longer than that.
        """
        deadline = None if timeout_ms is None else time.monotonic() + timeout_ms / 1000
        candidate = await self.best_candidate(page)
        if candidate is not None:
            return candidate.text

        logger.debug("No content selector qualified, using body text")
        try:
            return await page.inner_text("body", timeout=_remaining(deadline))
        except Exception as e:
            logger.debug("innerText of body failed: %s", e)
        try:
            return await page.text_content("body", timeout=_remaining(deadline)) or ""
        except Exception as e:
            logger.debug("textContent of body failed: %s", e)
        return ""

    async def _longest_match(
        self, page: Page, selector: str
    ) -> ExtractionCandidate | None:
        try:
            elements = await page.query_selector_all(selector)
        except Exception as e:
            logger.debug("%s", SelectorEvaluationError(selector, e))
            return None

        best: ExtractionCandidate | None = None
        for element in elements:
            try:
                text = (await element.inner_text()).strip()
            except Exception as e:
                logger.debug("%s", SelectorEvaluationError(selector, e))
                continue
            if best is None or len(text) > best.length:
                best = ExtractionCandidate(selector=selector, text=text, length=len(text))
        return best
