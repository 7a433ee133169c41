"""Shared pytest fixtures and Playwright stand-ins.

No test needs a real browser: pages, contexts and sessions are mocks whose
async methods are ``AsyncMock`` instances.

Usage in new test files:
    def test_something(make_page):
        page = make_page(title="Hello", body="World", selectors={...})
        ...
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from webtext.services.extractors.base import ExtractionConfig

LONG_PARAGRAPH = (
    "The quick brown fox jumps over the lazy dog while the committee reviews "
    "the quarterly budget and discusses plans for the upcoming season of "
    "community events across the region and neighbouring towns"
)


def make_element(text: str) -> AsyncMock:
    """Element handle mock whose inner_text() returns *text*."""
    element = AsyncMock()
    element.inner_text.return_value = text
    return element


def build_page(
    title: str = "Test Page",
    body: str = LONG_PARAGRAPH,
    selectors: dict[str, list[str]] | None = None,
    status: int = 200,
) -> AsyncMock:
    """Build a rendered-page mock.

    Args:
        title: Value returned by page.title().
        body: Value returned by page.inner_text("body").
        selectors: Maps CSS selector to the innerText of each matching element.
        status: HTTP status of the navigation response.
    """
    selectors = selectors or {}

    page = AsyncMock()
    page.url = "https://example.com/article"
    page.set_default_timeout = MagicMock()
    page.title.return_value = title
    page.inner_text.return_value = body
    page.text_content.return_value = body
    page.evaluate.return_value = 0

    async def query_selector_all(selector: str) -> list[AsyncMock]:
        return [make_element(text) for text in selectors.get(selector, [])]

    page.query_selector_all.side_effect = query_selector_all

    response = MagicMock()
    response.status = status
    page.goto.return_value = response
    return page


class FakeSession:
    """Stands in for BrowserSession; hands out queued pages.

    Each queued item is a page mock, or an exception raised when the
    context is acquired. Tracks how many contexts are open at once.
    """

    def __init__(
        self,
        pages: list,
        config: ExtractionConfig | None = None,
        acquire_delay: float = 0.0,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.acquire_delay = acquire_delay  # seconds, e.g. a slow browser launch
        self.pages = list(pages)
        self.opened = 0
        self.closed = 0
        self.open_now = 0
        self.max_open = 0
        self.initialize = AsyncMock()
        self.release = AsyncMock()

    @asynccontextmanager
    async def acquire_context(self):
        if self.acquire_delay:
            await asyncio.sleep(self.acquire_delay)
        item = self.pages.pop(0)
        if isinstance(item, Exception):
            raise item
        self.opened += 1
        self.open_now += 1
        self.max_open = max(self.max_open, self.open_now)
        try:
            yield item
        finally:
            self.open_now -= 1
            self.closed += 1


@pytest.fixture()
def make_page() -> Callable[..., AsyncMock]:
    """Factory fixture for rendered-page mocks."""
    return build_page


@pytest.fixture()
def make_session() -> type[FakeSession]:
    """FakeSession class, called with the pages to hand out."""
    return FakeSession
