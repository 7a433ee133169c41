"""Shared headless browser and per-attempt browsing contexts.

One Chromium process is launched lazily and shared by every request. Each
attempt gets its own browsing context (cookies, headers, viewport, page)
which is always closed before the attempt returns, so retries look like
fresh, independent visits.

Note: Playwright browsers are installed separately unless auto-install is
enabled:
    python -m playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from webtext.services.extractors.base import ExtractionConfig
from webtext.services.extractors.exceptions import BrowserLaunchError
from webtext.services.extractors.installer import (
    BrowserInstaller,
    is_missing_browser_error,
)

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)

# Runs before any page script; removes automation markers
FINGERPRINT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['zh-CN', 'zh', 'en'] });
window.chrome = window.chrome || {};
window.chrome.runtime = window.chrome.runtime || {};
if (navigator.permissions && navigator.permissions.query) {
    const originalQuery = navigator.permissions.query.bind(navigator.permissions);
    navigator.permissions.query = (parameters) =>
        parameters.name === 'notifications'
            ? Promise.resolve({ state: Notification.permission })
            : originalQuery(parameters);
}
"""


def build_headers(accept_language: str) -> dict[str, str]:
    return {
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": accept_language,
        "Accept-Encoding": "gzip, deflate, br",
        "Upgrade-Insecure-Requests": "1",
    }


class BrowserSession:
    """Owns the browser process and hands out isolated browsing contexts.

    The browser is started on first use (or by ``initialize()``) and stays
    up until ``release()``. Concurrent callers share the browser but never
    a context.

    Attributes:
        config: Extraction configuration (launch args, viewport, agents...)
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        installer: BrowserInstaller | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self._installer = installer or BrowserInstaller()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def initialize(self) -> Browser:
        """Launch the shared browser if it is not running yet.

        Safe to call concurrently; only the first caller launches. A browser
        that has crashed or disconnected is replaced.

        Raises:
            BrowserLaunchError: If the browser cannot be started.
        """
        if self.is_running:
            return self._browser

        async with self._lock:
            if self.is_running:
                return self._browser

            if self._browser is not None:
                logger.warning("Playwright browser disconnected, relaunching")
                await self._discard_browser()

            try:
                # Import here to avoid loading Playwright until needed
                from playwright.async_api import async_playwright

                self._playwright = await async_playwright().start()
                self._browser = await self._launch()
            except Exception as e:
                logger.error("Failed to launch Playwright browser: %s", e)
                await self._stop_playwright()
                raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

            logger.info(
                "Playwright browser launched (args=%s)", " ".join(self.config.launch_args)
            )
            return self._browser

    async def _launch(self) -> Browser:
        """Launch Chromium, installing it first if the binary is missing.

        Raises:
            BrowserInstallError: If the on-demand install fails.
        """
        options = {"headless": True, "args": list(self.config.launch_args)}
        try:
            return await self._playwright.chromium.launch(**options)
        except Exception as e:
            if not (self.config.auto_install_browser and is_missing_browser_error(e)):
                raise
            logger.warning("Chromium is not installed, downloading it now")

        # Blocking download, keep it off the event loop
        await asyncio.to_thread(
            self._installer.install, self.config.browser_install_timeout
        )
        return await self._playwright.chromium.launch(**options)

    @asynccontextmanager
    async def acquire_context(self) -> AsyncIterator[Page]:
        """Open a fresh browsing context and yield its page.

        The context is closed on exit, including when the body raises.
        Close failures are logged and swallowed so they never mask the
        attempt's own outcome.

        Raises:
            BrowserLaunchError: If the shared browser cannot be started.
        """
        browser = await self.initialize()
        user_agent = random.choice(self.config.user_agents)
        context = await browser.new_context(
            user_agent=user_agent,
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            locale=self.config.locale,
            extra_http_headers=build_headers(self.config.accept_language),
            java_script_enabled=True,
        )
        try:
            await self._install_fingerprint_script(context)
            page = await context.new_page()
            yield page
        finally:
            await self._close_context(context)

    async def _install_fingerprint_script(self, context: BrowserContext) -> None:
        try:
            await context.add_init_script(FINGERPRINT_SCRIPT)
        except Exception as e:
            logger.debug("Fingerprint script injection failed (ignored): %s", e)

    async def _close_context(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.warning("Error closing browsing context: %s", e)

    async def release(self) -> None:
        """Close the browser and stop Playwright.

        Safe to call multiple times. A later ``initialize()`` or
        ``acquire_context()`` starts a new browser.
        """
        async with self._lock:
            await self._discard_browser()

    async def _discard_browser(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
                logger.info("Playwright browser closed")
            except Exception as e:
                logger.warning("Error closing browser: %s", e)
            self._browser = None
        await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            try:
                await self._playwright.stop()
                logger.debug("Playwright stopped")
            except Exception as e:
                logger.warning("Error stopping Playwright: %s", e)
            self._playwright = None

    async def __aenter__(self) -> BrowserSession:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.release()
