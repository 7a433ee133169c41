"""Installer for the Playwright Chromium build.

Playwright ships without browser binaries; they are fetched by its CLI:

    python -m playwright install chromium

The session manager runs this once when a launch fails because the
executable is missing.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import time
from dataclasses import dataclass

from webtext.services.extractors.exceptions import BrowserInstallError

logger = logging.getLogger(__name__)

MISSING_EXECUTABLE_MARKER = "Executable doesn't exist"


def is_missing_browser_error(error: BaseException) -> bool:
    """Return True if a launch error means the browser was never installed."""
    return MISSING_EXECUTABLE_MARKER in str(error)


@dataclass(frozen=True)
class InstallResult:
    """Outcome of a browser install run."""

    elapsed_seconds: float
    stdout: str
    stderr: str
    command: list[str]


class BrowserInstaller:
    """Runs ``playwright install`` for one browser.

    Args:
        browser: Playwright browser name.
    """

    def __init__(self, browser: str = "chromium") -> None:
        self.browser = browser

    @property
    def command(self) -> list[str]:
        return [sys.executable, "-m", "playwright", "install", self.browser]

    def install(self, timeout: int = 600) -> InstallResult:
        """Download and install the browser binaries.

        Args:
            timeout: Maximum seconds to wait for the download.

        Returns:
            InstallResult with subprocess output.

        Raises:
            BrowserInstallError: CLI missing, timed out, or exited non-zero.
        """
        cmd = self.command
        logger.info(
            "Installing browser, this may take a few minutes: %s", " ".join(cmd)
        )
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            logger.error("Interpreter not found: %s", cmd[0])
            raise BrowserInstallError(f"'{cmd[0]}' not found") from exc
        except subprocess.TimeoutExpired as exc:
            logger.error("Browser install timed out after %ds", timeout)
            raise BrowserInstallError(
                f"Browser install timed out after {timeout}s: {' '.join(cmd)}"
            ) from exc

        elapsed = time.monotonic() - start

        if result.returncode != 0:
            logger.warning(
                "Browser install exited with code %d\nstderr: %s",
                result.returncode,
                result.stderr.strip(),
            )
            raise BrowserInstallError(
                f"Browser install exited with code {result.returncode}. "
                f"Install manually with: {' '.join(cmd)}\n"
                f"stderr: {result.stderr.strip()}"
            )

        logger.info("Browser installed in %.2fs", elapsed)
        return InstallResult(
            elapsed_seconds=round(elapsed, 3),
            stdout=result.stdout,
            stderr=result.stderr,
            command=cmd,
        )
