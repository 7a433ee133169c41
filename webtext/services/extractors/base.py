"""Base classes for web page text extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from webtext.core.config import Settings

# Stealth/stability flags passed to Chromium on launch
DEFAULT_LAUNCH_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
)

# Desktop browser user agents; one is picked per browsing context
DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36 Edg/136.0.0.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36 Edg/135.0.0.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36",
)

TITLE_LABEL = "标题"
CONTENT_LABEL = "内容"


def read_timeout(timeout_ms: float | None) -> float | None:
    """Playwright timeout for a page read capped by the remaining time.

    None keeps the page default. Playwright treats 0 as "no timeout", so an
    exhausted budget still gets a 1 ms floor.
    """
    if timeout_ms is None:
        return None
    return max(1.0, timeout_ms)


@dataclass(frozen=True)
class ExtractionConfig:
    """Tunable policy for the extraction engine.

    Every threshold used by the detector, pruner, selector, validator and
    retry loop lives here so callers can adjust them without code changes.
    """

    # Per-call defaults
    timeout_ms: int = 30_000
    max_attempts: int = 3

    # Browser
    launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    user_agents: tuple[str, ...] = DEFAULT_USER_AGENTS
    viewport_width: int = 1920
    viewport_height: int = 1080
    locale: str = "zh-CN"
    accept_language: str = "zh-CN,zh;q=0.9,en;q=0.8"
    auto_install_browser: bool = True
    browser_install_timeout: int = 600  # seconds

    # Waits (all capped by the remaining request time)
    ready_timeout_ms: int = 10_000
    wait_for_network_idle: bool = False
    challenge_poll_interval_ms: int = 2_000
    challenge_budget_ms: int = 30_000
    challenge_settle_ms: int = 2_000

    # Retry backoff: random(min, max) * attempt index
    backoff_min_ms: int = 3_000
    backoff_max_ms: int = 8_000

    # Content heuristics
    min_candidate_length: int = 100
    prune_max_height_px: int = 100
    prune_min_text_length: int = 50

    # Quality validation
    min_content_length: int = 50
    cjk_run_length: int = 20
    latin_run_length: int = 50

    # Normalization: drop lines shorter than 3 chars when strict
    strict_normalization: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> ExtractionConfig:
        """Build engine config from service settings."""
        return cls(
            timeout_ms=settings.extraction_timeout_ms,
            max_attempts=settings.extraction_max_attempts,
            auto_install_browser=settings.browser_auto_install,
            browser_install_timeout=settings.browser_install_timeout,
            wait_for_network_idle=settings.extraction_wait_for_network_idle,
        )


@dataclass(frozen=True)
class FetchRequest:
    """One extraction request. Immutable per call."""

    url: str
    timeout_ms: int = 30_000
    max_attempts: int = 3

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("url must not be empty")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {self.timeout_ms}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")


@dataclass(frozen=True)
class ExtractionCandidate:
    """Best text block found for one content selector."""

    selector: str
    text: str
    length: int = 0

    def __post_init__(self) -> None:
        if self.length == 0 and self.text:
            object.__setattr__(self, "length", len(self.text))


# ---------------------------------------------------------------------------
# Attempt outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success:
    """Attempt produced content that passed quality validation."""

    title: str
    content: str
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class Retryable:
    """Attempt failed in a way another fresh visit may fix."""

    reason: str
    error: Exception | None = None


@dataclass(frozen=True)
class Fatal:
    """Attempt failed in a way retrying cannot fix."""

    reason: str
    error: Exception | None = None


AttemptOutcome = Union[Success, Retryable, Fatal]


@dataclass
class ExtractionResult:
    """Result of a successful extraction."""

    url: str
    title: str
    content: str  # Normalized main content
    attempts: int = 1
    extraction_time_ms: float = 0.0
    warnings: list[str] = field(default_factory=list)
    show_title: bool = True

    @property
    def text(self) -> str:
        """Render the text blob handed to downstream summarization."""
        parts = []
        if self.title and self.show_title:
            parts.append(f"{TITLE_LABEL}: {self.title}")
            parts.append("")
        parts.append(f"{CONTENT_LABEL}:")
        parts.append(self.content)
        return "\n".join(parts)


class TextExtractor(Protocol):
    """Capabilities the host needs from an extraction engine."""

    async def extract(
        self,
        url: str,
        timeout_ms: int | None = None,
        max_attempts: int | None = None,
    ) -> str:
        """Extract normalized main text from a URL.

        Raises:
            ExhaustedRetriesError: If every attempt failed
        """
        ...

    async def initialize(self) -> None:
        """Start underlying resources. Idempotent."""
        ...

    async def dispose(self) -> None:
        """Release underlying resources. Safe to call multiple times."""
        ...
