"""Web page text extraction engine.

Renders a URL in headless Chromium (Playwright), waits out common anti-bot
interstitials, prunes boilerplate, picks the main content block and returns
normalized text suitable for summarization.

Usage:
    from webtext.services.extractors import WebPageTextExtractor

    async with WebPageTextExtractor() as extractor:
        text = await extractor.extract("https://example.com")
        print(text)

Note: Playwright browsers are downloaded on first launch when missing, or
manually with:
    python -m playwright install chromium
"""

from webtext.services.extractors.base import (
    ExtractionCandidate,
    ExtractionConfig,
    ExtractionResult,
    Fatal,
    FetchRequest,
    Retryable,
    Success,
    TextExtractor,
)
from webtext.services.extractors.challenge import ChallengeDetector
from webtext.services.extractors.content import BoilerplatePruner, ContentSelector
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
from webtext.services.extractors.normalizer import normalize_text
from webtext.services.extractors.pipeline import WebPageTextExtractor
from webtext.services.extractors.quality import QualityValidator
from webtext.services.extractors.session import BrowserSession

__all__ = [
    # Data model
    "ExtractionCandidate",
    "ExtractionConfig",
    "ExtractionResult",
    "FetchRequest",
    "Success",
    "Retryable",
    "Fatal",
    "TextExtractor",
    # Components
    "BoilerplatePruner",
    "BrowserSession",
    "ChallengeDetector",
    "ContentSelector",
    "QualityValidator",
    "WebPageTextExtractor",
    "normalize_text",
    # Exceptions
    "ExtractionError",
    "NavigationError",
    "ContentQualityError",
    "ChallengePersistentError",
    "SelectorEvaluationError",
    "BrowserLaunchError",
    "BrowserInstallError",
    "ExhaustedRetriesError",
]
