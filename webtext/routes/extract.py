"""Text extraction REST endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from webtext.schemas.common import HTTPErrorResponse
from webtext.schemas.extract import ExtractTextRequest, ExtractTextResponse
from webtext.services.extractors import (
    BrowserLaunchError,
    ExhaustedRetriesError,
    WebPageTextExtractor,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["extract"])


def get_extractor(request: Request) -> WebPageTextExtractor:
    """Return the process-wide extractor created in the app lifespan."""
    return request.app.state.extractor


def _error_code(exc: ExhaustedRetriesError) -> tuple[int, str]:
    """Map the last attempt's underlying error to a status and error code."""
    cause = exc.__cause__
    if isinstance(cause, BrowserLaunchError):
        return 503, "BROWSER_UNAVAILABLE"

    # NavigationError wraps the Playwright error one level down
    causes = [cause, getattr(cause, "__cause__", None)]
    if any(c is not None and "Timeout" in type(c).__name__ for c in causes):
        return 502, "TIMEOUT"
    return 502, "EXTRACTION_FAILED"


@router.post(
    "/extract",
    response_model=ExtractTextResponse,
    responses={
        400: {"model": HTTPErrorResponse, "description": "Invalid parameters"},
        502: {"model": HTTPErrorResponse, "description": "Every attempt failed"},
        503: {"model": HTTPErrorResponse, "description": "Browser unavailable"},
    },
)
async def extract_text(
    body: ExtractTextRequest,
    extractor: WebPageTextExtractor = Depends(get_extractor),
) -> ExtractTextResponse:
    """Render a web page and return its cleaned main text.

    Args:
        body: URL plus optional per-call timeout and attempt count.

    Returns:
        ExtractTextResponse with title, normalized content and the
        labelled text blob.

    Raises:
        HTTPException: 400 for invalid parameters, 502 when every attempt
            failed, 503 when the browser cannot be started.
    """
    url = str(body.url)
    try:
        result = await extractor.extract_result(
            url, timeout_ms=body.timeout_ms, max_attempts=body.max_attempts
        )
    except ExhaustedRetriesError as e:
        status_code, error_code = _error_code(e)
        logger.warning("Text extraction failed for %s: %s", url, e)
        raise HTTPException(
            status_code=status_code,
            detail={
                "error": {
                    "code": error_code,
                    "message": str(e),
                }
            },
        )
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "error": {
                    "code": "INVALID_REQUEST",
                    "message": str(e),
                }
            },
        )

    return ExtractTextResponse(
        url=result.url,
        title=result.title,
        content=result.content,
        text=result.text,
        attempts=result.attempts,
        extraction_time_ms=result.extraction_time_ms,
        warnings=result.warnings,
    )
