"""Pydantic v2 schemas for the text extraction endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field, HttpUrl


class ExtractTextRequest(BaseModel):
    """Request body for POST /api/v1/extract."""

    url: HttpUrl = Field(..., description="URL of the page to extract text from")
    timeout_ms: int | None = Field(
        default=None,
        ge=1_000,
        le=120_000,
        description="Per-attempt timeout in milliseconds (default: from settings)",
    )
    max_attempts: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Maximum number of attempts (default: from settings)",
    )


class ExtractTextResponse(BaseModel):
    """Response for POST /api/v1/extract."""

    url: str = Field(..., description="URL that was extracted")
    title: str = Field(default="", description="Page title")
    content: str = Field(..., description="Normalized main content")
    text: str = Field(..., description="Labelled title + content text blob")
    attempts: int = Field(..., ge=1, description="Attempts used")
    extraction_time_ms: float = Field(..., ge=0, description="Total time spent")
    warnings: list[str] = Field(
        default_factory=list, description="Non-fatal issues seen on the page"
    )
