"""Pydantic schemas package."""

from webtext.schemas.common import (  # noqa: F401
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    HTTPErrorResponse,
)
from webtext.schemas.extract import (  # noqa: F401
    ExtractTextRequest,
    ExtractTextResponse,
)
