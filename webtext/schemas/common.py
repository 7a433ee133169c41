from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Body of errors returned outside HTTPException (e.g. the 500 handler)."""

    error: ErrorDetail


class HTTPErrorResponse(BaseModel):
    """Body of errors raised as HTTPException with an error detail."""

    detail: ErrorResponse


class HealthResponse(BaseModel):
    status: str
    name: str
    version: str
    git_sha: str
