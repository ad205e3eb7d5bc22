"""Error body returned for domain exceptions."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of 4xx/502 responses raised from services (unknown tenant, nothing due, ...)."""

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code, e.g. NOT_FOUND")
