"""Response bodies shared by all endpoints."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(..., examples=["user not found"])


class HealthResponse(BaseModel):
    status: str = Field("healthy", examples=["healthy"])
