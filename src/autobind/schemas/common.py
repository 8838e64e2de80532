"""Common schemas used across the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class APIInfo(BaseModel):
    """Root endpoint payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    version: str
    status: str
    environment: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: str = Field(..., pattern=r"^(healthy|degraded)$")
    timestamp: datetime
    quotes_stored: int = Field(..., ge=0)
    policies_stored: int = Field(..., ge=0)
    lookup_cache_entries: int = Field(..., ge=0)
