"""Framework-neutral request/response envelopes used by the route operations."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class ApiRequest(BaseModel):
    """Incoming HTTP request as seen by an operation."""
    method: str = Field(..., description="Upper-case HTTP verb")
    query: dict[str, list[str]] = Field(default_factory=dict, description="Parsed query string, repeated keys kept")
    headers: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] = Field(default_factory=dict, description="Decoded JSON body, empty when absent or malformed")

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class ApiResponse(BaseModel):
    """Outgoing JSON response."""
    status_code: int
    body: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
