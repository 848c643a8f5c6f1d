"""Error response schemas."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response schema.

    Used for all error responses (4xx, 5xx) across the API.
    """

    error: str = Field(
        ...,
        description="Error type identifier",
        examples=["validation_error", "conflict", "not_found"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Request validation failed", "Organization not found"],
    )
    details: Optional[dict[str, Any]] = Field(
        None,
        description="Additional error context (field validation errors, etc.)",
        examples=[{"brandPrimary": "Must be a hex color such as #1a2b3c"}],
    )
    existing_id: Optional[str] = Field(
        None,
        alias="existingId",
        description="ID of the conflicting record (409 responses only)",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "error": "validation_error",
                    "message": "Request validation failed",
                    "details": {"name": "Field required"},
                },
                {
                    "error": "conflict",
                    "message": "Organization 'Acme' already exists",
                    "existingId": "0b8f6f0e-4a43-4f43-9d1e-6d0c2f3a9b11",
                },
            ]
        },
    )
