"""
Backoffice API: Pydantic Response Schemas
==========================================

What:  Pydantic models describing the JSON envelopes the API returns.
How:   Used as response_model / OpenAPI documentation by the routers and as
       the body shape produced by the exception handlers.

Records themselves are returned as plain JSON objects whose keys are the
table's column names; their shape is defined by the ORM models.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Success Envelopes
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    """Returned by PUT and DELETE on success."""
    message: str = Field(description="Human-readable confirmation")


class CreatedResponse(MessageResponse):
    """Returned by POST with HTTP 201 Created."""
    id: Any = Field(description="Primary key assigned by the database")


# ══════════════════════════════════════════════════════════════════════════
# Error Envelope
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every 4xx/5xx response.

    Fields:
        error: Machine-readable error code
               (validation_error, not_found, storage_error, internal_server_error)
        message: Human-readable description; raw driver text for storage errors
        details: Validation context, e.g. {"missing_fields": ["salary"]}
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "not_found",
            "message": "Employee with ID '99' was not found",
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
