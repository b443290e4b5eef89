"""
Meal Planner Backend - Shared Schema Pieces
===========================================

What:  Base model and envelopes shared by every endpoint.
How:   Python attributes are snake_case; the wire format is camelCase
       (`mealPlan`, `createdAt`, `storagePath`) through an alias generator.
       FastAPI serializes response models by alias, and requests are
       accepted under either name.

Every response carries `success`. Failures use ErrorResponse:
    {"success": false, "message": "No file uploaded."}
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for all API schemas: camelCase aliases, ORM-friendly."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(ApiModel):
    """Failure envelope used for 400, 413, and 500 responses."""

    success: bool = Field(default=False)
    message: str = Field(description="Human-readable error description")


class HealthResponse(ApiModel):
    """
    Health check response showing service and dependency status.

    status: healthy | degraded | unhealthy
    """

    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store: connected, disconnected")
    gemini: str = Field(description="Text generation: configured, not_configured")
    storage: str = Field(description="Blob store: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
