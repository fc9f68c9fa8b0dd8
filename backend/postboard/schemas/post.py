"""
Postboard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract.
Why:   Request parsing, response serialization and OpenAPI docs come from
       these models; they are kept separate from the ORM model so the wire
       shape can change independently of the table.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    """
    Body of POST /api/posts.

    Fields are optional at the schema level so that a missing field surfaces
    as the service's "Missing fields" error instead of a schema error.
    """
    title: Optional[str] = Field(default=None, description="Post title (required, non-empty)")
    content: Optional[str] = Field(default=None, description="Post body (required, non-empty)")
    date: Optional[str] = Field(
        default=None,
        description="Caller-supplied date string (required, stored as-is)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(BaseModel):
    """Full representation of a stored post."""
    id: int = Field(description="Store-assigned identifier")
    title: str
    content: str
    date: str
    read: int = Field(description="0 = unread, 1 = read")

    model_config = {"from_attributes": True}


class SuccessResponse(BaseModel):
    """Acknowledgement for delete and mark-read."""
    success: bool = True


class UnreadCountResponse(BaseModel):
    """Number of posts whose read flag is 0."""
    unread: int = Field(ge=0)


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned by every exception handler.

    Example:
        {
            "error": "Invalid JSON",
            "message": "Expecting value",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Short error label")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float

