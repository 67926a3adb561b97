"""
Visit Counter Backend: Pydantic Response Schemas
=================================================

What:  The API contract for /api/count and for error responses.
How:   FastAPI serializes these models with compact JSON separators, so
       VisitMessageResponse renders exactly as
       {"message":"Visit count incremented"}.
"""

from pydantic import BaseModel, Field


class VisitMessageResponse(BaseModel):
    """Returned by POST /api/count after a visit is recorded."""
    message: str = Field(description="Confirmation message")


class VisitCountResponse(BaseModel):
    """
    Returned by GET /api/count.

    The count is derived (COUNT(*) at read time), never cached.
    """
    visits: int = Field(ge=0, description="Number of recorded visits")


class ErrorResponse(BaseModel):
    """
    Standardized error body for every JSON error this service produces.

    Example:
        {
            "error": "storage_unavailable",
            "message": "Failed to increment visit count"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
